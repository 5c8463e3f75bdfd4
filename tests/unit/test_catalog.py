import catalog
from conftest import make_movie, make_user
from models import Comment, Movie, db
from session_store import Principal


def test_search_is_case_insensitive_substring(client):
    owner = make_user("erin")
    make_movie(owner, name="The Matrix")
    make_movie(owner, name="matrix reloaded")
    make_movie(owner, name="Inception")

    page = catalog.list_movies(search="MATRIX")
    assert sorted(m.name for m in page.items) == ["The Matrix", "matrix reloaded"]
    assert page.pages == 1


def test_search_wildcards_are_literal(client):
    owner = make_user("erin")
    make_movie(owner, name="100% Wolf")
    make_movie(owner, name="1000 Wolves")

    page = catalog.list_movies(search="100%")
    assert [m.name for m in page.items] == ["100% Wolf"]


def test_thirteen_matches_make_three_pages(client):
    owner = make_user("erin")
    for number in range(13):
        make_movie(owner, name=f"Matrix {number}")
    make_movie(owner, name="Something else")

    sizes = [len(catalog.list_movies(search="Matrix", page=p).items) for p in (1, 2, 3)]
    assert sizes == [6, 6, 1]
    assert catalog.list_movies(search="Matrix").pages == 3


def test_page_past_the_end_is_empty(client):
    owner = make_user("erin")
    make_movie(owner)

    page = catalog.list_movies(page=5)
    assert page.items == []
    assert page.pages == 1


def test_no_matches_gives_zero_pages(client):
    page = catalog.list_movies(search="nothing")
    assert page.items == []
    assert page.pages == 0


def test_page_below_one_is_first_page(client):
    owner = make_user("erin")
    make_movie(owner)
    assert len(catalog.list_movies(page=0).items) == 1
    assert len(catalog.list_movies(page=-3).items) == 1


def test_sort_by_year_and_rating(client):
    owner = make_user("erin")
    make_movie(owner, name="Old", year=1950, rating=9.0)
    make_movie(owner, name="New", year=2020, rating=6.5)
    make_movie(owner, name="Unrated", year=2000, rating=None)

    assert [m.name for m in catalog.list_movies(sort="year").items] == ["New", "Unrated", "Old"]
    assert [m.name for m in catalog.list_movies(sort="rating").items] == ["Old", "New", "Unrated"]
    assert [m.name for m in catalog.list_movies(sort="bogus").items] == ["Old", "New", "Unrated"]


def test_create_movie_uses_principal_as_owner(client):
    owner = make_user("erin")
    principal = Principal(owner.id, owner.username)
    movie = catalog.create_movie(
        principal,
        {
            "name": "Heat",
            "description": "A cop chases a crew of thieves.",
            "year": 1995,
            "genres": ["Crime"],
            "rating": None,
            "poster_url": "",
        },
    )
    assert movie.owner_id == owner.id
    assert movie.likes == 0
    assert movie.rating is None


def test_like_and_comment(client):
    owner = make_user("erin")
    fan = make_user("frank")
    movie = make_movie(owner)
    movie_id = movie.id

    assert catalog.like_movie(movie_id) is True
    assert catalog.like_movie(movie_id) is True
    assert catalog.like_movie(movie_id + 100) is False
    db.session.expire_all()
    assert db.session.get(Movie, movie_id).likes == 2

    comment = catalog.add_comment(Principal(fan.id, fan.username), movie_id, "Great film")
    assert comment.author == "frank"
    assert catalog.add_comment(Principal(fan.id, fan.username), movie_id + 100, "?") is None


def test_delete_movie_removes_comments(client):
    owner = make_user("erin")
    movie = make_movie(owner)
    catalog.add_comment(Principal(owner.id, owner.username), movie.id, "First")

    catalog.delete_movie(movie)
    assert Movie.query.count() == 0
    assert Comment.query.count() == 0


def test_huge_page_number_is_empty(client):
    owner = make_user("erin")
    make_movie(owner)

    page = catalog.list_movies(page=99999999999999999999)
    assert page.items == []
    assert page.pages == 1
