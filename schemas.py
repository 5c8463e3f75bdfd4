from typing import Any, Dict, List, NamedTuple

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates_schema,
)

# First motion picture year.
MIN_MOVIE_YEAR = 1888
MAX_MOVIE_YEAR = 9999


class FieldError(NamedTuple):
    field: str
    message: str


def field_errors(exc: ValidationError) -> List[FieldError]:
    """Flatten marshmallow's ``{field: [messages]}`` into FieldError values."""
    errors = []
    for field, messages in (exc.messages or {}).items():
        if isinstance(messages, str):
            messages = [messages]
        for message in messages:
            errors.append(FieldError(field, str(message)))
    return errors


def parse_genres(raw) -> List[str]:
    """Split a comma-separated genre string, keeping order and duplicates."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _strip(data: Dict[str, Any], *names: str) -> Dict[str, Any]:
    data = dict(data)
    for name in names:
        value = data.get(name)
        if isinstance(value, str):
            data[name] = value.strip()
    return data


def _lower_email(data: Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(data.get("email"), str):
        data["email"] = data["email"].lower()
    return data


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Username required"),
        error_messages={"required": "Username required"},
    )
    email = fields.Email(
        required=True,
        error_messages={"required": "Valid email required", "invalid": "Valid email required"},
    )
    password = fields.Str(
        required=True,
        validate=validate.Length(min=6, error="Password must be >=6 chars"),
        error_messages={"required": "Password must be >=6 chars"},
    )
    confirm = fields.Str(load_default="")

    @pre_load
    def strip_identity(self, data: Dict[str, Any], **kwargs):
        return _lower_email(_strip(data, "username", "email"))

    @validates_schema
    def validate_confirm(self, data: Dict[str, Any], **kwargs):
        if data.get("confirm") != data.get("password"):
            raise ValidationError("Passwords do not match", field_name="confirm")


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        error_messages={"required": "Valid email required", "invalid": "Valid email required"},
    )
    password = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Password required"),
        error_messages={"required": "Password required"},
    )

    @pre_load
    def strip_email(self, data: Dict[str, Any], **kwargs):
        return _lower_email(_strip(data, "email"))


class MovieSchema(Schema):
    """Core movie fields. Ownership is never read from input."""

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Name required"),
        error_messages={"required": "Name required"},
    )
    description = fields.Str(
        required=True,
        validate=validate.Length(min=10, error="Description min 10 chars"),
        error_messages={"required": "Description min 10 chars"},
    )
    year = fields.Int(
        required=True,
        strict=False,
        validate=validate.Range(min=MIN_MOVIE_YEAR, max=MAX_MOVIE_YEAR, error="Enter a valid year"),
        error_messages={"required": "Enter a valid year", "invalid": "Enter a valid year"},
    )
    genres = fields.Str(load_default="")
    rating = fields.Float(
        allow_none=True,
        load_default=None,
        validate=validate.Range(min=0, max=10, error="Rating must be between 0 and 10"),
        error_messages={"invalid": "Rating must be between 0 and 10"},
    )
    poster_url = fields.Str(load_default="", data_key="posterUrl")

    @pre_load
    def normalize(self, data: Dict[str, Any], **kwargs):
        data = _strip(data, "name", "year", "rating", "posterUrl")
        if data.get("rating") == "":
            data["rating"] = None
        return data

    @post_load
    def split_genres(self, data: Dict[str, Any], **kwargs):
        data["genres"] = parse_genres(data.get("genres"))
        return data


class CommentSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    comment = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Comment cannot be empty"),
        error_messages={"required": "Comment cannot be empty"},
    )

    @pre_load
    def strip_comment(self, data: Dict[str, Any], **kwargs):
        return _strip(data, "comment")


register_schema = RegisterSchema()
login_schema = LoginSchema()
movie_schema = MovieSchema()
comment_schema = CommentSchema()
