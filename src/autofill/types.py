from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

import orjson
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .errors import ParsingError, UnrecognizedRequestType

REQUEST_TYPES: frozenset[str] = frozenset({"fill_user_password", "fill_field"})


class FillUserPassword(BaseModel):
    """Fill the login form of the page with a username and a password."""

    type: Literal["fill_user_password"] = "fill_user_password"
    user: str = Field(..., repr=False)
    password: str = Field(..., repr=False)

    model_config = {"extra": "forbid"}


class FillField(BaseModel):
    """Fill the most recently focused input with free text."""

    type: Literal["fill_field"] = "fill_field"
    text: str = Field(..., repr=False)

    model_config = {"extra": "forbid"}


FillRequest = Annotated[Union[FillUserPassword, FillField], Field(discriminator="type")]

# None on success, otherwise the error message.
FillResponse = Union[str, None]

_REQUEST_ADAPTER: TypeAdapter[FillUserPassword | FillField] = TypeAdapter(FillRequest)


def _error_locations(exc: ValidationError) -> str:
    # Locations only: error details would echo credential values.
    locations = {".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()}
    return ", ".join(sorted(locations))


def parse_request(payload: Mapping[str, Any] | str | bytes) -> FillUserPassword | FillField:
    """Validate a message from the transport into a fill request."""

    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = orjson.loads(payload)
        except orjson.JSONDecodeError as exc:
            raise ParsingError("Request is not valid JSON") from exc
    if not isinstance(payload, Mapping):
        raise ParsingError(f"Request must be an object, got {type(payload).__name__}")

    request_type = payload.get("type")
    if request_type not in REQUEST_TYPES:
        raise UnrecognizedRequestType(request_type)

    try:
        return _REQUEST_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        raise ParsingError(f"Invalid {request_type} request: {_error_locations(exc)}") from exc
