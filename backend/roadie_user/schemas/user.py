"""
Roadie User Service — Pydantic User Schemas
============================================

What:  The wire form of a user (`UserRecord`) plus the body decoder used by
       Create and Replace, and the small response models of `/health`.
How:   `UserRecord` declares only `Sub`; every other field is kept as a
       pydantic "extra" so arbitrary profile fields survive a round trip
       untouched and serialize back flat: {"Sub": "u1", "Name": "Alice"}.

Decoding Rules:
    - body must be present and be a JSON object
    - base64 (API Gateway binary) and raw bytes are decoded strictly as UTF-8
    - `Sub` must be a non-empty string of at most 255 characters (numbers
      are not coerced)
    - Replace passes the path key, which overwrites any `Sub` in the body
"""

import base64
import binascii
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from roadie_user.exceptions import ValidationError

IDENTITY_FIELD = "Sub"
SUB_MAX_LENGTH = 255

_json_object = TypeAdapter(Dict[str, Any])


class UserRecord(BaseModel):
    """
    A user as the API sees it: identity plus opaque profile fields.

    `profile` exposes everything except `Sub`; stores persist it as-is.
    """

    sub: str = Field(
        alias=IDENTITY_FIELD,
        min_length=1,
        max_length=SUB_MAX_LENGTH,
        description="Stable external identity",
    )

    model_config = ConfigDict(extra="allow")

    @property
    def profile(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    @classmethod
    def from_profile(cls, sub: str, profile: Optional[Dict[str, Any]] = None) -> "UserRecord":
        """Rebuild a record from its stored parts."""
        return cls.model_validate({**(profile or {}), IDENTITY_FIELD: sub})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def _body_text(body: Union[str, bytes], base64_encoded: bool) -> str:
    """Undo transport encodings: base64 first, then strict UTF-8."""
    if base64_encoded:
        try:
            body = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(message="Request body is not valid base64", field="body")
    if isinstance(body, bytes):
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(
                message="Request body is not valid UTF-8",
                field="body",
                context={"position": e.start},
            )
    return body


def decode_user_body(
    body: Union[str, bytes, None],
    key: Optional[str] = None,
    base64_encoded: bool = False,
) -> UserRecord:
    """
    Decode a request body into a `UserRecord`.

    Args:
        body:           Request body as the host delivered it (text, raw bytes,
                        or base64 text), or None when absent.
        key:            Path key. When given it becomes the record's `Sub`,
                        whatever the body says.
        base64_encoded: `body` is base64 (API Gateway `isBase64Encoded`).

    Raises:
        ValidationError: body missing, not base64/UTF-8 where it must be,
                         not a JSON object, or no usable `Sub`.
    """
    if body is None:
        raise ValidationError(message="Request body is required", field="body")

    text = _body_text(body, base64_encoded)
    if not text.strip():
        raise ValidationError(message="Request body is required", field="body")

    try:
        data = _json_object.validate_json(text)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Request body must be a JSON object",
            field="body",
            context={"errors": e.error_count()},
        )

    if key is not None:
        data[IDENTITY_FIELD] = key

    try:
        return UserRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            message=(
                f"Request body must carry a non-empty string '{IDENTITY_FIELD}'"
                f" of at most {SUB_MAX_LENGTH} characters"
            ),
            field=IDENTITY_FIELD,
            context={"errors": e.error_count()},
        )


class ErrorResponse(BaseModel):
    """JSON body of the FastAPI catch-all 500 handler."""
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Store backend and its state, e.g. database:connected")
    uptime_seconds: float = Field(description="Seconds since service started")
