"""
Pydantic Schemas - Wire Format for Queued Person Records

Producers push one JSON object per person onto the Redis list:

    {
        "FirstName": "Ada",
        "LastName": "Lovelace",
        "Address": "London",
        "CreatedAt": "2024-01-01T00:00:00Z"
    }

Unknown fields are ignored and missing fields fall back to empty strings
(or the zero timestamp for CreatedAt). Column length limits are left to the
database.

Usage:
    from utils.schemas import decode_person

    person = decode_person(raw_bytes)
"""

from datetime import datetime, timezone

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Timestamp used when a payload carries no CreatedAt
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


class PayloadDecodeError(ValueError):
    """Raised when a queue payload cannot be decoded into a PersonRecord."""


class PersonRecord(BaseModel):
    """A person as carried on the queue and stored in the persons table."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    first_name: str = Field(default="", alias="FirstName")
    last_name: str = Field(default="", alias="LastName")
    address: str = Field(default="", alias="Address")
    created_at: datetime = Field(default=ZERO_TIME, alias="CreatedAt")

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def decode_person(payload: bytes | str) -> PersonRecord:
    """
    Decode a UTF-8 JSON payload into a PersonRecord.

    Args:
        payload: Raw item popped from the queue

    Returns:
        Decoded PersonRecord

    Raises:
        PayloadDecodeError: If the payload is not a JSON object or a field
            has the wrong type
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise PayloadDecodeError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PayloadDecodeError(
            f"Payload must be a JSON object, got {type(data).__name__}"
        )

    try:
        return PersonRecord.model_validate(data)
    except ValidationError as e:
        raise PayloadDecodeError(f"Payload does not match person schema: {e}") from e
