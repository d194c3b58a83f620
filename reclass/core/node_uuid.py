"""
Node identifiers

Classes are identified by a 16 byte uuid. The text form used on disk is the
base64 of the little-endian (.NET Guid) byte layout.
"""

import base64
import binascii
import uuid

from pydantic import BaseModel, ConfigDict


class NodeUuid(BaseModel):
    """
    Opaque class identifier

    Equality and hashing are by value. The all-zero uuid is reserved as the
    "no class" sentinel.
    """

    model_config = ConfigDict(frozen=True)

    value: uuid.UUID

    @classmethod
    def new(cls) -> "NodeUuid":
        """Create a fresh random identifier"""
        return cls(value=uuid.uuid4())

    @classmethod
    def zero(cls) -> "NodeUuid":
        """The sentinel identifier"""
        return cls(value=uuid.UUID(int=0))

    @classmethod
    def from_base64(cls, text: str) -> "NodeUuid":
        """
        Parse the canonical text form

        Raises:
            ValueError: If text is not base64 of exactly 16 bytes
        """
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, TypeError) as e:
            raise ValueError(f"Invalid uuid text: {text!r}") from e
        if len(raw) != 16:
            raise ValueError(f"Invalid uuid length: {len(raw)} bytes")
        return cls(value=uuid.UUID(bytes_le=raw))

    def to_base64(self) -> str:
        return base64.b64encode(self.value.bytes_le).decode("ascii")

    @property
    def is_zero(self) -> bool:
        return self.value.int == 0

    def __str__(self) -> str:
        return self.to_base64()
