"""ReClass exception module"""

from .errors import (
    ReClassError,
    ClassReferencedError,
    ClassNotFoundError,
    UnknownNodeTypeError,
    FileFormatError,
    InvalidCharacterError,
)

__all__ = [
    "ReClassError",
    "ClassReferencedError",
    "ClassNotFoundError",
    "UnknownNodeTypeError",
    "FileFormatError",
    "InvalidCharacterError",
]
