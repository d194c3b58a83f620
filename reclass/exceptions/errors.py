"""
ReClass Exception Definitions

Error types raised by the project graph and the file exchange layer.
"""

from typing import Any, Dict, List, Optional


class ReClassError(Exception):
    """ReClass base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClassReferencedError(ReClassError):
    """
    Class referenced error

    Raised when removing a class that other classes still reference through
    wrapper nodes. The project is left unchanged.
    """

    def __init__(self, references: List[Any]):
        super().__init__(
            "This class has references.",
            details={"references": [str(c.uuid) for c in references]},
        )
        self.references = list(references)


class ClassNotFoundError(ReClassError):
    """Lookup by uuid found no class"""

    def __init__(self, uuid: Any):
        super().__init__(f"No class with uuid {uuid}", details={"uuid": str(uuid)})
        self.uuid = uuid


class UnknownNodeTypeError(ReClassError):
    """
    Unknown node type error

    Occurs when neither a custom converter nor the built-in table knows a node
    variant or a serialized type tag. Readers and writers log it and skip the
    node.
    """

    pass


class FileFormatError(ReClassError):
    """
    File format error

    Occurs while reading a container file, such as a missing data entry,
    malformed XML or an unsupported format version.
    """

    pass


class InvalidCharacterError(ReClassError):
    """
    Invalid character error

    Raised while saving when a name, comment, signature, address or custom
    data value holds a character XML can not represent. Nothing is written.
    """

    pass
