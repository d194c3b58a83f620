"""ReClass project file exchange"""

from .constants import (
    DATA_FILE_NAME,
    FILE_EXTENSION,
    FILE_VERSION,
    FORMAT_NAME,
    SERIALIZATION_CLASS_NAME,
)
from .converters import (
    BUILTIN_NODE_TYPES,
    CustomNodeConverter,
    NodeConverterRegistry,
    default_registry,
)
from .writer import ProjectFileWriter, save_project, write_nodes
from .reader import ProjectFileReader, load_project, read_document, read_nodes

__all__ = [
    # Constants
    "DATA_FILE_NAME",
    "FILE_EXTENSION",
    "FILE_VERSION",
    "FORMAT_NAME",
    "SERIALIZATION_CLASS_NAME",
    # Converters
    "BUILTIN_NODE_TYPES",
    "CustomNodeConverter",
    "NodeConverterRegistry",
    "default_registry",
    # Writer
    "ProjectFileWriter",
    "save_project",
    "write_nodes",
    # Reader
    "ProjectFileReader",
    "load_project",
    "read_document",
    "read_nodes",
]
