"""ReClass - Reverse engineered class layouts and their project files."""

__version__ = "0.1.0"

from .core import ClassNode, NodeUuid, ReClassProject
from .exchange import load_project, read_nodes, save_project, write_nodes

__all__ = [
    "ClassNode",
    "NodeUuid",
    "ReClassProject",
    "load_project",
    "read_nodes",
    "save_project",
    "write_nodes",
]
