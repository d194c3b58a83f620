"""
ReClass Project Model

The project owns the class definitions, keeps references between them intact
and recomputes layouts when any class changes.
"""

import logging
from typing import Callable, Iterator, List, Optional

from ..exceptions.errors import ClassNotFoundError, ClassReferencedError
from .custom_data import CustomDataMap
from .enums import EnumMetaData
from .node_uuid import NodeUuid
from .nodes import BaseHexNode, ClassNode
from .resolver import references_class

logger = logging.getLogger(__name__)

ClassesChangedHandler = Callable[[ClassNode], None]


class ReClassProject:
    """
    Project graph

    Holds:
    - classes: ordered class definitions, exclusively owned
    - enums: enumeration metadata
    - custom_data: opaque plugin data
    - path: location of the last loaded or saved file

    Events are delivered synchronously to handlers registered with the
    subscribe_* methods.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.custom_data = CustomDataMap()
        self._classes: List[ClassNode] = []
        self._enums: List[EnumMetaData] = []
        self._class_added_handlers: List[ClassesChangedHandler] = []
        self._class_removed_handlers: List[ClassesChangedHandler] = []

    def __enter__(self) -> "ReClassProject":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._classes)

    def __iter__(self) -> Iterator[ClassNode]:
        return iter(list(self._classes))

    @property
    def classes(self) -> List[ClassNode]:
        """Snapshot of the class list"""
        return list(self._classes)

    @property
    def enums(self) -> List[EnumMetaData]:
        return list(self._enums)

    def subscribe_class_added(self, handler: ClassesChangedHandler) -> None:
        self._class_added_handlers.append(handler)

    def unsubscribe_class_added(self, handler: ClassesChangedHandler) -> None:
        if handler in self._class_added_handlers:
            self._class_added_handlers.remove(handler)

    def subscribe_class_removed(self, handler: ClassesChangedHandler) -> None:
        self._class_removed_handlers.append(handler)

    def unsubscribe_class_removed(self, handler: ClassesChangedHandler) -> None:
        if handler in self._class_removed_handlers:
            self._class_removed_handlers.remove(handler)

    def _raise_class_added(self, node: ClassNode) -> None:
        for handler in list(self._class_added_handlers):
            handler(node)

    def _raise_class_removed(self, node: ClassNode) -> None:
        for handler in list(self._class_removed_handlers):
            handler(node)

    def add_class(self, node: ClassNode) -> None:
        """
        Add a class to the project

        Uuids are not checked for duplicates here; callers are expected to
        hand in fresh classes.
        """
        self._classes.append(node)
        node.subscribe_nodes_changed(self._nodes_changed_handler)
        self._raise_class_added(node)

    def contains_class(self, uuid: NodeUuid) -> bool:
        return any(c.uuid == uuid for c in self._classes)

    def get_class_by_uuid(self, uuid: NodeUuid) -> ClassNode:
        """
        Find a class by uuid

        Raises:
            ClassNotFoundError: If no class has this uuid
        """
        for class_node in self._classes:
            if class_node.uuid == uuid:
                return class_node
        raise ClassNotFoundError(uuid)

    def _nodes_changed_handler(self, sender: ClassNode) -> None:
        # Layouts depend on the sizes of referenced classes
        self.update_offsets()

    def update_offsets(self) -> None:
        """Recompute the layout of every class"""
        for class_node in list(self._classes):
            class_node.update_offsets()

    def get_class_references(self, node: ClassNode) -> List[ClassNode]:
        """Other classes holding a wrapper that resolves to node"""
        return [
            c for c in self._classes if c is not node and references_class(c, node)
        ]

    def remove(self, node: ClassNode) -> None:
        """
        Remove a class

        Raises:
            ClassReferencedError: If other classes still reference node. The
                project is left unchanged.
        """
        references = self.get_class_references(node)
        if references:
            logger.debug(
                f"Refusing to remove class {node.name!r}: "
                f"referenced by {[c.name for c in references]}"
            )
            raise ClassReferencedError(references)

        if node in self._classes:
            self._classes.remove(node)
            node.unsubscribe_nodes_changed(self._nodes_changed_handler)
            self._raise_class_removed(node)

    def remove_unused_classes(self) -> List[ClassNode]:
        """
        Remove classes nobody references whose body is only placeholder nodes

        Returns:
            The removed classes
        """
        to_remove = [
            c
            for c in self._classes
            if not self.get_class_references(c)
            and all(isinstance(n, BaseHexNode) for n in c.nodes)
        ]
        for node in to_remove:
            self._classes.remove(node)
            node.unsubscribe_nodes_changed(self._nodes_changed_handler)
            self._raise_class_removed(node)

        if to_remove:
            logger.info(f"Removed {len(to_remove)} unused classes")
        return to_remove

    def clear(self) -> None:
        """Remove all classes, raising the removed event for each"""
        removed = list(self._classes)
        self._classes.clear()

        for node in removed:
            node.unsubscribe_nodes_changed(self._nodes_changed_handler)
            self._raise_class_removed(node)

    def close(self) -> None:
        """Release all classes and drop every event handler"""
        self.clear()
        self._class_added_handlers.clear()
        self._class_removed_handlers.clear()

    def add_enum(self, meta: EnumMetaData) -> None:
        self._enums.append(meta)

    def remove_enum(self, meta: EnumMetaData) -> bool:
        if meta in self._enums:
            self._enums.remove(meta)
            return True
        return False
