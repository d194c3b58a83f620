"""
Node converters

Maps node variants to the type tags written in project files. Plugins that add
their own node variants register a CustomNodeConverter; a registered converter
that claims a node or element takes over its conversion completely.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional, Type
from xml.etree.ElementTree import Element

from ..core.node_uuid import NodeUuid
from ..core.nodes import (
    BaseNode,
    Hex8Node,
    Hex16Node,
    Hex32Node,
    Hex64Node,
    Int8Node,
    Int16Node,
    Int32Node,
    Int64Node,
    UInt8Node,
    UInt16Node,
    UInt32Node,
    UInt64Node,
    BoolNode,
    FloatNode,
    DoubleNode,
    FunctionPtrNode,
    Utf8TextNode,
    Utf16TextNode,
    Utf32TextNode,
    BitFieldNode,
    VTableNode,
    ClassNode,
    FunctionNode,
    PointerNode,
    ArrayNode,
    ClassInstanceNode,
)
from ..exceptions.errors import UnknownNodeTypeError
from ..utils.logging import Logger

logger = logging.getLogger(__name__)

BUILTIN_NODE_TYPES: List[Type[BaseNode]] = [
    Hex8Node,
    Hex16Node,
    Hex32Node,
    Hex64Node,
    Int8Node,
    Int16Node,
    Int32Node,
    Int64Node,
    UInt8Node,
    UInt16Node,
    UInt32Node,
    UInt64Node,
    BoolNode,
    FloatNode,
    DoubleNode,
    FunctionPtrNode,
    Utf8TextNode,
    Utf16TextNode,
    Utf32TextNode,
    BitFieldNode,
    VTableNode,
    FunctionNode,
    PointerNode,
    ArrayNode,
    ClassInstanceNode,
]


class CustomNodeConverter(ABC):
    """
    Converter for node variants the built-in table does not know

    Both directions are driven by the claim checks: a converter only sees
    nodes and elements it said it can handle.
    """

    @abstractmethod
    def can_handle_node(self, node: BaseNode) -> bool:
        """Whether this converter writes the given node"""
        pass

    @abstractmethod
    def can_handle_element(self, element: Element) -> bool:
        """Whether this converter reads the given node element"""
        pass

    @abstractmethod
    def create_element_from_node(self, node: BaseNode, logger: Logger) -> Element:
        """
        Serialize a claimed node

        Args:
            node: Node to write
            logger: Diagnostics sink

        Returns:
            The node element
        """
        pass

    @abstractmethod
    def create_node_from_element(
        self,
        element: Element,
        parent: BaseNode,
        classes: Mapping[NodeUuid, ClassNode],
        logger: Logger,
    ) -> Optional[BaseNode]:
        """
        Deserialize a claimed element

        Args:
            element: Node element
            parent: The class or wrapper that will hold the node
            classes: Known classes by uuid, for resolving references
            logger: Diagnostics sink

        Returns:
            The node, None to skip it
        """
        pass


class NodeConverterRegistry:
    """
    Converter registry

    Custom converters are consulted first, in registration order. Built-in
    tags are matched on the exact node class, so an unregistered subclass of
    a built-in variant is unknown.
    """

    def __init__(self, builtin_types: Optional[Iterable[Type[BaseNode]]] = None):
        self._converters: List[CustomNodeConverter] = []
        self._type_to_tag: Dict[Type[BaseNode], str] = {}
        self._tag_to_type: Dict[str, Type[BaseNode]] = {}

        for node_type in builtin_types if builtin_types is not None else BUILTIN_NODE_TYPES:
            self._type_to_tag[node_type] = node_type.__name__
            self._tag_to_type[node_type.__name__] = node_type

    def register(self, converter: CustomNodeConverter) -> None:
        """Register a custom converter"""
        if converter not in self._converters:
            self._converters.append(converter)
            logger.debug(f"Registered node converter {type(converter).__name__}")

    def unregister(self, converter: CustomNodeConverter) -> bool:
        """Unregister a custom converter"""
        if converter in self._converters:
            self._converters.remove(converter)
            return True
        return False

    def registered_converters(self) -> List[CustomNodeConverter]:
        return list(self._converters)

    def get_write_converter(self, node: BaseNode) -> Optional[CustomNodeConverter]:
        for converter in self._converters:
            if converter.can_handle_node(node):
                return converter
        return None

    def get_read_converter(self, element: Element) -> Optional[CustomNodeConverter]:
        for converter in self._converters:
            if converter.can_handle_element(element):
                return converter
        return None

    def get_type_tag(self, node: BaseNode) -> str:
        """
        Get the built-in type tag of a node

        Raises:
            UnknownNodeTypeError: If the node class has no built-in tag
        """
        tag = self._type_to_tag.get(type(node))
        if tag is None:
            raise UnknownNodeTypeError(
                f"Unknown node type: {type(node).__name__}",
                details={"type": f"{type(node).__module__}.{type(node).__qualname__}"},
            )
        return tag

    def get_node_type(self, tag: str) -> Type[BaseNode]:
        """
        Get the node class of a built-in type tag

        Raises:
            UnknownNodeTypeError: If the tag is not a built-in tag
        """
        node_type = self._tag_to_type.get(tag)
        if node_type is None:
            raise UnknownNodeTypeError(f"Unknown node type: {tag}", details={"type": tag})
        return node_type


# Process wide registry, the seam plugins register their converters on
default_registry = NodeConverterRegistry()
