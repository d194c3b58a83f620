"""ReClass core data model"""

from .node_uuid import NodeUuid
from .nodes import (
    POINTER_SIZE,
    BaseNode,
    BaseHexNode,
    Hex8Node,
    Hex16Node,
    Hex32Node,
    Hex64Node,
    BaseNumericNode,
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
    BaseTextNode,
    Utf8TextNode,
    Utf16TextNode,
    Utf32TextNode,
    BitFieldNode,
    VirtualMethodNode,
    VTableNode,
    ClassNode,
    FunctionNode,
    BaseWrapperNode,
    PointerNode,
    BaseWrapperArrayNode,
    ArrayNode,
    ClassInstanceNode,
)
from .resolver import (
    resolve_most_inner_node,
    iter_wrapper_nodes,
    references_class,
    collect_referenced_classes,
)
from .custom_data import CustomDataMap
from .enums import EnumMetaData
from .project import ReClassProject

__all__ = [
    # Identity
    "NodeUuid",
    # Nodes
    "POINTER_SIZE",
    "BaseNode",
    "BaseHexNode",
    "Hex8Node",
    "Hex16Node",
    "Hex32Node",
    "Hex64Node",
    "BaseNumericNode",
    "Int8Node",
    "Int16Node",
    "Int32Node",
    "Int64Node",
    "UInt8Node",
    "UInt16Node",
    "UInt32Node",
    "UInt64Node",
    "BoolNode",
    "FloatNode",
    "DoubleNode",
    "FunctionPtrNode",
    "BaseTextNode",
    "Utf8TextNode",
    "Utf16TextNode",
    "Utf32TextNode",
    "BitFieldNode",
    "VirtualMethodNode",
    "VTableNode",
    "ClassNode",
    "FunctionNode",
    "BaseWrapperNode",
    "PointerNode",
    "BaseWrapperArrayNode",
    "ArrayNode",
    "ClassInstanceNode",
    # Resolver
    "resolve_most_inner_node",
    "iter_wrapper_nodes",
    "references_class",
    "collect_referenced_classes",
    # Project
    "CustomDataMap",
    "EnumMetaData",
    "ReClassProject",
]
