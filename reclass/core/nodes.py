"""
ReClass Node Definitions

Node variants describing the fields of a class layout.

All nodes must include:
- name / comment: display text, ``None`` is stored as ""
- is_hidden: display flag

Nodes are compared by identity. Classes reference each other through
ClassInstanceNode and FunctionNode, so the node graph may contain cycles.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .node_uuid import NodeUuid

# x64 layout
POINTER_SIZE = 8

NodesChangedHook = Callable[["ClassNode"], None]


class BaseNode(BaseModel, ABC):
    """
    Node base class

    Assigning any declared field signals a change to the owning class, which
    forwards it to its registered hooks.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    comment: str = ""
    is_hidden: bool = False

    _parent: Optional[Any] = PrivateAttr(default=None)
    _offset: int = PrivateAttr(default=0)

    @field_validator("name", "comment", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name in type(self).model_fields:
            self.notify_changed()

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr_args__(self):
        yield "name", self.name

    @property
    def parent(self) -> Optional["BaseNode"]:
        """Owning container (a class or a wrapper), None when detached"""
        return self._parent

    @property
    def offset(self) -> int:
        """Byte offset inside the owning class, as of the last recompute"""
        return self._offset

    @property
    @abstractmethod
    def memory_size(self) -> int:
        """Size in bytes this node occupies in the class layout"""
        pass

    def notify_changed(self) -> None:
        """Propagate a change notification to the owner"""
        if self._parent is not None:
            self._parent.notify_changed()

    def _set_parent(self, parent: Optional["BaseNode"]) -> None:
        self._parent = parent


def _reparent(owner: BaseNode, old: List[BaseNode], new: List[BaseNode]) -> None:
    """Move ownership after a whole child list was assigned"""
    for node in old:
        if node.parent is owner and node not in new:
            node._set_parent(None)
    for node in new:
        node._set_parent(owner)


class _FixedSizeNode(BaseNode):
    SIZE: ClassVar[int] = 0

    @property
    def memory_size(self) -> int:
        return self.SIZE


class BaseHexNode(_FixedSizeNode):
    """Opaque placeholder bytes, the filler of a class nobody has authored yet"""


class Hex8Node(BaseHexNode):
    SIZE: ClassVar[int] = 1


class Hex16Node(BaseHexNode):
    SIZE: ClassVar[int] = 2


class Hex32Node(BaseHexNode):
    SIZE: ClassVar[int] = 4


class Hex64Node(BaseHexNode):
    SIZE: ClassVar[int] = 8


class BaseNumericNode(_FixedSizeNode):
    """Scalar value"""


class Int8Node(BaseNumericNode):
    SIZE: ClassVar[int] = 1


class Int16Node(BaseNumericNode):
    SIZE: ClassVar[int] = 2


class Int32Node(BaseNumericNode):
    SIZE: ClassVar[int] = 4


class Int64Node(BaseNumericNode):
    SIZE: ClassVar[int] = 8


class UInt8Node(BaseNumericNode):
    SIZE: ClassVar[int] = 1


class UInt16Node(BaseNumericNode):
    SIZE: ClassVar[int] = 2


class UInt32Node(BaseNumericNode):
    SIZE: ClassVar[int] = 4


class UInt64Node(BaseNumericNode):
    SIZE: ClassVar[int] = 8


class BoolNode(BaseNumericNode):
    SIZE: ClassVar[int] = 1


class FloatNode(BaseNumericNode):
    SIZE: ClassVar[int] = 4


class DoubleNode(BaseNumericNode):
    SIZE: ClassVar[int] = 8


class FunctionPtrNode(_FixedSizeNode):
    SIZE: ClassVar[int] = POINTER_SIZE


class BaseTextNode(BaseNode):
    """
    Inline text buffer

    length counts characters, not bytes.
    """

    CHAR_SIZE: ClassVar[int] = 1

    length: int = Field(default=8, ge=0)

    @property
    def memory_size(self) -> int:
        return self.length * self.CHAR_SIZE


class Utf8TextNode(BaseTextNode):
    CHAR_SIZE: ClassVar[int] = 1


class Utf16TextNode(BaseTextNode):
    CHAR_SIZE: ClassVar[int] = 2


class Utf32TextNode(BaseTextNode):
    CHAR_SIZE: ClassVar[int] = 4


class BitFieldNode(BaseNode):
    """Bit field, occupying whole bytes"""

    bits: int = Field(default=8, ge=1, le=64)

    @property
    def memory_size(self) -> int:
        return (self.bits + 7) // 8


class VirtualMethodNode(_FixedSizeNode):
    """Entry of a VTableNode"""

    SIZE: ClassVar[int] = POINTER_SIZE


class VTableNode(BaseNode):
    """Pointer to a table of virtual methods"""

    nodes: List[VirtualMethodNode] = Field(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        for method in self.nodes:
            method._set_parent(self)

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "nodes":
            super().__setattr__(name, value)
            return
        old = list(self.nodes)
        super().__setattr__(name, value)
        _reparent(self, old, self.nodes)

    @property
    def memory_size(self) -> int:
        return POINTER_SIZE

    def add_node(self, method: VirtualMethodNode) -> None:
        method._set_parent(self)
        self.nodes.append(method)
        self.notify_changed()

    def remove_node(self, method: VirtualMethodNode) -> bool:
        if method not in self.nodes:
            return False
        self.nodes.remove(method)
        method._set_parent(None)
        self.notify_changed()
        return True


class ClassNode(BaseNode):
    """
    Class definition

    Top level container of an ordered node list. The list order is the memory
    layout order. Assigning a new ``nodes`` list reparents its nodes; editing
    the list in place signals nothing, so use the node methods instead.
    """

    uuid: NodeUuid = Field(default_factory=NodeUuid.new)
    address_formula: str = ""
    nodes: List[BaseNode] = Field(default_factory=list)

    _hooks: List[Callable[..., None]] = PrivateAttr(default_factory=list)
    _sizing: bool = PrivateAttr(default=False)

    @field_validator("address_formula", mode="before")
    @classmethod
    def _formula_none_to_empty(cls, v):
        return "" if v is None else v

    def model_post_init(self, __context: Any) -> None:
        for node in self.nodes:
            self._check_child(node)
            node._set_parent(self)

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "nodes":
            super().__setattr__(name, value)
            return
        for node in value:
            self._check_child(node)
        old = list(self.nodes)
        super().__setattr__(name, value)
        _reparent(self, old, self.nodes)

    def __repr_args__(self):
        yield "name", self.name
        yield "uuid", str(self.uuid)

    @classmethod
    def create(cls, name: str = "", default_node_count: int = 0) -> "ClassNode":
        """Create a class pre-filled with Hex64Node placeholders"""
        class_node = cls(name=name)
        for _ in range(default_node_count):
            class_node.add_node(Hex64Node())
        class_node.update_offsets()
        return class_node

    @property
    def memory_size(self) -> int:
        # Embedded instances may cycle back to this class
        if self._sizing:
            return 0
        self._sizing = True
        try:
            return sum(node.memory_size for node in self.nodes)
        finally:
            self._sizing = False

    def subscribe_nodes_changed(self, hook: NodesChangedHook) -> None:
        self._hooks.append(hook)

    def unsubscribe_nodes_changed(self, hook: NodesChangedHook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def notify_changed(self) -> None:
        for hook in list(self._hooks):
            hook(self)

    def update_offsets(self) -> None:
        """Assign each child its byte offset in list order"""
        offset = 0
        for node in self.nodes:
            node._offset = offset
            offset += node.memory_size

    def _check_child(self, node: BaseNode) -> None:
        if isinstance(node, ClassNode):
            raise ValueError("A class can not be a child node")

    def add_node(self, node: BaseNode, take_ownership: bool = True) -> None:
        """
        Append a child node

        Args:
            node: Node to append
            take_ownership: Make this class the node's parent. Pass False to
                list a node that stays owned elsewhere.
        """
        self._check_child(node)
        if take_ownership:
            node._set_parent(self)
        self.nodes.append(node)
        self.notify_changed()

    def insert_node(self, index: int, node: BaseNode) -> None:
        self._check_child(node)
        node._set_parent(self)
        self.nodes.insert(index, node)
        self.notify_changed()

    def remove_node(self, node: BaseNode) -> bool:
        if node not in self.nodes:
            return False
        self.nodes.remove(node)
        if node.parent is self:
            node._set_parent(None)
        self.notify_changed()
        return True

    def replace_child_node(self, child: BaseNode, node: BaseNode) -> None:
        """
        Swap a child for another node at the same position

        Raises:
            ValueError: If child is not a child of this class
        """
        self._check_child(node)
        index = self.nodes.index(child)
        self.nodes[index] = node
        if child.parent is self:
            child._set_parent(None)
        node._set_parent(self)
        self.notify_changed()

    def clear_nodes(self) -> List[BaseNode]:
        """Detach and return all children"""
        removed = list(self.nodes)
        self.nodes.clear()
        for node in removed:
            if node.parent is self:
                node._set_parent(None)
        self.notify_changed()
        return removed


class FunctionNode(BaseNode):
    """
    Function stub

    belongs_to_class is a plain reference to the owning class, never
    ownership.
    """

    signature: str = "void function()"
    belongs_to_class: Optional[ClassNode] = None

    @field_validator("signature", mode="before")
    @classmethod
    def _signature_none_to_empty(cls, v):
        return "" if v is None else v

    @property
    def memory_size(self) -> int:
        return 0


class BaseWrapperNode(BaseNode):
    """
    Node wrapping exactly one inner node

    Wrappers that own their inner node become its parent; a class instance
    only points at a class owned by the project.
    """

    OWNS_INNER_NODE: ClassVar[bool] = True

    inner_node: Optional[BaseNode] = None

    def model_post_init(self, __context: Any) -> None:
        if self.OWNS_INNER_NODE and self.inner_node is not None:
            self.inner_node._set_parent(self)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "inner_node":
            self.change_inner_node(value)
        else:
            super().__setattr__(name, value)

    def can_change_inner_node_to(self, node: BaseNode) -> bool:
        return not isinstance(node, ClassNode)

    def change_inner_node(self, node: Optional[BaseNode]) -> None:
        """
        Replace the inner node

        Raises:
            ValueError: If this wrapper can not wrap the given node
        """
        if node is not None and not self.can_change_inner_node_to(node):
            raise ValueError(
                f"{type(self).__name__} can not wrap {type(node).__name__}"
            )
        if self.inner_node is node:
            return
        if self.OWNS_INNER_NODE and node is not None and self._is_owned_by(node):
            raise ValueError(f"{type(self).__name__} can not wrap its own owner")

        old = self.inner_node
        if self.OWNS_INNER_NODE:
            if old is not None and old.parent is self:
                old._set_parent(None)
            if node is not None:
                node._set_parent(self)
        BaseNode.__setattr__(self, "inner_node", node)

    def _is_owned_by(self, node: BaseNode) -> bool:
        current: Optional[BaseNode] = self
        while current is not None:
            if current is node:
                return True
            current = current.parent
        return False

    def resolve_most_inner_node(self) -> Optional[BaseNode]:
        """Follow the inner node chain to its end"""
        from .resolver import resolve_most_inner_node

        return resolve_most_inner_node(self)


class PointerNode(BaseWrapperNode):
    """Pointer owning the description of its target"""

    @property
    def memory_size(self) -> int:
        return POINTER_SIZE


class BaseWrapperArrayNode(BaseWrapperNode):
    """count repetitions of the inner node"""

    count: int = Field(default=1, ge=0)

    @property
    def memory_size(self) -> int:
        if self.inner_node is None:
            return 0
        return self.count * self.inner_node.memory_size


class ArrayNode(BaseWrapperArrayNode):
    pass


class ClassInstanceNode(BaseWrapperNode):
    """Embedded instance of a class defined elsewhere in the project"""

    OWNS_INNER_NODE: ClassVar[bool] = False

    @classmethod
    def for_class(cls, class_node: ClassNode, **kwargs: Any) -> "ClassInstanceNode":
        node = cls(**kwargs)
        node.change_inner_node(class_node)
        return node

    def can_change_inner_node_to(self, node: BaseNode) -> bool:
        return isinstance(node, ClassNode)

    @property
    def memory_size(self) -> int:
        if self.inner_node is None:
            return 0
        return self.inner_node.memory_size
