"""
Node Unit Tests

Tests for node sizes, ownership, offsets and change notification
"""

import pytest
from pydantic import ValidationError

from reclass.core import (
    POINTER_SIZE,
    ArrayNode,
    BitFieldNode,
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    Hex8Node,
    Hex64Node,
    Int32Node,
    Int64Node,
    PointerNode,
    Utf16TextNode,
    Utf32TextNode,
    Utf8TextNode,
    VirtualMethodNode,
    VTableNode,
)


class TestNodeSizes:
    """Tests for memory sizes of node variants"""

    def test_fixed_sizes(self):
        """Test fixed size variants"""
        assert Hex8Node().memory_size == 1
        assert Int32Node().memory_size == 4
        assert Int64Node().memory_size == 8
        assert PointerNode().memory_size == POINTER_SIZE
        assert VTableNode().memory_size == POINTER_SIZE
        assert FunctionNode().memory_size == 0

    def test_text_sizes(self):
        """Test text size is length times character size"""
        assert Utf8TextNode(length=32).memory_size == 32
        assert Utf16TextNode(length=32).memory_size == 64
        assert Utf32TextNode(length=32).memory_size == 128

    def test_bitfield_size(self):
        """Test bit fields occupy whole bytes"""
        assert BitFieldNode(bits=1).memory_size == 1
        assert BitFieldNode(bits=8).memory_size == 1
        assert BitFieldNode(bits=9).memory_size == 2
        assert BitFieldNode(bits=64).memory_size == 8

    def test_bitfield_range(self):
        """Test bit count is limited to 1..64"""
        with pytest.raises(ValidationError):
            BitFieldNode(bits=0)
        with pytest.raises(ValidationError):
            BitFieldNode(bits=65)

    def test_array_size(self):
        """Test array size is count times inner size"""
        assert ArrayNode(count=10, inner_node=Int32Node()).memory_size == 40
        assert ArrayNode(count=10).memory_size == 0

    def test_negative_count_rejected(self):
        """Test negative counts and lengths are rejected"""
        with pytest.raises(ValidationError):
            ArrayNode(count=-1)
        node = Utf8TextNode()
        with pytest.raises(ValidationError):
            node.length = -1

    def test_class_size(self):
        """Test class size is the sum of its children"""
        class_node = ClassNode(nodes=[Int32Node(), Int64Node(), Hex8Node()])
        assert class_node.memory_size == 13

    def test_class_instance_size(self):
        """Test an embedded instance has the size of its class"""
        inner = ClassNode(nodes=[Int64Node(), Int64Node()])
        assert ClassInstanceNode.for_class(inner).memory_size == 16

    def test_embedded_cycle_terminates(self):
        """Test classes embedding each other have a finite size"""
        a = ClassNode(name="A", nodes=[Int32Node()])
        b = ClassNode(name="B", nodes=[Int32Node()])
        a.add_node(ClassInstanceNode.for_class(b))
        b.add_node(ClassInstanceNode.for_class(a))

        assert a.memory_size == 8
        assert b.memory_size == 8


class TestNodeFields:
    """Tests for common node fields"""

    def test_none_text_becomes_empty(self):
        """Test None name and comment are stored as empty strings"""
        node = Int32Node(name=None, comment=None)
        assert node.name == ""
        assert node.comment == ""

        node.name = None
        assert node.name == ""

    def test_identity_equality(self):
        """Test nodes compare by identity"""
        a = Int32Node(name="x")
        b = Int32Node(name="x")
        assert a != b
        assert a == a
        assert len({a, b}) == 2

    def test_repr_does_not_recurse(self):
        """Test repr of cyclic classes terminates"""
        a = ClassNode(name="A")
        b = ClassNode(name="B")
        a.add_node(PointerNode(inner_node=ClassInstanceNode.for_class(b)))
        b.add_node(PointerNode(inner_node=ClassInstanceNode.for_class(a)))

        assert "A" in repr(a)


class TestClassNodeChildren:
    """Tests for the child list of a class"""

    def test_create_with_placeholders(self):
        """Test a created class holds Hex64Node placeholders"""
        class_node = ClassNode.create("Fresh", 4)

        assert class_node.name == "Fresh"
        assert len(class_node.nodes) == 4
        assert all(isinstance(n, Hex64Node) for n in class_node.nodes)
        assert [n.offset for n in class_node.nodes] == [0, 8, 16, 24]

    def test_create_empty(self):
        """Test a class with no placeholders"""
        assert ClassNode.create("Empty").nodes == []

    def test_add_sets_parent(self):
        """Test adding a node takes ownership"""
        class_node = ClassNode()
        node = Int32Node()
        class_node.add_node(node)

        assert node.parent is class_node
        assert class_node.nodes == [node]

    def test_add_without_ownership(self):
        """Test a node can be listed without re-parenting"""
        owner = ClassNode()
        node = Int32Node()
        owner.add_node(node)

        other = ClassNode()
        other.add_node(node, take_ownership=False)

        assert node.parent is owner
        assert node in other.nodes

    def test_class_is_not_a_child(self):
        """Test a class can not be added as a child node"""
        with pytest.raises(ValueError):
            ClassNode().add_node(ClassNode())

    def test_constructor_sets_parents(self):
        """Test nodes passed to the constructor are owned"""
        node = Int32Node()
        class_node = ClassNode(nodes=[node])
        assert node.parent is class_node

    def test_insert_remove_replace(self):
        """Test positional edits of the child list"""
        a, b, c = Int32Node(name="a"), Int32Node(name="b"), Int32Node(name="c")
        class_node = ClassNode(nodes=[a, c])

        class_node.insert_node(1, b)
        assert [n.name for n in class_node.nodes] == ["a", "b", "c"]

        assert class_node.remove_node(b)
        assert b.parent is None
        assert not class_node.remove_node(b)

        d = Int64Node(name="d")
        class_node.replace_child_node(a, d)
        assert [n.name for n in class_node.nodes] == ["d", "c"]
        assert a.parent is None
        assert d.parent is class_node

    def test_replace_unknown_child(self):
        """Test replacing a node that is not a child fails"""
        with pytest.raises(ValueError):
            ClassNode().replace_child_node(Int32Node(), Int32Node())

    def test_clear_nodes(self):
        """Test clearing detaches all children"""
        a, b = Int32Node(), Int32Node()
        class_node = ClassNode(nodes=[a, b])

        removed = class_node.clear_nodes()

        assert removed == [a, b]
        assert class_node.nodes == []
        assert a.parent is None and b.parent is None

    def test_update_offsets(self):
        """Test offsets follow list order"""
        class_node = ClassNode(nodes=[Int32Node(), Int64Node(), Hex8Node()])
        class_node.update_offsets()
        assert [n.offset for n in class_node.nodes] == [0, 4, 12]


class TestWrapperNodes:
    """Tests for wrapper ownership"""

    def test_pointer_owns_inner(self):
        """Test a pointer becomes the parent of its inner node"""
        inner = Int32Node()
        pointer = PointerNode(inner_node=inner)
        assert inner.parent is pointer

    def test_change_inner_node(self):
        """Test swapping the inner node moves ownership"""
        old, new = Int32Node(), Int64Node()
        pointer = PointerNode(inner_node=old)

        pointer.change_inner_node(new)

        assert pointer.inner_node is new
        assert new.parent is pointer
        assert old.parent is None

    def test_pointer_can_not_wrap_class(self):
        """Test a generic wrapper rejects a class"""
        with pytest.raises(ValueError):
            PointerNode().change_inner_node(ClassNode())

    def test_wrapper_can_not_wrap_its_owner(self):
        """Test wrapping an ancestor is rejected"""
        outer = PointerNode()
        inner = PointerNode()
        outer.change_inner_node(inner)

        with pytest.raises(ValueError):
            inner.change_inner_node(outer)

    def test_class_instance_does_not_own(self):
        """Test a class instance leaves the class unparented"""
        target = ClassNode()
        instance = ClassInstanceNode.for_class(target)

        assert instance.inner_node is target
        assert target.parent is None

    def test_class_instance_requires_class(self):
        """Test a class instance only wraps classes"""
        with pytest.raises(ValueError):
            ClassInstanceNode().change_inner_node(Int32Node())

    def test_vtable_methods_owned(self):
        """Test vtable methods are owned by the vtable"""
        method = VirtualMethodNode(name="Run")
        vtable = VTableNode(nodes=[method])
        assert method.parent is vtable

        extra = VirtualMethodNode()
        vtable.add_node(extra)
        assert extra.parent is vtable
        assert vtable.remove_node(extra)
        assert extra.parent is None


class TestChangeNotification:
    """Tests for change signals reaching the owning class"""

    @pytest.fixture
    def observed(self):
        class_node = ClassNode(name="Observed")
        calls = []
        class_node.subscribe_nodes_changed(calls.append)
        return class_node, calls

    def test_child_list_edits_notify(self, observed):
        """Test every child list edit signals the class"""
        class_node, calls = observed
        node = Int32Node()

        class_node.add_node(node)
        class_node.insert_node(0, Hex8Node())
        class_node.replace_child_node(node, Int64Node())
        class_node.remove_node(class_node.nodes[0])
        class_node.clear_nodes()

        assert len(calls) == 5
        assert all(sender is class_node for sender in calls)

    def test_field_assignment_notifies(self, observed):
        """Test assigning a child's field signals the class"""
        class_node, calls = observed
        node = Utf8TextNode()
        class_node.add_node(node)
        calls.clear()

        node.length = 16
        node.name = "text"

        assert len(calls) == 2

    def test_nested_change_bubbles_up(self, observed):
        """Test a change deep inside a wrapper reaches the class"""
        class_node, calls = observed
        inner = ArrayNode(count=2, inner_node=Int32Node())
        class_node.add_node(PointerNode(inner_node=inner))
        calls.clear()

        inner.count = 4
        inner.change_inner_node(Int64Node())

        assert len(calls) == 2

    def test_unsubscribe(self, observed):
        """Test an unsubscribed hook is no longer called"""
        class_node, calls = observed
        class_node.unsubscribe_nodes_changed(calls.append)
        class_node.add_node(Int32Node())
        assert calls == []

    def test_hook_may_unsubscribe_itself(self):
        """Test hooks are dispatched from a snapshot"""
        class_node = ClassNode()
        calls = []

        def once(sender):
            calls.append(sender)
            sender.unsubscribe_nodes_changed(once)

        class_node.subscribe_nodes_changed(once)
        class_node.subscribe_nodes_changed(calls.append)

        class_node.add_node(Int32Node())
        class_node.add_node(Int32Node())

        assert len(calls) == 3

    def test_detached_node_is_silent(self, observed):
        """Test a removed node no longer signals its old class"""
        class_node, calls = observed
        node = Int32Node()
        class_node.add_node(node)
        class_node.remove_node(node)
        calls.clear()

        node.name = "gone"

        assert calls == []


class TestDirectAssignment:
    """Tests for assigning inner nodes and child lists directly"""

    def test_inner_node_assignment_takes_ownership(self):
        """Test assigning inner_node parents the node like change_inner_node"""
        class_node = ClassNode()
        pointer = PointerNode(inner_node=Int32Node())
        class_node.add_node(pointer)
        calls = []
        class_node.subscribe_nodes_changed(calls.append)
        old = pointer.inner_node

        inner = Int32Node()
        pointer.inner_node = inner
        assert inner.parent is pointer
        assert old.parent is None

        calls.clear()
        inner.name = "y"
        assert len(calls) == 1

    def test_inner_node_assignment_checked(self):
        """Test direct assignment applies the wrap rules"""
        with pytest.raises(ValueError):
            PointerNode().inner_node = ClassNode()
        with pytest.raises(ValueError):
            ClassInstanceNode().inner_node = Int32Node()

        outer = PointerNode()
        inner = PointerNode()
        outer.inner_node = inner
        with pytest.raises(ValueError):
            inner.inner_node = outer

    def test_class_instance_assignment_does_not_own(self):
        """Test assigning a class to an instance leaves it unparented"""
        target = ClassNode()
        instance = ClassInstanceNode()
        instance.inner_node = target
        assert instance.inner_node is target
        assert target.parent is None

    def test_nodes_assignment_reparents(self):
        """Test assigning a new child list moves ownership"""
        kept, dropped = Int32Node(), Int32Node()
        class_node = ClassNode(nodes=[kept, dropped])
        calls = []
        class_node.subscribe_nodes_changed(calls.append)

        added = Int64Node()
        class_node.nodes = [kept, added]

        assert kept.parent is class_node
        assert added.parent is class_node
        assert dropped.parent is None
        assert len(calls) == 1

        calls.clear()
        added.name = "grown"
        assert len(calls) == 1

    def test_nodes_assignment_rejects_classes(self):
        """Test a class can not be assigned into a child list"""
        class_node = ClassNode(nodes=[Int32Node()])
        with pytest.raises(ValueError):
            class_node.nodes = [ClassNode()]
        assert len(class_node.nodes) == 1
        with pytest.raises(ValueError):
            ClassNode(nodes=[ClassNode()])

    def test_vtable_methods_assignment_reparents(self):
        """Test assigning vtable methods moves ownership"""
        old = VirtualMethodNode()
        vtable = VTableNode(nodes=[old])
        new = VirtualMethodNode()

        vtable.nodes = [new]

        assert new.parent is vtable
        assert old.parent is None
