"""
Reference Resolver Unit Tests

Tests for wrapper chain resolution and reachable class collection
"""

from reclass.core import (
    ArrayNode,
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    Int32Node,
    PointerNode,
    collect_referenced_classes,
    references_class,
    resolve_most_inner_node,
)


class TestResolveMostInnerNode:
    """Tests for following wrapper chains"""

    def test_plain_pointer(self):
        """Test a pointer to a scalar resolves to the scalar"""
        inner = Int32Node()
        assert resolve_most_inner_node(PointerNode(inner_node=inner)) is inner

    def test_nested_chain(self):
        """Test array of pointers to a class instance resolves to the class"""
        target = ClassNode(name="Target")
        node = ArrayNode(
            inner_node=PointerNode(inner_node=ClassInstanceNode.for_class(target))
        )
        assert node.resolve_most_inner_node() is target

    def test_empty_wrapper(self):
        """Test an empty chain resolves to nothing"""
        assert resolve_most_inner_node(PointerNode()) is None
        assert resolve_most_inner_node(ArrayNode(inner_node=PointerNode())) is None

    def test_self_loop_terminates(self):
        """Test a wrapper chain looping onto itself resolves to nothing"""
        pointer = PointerNode()
        pointer.__dict__["inner_node"] = pointer
        assert resolve_most_inner_node(pointer) is None

    def test_class_instance_stops_at_class(self):
        """Test resolution does not descend into the referenced class"""
        target = ClassNode(nodes=[PointerNode(inner_node=Int32Node())])
        assert resolve_most_inner_node(ClassInstanceNode.for_class(target)) is target


class TestReferencesClass:
    """Tests for reference checks between classes"""

    def test_direct_reference(self):
        """Test a top level wrapper referencing the target"""
        target = ClassNode()
        holder = ClassNode(nodes=[ClassInstanceNode.for_class(target)])
        assert references_class(holder, target)
        assert not references_class(target, holder)

    def test_non_wrapper_nodes_ignored(self):
        """Test scalar nodes never reference a class"""
        target = ClassNode()
        holder = ClassNode(nodes=[Int32Node()])
        assert not references_class(holder, target)


class TestCollectReferencedClasses:
    """Tests for reachable class collection"""

    def test_transitive_closure(self):
        """Test classes reached through other classes are collected"""
        y = ClassNode(name="Y", nodes=[Int32Node()])
        x = ClassNode(name="X", nodes=[PointerNode(inner_node=ClassInstanceNode.for_class(y))])
        start = PointerNode(inner_node=ClassInstanceNode.for_class(x))

        assert collect_referenced_classes([start]) == [x, y]

    def test_cycle_terminates(self):
        """Test mutually referencing classes are each collected once"""
        a = ClassNode(name="A")
        b = ClassNode(name="B")
        a.add_node(PointerNode(inner_node=ClassInstanceNode.for_class(b)))
        b.add_node(PointerNode(inner_node=ClassInstanceNode.for_class(a)))

        assert collect_referenced_classes([a]) == [a, b]

    def test_deduplicated_by_uuid(self):
        """Test the same class reached twice is listed once"""
        target = ClassNode()
        nodes = [ClassInstanceNode.for_class(target), ClassInstanceNode.for_class(target)]
        assert collect_referenced_classes(nodes) == [target]

    def test_scalars_yield_nothing(self):
        """Test nodes without references collect no classes"""
        assert collect_referenced_classes([Int32Node(), PointerNode()]) == []

    def test_function_owner_collected(self):
        """Test the class a function belongs to is reachable"""
        owner = ClassNode(name="Owner")
        function = FunctionNode(name="f", belongs_to_class=owner)
        other = ClassNode(name="Other", nodes=[FunctionNode(belongs_to_class=owner)])

        assert collect_referenced_classes([function]) == [owner]
        assert collect_referenced_classes([other]) == [other, owner]
        assert collect_referenced_classes([FunctionNode()]) == []
