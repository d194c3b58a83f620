"""
Node Selection Export Tests

Tests for writing arbitrary node selections and reading them back
"""

import io

from reclass.core import (
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    Int32Node,
    Int64Node,
    PointerNode,
    ReClassProject,
)
from reclass.exchange import SERIALIZATION_CLASS_NAME, read_document, read_nodes, write_nodes


def class_names(stream):
    stream.seek(0)
    root = read_document(stream)
    stream.seek(0)
    return [c.get("name") for c in root.find("classes")]


class TestWriteNodes:
    """Tests for the export side"""

    def test_referenced_classes_included(self):
        """Test classes reached through the selection are written"""
        y = ClassNode(name="Y", nodes=[Int32Node()])
        x = ClassNode(
            name="X", nodes=[PointerNode(inner_node=ClassInstanceNode.for_class(y))]
        )
        owner = ClassNode(name="Owner")
        selected = PointerNode(name="sel", inner_node=ClassInstanceNode.for_class(x))
        owner.add_node(selected)

        stream = io.BytesIO()
        write_nodes(stream, [selected])

        assert class_names(stream) == [SERIALIZATION_CLASS_NAME, "X", "Y"]

    def test_function_owner_included(self):
        """Test the class a selected function belongs to is written"""
        owner = ClassNode(name="Owner", nodes=[Int32Node()])
        function = FunctionNode(name="f", belongs_to_class=owner)
        holder = ClassNode(name="Holder")
        holder.add_node(function)

        stream = io.BytesIO()
        write_nodes(stream, [function])

        assert class_names(stream) == [SERIALIZATION_CLASS_NAME, "Owner"]
        classes, nodes = read_nodes(stream)
        assert nodes[0].belongs_to_class is classes[0]

    def test_selection_not_reparented(self):
        """Test exported nodes stay with their owners"""
        owner = ClassNode(name="Owner")
        selected = Int32Node(name="field")
        owner.add_node(selected)
        calls = []
        owner.subscribe_nodes_changed(calls.append)

        write_nodes(io.BytesIO(), [selected])

        assert selected.parent is owner
        assert owner.nodes == [selected]
        assert calls == []

    def test_selected_class_is_top_level(self):
        """Test a selected class is written as a class of its own"""
        selected = ClassNode(name="Picked", nodes=[Int64Node()])

        stream = io.BytesIO()
        write_nodes(stream, [selected])

        root = read_document(stream)
        container, picked = root.find("classes")
        assert container.get("name") == SERIALIZATION_CLASS_NAME
        assert len(container) == 0
        assert picked.get("name") == "Picked"

    def test_exported_classes_not_subscribed(self, monkeypatch):
        """Test exporting leaves no hooks on the exported classes"""
        target = ClassNode(name="Target")
        write_nodes(io.BytesIO(), [ClassInstanceNode.for_class(target)])

        recomputed = []
        monkeypatch.setattr(
            ClassNode, "update_offsets", lambda self: recomputed.append(self)
        )
        target.add_node(Int32Node())

        assert recomputed == []


class TestReadNodes:
    """Tests for the import side"""

    def test_round_trip_into_new_project(self):
        """Test nodes and their classes come back"""
        x = ClassNode(name="X", nodes=[Int32Node()])
        owner = ClassNode(name="Owner")
        pointer = PointerNode(name="p", inner_node=ClassInstanceNode.for_class(x))
        scalar = Int64Node(name="n", comment="count")
        owner.add_node(pointer)
        owner.add_node(scalar)

        stream = io.BytesIO()
        write_nodes(stream, [pointer, scalar])
        stream.seek(0)
        classes, nodes = read_nodes(stream)

        assert [c.name for c in classes] == ["X"]
        assert [n.name for n in nodes] == ["p", "n"]
        assert nodes[1].comment == "count"
        assert all(n.parent is None for n in nodes)
        assert nodes[0].resolve_most_inner_node() is classes[0]
        assert classes[0].uuid == x.uuid

    def test_template_classes_reused(self):
        """Test pasted references point at the template's classes"""
        project = ReClassProject()
        x = ClassNode(name="X", nodes=[Int32Node()])
        owner = ClassNode(name="Owner")
        pointer = PointerNode(inner_node=ClassInstanceNode.for_class(x))
        owner.add_node(pointer)
        project.add_class(x)
        project.add_class(owner)

        stream = io.BytesIO()
        write_nodes(stream, [pointer])
        stream.seek(0)
        classes, nodes = read_nodes(stream, project)

        assert classes == []
        assert nodes[0].resolve_most_inner_node() is x
        assert project.classes == [x, owner]

    def test_template_project_keeps_its_hooks(self):
        """Test the template project still tracks its classes"""
        project = ReClassProject()
        inner = ClassNode(name="Inner", nodes=[Int32Node()])
        after = Int32Node(name="after")
        outer = ClassNode(name="Outer", nodes=[ClassInstanceNode.for_class(inner), after])
        project.add_class(inner)
        project.add_class(outer)

        stream = io.BytesIO()
        write_nodes(stream, [after])
        stream.seek(0)
        read_nodes(stream, project)

        inner.add_node(Int64Node())
        assert after.offset == 12
