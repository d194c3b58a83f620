"""
Shared fixtures

Builds the sample project used by the round-trip and CLI tests and provides a
recording Logger double.
"""

from typing import List, Tuple

import pytest

from reclass.core import (
    ArrayNode,
    BitFieldNode,
    ClassInstanceNode,
    ClassNode,
    FloatNode,
    FunctionNode,
    Int32Node,
    PointerNode,
    ReClassProject,
    Utf8TextNode,
    VirtualMethodNode,
    VTableNode,
)
from reclass.utils.logging import Logger, LogLevel


class RecordingLogger(Logger):
    """Logger double keeping every message"""

    def __init__(self):
        self.entries: List[Tuple[LogLevel, str]] = []

    def log(self, level: LogLevel, message: str) -> None:
        self.entries.append((level, message))

    def levels(self) -> List[LogLevel]:
        return [level for level, _ in self.entries]

    def messages(self, level: LogLevel) -> List[str]:
        return [message for lvl, message in self.entries if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def sample_project() -> ReClassProject:
    """
    Project exercising every serialized attribute:
    - an empty class
    - a class with a nested owned wrapper
    - two classes pointing at each other
    - a vtable with 3 methods, an array of 10, a text of 32, a bitfield of 4
    - one custom data entry
    """
    project = ReClassProject()

    empty = ClassNode(name="Empty")

    holder = ClassNode(name="Holder", comment="owns its pointee")
    holder.add_node(
        PointerNode(name="value_ptr", inner_node=Int32Node(name="value", comment="pointee"))
    )

    player = ClassNode(
        name="Player", comment="local player", address_formula="<game.exe>+0x1234"
    )
    inventory = ClassNode(name="Inventory", address_formula="0")

    player.add_node(
        VTableNode(
            name="vtable",
            nodes=[
                VirtualMethodNode(name="Destroy"),
                VirtualMethodNode(name="Update", comment="per frame"),
                VirtualMethodNode(name="Render", is_hidden=True),
            ],
        )
    )
    player.add_node(
        PointerNode(name="inventory", inner_node=ClassInstanceNode.for_class(inventory))
    )
    player.add_node(Utf8TextNode(name="name", length=32))
    player.add_node(BitFieldNode(name="flags", bits=4, is_hidden=True))
    player.add_node(
        FunctionNode(
            name="update", signature="void update(float dt)", belongs_to_class=player
        )
    )
    player.add_node(FloatNode(name="health"))

    inventory.add_node(
        PointerNode(name="owner", inner_node=ClassInstanceNode.for_class(player))
    )
    inventory.add_node(ArrayNode(name="slots", count=10, inner_node=Int32Node()))
    inventory.add_node(FunctionNode(name="free_function"))

    for class_node in (empty, holder, player, inventory):
        project.add_class(class_node)
    project.update_offsets()

    project.custom_data["PluginX_Key"] = "value"
    return project
