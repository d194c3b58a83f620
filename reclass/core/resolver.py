"""
Reference resolution

Follows wrapper chains to the class they finally describe and collects the
classes reachable from a set of nodes.
"""

from typing import Dict, Iterable, Iterator, List, Optional

from .node_uuid import NodeUuid
from .nodes import BaseNode, BaseWrapperNode, ClassInstanceNode, ClassNode, FunctionNode


def resolve_most_inner_node(node: BaseWrapperNode) -> Optional[BaseNode]:
    """
    Follow the inner node chain of a wrapper

    Stops at the first node that is not a wrapper, or at the class a
    ClassInstanceNode points to.

    Args:
        node: Wrapper to start from

    Returns:
        The terminal node, None if the chain ends in an empty wrapper or loops
        back onto itself
    """
    seen = set()
    current: Optional[BaseNode] = node
    while isinstance(current, BaseWrapperNode):
        if id(current) in seen:
            return None
        seen.add(id(current))

        if isinstance(current, ClassInstanceNode):
            return current.inner_node
        current = current.inner_node
    return current


def iter_wrapper_nodes(class_node: ClassNode) -> Iterator[BaseWrapperNode]:
    """Top level wrapper nodes of a class"""
    for node in class_node.nodes:
        if isinstance(node, BaseWrapperNode):
            yield node


def references_class(class_node: ClassNode, target: ClassNode) -> bool:
    """Whether any top level wrapper of class_node resolves to target"""
    return any(
        wrapper.resolve_most_inner_node() is target
        for wrapper in iter_wrapper_nodes(class_node)
    )


def collect_referenced_classes(nodes: Iterable[BaseNode]) -> List[ClassNode]:
    """
    Collect every class reachable through wrapper and function references

    Starts from the given nodes (wrappers are resolved, function nodes lead to
    the class they belong to, classes are taken as they are) and walks the
    wrappers and function nodes of each class found. Classes are
    deduplicated by uuid and returned in discovery order.

    Args:
        nodes: Starting nodes

    Returns:
        Reachable classes
    """
    found: Dict[NodeUuid, ClassNode] = {}
    pending: List[BaseNode] = list(nodes)
    pending.reverse()

    while pending:
        node = pending.pop()
        if isinstance(node, BaseWrapperNode):
            node = node.resolve_most_inner_node()
        if isinstance(node, FunctionNode):
            node = node.belongs_to_class
        if not isinstance(node, ClassNode) or node.uuid in found:
            continue

        found[node.uuid] = node
        pending.extend(
            reversed(
                [n for n in node.nodes if isinstance(n, (BaseWrapperNode, FunctionNode))]
            )
        )

    return list(found.values())
