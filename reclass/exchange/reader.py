"""
Project file reader

Rebuilds a project from the zip container. Classes are created in two
passes, shells first and bodies second, so references between classes resolve
regardless of their order in the file.
"""

import zipfile
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union
from xml.etree.ElementTree import Element, ParseError, fromstring

from ..config import ReClassConfig, get_default_config
from ..core.node_uuid import NodeUuid
from ..core.nodes import (
    ArrayNode,
    BaseNode,
    BaseTextNode,
    BaseWrapperArrayNode,
    BaseWrapperNode,
    BitFieldNode,
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    PointerNode,
    VirtualMethodNode,
    VTableNode,
)
from ..core.project import ReClassProject
from ..exceptions.errors import FileFormatError, UnknownNodeTypeError
from ..utils.logging import Logger, LogLevel, StandardLogger
from .constants import (
    DATA_FILE_NAME,
    FILE_VERSION,
    FILE_VERSION_CRITICAL_MASK,
    SERIALIZATION_CLASS_NAME,
    XML_ADDRESS_ATTRIBUTE,
    XML_BITS_ATTRIBUTE,
    XML_CLASS_ELEMENT,
    XML_CLASSES_ELEMENT,
    XML_COMMENT_ATTRIBUTE,
    XML_COUNT_ATTRIBUTE,
    XML_CUSTOM_DATA_ELEMENT,
    XML_HIDDEN_ATTRIBUTE,
    XML_LENGTH_ATTRIBUTE,
    XML_METHOD_ELEMENT,
    XML_NAME_ATTRIBUTE,
    XML_NODE_ELEMENT,
    XML_PLATFORM_ATTRIBUTE,
    XML_REFERENCE_ATTRIBUTE,
    XML_ROOT_ELEMENT,
    XML_SIGNATURE_ATTRIBUTE,
    XML_TYPE_ATTRIBUTE,
    XML_UUID_ATTRIBUTE,
    XML_VERSION_ATTRIBUTE,
    parse_bool,
)
from .converters import NodeConverterRegistry, default_registry

Source = Union[str, Path, BinaryIO]

# Wrapper chains older files stored as a single node, innermost wrapper last
LEGACY_NODE_TYPES = {
    "ClassPtrNode": [PointerNode],
    "ClassPointerNode": [PointerNode],
    "ClassInstanceArrayNode": [ArrayNode],
    "ClassPtrArrayNode": [ArrayNode, PointerNode],
    "ClassPointerArrayNode": [ArrayNode, PointerNode],
}


def _parse_int(element: Element, attribute: str, default: int) -> int:
    value = element.get(attribute)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_uuid(text: Optional[str]) -> Optional[NodeUuid]:
    if not text:
        return None
    try:
        return NodeUuid.from_base64(text)
    except ValueError:
        return None


def read_document(source: Source) -> Element:
    """
    Extract and parse the XML document of a container file

    Raises:
        FileFormatError: If the archive or its document is unusable
    """
    try:
        with zipfile.ZipFile(source, "r") as archive:
            try:
                data = archive.read(DATA_FILE_NAME)
            except KeyError as e:
                raise FileFormatError(
                    f"Archive has no {DATA_FILE_NAME} entry",
                    details={"entries": archive.namelist()},
                ) from e
    except zipfile.BadZipFile as e:
        raise FileFormatError(f"Not a project archive: {e}") from e

    try:
        root = fromstring(data)
    except ParseError as e:
        raise FileFormatError(f"Malformed project document: {e}") from e

    if root.tag != XML_ROOT_ELEMENT:
        raise FileFormatError(
            f"Unexpected root element: {root.tag}", details={"root": root.tag}
        )
    return root


class ProjectFileReader:
    """
    Reads a container file into a project

    Classes already present in the target project (same uuid) are reused and
    their stored body is not read again.
    """

    def __init__(
        self,
        project: ReClassProject,
        registry: Optional[NodeConverterRegistry] = None,
        config: Optional[ReClassConfig] = None,
    ):
        self.project = project
        self.registry = registry or default_registry
        self.config = config or get_default_config()

    def load(self, source: Source, logger: Optional[Logger] = None) -> List[ClassNode]:
        """
        Read a container file

        Args:
            source: File path or readable binary stream
            logger: Diagnostics sink for skipped nodes

        Returns:
            Classes newly added to the project

        Raises:
            FileFormatError: If the file is unreadable or its version is
                unsupported
        """
        logger = logger or StandardLogger(__name__)

        root = read_document(source)
        self._check_header(root, logger)

        custom_data = root.find(XML_CUSTOM_DATA_ELEMENT)
        if custom_data is not None:
            for item in custom_data:
                self.project.custom_data.restore(item.tag, item.text or "")

        classes: Dict[NodeUuid, ClassNode] = {c.uuid: c for c in self.project.classes}
        new_classes: List[Tuple[ClassNode, Element]] = []

        classes_element = root.find(XML_CLASSES_ELEMENT)
        class_elements = (
            classes_element.findall(XML_CLASS_ELEMENT)
            if classes_element is not None
            else []
        )

        for element in class_elements:
            uuid = _parse_uuid(element.get(XML_UUID_ATTRIBUTE))
            if uuid is None:
                logger.log(
                    LogLevel.ERROR,
                    f"Skipping class with invalid uuid: {element.get(XML_NAME_ATTRIBUTE)}",
                )
                continue
            if uuid in classes:
                logger.log(LogLevel.DEBUG, f"Reusing existing class {uuid}")
                continue

            class_node = ClassNode(
                uuid=uuid,
                name=element.get(XML_NAME_ATTRIBUTE, ""),
                comment=element.get(XML_COMMENT_ATTRIBUTE, ""),
                address_formula=element.get(XML_ADDRESS_ATTRIBUTE, ""),
            )
            classes[uuid] = class_node
            new_classes.append((class_node, element))

        for class_node, element in new_classes:
            for node_element in element.findall(XML_NODE_ELEMENT):
                node = self.create_node_from_element(
                    node_element, class_node, classes, logger
                )
                if node is not None:
                    class_node.add_node(node)

        for class_node, _ in new_classes:
            self.project.add_class(class_node)
        self.project.update_offsets()

        if isinstance(source, (str, Path)):
            self.project.path = str(source)

        return [class_node for class_node, _ in new_classes]

    def _check_header(self, root: Element, logger: Logger) -> None:
        version = _parse_int(root, XML_VERSION_ATTRIBUTE, 0)
        if (version & FILE_VERSION_CRITICAL_MASK) > (
            FILE_VERSION & FILE_VERSION_CRITICAL_MASK
        ):
            raise FileFormatError(
                "The file version is unsupported.",
                details={"version": version, "supported": FILE_VERSION},
            )

        platform = root.get(XML_PLATFORM_ATTRIBUTE)
        if platform != self.config.platform:
            logger.log(
                LogLevel.WARNING,
                f"The platform of the file ({platform}) doesn't match "
                f"the program platform ({self.config.platform}).",
            )

    def create_node_from_element(
        self,
        element: Element,
        parent: BaseNode,
        classes: Dict[NodeUuid, ClassNode],
        logger: Logger,
    ) -> Optional[BaseNode]:
        """
        Deserialize one node element

        Returns:
            The node, None if the element is skipped
        """
        converter = self.registry.get_read_converter(element)
        if converter is not None:
            return converter.create_node_from_element(element, parent, classes, logger)

        type_tag = element.get(XML_TYPE_ATTRIBUTE, "")
        if type_tag in LEGACY_NODE_TYPES:
            return self._create_legacy_node(element, type_tag, classes, logger)

        try:
            node_type = self.registry.get_node_type(type_tag)
        except UnknownNodeTypeError:
            logger.log(LogLevel.ERROR, f"Skipping node with unknown type: {type_tag}")
            logger.log(
                LogLevel.WARNING, element.get(XML_NAME_ATTRIBUTE, "")
            )
            return None

        node = node_type(
            name=element.get(XML_NAME_ATTRIBUTE, ""),
            comment=element.get(XML_COMMENT_ATTRIBUTE, ""),
            is_hidden=parse_bool(element.get(XML_HIDDEN_ATTRIBUTE, "")),
        )

        if isinstance(node, BaseWrapperNode):
            if isinstance(node, ClassInstanceNode):
                class_node = self._resolve_reference(element, classes, logger)
                if class_node is None:
                    return None
                node.change_inner_node(class_node)
            else:
                inner_element = element.find(XML_NODE_ELEMENT)
                if inner_element is not None:
                    inner = self.create_node_from_element(
                        inner_element, node, classes, logger
                    )
                    if inner is not None:
                        node.change_inner_node(inner)

        if isinstance(node, VTableNode):
            for method_element in element.findall(XML_METHOD_ELEMENT):
                node.add_node(
                    VirtualMethodNode(
                        name=method_element.get(XML_NAME_ATTRIBUTE, ""),
                        comment=method_element.get(XML_COMMENT_ATTRIBUTE, ""),
                        is_hidden=parse_bool(method_element.get(XML_HIDDEN_ATTRIBUTE, "")),
                    )
                )
        elif isinstance(node, BaseWrapperArrayNode):
            node.count = max(0, _parse_int(element, XML_COUNT_ATTRIBUTE, node.count))
        elif isinstance(node, BaseTextNode):
            node.length = max(0, _parse_int(element, XML_LENGTH_ATTRIBUTE, node.length))
        elif isinstance(node, BitFieldNode):
            bits = _parse_int(element, XML_BITS_ATTRIBUTE, node.bits)
            node.bits = min(64, max(1, bits))
        elif isinstance(node, FunctionNode):
            uuid = _parse_uuid(element.get(XML_REFERENCE_ATTRIBUTE))
            if uuid is not None and not uuid.is_zero:
                node.belongs_to_class = classes.get(uuid)
            node.signature = element.get(XML_SIGNATURE_ATTRIBUTE, "")

        return node

    def _resolve_reference(
        self, element: Element, classes: Dict[NodeUuid, ClassNode], logger: Logger
    ) -> Optional[ClassNode]:
        reference = element.get(XML_REFERENCE_ATTRIBUTE)
        uuid = _parse_uuid(reference)
        class_node = classes.get(uuid) if uuid is not None else None
        if class_node is None:
            logger.log(
                LogLevel.ERROR,
                f"Skipping node with unknown reference: {reference}",
            )
            logger.log(LogLevel.WARNING, element.get(XML_NAME_ATTRIBUTE, ""))
        return class_node

    def _create_legacy_node(
        self,
        element: Element,
        type_tag: str,
        classes: Dict[NodeUuid, ClassNode],
        logger: Logger,
    ) -> Optional[BaseNode]:
        class_node = self._resolve_reference(element, classes, logger)
        if class_node is None:
            return None

        node: BaseNode = ClassInstanceNode.for_class(class_node)
        wrappers = LEGACY_NODE_TYPES[type_tag]
        for wrapper_type in reversed(wrappers):
            wrapper = wrapper_type()
            wrapper.change_inner_node(node)
            node = wrapper

        node.name = element.get(XML_NAME_ATTRIBUTE, "")
        node.comment = element.get(XML_COMMENT_ATTRIBUTE, "")
        node.is_hidden = parse_bool(element.get(XML_HIDDEN_ATTRIBUTE, ""))
        if isinstance(node, BaseWrapperArrayNode):
            node.count = max(0, _parse_int(element, XML_COUNT_ATTRIBUTE, node.count))
        return node


def load_project(
    source: Source,
    logger: Optional[Logger] = None,
    registry: Optional[NodeConverterRegistry] = None,
    config: Optional[ReClassConfig] = None,
) -> ReClassProject:
    """Read a container file into a new project"""
    project = ReClassProject()
    ProjectFileReader(project, registry, config).load(source, logger)
    return project


def read_nodes(
    source: Source,
    template_project: Optional[ReClassProject] = None,
    logger: Optional[Logger] = None,
    registry: Optional[NodeConverterRegistry] = None,
    config: Optional[ReClassConfig] = None,
) -> Tuple[List[ClassNode], List[BaseNode]]:
    """
    Read a node selection written by write_nodes

    Classes the template project already has are reused, so pasted references
    point at the existing definitions.

    Args:
        source: File path or readable binary stream
        template_project: Project the nodes will be inserted into
        logger: Diagnostics sink
        registry: Converter registry, the default registry if omitted
        config: Reader configuration

    Returns:
        The classes the template project does not have yet, and the selected
        non-class nodes detached from the container class
    """
    with ReClassProject() as project:
        if template_project is not None:
            for class_node in template_project.classes:
                project.add_class(class_node)

        loaded = ProjectFileReader(project, registry, config).load(source, logger)

        classes: List[ClassNode] = []
        nodes: List[BaseNode] = []
        for class_node in loaded:
            if class_node.name == SERIALIZATION_CLASS_NAME:
                nodes.extend(class_node.clear_nodes())
            else:
                classes.append(class_node)

    return classes, nodes
