"""
Project file writer

Serializes a project into the zip container. Nodes no converter knows are
logged and left out, so one unsupported node never blocks saving the rest.
"""

import re
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional, Union
from xml.etree.ElementTree import Comment, Element, ElementTree, SubElement, indent

from ..config import ReClassConfig, get_default_config
from ..core.nodes import (
    BaseNode,
    BaseTextNode,
    BaseWrapperArrayNode,
    BaseWrapperNode,
    BitFieldNode,
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    VTableNode,
)
from ..core.node_uuid import NodeUuid
from ..core.project import ReClassProject
from ..core.resolver import collect_referenced_classes
from ..exceptions.errors import InvalidCharacterError, UnknownNodeTypeError
from ..utils.logging import Logger, LogLevel, StandardLogger
from .constants import (
    APPLICATION_NAME,
    DATA_FILE_NAME,
    FILE_VERSION,
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
    format_bool,
)
from .converters import NodeConverterRegistry, default_registry

Target = Union[str, Path, BinaryIO]

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def check_document_text(root: Element) -> None:
    """
    Verify every attribute value and text of a document is representable

    Raises:
        InvalidCharacterError: On the first value holding an invalid character
    """
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        values = [(None, element.text)] + list(element.attrib.items())
        for attribute, value in values:
            if value and _INVALID_XML_CHARS.search(value):
                raise InvalidCharacterError(
                    f"Invalid XML character in {element.tag} "
                    f"{element.get(XML_NAME_ATTRIBUTE, '')!r}",
                    details={
                        "element": element.tag,
                        "attribute": attribute,
                        "value": value,
                    },
                )


class ProjectFileWriter:
    """
    Writes a project to a container file

    Example:
        >>> writer = ProjectFileWriter(project)
        >>> writer.save("game.rcnet", StandardLogger())
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

    def save(self, target: Target, logger: Optional[Logger] = None) -> None:
        """
        Write the project

        Args:
            target: File path or writable binary stream
            logger: Diagnostics sink for skipped nodes

        Raises:
            InvalidCharacterError: If any text can not be written as XML. The
                target is left untouched.

        Stream errors propagate; the archive may then be incomplete.
        """
        logger = logger or StandardLogger(__name__)

        root = self.create_document(logger)
        check_document_text(root)

        if isinstance(target, (str, Path)):
            with open(target, "wb") as stream:
                self._write_archive(stream, root)
            self.project.path = str(target)
        else:
            self._write_archive(target, root)

    def _write_archive(self, stream: BinaryIO, root: Element) -> None:
        document = ElementTree(root)
        indent(document, space="  ")

        with zipfile.ZipFile(
            stream,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.config.compression_level,
        ) as archive:
            with archive.open(DATA_FILE_NAME, "w") as entry:
                entry.write(b'<?xml version="1.0" encoding="utf-8"?>\n')
                document.write(entry, encoding="utf-8", xml_declaration=False)

    def create_document(self, logger: Logger) -> Element:
        """Build the XML document root"""
        from .. import __version__

        root = Element(
            XML_ROOT_ELEMENT,
            {
                XML_VERSION_ATTRIBUTE: str(FILE_VERSION),
                XML_PLATFORM_ATTRIBUTE: self.config.platform,
            },
        )
        root.append(Comment(f" {APPLICATION_NAME} {__version__} "))

        classes = SubElement(root, XML_CLASSES_ELEMENT)
        classes.extend(self.create_class_elements(self.project.classes, logger))

        custom_data = SubElement(root, XML_CUSTOM_DATA_ELEMENT)
        for key, value in self.project.custom_data.items():
            SubElement(custom_data, key).text = value

        return root

    def create_class_elements(
        self, classes: Iterable[ClassNode], logger: Logger
    ) -> List[Element]:
        elements = []
        for class_node in classes:
            element = Element(
                XML_CLASS_ELEMENT,
                {
                    XML_UUID_ATTRIBUTE: class_node.uuid.to_base64(),
                    XML_NAME_ATTRIBUTE: class_node.name,
                    XML_COMMENT_ATTRIBUTE: class_node.comment,
                    XML_ADDRESS_ATTRIBUTE: class_node.address_formula,
                },
            )
            element.extend(self.create_node_elements(class_node.nodes, logger))
            elements.append(element)
        return elements

    def create_node_elements(
        self, nodes: Iterable[BaseNode], logger: Logger
    ) -> Iterator[Element]:
        for node in nodes:
            element = self.create_node_element(node, logger)
            if element is not None:
                yield element

    def create_node_element(self, node: BaseNode, logger: Logger) -> Optional[Element]:
        """
        Serialize one node

        Returns:
            The node element, None if the node is skipped
        """
        converter = self.registry.get_write_converter(node)
        if converter is not None:
            return converter.create_element_from_node(node, logger)

        try:
            type_tag = self.registry.get_type_tag(node)
        except UnknownNodeTypeError as e:
            logger.log(LogLevel.ERROR, f"Skipping node with unknown type: {node.name}")
            logger.log(LogLevel.WARNING, e.details["type"])
            return None

        element = Element(
            XML_NODE_ELEMENT,
            {
                XML_NAME_ATTRIBUTE: node.name,
                XML_COMMENT_ATTRIBUTE: node.comment,
                XML_HIDDEN_ATTRIBUTE: format_bool(node.is_hidden),
                XML_TYPE_ATTRIBUTE: type_tag,
            },
        )

        if isinstance(node, BaseWrapperNode):
            if isinstance(node, ClassInstanceNode):
                if not isinstance(node.inner_node, ClassNode):
                    logger.log(
                        LogLevel.ERROR,
                        f"Skipping class instance without a class: {node.name}",
                    )
                    return None
                element.set(XML_REFERENCE_ATTRIBUTE, node.inner_node.uuid.to_base64())
            elif node.inner_node is not None:
                inner = self.create_node_element(node.inner_node, logger)
                if inner is not None:
                    element.append(inner)

        if isinstance(node, VTableNode):
            for method in node.nodes:
                SubElement(
                    element,
                    XML_METHOD_ELEMENT,
                    {
                        XML_NAME_ATTRIBUTE: method.name,
                        XML_COMMENT_ATTRIBUTE: method.comment,
                        XML_HIDDEN_ATTRIBUTE: format_bool(method.is_hidden),
                    },
                )
        elif isinstance(node, BaseWrapperArrayNode):
            element.set(XML_COUNT_ATTRIBUTE, str(node.count))
        elif isinstance(node, BaseTextNode):
            element.set(XML_LENGTH_ATTRIBUTE, str(node.length))
        elif isinstance(node, BitFieldNode):
            element.set(XML_BITS_ATTRIBUTE, str(node.bits))
        elif isinstance(node, FunctionNode):
            owner = node.belongs_to_class
            uuid = owner.uuid if owner is not None else NodeUuid.zero()
            element.set(XML_REFERENCE_ATTRIBUTE, uuid.to_base64())
            element.set(XML_SIGNATURE_ATTRIBUTE, node.signature)

        return element


def save_project(
    project: ReClassProject,
    target: Target,
    logger: Optional[Logger] = None,
    registry: Optional[NodeConverterRegistry] = None,
    config: Optional[ReClassConfig] = None,
) -> None:
    """Write a project to a container file"""
    ProjectFileWriter(project, registry, config).save(target, logger)


def write_nodes(
    output: Target,
    nodes: Iterable[BaseNode],
    logger: Optional[Logger] = None,
    registry: Optional[NodeConverterRegistry] = None,
    config: Optional[ReClassConfig] = None,
) -> None:
    """
    Write an arbitrary node selection as a self-contained file

    Classes in the selection become top level classes. Every other node is
    listed in a synthetic container class, without being re-parented. All
    classes reachable through wrapper references are included, so the file
    never refers to a class it does not contain.

    Args:
        output: File path or writable binary stream
        nodes: Selected nodes
        logger: Diagnostics sink
        registry: Converter registry, the default registry if omitted
        config: Writer configuration
    """
    nodes = list(nodes)

    container = ClassNode(name=SERIALIZATION_CLASS_NAME)
    for node in nodes:
        if not isinstance(node, ClassNode):
            container.add_node(node, take_ownership=False)

    with ReClassProject() as project:
        project.add_class(container)
        for class_node in collect_referenced_classes(nodes):
            if not project.contains_class(class_node.uuid):
                project.add_class(class_node)

        ProjectFileWriter(project, registry, config).save(output, logger)
