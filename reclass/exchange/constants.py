"""
Project file constants

A project file is a zip archive holding one XML document:

    <reclass version="65537" platform="x64">
      <classes>
        <class uuid=".." name=".." comment=".." address="..">
          <node name=".." comment=".." hidden="False" type="Int32Node" />
          ...
        </class>
      </classes>
      <custom_data>
        <PluginX_Key>value</PluginX_Key>
      </custom_data>
    </reclass>
"""

APPLICATION_NAME = "ReClass"
FORMAT_NAME = "ReClass File"
FILE_EXTENSION = ".rcnet"

DATA_FILE_NAME = "Data.xml"

FILE_VERSION = 0x00010001
FILE_VERSION_CRITICAL_MASK = 0xFFFF0000

SERIALIZATION_CLASS_NAME = "__Serialization_Class__"

XML_ROOT_ELEMENT = "reclass"
XML_CLASSES_ELEMENT = "classes"
XML_CLASS_ELEMENT = "class"
XML_NODE_ELEMENT = "node"
XML_METHOD_ELEMENT = "method"
XML_CUSTOM_DATA_ELEMENT = "custom_data"

XML_VERSION_ATTRIBUTE = "version"
XML_PLATFORM_ATTRIBUTE = "platform"
XML_UUID_ATTRIBUTE = "uuid"
XML_NAME_ATTRIBUTE = "name"
XML_COMMENT_ATTRIBUTE = "comment"
XML_HIDDEN_ATTRIBUTE = "hidden"
XML_ADDRESS_ATTRIBUTE = "address"
XML_TYPE_ATTRIBUTE = "type"
XML_REFERENCE_ATTRIBUTE = "reference"
XML_COUNT_ATTRIBUTE = "count"
XML_LENGTH_ATTRIBUTE = "length"
XML_BITS_ATTRIBUTE = "bits"
XML_SIGNATURE_ATTRIBUTE = "signature"


def format_bool(value: bool) -> str:
    return "True" if value else "False"


def parse_bool(text: str) -> bool:
    return (text or "").strip().lower() == "true"
