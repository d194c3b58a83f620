"""
Project custom data

Key-value store in which plugins keep project related data. The preferred
key format is {PluginName}_{KeyName}.
"""

import re
from typing import Dict, Iterator, MutableMapping, Optional

# Keys are written as XML element names
_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")


class CustomDataMap(MutableMapping):
    """Ordered string to string mapping, preserved verbatim in project files"""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = {}
        if data:
            self.update(data)

    @staticmethod
    def is_valid_key(key: str) -> bool:
        return (
            isinstance(key, str)
            and _KEY_PATTERN.match(key) is not None
            and not key.lower().startswith("xml")
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        if not self.is_valid_key(key):
            raise ValueError(f"Invalid custom data key: {key!r}")
        if not isinstance(value, str):
            raise TypeError(f"Custom data values must be str, got {type(value).__name__}")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"CustomDataMap({self._data!r})"

    def restore(self, key: str, value: str) -> None:
        """
        Store an entry read from a project file verbatim

        Skips the key rules of __setitem__, so entries written by other tools
        (for example keys starting with "xml") survive a load and save.
        """
        self._data[key] = value

    def set_string(self, key: str, value: str) -> None:
        self[key] = value

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(key, default)

    def remove_value(self, key: str) -> None:
        self._data.pop(key, None)

    def set_bool(self, key: str, value: bool) -> None:
        self[key] = "True" if value else "False"

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._data.get(key)
        if value is None:
            return default
        return value.strip().lower() == "true"

    def set_int(self, key: str, value: int) -> None:
        self[key] = str(int(value))

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._data.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
