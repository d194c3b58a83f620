"""Enumeration metadata kept on a project"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator


class EnumMetaData(BaseModel):
    """
    Named enumeration

    - size: byte width of the underlying integer
    - values: ordered name to value mapping
    """

    name: str
    use_flags_mode: bool = False
    size: int = 4
    values: Dict[str, int] = Field(default_factory=dict)

    @field_validator("size")
    @classmethod
    def validate_size(cls, v):
        if v not in (1, 2, 4, 8):
            raise ValueError(f"Invalid enum size: {v}. Expected one of 1, 2, 4, 8")
        return v
