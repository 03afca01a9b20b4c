"""Field mapping models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MappingField(BaseModel):
    """A flattened mapping field."""

    path: str = Field(description="Dot-joined field path, e.g. 'http.request.method'")
    type: str = Field(description="Declared mapping type")
    is_leaf: bool = Field(default=True, description="Whether the field is a non-object leaf")


class FieldInfo(BaseModel):
    """Field as exposed to the UI layer."""

    name: str
    type: str

    @classmethod
    def from_mapping_field(cls, field: MappingField) -> FieldInfo:
        return cls(name=field.path, type=field.type)
