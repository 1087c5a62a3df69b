"""Descriptor file models and the typed record model built from them.

The pydantic models mirror the YAML/JSON descriptor layout. `build_record`
turns one RecordSpec into a RecordDescriptor: declared types parsed into
TypeExpr trees and rule occurrences aggregated into annotations.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ..aggregator import aggregate, aggregate_struct_options
from ..errors import GenerationError
from ..grammar.models import FieldAnnotation, StructAnnotation
from ..grammar.parser import parse_type_expr
from ..types import TypeExpr


class RecordKind(str, Enum):
    """Shape of a described type. Only structs can be generated for."""
    STRUCT = "struct"
    TUPLE = "tuple"
    UNIT = "unit"
    ENUM = "enum"


def _as_list(value):
    if isinstance(value, str):
        return [value]
    return value


class ImportSpec(BaseModel):
    """`from module import names` or plain `import module`."""
    module: str
    names: list[str] = Field(default_factory=list)

    def render(self) -> str:
        if self.names:
            return f"from {self.module} import {', '.join(self.names)}"
        return f"import {self.module}"


class FieldSpec(BaseModel):
    """One declared field with its annotation occurrences."""
    name: str | None = None
    type: str
    rules: list[str] = Field(default_factory=list)

    @field_validator("rules", mode="before")
    @classmethod
    def coerce_rules(cls, v):
        return _as_list(v)


class RecordSpec(BaseModel):
    """One record type to generate validation for."""
    name: str
    kind: RecordKind = RecordKind.STRUCT
    options: list[str] = Field(default_factory=list)
    fields: list[FieldSpec] = Field(default_factory=list)
    doc: str | None = None

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, v):
        return _as_list(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.isidentifier():
            raise ValueError(f"record name must be a valid identifier, got: {v!r}")
        return v


class ModuleSpec(BaseModel):
    """A whole descriptor file: imports plus records in declaration order."""
    module: str | None = None
    imports: list[ImportSpec] = Field(default_factory=list)
    records: list[RecordSpec] = Field(default_factory=list)

    @field_validator("module")
    @classmethod
    def validate_module(cls, v):
        if v is not None and not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"module must be a dotted Python name, got: {v!r}")
        return v


@dataclass
class FieldDescriptor:
    """A field ready for generation."""
    name: str | None
    declared_type: TypeExpr
    type_text: str
    annotation: FieldAnnotation | None = None

    @property
    def is_annotated(self) -> bool:
        return self.annotation is not None and not self.annotation.is_skip


@dataclass
class RecordDescriptor:
    """A record ready for generation."""
    name: str
    kind: RecordKind = RecordKind.STRUCT
    fields: list[FieldDescriptor] = field(default_factory=list)
    struct_annotation: StructAnnotation = field(default_factory=StructAnnotation)
    doc: str | None = None

    @property
    def annotated_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.is_annotated]


def build_record(spec: RecordSpec) -> RecordDescriptor:
    """Parse and aggregate every annotation on a record.

    Args:
        spec: Record as loaded from a descriptor file

    Returns:
        RecordDescriptor with parsed types and merged annotations

    Raises:
        GenerationError: Any parse or aggregation failure, with the record or
            field name attached as its location
    """
    try:
        struct_annotation = aggregate_struct_options(spec.options)
    except GenerationError as e:
        raise e.with_location(spec.name)

    fields = []
    for index, field_spec in enumerate(spec.fields):
        label = field_spec.name or str(index)
        location = f"{spec.name}.{label}"
        try:
            declared = parse_type_expr(field_spec.type)
            annotation = aggregate(field_spec.rules, label)
        except GenerationError as e:
            raise e.with_location(location)
        fields.append(FieldDescriptor(
            name=field_spec.name,
            declared_type=declared,
            type_text=field_spec.type,
            annotation=annotation,
        ))

    return RecordDescriptor(
        name=spec.name,
        kind=spec.kind,
        fields=fields,
        struct_annotation=struct_annotation,
        doc=spec.doc,
    )
