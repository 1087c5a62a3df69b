"""Per-field generation models and generator outputs."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from ..descriptor.models import FieldDescriptor
from ..grammar.models import ValidatorInvocation
from ..types import TypeExpr, TypeShape


class FieldKind(str, Enum):
    VALIDATED = "validated"
    NESTED = "nested"
    NEWTYPE = "newtype"


@dataclass(frozen=True)
class ValidatorSlot:
    """One invocation with its resolved type and generated names."""
    invocation: ValidatorInvocation
    resolved_type: TypeExpr | None
    slot_name: str
    member_name: str
    type_expression: str
    escape_hatch: bool = False


@dataclass
class FieldErrorModel:
    """Everything generation needs to know about one annotated field."""
    field: FieldDescriptor
    shape: TypeShape
    kind: FieldKind
    error_type: str
    field_slots: list[ValidatorSlot] = field(default_factory=list)
    element_slots: list[ValidatorSlot] = field(default_factory=list)
    validator_enum: str | None = None
    element_error_type: str | None = None
    element_validator_enum: str | None = None
    inner_error_type: str | None = None

    @property
    def name(self) -> str:
        return self.field.name

    @property
    def has_field_slots(self) -> bool:
        return bool(self.field_slots)

    @property
    def has_element_slots(self) -> bool:
        return bool(self.element_slots)


class GeneratedRecord(BaseModel):
    """Generated source for a single record."""
    name: str
    source: str
    error_types: list[str] = Field(default_factory=list)
    enums: list[str] = Field(default_factory=list)
    mixin: str
    record_class: str | None = None


class GeneratedModule(BaseModel):
    """A complete generated Python module."""
    module: str
    source: str
    records: list[GeneratedRecord] = Field(default_factory=list)

    @property
    def record_names(self) -> list[str]:
        return [record.name for record in self.records]

    @property
    def error_types(self) -> list[str]:
        return [name for record in self.records for name in record.error_types]
