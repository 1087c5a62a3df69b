"""Python code generation for record validation."""

from .generator import CodeGenerator
from .models import FieldErrorModel, FieldKind, GeneratedModule, GeneratedRecord, ValidatorSlot

__all__ = [
    "CodeGenerator",
    "FieldErrorModel",
    "FieldKind",
    "GeneratedModule",
    "GeneratedRecord",
    "ValidatorSlot",
]
