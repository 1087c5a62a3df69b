"""Record descriptors: file models, loading and the typed record model."""

from .loader import build_records, load_descriptor, load_descriptor_data
from .models import (
    FieldDescriptor,
    FieldSpec,
    ImportSpec,
    ModuleSpec,
    RecordDescriptor,
    RecordKind,
    RecordSpec,
    build_record,
)

__all__ = [
    "FieldDescriptor",
    "FieldSpec",
    "ImportSpec",
    "ModuleSpec",
    "RecordDescriptor",
    "RecordKind",
    "RecordSpec",
    "build_record",
    "build_records",
    "load_descriptor",
    "load_descriptor_data",
]
