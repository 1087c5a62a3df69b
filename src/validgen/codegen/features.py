"""Struct-level features: validating constructor and newtype error access."""

from ..descriptor.models import RecordDescriptor
from ..errors import StructuralError
from .error_types import INDENT, render_all_accessor, render_delegating_getattr
from .models import FieldErrorModel, FieldKind


def render_try_new(record: RecordDescriptor, error_type: str) -> list[str]:
    """Classmethod building the record from every field and validating it."""
    names = [f.name for f in record.fields]
    parameters = ", ".join(["cls", *names])
    keywords = ", ".join(f"{name}={name}" for name in names)
    return [
        f"{INDENT}@classmethod",
        f"{INDENT}def try_new({parameters}) -> Union[{record.name}, {error_type}]:",
        f'{INDENT * 2}"""Construct a `{record.name}` and return it, or its validation error."""',
        f"{INDENT * 2}instance = cls({keywords})",
        f"{INDENT * 2}error = instance.validate()",
        f"{INDENT * 2}if error is not None:",
        f"{INDENT * 3}return error",
        f"{INDENT * 2}return instance",
    ]


def newtype_field(record: RecordDescriptor, models: list[FieldErrorModel]) -> FieldErrorModel:
    """The single annotated field of a newtype record.

    Raises:
        StructuralError: Unless exactly one field is annotated
    """
    if len(models) != 1:
        raise StructuralError(
            f"newtype structs must have exactly one validated field, found {len(models)}",
            location=record.name,
        )
    return models[0]


def render_newtype_accessors(model: FieldErrorModel) -> list[list[str]]:
    """Methods added to the aggregate error so it reads as the field's error."""
    methods = [render_delegating_getattr(model.name)]
    if model.kind == FieldKind.VALIDATED and model.has_field_slots:
        methods.append(render_all_accessor(model.validator_enum, model.field_slots, target=f"self.{model.name}"))
    return methods
