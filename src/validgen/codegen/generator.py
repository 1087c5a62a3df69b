"""Code generator turning record descriptors into a Python validation module."""

import keyword
import logging

from ..config import ValidgenConfig, create_default_config
from ..descriptor.loader import build_records
from ..descriptor.models import FieldDescriptor, ModuleSpec, RecordDescriptor, RecordKind
from ..errors import StructuralError
from ..grammar.models import ValidatorInvocation
from ..resolver import is_escape_hatch, resolve
from ..types import NamedType, TypeExpr, TypeShape, TypeSystem
from .error_types import (
    INDENT,
    render_element_error,
    render_field_error,
    render_newtype_field_error,
    render_record_error,
    render_validator_enum,
)
from .features import newtype_field, render_newtype_accessors, render_try_new
from .models import (
    FieldErrorModel,
    FieldKind,
    GeneratedModule,
    GeneratedRecord,
    ValidatorSlot,
)
from .naming import NameScheme
from .validate_body import render_validation_methods

logger = logging.getLogger(__name__)

RUNTIME_MODULE = "validgen.runtime"

# Attribute names the generated classes define themselves
RESERVED_SLOT_NAMES = frozenset({"all", "is_empty", "has_errors", "element_errors", "inner"})
RESERVED_FIELD_NAMES = frozenset({
    "is_empty", "has_errors", "validate", "collect_errors", "try_new", "cls", "self",
})

# Module-level names the generated code reads; a record must not rebind them
PRELUDE_NAMES = frozenset({
    "Any", "Optional", "Union", "dataclasses", "enum", "Failure", "ValidationError",
})

MODULE_PRELUDE = [
    "from __future__ import annotations",
    "",
    "import dataclasses",
    "import enum",
    "from typing import Any, Optional, Union",
    "",
    f"from {RUNTIME_MODULE} import Failure, ValidationError",
]


class CodeGenerator:
    """Generate error types, enumerations and validation methods for records.

    Output depends only on the descriptors and configuration: fields,
    validators and records are emitted in declaration order and nothing
    time-dependent is written, so regenerating yields identical source.
    """

    def __init__(self, config: ValidgenConfig | None = None):
        self.config = config or create_default_config()
        self.types = TypeSystem(self.config.types)
        self.names = NameScheme(self.config.naming)

    # models

    def build_slot(self, invocation: ValidatorInvocation, declared: TypeExpr,
                   is_element_slot: bool) -> ValidatorSlot:
        """Resolve one invocation's type parameter and name its slot."""
        resolved = resolve(declared, invocation.type_mode, is_element_slot, self.types)
        type_expression = invocation.python_path
        if resolved is not None:
            type_expression += f"[{self.types.render_python(resolved)}]"
        return ValidatorSlot(
            invocation=invocation,
            resolved_type=resolved,
            slot_name=self.names.slot(invocation.name),
            member_name=self.names.member(invocation.name),
            type_expression=type_expression,
            escape_hatch=is_escape_hatch(invocation.type_mode, self.types),
        )

    def _build_slots(self, record: RecordDescriptor, field: FieldDescriptor,
                     invocations: list[ValidatorInvocation], is_element_slot: bool) -> list[ValidatorSlot]:
        slots = [self.build_slot(inv, field.declared_type, is_element_slot) for inv in invocations]
        seen: set[str] = set()
        for slot in slots:
            if slot.slot_name in RESERVED_SLOT_NAMES:
                raise StructuralError(
                    f"validator `{slot.invocation.name}` maps to reserved attribute `{slot.slot_name}`",
                    location=f"{record.name}.{field.name}",
                )
            if slot.slot_name in seen:
                raise StructuralError(
                    f"validators on field `{field.name}` map to the same slot `{slot.slot_name}`",
                    location=f"{record.name}.{field.name}",
                )
            seen.add(slot.slot_name)
        return slots

    def build_field_model(self, record: RecordDescriptor, field: FieldDescriptor) -> FieldErrorModel:
        """Build the error model for one annotated field."""
        annotation = field.annotation
        shape = TypeShape.of(field.declared_type, self.types)

        if annotation.delegates:
            inner = shape.unwrapped
            if not isinstance(inner, NamedType):
                raise StructuralError(
                    f"field `{field.name}` needs a concrete type to delegate validation to",
                    location=f"{record.name}.{field.name}",
                )
            if self.types.is_collection(inner) or self.types.is_builtin(inner):
                modifier = "nested" if annotation.is_nested else "newtype"
                raise StructuralError(
                    f"field `{field.name}` of type `{field.declared_type}` cannot be `{modifier}`; "
                    f"it needs a generated record type with its own `validate()`",
                    location=f"{record.name}.{field.name}",
                )
            inner_error = self.names.type_error(inner.simple_name)
            if annotation.is_nested:
                return FieldErrorModel(field, shape, FieldKind.NESTED, error_type=inner_error)
            return FieldErrorModel(
                field, shape, FieldKind.NEWTYPE,
                error_type=self.names.field_error(record.name, field.name),
                inner_error_type=inner_error,
            )

        if annotation.has_element_validators and not shape.is_collection:
            raise StructuralError(
                f"field `{field.name}` of type `{field.declared_type}` is not a collection; "
                f"`each(...)` needs a sequence or set",
                location=f"{record.name}.{field.name}",
            )

        model = FieldErrorModel(
            field, shape, FieldKind.VALIDATED,
            error_type=self.names.field_error(record.name, field.name),
            field_slots=self._build_slots(record, field, annotation.field_validators, False),
            element_slots=self._build_slots(record, field, annotation.element_validators, True),
        )
        if model.has_field_slots:
            model.validator_enum = self.names.field_validator_enum(record.name, field.name)
        if model.has_element_slots:
            model.element_error_type = self.names.element_error(record.name, field.name)
            model.element_validator_enum = self.names.element_validator_enum(record.name, field.name)
        return model

    def check_structure(self, record: RecordDescriptor) -> None:
        """Reject records whose shape cannot carry generated validation.

        Raises:
            StructuralError: For non-struct kinds, unnamed or missing fields,
                and names that would collide with generated members
        """
        if not record.name.isidentifier() or keyword.iskeyword(record.name):
            raise StructuralError(f"record name `{record.name}` is not a valid identifier")
        if record.name in PRELUDE_NAMES:
            raise StructuralError(
                f"record name `{record.name}` shadows a name the generated module imports",
                location=record.name,
            )
        if record.kind != RecordKind.STRUCT:
            raise StructuralError(
                f"validation can only be generated for structs, `{record.name}` is a {record.kind.value}",
                location=record.name,
            )
        if not record.fields:
            raise StructuralError("struct has no fields", location=record.name)

        seen: set[str] = set()
        for index, field in enumerate(record.fields):
            if not field.name:
                raise StructuralError(f"field {index} has no name; only named fields are supported",
                                      location=record.name)
            if not field.name.isidentifier() or keyword.iskeyword(field.name):
                raise StructuralError(f"field name `{field.name}` is not a valid identifier",
                                      location=record.name)
            if field.name in RESERVED_FIELD_NAMES:
                raise StructuralError(f"field name `{field.name}` collides with a generated member",
                                      location=record.name)
            if field.name in seen:
                raise StructuralError(f"duplicate field `{field.name}`", location=record.name)
            seen.add(field.name)

    # rendering

    def generate(self, record: RecordDescriptor) -> GeneratedRecord:
        """Generate every class for one record.

        Args:
            record: Record with parsed types and aggregated annotations

        Returns:
            GeneratedRecord with the source of all classes for the record

        Raises:
            StructuralError: If the record shape cannot be generated for
        """
        self.check_structure(record)
        models = [self.build_field_model(record, f) for f in record.annotated_fields]
        struct = record.struct_annotation
        error_type = self.names.record_error(record.name)
        mixin = self.names.mixin(record.name)

        blocks: list[list[str]] = []
        error_types: list[str] = []
        enums: list[str] = []

        for model in models:
            owner = f"`{record.name}.{model.name}`"
            if model.kind == FieldKind.NESTED:
                continue
            if model.kind == FieldKind.NEWTYPE:
                blocks.append(render_newtype_field_error(model, owner))
                error_types.append(model.error_type)
                continue
            if model.has_field_slots:
                blocks.append(render_validator_enum(model.validator_enum, model.field_slots, owner))
                enums.append(model.validator_enum)
            if model.has_element_slots:
                blocks.append(render_validator_enum(
                    model.element_validator_enum, model.element_slots, f"elements of {owner}"
                ))
                enums.append(model.element_validator_enum)
                blocks.append(render_element_error(model, f"elements of {owner}"))
                error_types.append(model.element_error_type)
            blocks.append(render_field_error(model, owner))
            error_types.append(model.error_type)

        extra_methods = []
        if struct.is_newtype_wrapper:
            extra_methods = render_newtype_accessors(newtype_field(record, models))
            if "all" in {f.name for f in record.fields}:
                raise StructuralError("field name `all` collides with a generated member",
                                      location=record.name)
        blocks.append(render_record_error(error_type, record.name, models, extra_methods))
        error_types.append(error_type)

        field_names = {f.name for f in record.fields}
        mixin_lines = [
            f"class {mixin}:",
            f'{INDENT}"""Validation methods for `{record.name}`."""',
            "",
        ]
        mixin_lines.extend(render_validation_methods(error_type, models, field_names))
        if struct.generates_validating_constructor:
            mixin_lines.append("")
            mixin_lines.extend(render_try_new(record, error_type))
        blocks.append(mixin_lines)

        record_class = None
        if self.config.output.emit_records:
            blocks.append(self.render_record_class(record, mixin))
            record_class = record.name

        logger.debug(
            "Generated %s: %d annotated field(s), %d error type(s)",
            record.name, len(models), len(error_types),
        )
        return GeneratedRecord(
            name=record.name,
            source="\n\n\n".join("\n".join(block) for block in blocks) + "\n",
            error_types=error_types,
            enums=enums,
            mixin=mixin,
            record_class=record_class,
        )

    def render_record_class(self, record: RecordDescriptor, mixin: str) -> list[str]:
        lines = ["@dataclasses.dataclass", f"class {record.name}({mixin}):"]
        if record.doc:
            lines.append(f'{INDENT}"""{record.doc.strip()}"""')
            lines.append("")
        for field in record.fields:
            lines.append(f"{INDENT}{field.name}: {self.types.render_python(field.declared_type)}")
        return lines

    def generate_module(self, spec: ModuleSpec, source_name: str | None = None) -> GeneratedModule:
        """Generate one Python module for every record in a descriptor.

        Args:
            spec: Loaded descriptor
            source_name: Descriptor file name for the header comment

        Returns:
            GeneratedModule with the complete module source

        Raises:
            GenerationError: On the first record that fails to parse or generate
        """
        records = build_records(spec)
        generated: list[GeneratedRecord] = []
        defined: set[str] = set()

        for record in records:
            try:
                result = self.generate(record)
            except StructuralError as e:
                raise e.with_location(record.name)
            names = [*result.error_types, *result.enums, result.mixin]
            if result.record_class:
                names.append(result.record_class)
            clashes = defined.intersection(names)
            if clashes:
                raise StructuralError(
                    f"generated name `{sorted(clashes)[0]}` is defined twice in module `{spec.module}`",
                    location=record.name,
                )
            defined.update(names)
            generated.append(result)

        origin = f" from {source_name}" if source_name else ""
        header = [f"# Generated by validgen{origin}. Do not edit.", *MODULE_PRELUDE]
        if spec.imports:
            header.append("")
            header.extend(spec_import.render() for spec_import in spec.imports)

        parts = ["\n".join(header) + "\n"]
        parts.extend(result.source for result in generated)
        source = "\n\n".join(parts)

        logger.info("Generated module %s with %d record(s)", spec.module, len(generated))
        return GeneratedModule(module=spec.module or "generated", source=source, records=generated)
