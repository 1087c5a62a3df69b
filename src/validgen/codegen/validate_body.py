"""Emitter for the `collect_errors`/`validate` methods of the mixin class.

Checks run in field declaration order and never stop early: every
validator on every field is evaluated, so one call reports the complete set
of failures.
"""

from .error_types import INDENT
from .models import FieldErrorModel, FieldKind, ValidatorSlot


def render_argument(name: str, expression: str, field_names: set[str]) -> str:
    """`name=expr`, reading bare record field names from `self`."""
    if expression.isidentifier() and expression in field_names:
        expression = f"self.{expression}"
    return f"{name}={expression}"


def render_check(slot: ValidatorSlot, value: str, target: str,
                 field_names: set[str], depth: int) -> list[str]:
    """Construct one validator, run it, and store it in its slot on failure."""
    pad = INDENT * depth
    arguments = ", ".join(
        render_argument(argument.name, argument.expression, field_names)
        for argument in slot.invocation.arguments
    )
    return [
        f"{pad}validator = {slot.type_expression}({arguments}).with_value({value})",
        f"{pad}if not validator.validate({value}):",
        f"{pad}{INDENT}{target}.{slot.slot_name} = validator",
    ]


def _render_element_loop(model: FieldErrorModel, field_names: set[str], depth: int) -> list[str]:
    pad = INDENT * depth
    lines = [f"{pad}for index, item in enumerate(value):"]
    if model.shape.element_is_optional:
        lines.append(f"{pad}{INDENT}if item is None:")
        lines.append(f"{pad}{INDENT * 2}continue")
    lines.append(f"{pad}{INDENT}element_error = {model.element_error_type}()")
    for slot in model.element_slots:
        lines.extend(render_check(slot, "item", "element_error", field_names, depth + 1))
    lines.append(f"{pad}{INDENT}if not element_error.is_empty():")
    lines.append(f"{pad}{INDENT * 2}error.{model.name}.element_errors.append((index, element_error))")
    return lines


def _render_delegation(model: FieldErrorModel, depth: int) -> list[str]:
    pad = INDENT * depth
    target = f"error.{model.name}" if model.kind == FieldKind.NESTED else f"error.{model.name}.inner"
    lines = [f"{pad}value = self.{model.name}"]
    if model.shape.is_optional:
        lines.append(f"{pad}if value is not None:")
        pad += INDENT
    lines.append(f"{pad}{target} = value.validate()")
    return lines


def render_field_checks(model: FieldErrorModel, field_names: set[str], depth: int = 2) -> list[str]:
    """All checks for one annotated field."""
    if model.kind != FieldKind.VALIDATED:
        return _render_delegation(model, depth)

    pad = INDENT * depth
    lines = [f"{pad}value = self.{model.name}"]

    full_value_slots = [slot for slot in model.field_slots if slot.escape_hatch]
    unwrapped_slots = [slot for slot in model.field_slots if not slot.escape_hatch]
    target = f"error.{model.name}"

    for slot in full_value_slots:
        lines.extend(render_check(slot, "value", target, field_names, depth))

    if not unwrapped_slots and not model.has_element_slots:
        return lines

    inner_depth = depth
    if model.shape.is_optional:
        lines.append(f"{pad}if value is not None:")
        inner_depth += 1
    for slot in unwrapped_slots:
        lines.extend(render_check(slot, "value", target, field_names, inner_depth))
    if model.has_element_slots:
        lines.extend(_render_element_loop(model, field_names, inner_depth))
    return lines


def render_validation_methods(error_type: str, models: list[FieldErrorModel],
                              field_names: set[str]) -> list[str]:
    """`collect_errors` and `validate` for the mixin class."""
    lines = [
        f"{INDENT}def collect_errors(self) -> {error_type}:",
        f'{INDENT * 2}"""Run every check and return the error, empty when all pass."""',
        f"{INDENT * 2}error = {error_type}()",
    ]
    for model in models:
        lines.append("")
        lines.append(f"{INDENT * 2}# {model.name}")
        lines.extend(render_field_checks(model, field_names))
    lines.append(f"{INDENT * 2}return error")
    lines.append("")
    lines.extend([
        f"{INDENT}def validate(self) -> Optional[{error_type}]:",
        f'{INDENT * 2}"""Return None when every check passes, otherwise the populated error."""',
        f"{INDENT * 2}error = self.collect_errors()",
        f"{INDENT * 2}if error.is_empty():",
        f"{INDENT * 3}return None",
        f"{INDENT * 2}return error",
    ])
    return lines
