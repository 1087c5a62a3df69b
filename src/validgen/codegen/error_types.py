"""Emitters for generated error types and failure enumerations.

Each function returns the lines of one top-level class. Class bodies use
`dataclasses.field` and `enum.Enum` through their modules so that a slot or
member named `field` cannot shadow them.
"""

from .models import FieldErrorModel, FieldKind, ValidatorSlot

INDENT = "    "


def render_is_empty(conditions: list[str]) -> list[str]:
    """`is_empty` method returning the conjunction of conditions."""
    lines = [f"{INDENT}def is_empty(self) -> bool:"]
    if not conditions:
        lines.append(f"{INDENT * 2}return True")
    elif len(conditions) == 1:
        lines.append(f"{INDENT * 2}return {conditions[0]}")
    else:
        lines.append(f"{INDENT * 2}return (")
        lines.append(f"{INDENT * 3}{conditions[0]}")
        lines.extend(f"{INDENT * 3}and {condition}" for condition in conditions[1:])
        lines.append(f"{INDENT * 2})")
    return lines


def render_all_accessor(enum_name: str, slots: list[ValidatorSlot], target: str = "self") -> list[str]:
    """`all()` returning Failure items for occupied slots, in slot order."""
    lines = [
        f"{INDENT}def all(self) -> list[Failure]:",
        f'{INDENT * 2}"""Failed checks in declaration order."""',
        f"{INDENT * 2}failures = []",
    ]
    for slot in slots:
        attribute = f"{target}.{slot.slot_name}"
        lines.append(f"{INDENT * 2}if {attribute} is not None:")
        lines.append(
            f"{INDENT * 3}failures.append(Failure({enum_name}.{slot.member_name}, {attribute}))"
        )
    lines.append(f"{INDENT * 2}return failures")
    return lines


def render_validator_enum(name: str, slots: list[ValidatorSlot], owner: str) -> list[str]:
    lines = [
        f"class {name}(enum.Enum):",
        f'{INDENT}"""Checks that can fail on {owner}."""',
        "",
    ]
    lines.extend(f'{INDENT}{slot.member_name} = "{slot.slot_name}"' for slot in slots)
    return lines


def _slot_lines(slots: list[ValidatorSlot]) -> list[str]:
    return [f"{INDENT}{slot.slot_name}: Optional[{slot.type_expression}] = None" for slot in slots]


def render_element_error(model: FieldErrorModel, owner: str) -> list[str]:
    """Error type for one element of a collection field."""
    lines = [
        "@dataclasses.dataclass",
        f"class {model.element_error_type}(ValidationError):",
        f'{INDENT}"""Failed element checks on {owner}."""',
        "",
    ]
    lines.extend(_slot_lines(model.element_slots))
    lines.append("")
    lines.extend(render_all_accessor(model.element_validator_enum, model.element_slots))
    lines.append("")
    lines.extend(render_is_empty([f"self.{slot.slot_name} is None" for slot in model.element_slots]))
    return lines


def render_field_error(model: FieldErrorModel, owner: str) -> list[str]:
    """Error type for a validated field: one slot per field-level check."""
    lines = [
        "@dataclasses.dataclass",
        f"class {model.error_type}(ValidationError):",
        f'{INDENT}"""Failed checks on {owner}."""',
        "",
    ]
    lines.extend(_slot_lines(model.field_slots))
    if model.has_element_slots:
        lines.append(
            f"{INDENT}element_errors: list[tuple[int, {model.element_error_type}]] = "
            f"dataclasses.field(default_factory=list)"
        )

    if model.has_field_slots:
        lines.append("")
        lines.extend(render_all_accessor(model.validator_enum, model.field_slots))

    conditions = [f"self.{slot.slot_name} is None" for slot in model.field_slots]
    if model.has_element_slots:
        conditions.append("not self.element_errors")
    lines.append("")
    lines.extend(render_is_empty(conditions))
    return lines


def render_delegating_getattr(attribute: str) -> list[str]:
    """`__getattr__` forwarding unknown attributes to `self.<attribute>`."""
    return [
        f"{INDENT}def __getattr__(self, name: str) -> Any:",
        f'{INDENT * 2}target = self.__dict__.get("{attribute}")',
        f'{INDENT * 2}if name.startswith("__") or target is None:',
        f"{INDENT * 3}raise AttributeError(name)",
        f"{INDENT * 2}return getattr(target, name)",
    ]


def render_newtype_field_error(model: FieldErrorModel, owner: str) -> list[str]:
    """Wrapper holding a newtype value's own error, with transparent access."""
    lines = [
        "@dataclasses.dataclass",
        f"class {model.error_type}(ValidationError):",
        f'{INDENT}"""Error of the wrapped value in {owner}; attributes read through to it."""',
        "",
        f"{INDENT}inner: Optional[{model.inner_error_type}] = None",
        "",
    ]
    lines.extend(render_is_empty(["self.inner is None"]))
    lines.append("")
    lines.extend(render_delegating_getattr("inner"))
    return lines


def render_record_error(name: str, record: str, models: list[FieldErrorModel],
                        extra_methods: list[list[str]] | None = None) -> list[str]:
    """Aggregate error with one member per annotated field."""
    lines = [
        "@dataclasses.dataclass",
        f"class {name}(ValidationError):",
        f'{INDENT}"""All validation failures of `{record}`."""',
    ]
    if models:
        lines.append("")
    conditions = []
    for model in models:
        if model.kind == FieldKind.NESTED:
            lines.append(f"{INDENT}{model.name}: Optional[{model.error_type}] = None")
            conditions.append(f"self.{model.name} is None")
        else:
            lines.append(
                f"{INDENT}{model.name}: {model.error_type} = "
                f"dataclasses.field(default_factory={model.error_type})"
            )
            conditions.append(f"self.{model.name}.is_empty()")

    lines.append("")
    lines.extend(render_is_empty(conditions))
    for method in extra_methods or []:
        lines.append("")
        lines.extend(method)
    return lines
