"""AST nodes produced by the annotation parser.

Plain dataclasses: the parser is a pure function of annotation text and these
nodes never leave the build step.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..types import TypeExpr


class TypeModeKind(str, Enum):
    """How a validator's type parameter is chosen."""
    NONE = "none"                    # no turbofish: non-generic validator
    INFER_FULL = "infer_full"        # ::<_>
    INFER_PARTIAL = "infer_partial"  # ::<Outer<_>>, including ::<Option<_>>
    EXPLICIT = "explicit"            # ::<ConcreteType>


@dataclass(frozen=True)
class TypeMode:
    """Requested type-parameter mode with its written template, if any."""
    kind: TypeModeKind = TypeModeKind.NONE
    template: Optional[TypeExpr] = None

    def __str__(self) -> str:
        if self.kind == TypeModeKind.NONE:
            return ""
        if self.kind == TypeModeKind.INFER_FULL:
            return "::<_>"
        return f"::<{self.template}>"


@dataclass(frozen=True)
class Argument:
    """One `name = expression` pair; the expression is kept as source text."""
    name: str
    expression: str


@dataclass(frozen=True)
class ValidatorInvocation:
    """`path::<T>(name = expr, ...)` as written in an annotation."""
    path: str
    type_mode: TypeMode = field(default_factory=TypeMode)
    arguments: Tuple[Argument, ...] = field(default_factory=tuple)
    position: int = 0

    @property
    def name(self) -> str:
        """Simple name used for slot naming and duplicate detection."""
        return self.path.replace("::", ".").rsplit(".", 1)[-1]

    @property
    def python_path(self) -> str:
        """The path as a Python attribute chain."""
        return self.path.replace("::", ".")

    def __str__(self) -> str:
        args = ""
        if self.arguments:
            args = "(" + ", ".join(f"{a.name} = {a.expression}" for a in self.arguments) + ")"
        return f"{self.path}{self.type_mode}{args}"


@dataclass
class ParsedAnnotation:
    """Result of parsing one annotation occurrence.

    Either `modifier` is set (skip/nested/newtype) or the validator lists hold
    the occurrence's field-level and element-level invocations.
    """
    field_validators: List[ValidatorInvocation] = field(default_factory=list)
    element_validators: List[ValidatorInvocation] = field(default_factory=list)
    modifier: Optional[str] = None

    @property
    def is_modifier(self) -> bool:
        return self.modifier is not None


@dataclass
class FieldAnnotation:
    """All occurrences on one field merged together."""
    field_validators: List[ValidatorInvocation] = field(default_factory=list)
    element_validators: List[ValidatorInvocation] = field(default_factory=list)
    is_skip: bool = False
    is_nested: bool = False
    is_newtype: bool = False

    @property
    def has_validators(self) -> bool:
        return bool(self.field_validators or self.element_validators)

    @property
    def has_element_validators(self) -> bool:
        return bool(self.element_validators)

    @property
    def delegates(self) -> bool:
        """Nested and newtype fields defer to the value's own validate()."""
        return self.is_nested or self.is_newtype


@dataclass
class StructAnnotation:
    """Struct-level options."""
    generates_validating_constructor: bool = False
    is_newtype_wrapper: bool = False
