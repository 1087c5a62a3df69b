"""Type expressions and the structural queries the resolver needs.

A type is either a named type with generic arguments or the inference
placeholder `_`. Whether a name means "optional" or "collection" is decided
by a TypeSystem built from configuration, so the same descriptor can be
written with Rust-style (`Option<Vec<i32>>`) or typing-style
(`Optional[list[int]]`) names.
"""

from dataclasses import dataclass, field
from typing import Union

from .config import TypesConfig


@dataclass(frozen=True)
class Placeholder:
    """The `_` leaf, meaning "fill from context"."""

    def __str__(self) -> str:
        return "_"


@dataclass(frozen=True)
class NamedType:
    """A (possibly qualified) type name applied to generic arguments."""
    name: str
    args: tuple["TypeExpr", ...] = field(default_factory=tuple)

    @property
    def simple_name(self) -> str:
        """Last path segment of the name."""
        return self.name.replace("::", ".").rsplit(".", 1)[-1]

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(str(arg) for arg in self.args)}>"


TypeExpr = Union[NamedType, Placeholder]


def contains_placeholder(ty: TypeExpr) -> bool:
    """Check whether any leaf of the type is the `_` placeholder."""
    if isinstance(ty, Placeholder):
        return True
    return any(contains_placeholder(arg) for arg in ty.args)


def substitute_placeholder(ty: TypeExpr, replacement: TypeExpr) -> TypeExpr:
    """Replace every `_` leaf with `replacement`, at any depth.

    `Vec<_>` with `String` becomes `Vec<String>`;
    `HashMap<String, Vec<_>>` with `i32` becomes `HashMap<String, Vec<i32>>`.
    """
    if isinstance(ty, Placeholder):
        return replacement
    if not ty.args:
        return ty
    return NamedType(ty.name, tuple(substitute_placeholder(arg, replacement) for arg in ty.args))


def first_generic_arg(ty: TypeExpr) -> TypeExpr | None:
    """First generic argument of a named type: `Vec<String>` gives `String`."""
    if isinstance(ty, NamedType) and ty.args:
        return ty.args[0]
    return None


class TypeSystem:
    """Answers optional/collection questions and renders Python annotations."""

    def __init__(self, config: TypesConfig | None = None):
        config = config or TypesConfig()
        self.optional_names = frozenset(config.optional)
        self.collection_names = frozenset(config.collections)
        self.aliases = config.resolved_aliases()
        self.builtin_names = frozenset(self.aliases) | frozenset(self.aliases.values())

    def is_optional(self, ty: TypeExpr) -> bool:
        return (
            isinstance(ty, NamedType)
            and ty.simple_name in self.optional_names
            and len(ty.args) == 1
        )

    def option_inner(self, ty: TypeExpr) -> TypeExpr | None:
        """Inner type of `Option<T>`, or None when the type is not optional."""
        if self.is_optional(ty):
            return ty.args[0]
        return None

    def unwrap_optional(self, ty: TypeExpr) -> TypeExpr:
        return self.option_inner(ty) or ty

    def is_collection(self, ty: TypeExpr) -> bool:
        return (
            isinstance(ty, NamedType)
            and ty.simple_name in self.collection_names
            and len(ty.args) == 1
        )

    def collection_inner(self, ty: TypeExpr) -> TypeExpr | None:
        """Element type of a collection, or None when the type is not one."""
        if self.is_collection(ty):
            return ty.args[0]
        return None

    def is_builtin(self, ty: TypeExpr) -> bool:
        """Primitive or container spellings from the alias table, either side."""
        if not isinstance(ty, NamedType):
            return False
        name = ty.name.replace("::", ".")
        return (
            name in self.builtin_names
            or ty.simple_name in self.aliases
            or ty.simple_name in self.optional_names
            or ty.simple_name in self.collection_names
        )

    def is_option_placeholder(self, ty: TypeExpr) -> bool:
        """`Option<_>`: the escape hatch asking for the full optional value."""
        return self.is_optional(ty) and isinstance(ty.args[0], Placeholder)

    def render_python(self, ty: TypeExpr) -> str:
        """Render a resolved type as a runtime-evaluable Python expression."""
        if isinstance(ty, Placeholder):
            # Unresolved placeholders only reach here from malformed input
            return "Any"
        name = ty.name.replace("::", ".")
        if name in self.aliases:
            name = self.aliases[name]
        elif "::" in ty.name:
            name = self.aliases.get(ty.simple_name, name)
        if not ty.args:
            return name
        return f"{name}[{', '.join(self.render_python(arg) for arg in ty.args)}]"


@dataclass(frozen=True)
class TypeShape:
    """Structural decomposition of a declared field type."""
    declared: TypeExpr
    is_optional: bool
    unwrapped: TypeExpr
    is_collection: bool
    element: TypeExpr | None
    element_is_optional: bool

    @classmethod
    def of(cls, declared: TypeExpr, types: TypeSystem) -> "TypeShape":
        unwrapped = types.unwrap_optional(declared)
        element = types.collection_inner(unwrapped)
        return cls(
            declared=declared,
            is_optional=types.is_optional(declared),
            unwrapped=unwrapped,
            is_collection=element is not None,
            element=element,
            element_is_optional=element is not None and types.is_optional(element),
        )
