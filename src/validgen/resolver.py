"""Type-inference resolver.

Computes the concrete type argument a generic validator is instantiated with,
given the field's declared type and the turbofish mode written in the
annotation.
"""

from .grammar.models import TypeMode, TypeModeKind
from .types import TypeExpr, TypeSystem, first_generic_arg, substitute_placeholder


def resolve(declared: TypeExpr, type_mode: TypeMode, is_element_slot: bool,
            types: TypeSystem | None = None) -> TypeExpr | None:
    """Resolve the type parameter for one validator invocation.

    Steps, in order:
      a. for an element slot, unwrap an optional field and then one
         collection level;
      b. unless the mode is the `Option<_>` escape hatch, unwrap one optional
         level;
      c. apply the mode. No turbofish gives None, `_` gives the unwrapped
         type, a template has its placeholders replaced with the first
         generic argument of the pre-unwrap type (or the type itself when it
         has none), and an explicit type is used verbatim.

    Args:
        declared: The field's declared type
        type_mode: Mode written in the annotation
        is_element_slot: Whether the invocation sits inside `each(...)`
        types: Type system deciding what counts as optional or a collection

    Returns:
        The resolved type, or None for a non-generic validator
    """
    types = types or TypeSystem()

    subject = declared
    if is_element_slot:
        subject = types.unwrap_optional(subject)
        subject = types.collection_inner(subject) or subject

    unwrapped = subject if is_escape_hatch(type_mode, types) else types.unwrap_optional(subject)

    if type_mode.kind == TypeModeKind.NONE:
        return None
    if type_mode.kind == TypeModeKind.INFER_FULL:
        return unwrapped
    if type_mode.kind == TypeModeKind.EXPLICIT:
        return type_mode.template

    replacement = first_generic_arg(subject) or subject
    return substitute_placeholder(type_mode.template, replacement)


def is_escape_hatch(type_mode: TypeMode, types: TypeSystem) -> bool:
    """Whether the invocation asks for the full optional value."""
    return (
        type_mode.kind == TypeModeKind.INFER_PARTIAL
        and types.is_option_placeholder(type_mode.template)
    )
