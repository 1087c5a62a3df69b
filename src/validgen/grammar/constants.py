"""Keywords and fixed messages of the annotation grammar."""

from typing import Dict, Tuple

# Field modifiers; each must be the only item in its annotation occurrence
MODIFIER_SKIP = "skip"
MODIFIER_NESTED = "nested"
MODIFIER_NEWTYPE = "newtype"
FIELD_MODIFIERS: Tuple[str, ...] = (MODIFIER_SKIP, MODIFIER_NESTED, MODIFIER_NEWTYPE)

# Element-level block keyword: each(Validator, ...)
EACH_KEYWORD = "each"

PLACEHOLDER = "_"

# Struct-level options and the StructAnnotation flag each one sets
OPTION_TRY_NEW = "try_new"
OPTION_NEWTYPE = "newtype"
STRUCT_OPTIONS: Tuple[str, ...] = (OPTION_TRY_NEW, OPTION_NEWTYPE)

# Bracket pairs accepted around generic arguments
GENERIC_BRACKETS: Dict[str, str] = {"<": ">", "[": "]"}

# Brackets that nest inside argument expressions
EXPRESSION_OPENERS = "([{"
EXPRESSION_CLOSERS = ")]}"

LEGACY_GENERIC_HINT = "use turbofish syntax for type parameters: `Validator::<_>` not `Validator<_>`"
