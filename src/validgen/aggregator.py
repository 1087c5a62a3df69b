"""Merge annotation occurrences into one annotation per field or record.

A field may carry several annotation occurrences; each is parsed on its own
and the results are unioned. Field-level and element-level slots keep
separate seen-name sets, so `each(Required), Required` is legal while
`Required, Required` is not.
"""

import logging
from typing import Iterable

from .errors import DuplicateValidatorError, StructuralError
from .grammar.constants import (
    MODIFIER_NESTED,
    MODIFIER_NEWTYPE,
    MODIFIER_SKIP,
    OPTION_NEWTYPE,
    OPTION_TRY_NEW,
)
from .grammar.models import FieldAnnotation, StructAnnotation, ValidatorInvocation
from .grammar.parser import parse_annotation, parse_struct_options

logger = logging.getLogger(__name__)


def _union(target: list[ValidatorInvocation], seen: set[str],
           invocations: Iterable[ValidatorInvocation], field_name: str, element: bool) -> None:
    for invocation in invocations:
        if invocation.name in seen:
            raise DuplicateValidatorError(invocation.name, field_name, element=element)
        seen.add(invocation.name)
        target.append(invocation)


def aggregate(occurrences: Iterable[str], field_name: str) -> FieldAnnotation | None:
    """Merge every annotation occurrence on one field.

    Args:
        occurrences: Raw annotation texts in declaration order
        field_name: Field name, used in error messages

    Returns:
        FieldAnnotation, or None when the field carries no validators and no
        modifier

    Raises:
        AnnotationSyntaxError: If an occurrence does not parse
        DuplicateValidatorError: If one slot names the same validator twice
        StructuralError: If `nested`/`newtype` is mixed with validators or
            with each other
    """
    result = FieldAnnotation()
    field_seen: set[str] = set()
    element_seen: set[str] = set()

    for text in occurrences:
        parsed = parse_annotation(text)
        if parsed.modifier == MODIFIER_SKIP:
            result.is_skip = True
        elif parsed.modifier == MODIFIER_NESTED:
            result.is_nested = True
        elif parsed.modifier == MODIFIER_NEWTYPE:
            result.is_newtype = True
        else:
            _union(result.field_validators, field_seen, parsed.field_validators, field_name, False)
            _union(result.element_validators, element_seen, parsed.element_validators, field_name, True)

    if result.is_skip:
        logger.debug("Field %s is skipped", field_name)
        return FieldAnnotation(is_skip=True)

    if result.is_nested and result.is_newtype:
        raise StructuralError(f"field `{field_name}` cannot be both `nested` and `newtype`")
    if result.delegates and result.has_validators:
        modifier = MODIFIER_NESTED if result.is_nested else MODIFIER_NEWTYPE
        raise StructuralError(
            f"field `{field_name}` is marked `{modifier}` and cannot also declare validators"
        )

    if not result.has_validators and not result.delegates:
        return None
    return result


def aggregate_struct_options(occurrences: Iterable[str]) -> StructAnnotation:
    """Merge struct-level option occurrences such as ``["try_new", "newtype"]``.

    Raises:
        UnknownOptionError: For an unrecognized option name
    """
    result = StructAnnotation()
    for text in occurrences:
        for option in parse_struct_options(text):
            if option == OPTION_TRY_NEW:
                result.generates_validating_constructor = True
            elif option == OPTION_NEWTYPE:
                result.is_newtype_wrapper = True
    return result
