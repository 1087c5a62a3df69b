"""Annotation grammar: lexer, parser and AST nodes.

Basic usage:
    from validgen.grammar import parse_annotation

    parsed = parse_annotation("StringLength(min = 1), each(Email)")
    for invocation in parsed.field_validators:
        print(invocation.name, invocation.type_mode)
"""

from .models import (
    Argument,
    FieldAnnotation,
    ParsedAnnotation,
    StructAnnotation,
    TypeMode,
    TypeModeKind,
    ValidatorInvocation,
)
from .parser import parse_annotation, parse_struct_options, parse_type_expr

__all__ = [
    "Argument",
    "FieldAnnotation",
    "ParsedAnnotation",
    "StructAnnotation",
    "TypeMode",
    "TypeModeKind",
    "ValidatorInvocation",
    "parse_annotation",
    "parse_struct_options",
    "parse_type_expr",
]
