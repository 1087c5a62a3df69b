"""Recursive-descent parser for validation annotations.

Parses one annotation occurrence such as

    StringLength(min = 1, max = 50), Range::<_>(min = 0), each(Email)

into a ParsedAnnotation. Path parsing uses one token of lookahead so that
`a::b::C` keeps going while `C::<T>` stops before the turbofish.
"""

import ast
import logging

from ..errors import AnnotationSyntaxError, UnknownOptionError
from ..types import NamedType, Placeholder, TypeExpr, contains_placeholder
from .constants import (
    EACH_KEYWORD,
    EXPRESSION_CLOSERS,
    EXPRESSION_OPENERS,
    FIELD_MODIFIERS,
    GENERIC_BRACKETS,
    LEGACY_GENERIC_HINT,
    PLACEHOLDER,
    STRUCT_OPTIONS,
)
from .lexer import Token, TokenKind, tokenize
from .models import Argument, ParsedAnnotation, TypeMode, TypeModeKind, ValidatorInvocation

logger = logging.getLogger(__name__)


class _Parser:
    """Token cursor shared by the annotation, option and type grammars."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    # cursor helpers

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def peek(self, distance: int = 1) -> Token:
        return self.tokens[min(self.index + distance, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.current
        if token.kind != TokenKind.EOF:
            self.index += 1
        return token

    def at_eof(self) -> bool:
        return self.current.kind == TokenKind.EOF

    def error(self, message: str, token: Token | None = None,
              hint: str | None = None) -> AnnotationSyntaxError:
        token = token or self.current
        return AnnotationSyntaxError(message, self.text, token.offset, hint=hint)

    def expect_punct(self, value: str, context: str) -> Token:
        if not self.current.is_punct(value):
            raise self.error(f"expected `{value}` {context}, found {self.current.describe()}")
        return self.advance()

    def expect_ident(self, context: str) -> Token:
        if self.current.kind != TokenKind.IDENT:
            raise self.error(f"expected identifier {context}, found {self.current.describe()}")
        return self.advance()

    # annotation grammar

    def parse_annotation(self) -> ParsedAnnotation:
        if self.at_eof():
            raise self.error("empty annotation")

        first = self.current
        if first.kind == TokenKind.IDENT and first.value in FIELD_MODIFIERS and self._is_bare_item():
            self.advance()
            if not self.at_eof():
                raise self.error(f"`{first.value}` must appear alone in its annotation", first)
            return ParsedAnnotation(modifier=first.value)

        result = ParsedAnnotation()
        while True:
            token = self.current
            if self._at_each_block():
                result.element_validators.extend(self.parse_each())
            elif token.kind == TokenKind.IDENT and token.value in FIELD_MODIFIERS and self._is_bare_item():
                raise self.error(f"`{token.value}` must appear alone in its annotation")
            else:
                result.field_validators.append(self.parse_invocation())

            if self.at_eof():
                break
            self.expect_punct(",", "between validators")
            if self.at_eof():
                break
        return result

    def _is_bare_item(self) -> bool:
        follower = self.peek()
        return follower.kind == TokenKind.EOF or follower.is_punct(",")

    def _at_each_block(self) -> bool:
        return (
            self.current.kind == TokenKind.IDENT
            and self.current.value == EACH_KEYWORD
            and self.peek().is_punct("(")
        )

    def parse_each(self) -> list[ValidatorInvocation]:
        self.advance()
        self.expect_punct("(", "after `each`")
        if self.current.is_punct(")"):
            raise self.error("`each(...)` must list at least one validator")

        invocations = []
        while True:
            if self._at_each_block():
                raise self.error("`each(...)` cannot be nested")
            invocations.append(self.parse_invocation())
            if self.current.is_punct(")"):
                break
            self.expect_punct(",", "between element validators")
            if self.current.is_punct(")"):
                break
        self.advance()
        return invocations

    def parse_invocation(self) -> ValidatorInvocation:
        start = self.current
        path = self.parse_path("for validator name")

        type_mode = TypeMode()
        if self.current.kind == TokenKind.PATH_SEP and self.peek().is_punct("<"):
            type_mode = self.parse_turbofish()
        elif self.current.kind == TokenKind.PUNCT and self.current.value in GENERIC_BRACKETS:
            raise self.error(
                f"unexpected `{self.current.value}` after validator `{path}`",
                hint=LEGACY_GENERIC_HINT,
            )

        arguments: tuple[Argument, ...] = ()
        if self.current.is_punct("("):
            arguments = self.parse_arguments()

        return ValidatorInvocation(
            path=path, type_mode=type_mode, arguments=arguments, position=start.offset
        )

    def parse_path(self, context: str) -> str:
        """Consume `ident ((:: | .) ident)*`, stopping before `::<`."""
        segments = [self.expect_ident(context).value]
        while True:
            token = self.current
            if token.kind == TokenKind.PATH_SEP:
                follower = self.peek()
                if follower.is_punct("<"):
                    break
                if follower.kind != TokenKind.IDENT:
                    raise self.error(
                        f"expected identifier or `<` after `::`, found {follower.describe()}",
                        follower,
                    )
                self.advance()
                segments.append("::" + self.advance().value)
            elif token.is_punct(".") and self.peek().kind == TokenKind.IDENT:
                self.advance()
                segments.append("." + self.advance().value)
            else:
                break
        return "".join(segments)

    def parse_turbofish(self) -> TypeMode:
        self.advance()
        self.expect_punct("<", "to open type parameter")
        if self.current.kind == TokenKind.IDENT and self.current.value == PLACEHOLDER \
                and self.peek().is_punct(">"):
            self.advance()
            self.advance()
            return TypeMode(TypeModeKind.INFER_FULL)

        template = self.parse_type()
        self.expect_punct(">", "to close type parameter")
        if contains_placeholder(template):
            return TypeMode(TypeModeKind.INFER_PARTIAL, template)
        return TypeMode(TypeModeKind.EXPLICIT, template)

    def parse_arguments(self) -> tuple[Argument, ...]:
        open_paren = self.advance()
        arguments: list[Argument] = []
        seen: set[str] = set()
        while not self.current.is_punct(")"):
            if self.at_eof():
                raise self.error("unclosed `(` in argument list", open_paren)
            name_token = self.expect_ident("for argument name")
            if name_token.value in seen:
                raise self.error(f"duplicate argument `{name_token.value}`", name_token)
            seen.add(name_token.value)
            self.expect_punct("=", f"after argument `{name_token.value}`")
            arguments.append(Argument(name_token.value, self.parse_expression(open_paren)))

            if self.current.is_punct(","):
                self.advance()
            elif not self.current.is_punct(")"):
                raise self.error(f"expected `,` or `)` in argument list, found {self.current.describe()}")
        self.advance()
        return tuple(arguments)

    def parse_expression(self, open_paren: Token) -> str:
        """Capture source text up to the next top-level `,` or `)`."""
        start = self.current
        depth = 0
        while True:
            token = self.current
            if token.kind == TokenKind.EOF:
                raise self.error("unclosed `(` in argument list", open_paren)
            if token.kind == TokenKind.PUNCT:
                if depth == 0 and token.value in ",)":
                    break
                if token.value in EXPRESSION_OPENERS:
                    depth += 1
                elif token.value in EXPRESSION_CLOSERS:
                    depth -= 1
            self.advance()

        expression = self.text[start.offset:self.current.offset].strip()
        if not expression:
            raise self.error("expected expression", start)
        try:
            ast.parse(expression, mode="eval")
        except SyntaxError as e:
            raise self.error(f"invalid argument expression `{expression}`: {e.msg}", start) from e
        return expression

    # struct options

    def parse_struct_options(self) -> list[str]:
        options = []
        while not self.at_eof():
            token = self.expect_ident("for struct-level option")
            if token.value not in STRUCT_OPTIONS:
                raise UnknownOptionError(token.value, STRUCT_OPTIONS)
            options.append(token.value)
            if self.at_eof():
                break
            self.expect_punct(",", "between struct-level options")
        return options

    # types

    def parse_type(self) -> TypeExpr:
        token = self.current
        if token.kind == TokenKind.IDENT and token.value == PLACEHOLDER:
            self.advance()
            ty: TypeExpr = Placeholder()
        else:
            name = self.parse_path("for type name")
            args: list[TypeExpr] = []
            if self.current.kind == TokenKind.PUNCT and self.current.value in GENERIC_BRACKETS:
                opener = self.advance()
                closer = GENERIC_BRACKETS[opener.value]
                if self.current.is_punct(closer):
                    raise self.error(f"empty generic argument list for `{name}`")
                while True:
                    args.append(self.parse_type())
                    if self.current.is_punct(closer):
                        break
                    self.expect_punct(",", f"or `{closer}` in generic arguments of `{name}`")
                self.advance()
            ty = NamedType(name, tuple(args))

        # `T | None` is accepted as a synonym for Option<T>
        while self.current.kind == TokenKind.OTHER and self.current.value == "|":
            if not (self.peek().kind == TokenKind.IDENT and self.peek().value == "None"):
                raise self.error("only `| None` is supported in type unions", self.peek())
            self.advance()
            self.advance()
            ty = NamedType("Option", (ty,))
        return ty


def parse_annotation(text: str) -> ParsedAnnotation:
    """Parse one annotation occurrence.

    Args:
        text: Annotation text, e.g. ``"StringLength(min = 1), each(Email)"``

    Returns:
        ParsedAnnotation holding either a modifier or the invocation lists

    Raises:
        AnnotationSyntaxError: If the text does not match the grammar
    """
    parsed = _Parser(text).parse_annotation()
    logger.debug(
        "Parsed annotation %r: %d field, %d element validator(s), modifier=%s",
        text, len(parsed.field_validators), len(parsed.element_validators), parsed.modifier,
    )
    return parsed


def parse_struct_options(text: str) -> list[str]:
    """Parse a struct-level option list such as ``"try_new, newtype"``.

    Raises:
        UnknownOptionError: For a name other than `try_new` or `newtype`
        AnnotationSyntaxError: For anything that is not a name list
    """
    return _Parser(text).parse_struct_options()


def parse_type_expr(text: str) -> TypeExpr:
    """Parse a declared field type like ``Option<Vec<String>>`` or ``list[int] | None``."""
    parser = _Parser(text)
    if parser.at_eof():
        raise parser.error("empty type")
    ty = parser.parse_type()
    if not parser.at_eof():
        raise parser.error(f"unexpected {parser.current.describe()} after type")
    if contains_placeholder(ty):
        placeholder = next(
            token for token in parser.tokens
            if token.kind == TokenKind.IDENT and token.value == PLACEHOLDER
        )
        raise parser.error("`_` is only allowed in validator type parameters, not declared types",
                           placeholder)
    return ty
