"""Tokenizer for annotation text.

Tokens keep their character offset so parse errors can point at the exact
column. Argument expressions are later sliced out of the original text by
offset, so operators only need to be split finely enough for bracket and
comma tracking.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import AnnotationSyntaxError


class TokenKind(str, Enum):
    IDENT = "identifier"
    NUMBER = "number"
    STRING = "string"
    PATH_SEP = "`::`"
    PUNCT = "punctuation"
    OTHER = "operator"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    offset: int

    def is_punct(self, value: str) -> bool:
        return self.kind == TokenKind.PUNCT and self.value == value

    def describe(self) -> str:
        if self.kind == TokenKind.EOF:
            return "end of input"
        return f"`{self.value}`"


_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>[rbfu]{0,2}"(?:[^"\\\n]|\\.)*"|[rbfu]{0,2}'(?:[^'\\\n]|\\.)*')
  | (?P<unterminated>["'])
  | (?P<number>0[xXoObB][0-9a-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<path_sep>::)
  | (?P<punct>[()\[\]{}<>,=.])
  | (?P<other>\S)
    """,
    re.VERBOSE,
)

_GROUP_KINDS = {
    "string": TokenKind.STRING,
    "number": TokenKind.NUMBER,
    "ident": TokenKind.IDENT,
    "path_sep": TokenKind.PATH_SEP,
    "punct": TokenKind.PUNCT,
    "other": TokenKind.OTHER,
}


def tokenize(text: str) -> list[Token]:
    """Split annotation text into tokens, ending with an EOF token.

    Args:
        text: Raw annotation text

    Returns:
        List of tokens with character offsets

    Raises:
        AnnotationSyntaxError: On an unterminated string literal
    """
    tokens: list[Token] = []
    for match in _TOKEN_PATTERN.finditer(text):
        group = match.lastgroup
        if group == "ws":
            continue
        if group == "unterminated":
            raise AnnotationSyntaxError("unterminated string literal", text, match.start())
        tokens.append(Token(_GROUP_KINDS[group], match.group(), match.start()))
    tokens.append(Token(TokenKind.EOF, "", len(text)))
    return tokens
