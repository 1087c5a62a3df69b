"""Identifier helpers and the naming scheme for generated types."""

import keyword
import re

from ..config import NamingConfig

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

# Constants that keyword.iskeyword() does not cover on every version
_RESERVED_NAMES = frozenset({"None", "True", "False", "match", "case", "type", "_"})


def snake_case(name: str) -> str:
    """`StringLength` -> `string_length`, `HTTPUrl` -> `http_url`."""
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


def camel_case(name: str) -> str:
    """`first_name` -> `FirstName`; already-camel names keep their casing."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def constant_case(name: str) -> str:
    """`StringLength` -> `STRING_LENGTH`."""
    return snake_case(name).upper()


def safe_identifier(name: str) -> str:
    """Append `_` to names that cannot be used as attribute names."""
    if keyword.iskeyword(name) or name in _RESERVED_NAMES:
        return name + "_"
    return name


class NameScheme:
    """Class names for the types generated per record and field."""

    def __init__(self, config: NamingConfig | None = None):
        self.config = config or NamingConfig()

    def record_error(self, record: str) -> str:
        return f"{record}{self.config.error_suffix}"

    def mixin(self, record: str) -> str:
        return f"{record}{self.config.mixin_suffix}"

    def field_error(self, record: str, field: str) -> str:
        return f"{record}{camel_case(field)}{self.config.error_suffix}"

    def field_validator_enum(self, record: str, field: str) -> str:
        return f"{record}{camel_case(field)}{self.config.validator_suffix}"

    def element_error(self, record: str, field: str) -> str:
        return f"{record}{camel_case(field)}{self.config.element_infix}{self.config.error_suffix}"

    def element_validator_enum(self, record: str, field: str) -> str:
        return f"{record}{camel_case(field)}{self.config.element_infix}{self.config.validator_suffix}"

    def type_error(self, type_name: str) -> str:
        """Error type generated for another record, used by nested fields."""
        return f"{type_name}{self.config.error_suffix}"

    @staticmethod
    def slot(validator_name: str) -> str:
        return safe_identifier(snake_case(validator_name))

    @staticmethod
    def member(validator_name: str) -> str:
        return constant_case(validator_name)
