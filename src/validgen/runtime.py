"""Runtime contract imported by generated validation modules.

A validator is a dataclass constructed with named arguments. Generated code
hands it the checked value with `with_value`, then asks `validate(value)`.
On failure the validator itself is stored in the error slot, so `str()` on
it can render a message using both its arguments and the offending value.

    @validator
    class NumberRange(Validator[int]):
        min: int = 0
        max: int = 100
        actual: int | None = value_field()

        def validate(self, value: int) -> bool:
            return self.min <= value <= self.max

        def __str__(self) -> str:
            return f"{self.actual} is not within [{self.min}, {self.max}]"
"""

import dataclasses
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V", bound="Validator")

VALUE_FIELD_METADATA_KEY = "validgen"
VALUE_FIELD_MARKER = "value"


def value_field(default: Any = None) -> Any:
    """Mark the dataclass field that receives the checked value."""
    return dataclasses.field(
        default=default, metadata={VALUE_FIELD_METADATA_KEY: VALUE_FIELD_MARKER}
    )


class Validator(ABC, Generic[T]):
    """Base class for validators used in annotations."""

    __value_field__: ClassVar[str | None] = None

    def with_value(self: V, value: Any) -> V:
        """Store the value being checked and return self."""
        if self.__value_field__ is None:
            raise TypeError(
                f"{type(self).__name__} has no value field; decorate it with @validator "
                f"and mark one field with value_field()"
            )
        setattr(self, self.__value_field__, value)
        return self

    @property
    def value(self) -> Any:
        """The value most recently passed to `with_value`."""
        if self.__value_field__ is None:
            return None
        return getattr(self, self.__value_field__)

    @abstractmethod
    def validate(self, value: T) -> bool:
        """Return True when the value passes this check."""

    def __str__(self) -> str:
        return f"{type(self).__name__} failed for value {self.value!r}"


def validator(cls: type[V] | None = None, **dataclass_kwargs: Any):
    """Class decorator turning a Validator subclass into a dataclass.

    Usable bare (`@validator`) or with dataclass options
    (`@validator(eq=False)`). Exactly one field must be marked with
    `value_field()`.

    Raises:
        TypeError: If the class is not a Validator or has no value field
    """

    def wrap(klass: type[V]) -> type[V]:
        if not (isinstance(klass, type) and issubclass(klass, Validator)):
            raise TypeError(f"@validator expects a Validator subclass, got {klass!r}")
        if "__dataclass_fields__" not in klass.__dict__:
            klass = dataclass(klass, **dataclass_kwargs)

        marked = [
            f.name for f in dataclasses.fields(klass)
            if f.metadata.get(VALUE_FIELD_METADATA_KEY) == VALUE_FIELD_MARKER
        ]
        if len(marked) != 1:
            raise TypeError(
                f"{klass.__name__} must mark exactly one field with value_field(), "
                f"found {len(marked)}"
            )
        klass.__value_field__ = marked[0]
        return klass

    if cls is None:
        return wrap
    return wrap(cls)


class ValidationError(ABC):
    """Base class of every generated error type."""

    @abstractmethod
    def is_empty(self) -> bool:
        """True when no check recorded a failure."""

    def has_errors(self) -> bool:
        return not self.is_empty()


@dataclass(frozen=True)
class Failure:
    """One failed check: which enumeration member, and the validator itself."""
    check: enum.Enum
    validator: Validator

    def __str__(self) -> str:
        return str(self.validator)


@dataclass(frozen=True)
class RegistryEntry:
    """A validator known to tooling."""
    name: str
    factory: Callable[..., Validator]
    description: str = ""
    input_type: str | None = None


class ValidatorRegistry:
    """Explicit table of validators for discovery and tooling.

    Populated by calling each validator module's
    `register_validators(registry)`; entries keep registration order.
    """

    def __init__(self):
        self._entries: dict[str, RegistryEntry] = {}

    def register(self, name: str, factory: Callable[..., Validator],
                 description: str = "", input_type: str | None = None) -> RegistryEntry:
        """Register a validator under a unique name.

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._entries:
            raise ValueError(f"validator `{name}` is already registered")
        entry = RegistryEntry(name, factory, description, input_type)
        self._entries[name] = entry
        logger.debug("Registered validator %s", name)
        return entry

    def get(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def create(self, name: str, **kwargs: Any) -> Validator:
        """Construct a registered validator with named arguments.

        Raises:
            KeyError: If no validator is registered under the name
        """
        entry = self._entries.get(name)
        if entry is None:
            raise KeyError(f"unknown validator `{name}`")
        return entry.factory(**kwargs)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)
