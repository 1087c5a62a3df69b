"""Unit tests for the runtime contract used by generated code."""

import enum
from dataclasses import dataclass
from typing import Optional

import pytest

from sample_validators import NumberRange, Range, StringLength, register_validators
from validgen.runtime import (
    Failure,
    ValidationError,
    Validator,
    ValidatorRegistry,
    validator,
    value_field,
)


class TestValidatorDecorator:
    """Test the @validator class decorator."""

    def test_value_field_is_recorded(self):
        assert StringLength.__value_field__ == "actual"

    def test_with_value_stores_and_returns_self(self):
        check = NumberRange(min=0, max=10)
        assert check.with_value(42) is check
        assert check.actual == 42
        assert check.value == 42

    def test_generic_validator_subscript(self):
        """Test generic validators can be built through their subscripted alias."""
        check = Range[float](min=0.5).with_value(0.1)
        assert isinstance(check, Range)
        assert not check.validate(0.1)

    def test_default_message(self):
        check = Range(min=1).with_value(0)
        assert str(check) == "Range failed for value 0"

    def test_decorator_with_options(self):
        @validator(eq=False)
        class Positive(Validator[int]):
            actual: Optional[int] = value_field()

            def validate(self, value: int) -> bool:
                return value > 0

        assert Positive() != Positive()
        assert Positive.__value_field__ == "actual"

    def test_already_a_dataclass(self):
        @validator
        @dataclass
        class NonZero(Validator[int]):
            actual: Optional[int] = value_field()

            def validate(self, value: int) -> bool:
                return value != 0

        assert NonZero.__value_field__ == "actual"

    def test_missing_value_field(self):
        with pytest.raises(TypeError, match="found 0"):
            @validator
            class Broken(Validator[int]):
                limit: int = 0

                def validate(self, value: int) -> bool:
                    return True

    def test_two_value_fields(self):
        with pytest.raises(TypeError, match="found 2"):
            @validator
            class Broken(Validator[int]):
                a: Optional[int] = value_field()
                b: Optional[int] = value_field()

                def validate(self, value: int) -> bool:
                    return True

    def test_not_a_validator(self):
        with pytest.raises(TypeError, match="Validator subclass"):
            @validator
            class Plain:
                pass

    def test_undecorated_validator_rejects_with_value(self):
        class Loose(Validator[int]):
            def validate(self, value: int) -> bool:
                return True

        with pytest.raises(TypeError, match="no value field"):
            Loose().with_value(1)
        assert Loose().value is None


class TestValidationError:
    """Test the error base class and Failure items."""

    def test_has_errors_negates_is_empty(self):
        @dataclass
        class SampleError(ValidationError):
            failed: bool = False

            def is_empty(self) -> bool:
                return not self.failed

        assert not SampleError().has_errors()
        assert SampleError(failed=True).has_errors()

    def test_is_empty_is_abstract(self):
        with pytest.raises(TypeError):
            ValidationError()

    def test_failure_renders_validator(self):
        class Check(enum.Enum):
            STRING_LENGTH = "string_length"

        check = StringLength(min=2, max=5).with_value("a")
        failure = Failure(Check.STRING_LENGTH, check)
        assert failure.check is Check.STRING_LENGTH
        assert str(failure) == "length of 'a' must be between 2 and 5"


class TestValidatorRegistry:
    """Test ValidatorRegistry."""

    @pytest.fixture
    def registry(self):
        registry = ValidatorRegistry()
        register_validators(registry)
        return registry

    def test_registration_order(self, registry):
        assert [entry.name for entry in registry] == ["StringLength", "NumberRange", "Range", "Required"]
        assert len(registry) == 4

    def test_lookup(self, registry):
        assert "Range" in registry
        assert "Missing" not in registry
        assert registry.get("NumberRange").input_type == "int"
        assert registry.get("Missing") is None

    def test_create(self, registry):
        check = registry.create("NumberRange", min=1, max=3)
        assert isinstance(check, NumberRange)
        assert check.validate(2)

    def test_create_unknown(self, registry):
        with pytest.raises(KeyError, match="Missing"):
            registry.create("Missing")

    def test_duplicate_registration(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.register("Range", Range)
