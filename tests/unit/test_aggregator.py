"""Unit tests for merging annotation occurrences."""

import pytest

from validgen.aggregator import aggregate, aggregate_struct_options
from validgen.errors import (
    AnnotationSyntaxError,
    DuplicateValidatorError,
    StructuralError,
    UnknownOptionError,
)


class TestFieldAggregation:
    """Test aggregate() on field occurrences."""

    def test_occurrences_are_unioned_in_order(self):
        """Test validators from several occurrences keep declaration order."""
        annotation = aggregate(["StringLength(min = 1)", "NonEmpty, each(Even)", "Pattern"], "name")
        assert [v.name for v in annotation.field_validators] == ["StringLength", "NonEmpty", "Pattern"]
        assert [v.name for v in annotation.element_validators] == ["Even"]
        assert annotation.has_validators
        assert not annotation.is_skip

    def test_no_occurrences_is_unannotated(self):
        """Test a field without annotations yields None."""
        assert aggregate([], "name") is None

    def test_duplicate_within_one_occurrence(self):
        """Test the same validator twice in one occurrence fails."""
        with pytest.raises(DuplicateValidatorError) as exc_info:
            aggregate(["NonEmpty, NonEmpty"], "title")
        assert exc_info.value.name == "NonEmpty"
        assert exc_info.value.field == "title"
        assert str(exc_info.value) == "duplicate validator `NonEmpty` on field `title`"

    def test_duplicate_across_occurrences(self):
        """Test duplicates are detected across occurrences, even with different arguments."""
        with pytest.raises(DuplicateValidatorError):
            aggregate(["Range(min = 1)", "Range(max = 3)"], "count")

    def test_duplicate_by_simple_name(self):
        """Test qualified paths with the same last segment collide."""
        with pytest.raises(DuplicateValidatorError):
            aggregate(["a::Len", "b.Len"], "items")

    def test_element_duplicate(self):
        """Test duplicates in the element slot are reported as such."""
        with pytest.raises(DuplicateValidatorError) as exc_info:
            aggregate(["each(Even)", "each(Even)"], "numbers")
        assert exc_info.value.element is True
        assert "duplicate element validator `Even`" in str(exc_info.value)

    def test_same_name_in_both_slots_is_allowed(self):
        """Test field and element slots have separate name sets."""
        annotation = aggregate(["Required, each(Required)"], "values")
        assert len(annotation.field_validators) == 1
        assert len(annotation.element_validators) == 1

    def test_skip_overrides_everything(self):
        """Test skip on any occurrence excludes the field."""
        annotation = aggregate(["StringLength(min = 1)", "skip"], "name")
        assert annotation.is_skip
        assert annotation.field_validators == []
        assert annotation.element_validators == []

    def test_nested(self):
        annotation = aggregate(["nested"], "address")
        assert annotation.is_nested
        assert annotation.delegates
        assert not annotation.has_validators

    def test_newtype(self):
        annotation = aggregate(["newtype"], "email")
        assert annotation.is_newtype
        assert annotation.delegates

    def test_nested_with_validators(self):
        """Test a delegating field cannot carry its own validators."""
        with pytest.raises(StructuralError, match="nested"):
            aggregate(["nested", "NonEmpty"], "address")

    def test_nested_and_newtype(self):
        with pytest.raises(StructuralError):
            aggregate(["nested", "newtype"], "address")

    def test_syntax_errors_propagate(self):
        with pytest.raises(AnnotationSyntaxError):
            aggregate(["Range<_>"], "count")


class TestStructOptionAggregation:
    """Test aggregate_struct_options()."""

    def test_defaults(self):
        annotation = aggregate_struct_options([])
        assert not annotation.generates_validating_constructor
        assert not annotation.is_newtype_wrapper

    def test_options_across_occurrences(self):
        annotation = aggregate_struct_options(["try_new", "newtype"])
        assert annotation.generates_validating_constructor
        assert annotation.is_newtype_wrapper

    def test_unknown_option(self):
        with pytest.raises(UnknownOptionError, match="`frozen`"):
            aggregate_struct_options(["frozen"])
