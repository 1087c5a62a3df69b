"""Unit tests for descriptor loading and record building."""

import json

import pytest

from validgen.descriptor import (
    FieldSpec,
    ImportSpec,
    RecordKind,
    RecordSpec,
    build_record,
    build_records,
    load_descriptor,
    load_descriptor_data,
)
from validgen.errors import AnnotationSyntaxError, DuplicateValidatorError, UnknownOptionError
from validgen.types import NamedType

YAML_DESCRIPTOR = """\
module: shop.models
imports:
  - module: rules
    names: [StringLength, NumberRange]
records:
  - name: Product
    options: try_new
    fields:
      - name: title
        type: String
        rules: "StringLength(min = 1)"
      - name: price
        type: f64
        rules:
          - NumberRange(min = 0)
      - name: notes
        type: Option<String>
"""


class TestLoadDescriptor:
    """Test load_descriptor() on files."""

    def test_load_yaml(self, tmp_path):
        """Test a YAML descriptor with string-or-list rules."""
        path = tmp_path / "shop.yaml"
        path.write_text(YAML_DESCRIPTOR)

        spec = load_descriptor(path)
        assert spec.module == "shop.models"
        assert spec.imports[0].render() == "from rules import StringLength, NumberRange"

        product = spec.records[0]
        assert product.kind == RecordKind.STRUCT
        assert product.options == ["try_new"]
        assert product.fields[0].rules == ["StringLength(min = 1)"]
        assert product.fields[1].rules == ["NumberRange(min = 0)"]
        assert product.fields[2].rules == []

    def test_load_json(self, tmp_path):
        """Test a JSON descriptor."""
        path = tmp_path / "users.json"
        path.write_text(json.dumps({
            "module": "users",
            "records": [{"name": "User", "fields": [{"name": "age", "type": "i32", "rules": ["Even"]}]}],
        }))

        spec = load_descriptor(path)
        assert spec.records[0].fields[0].type == "i32"

    def test_module_defaults_to_file_stem(self, tmp_path):
        """Test a missing module name comes from the file name."""
        path = tmp_path / "billing-accounts.yml"
        path.write_text("records: []\n")

        assert load_descriptor(path).module == "billing_accounts"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            load_descriptor(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("records: [\n")

        with pytest.raises(ValueError, match="Invalid descriptor syntax"):
            load_descriptor(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")

        with pytest.raises(ValueError, match="Invalid descriptor syntax"):
            load_descriptor(path)


class TestLoadDescriptorData:
    """Test validation of parsed descriptor data."""

    def test_empty_document(self):
        """Test an empty document is an empty module."""
        assert load_descriptor_data(None).records == []

    def test_non_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            load_descriptor_data(["not", "a", "mapping"])

    def test_invalid_record_name(self):
        with pytest.raises(ValueError, match="Invalid descriptor"):
            load_descriptor_data({"records": [{"name": "not a name"}]})

    def test_invalid_module_name(self):
        with pytest.raises(ValueError, match="Invalid descriptor"):
            load_descriptor_data({"module": "my-module"})

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            load_descriptor_data({"records": [{"name": "Point", "kind": "class"}]})

    def test_plain_import(self):
        assert ImportSpec(module="decimal").render() == "import decimal"


class TestBuildRecord:
    """Test build_record() and build_records()."""

    def test_types_and_annotations(self):
        """Test declared types are parsed and rules aggregated."""
        record = build_record(RecordSpec(
            name="Order",
            options=["try_new"],
            fields=[
                FieldSpec(name="lines", type="Vec<String>", rules=["Len::<Vec<_>>(max = 3)", "each(NonEmpty)"]),
                FieldSpec(name="comment", type="Option<String>"),
                FieldSpec(name="cache", type="String", rules=["skip"]),
            ],
        ))

        assert record.struct_annotation.generates_validating_constructor
        lines, comment, cache = record.fields
        assert lines.declared_type == NamedType("Vec", (NamedType("String"),))
        assert lines.type_text == "Vec<String>"
        assert [v.name for v in lines.annotation.element_validators] == ["NonEmpty"]
        assert comment.annotation is None
        assert cache.annotation.is_skip
        assert record.annotated_fields == [lines]

    def test_field_error_location(self):
        """Test field failures are reported at Record.field."""
        spec = RecordSpec(name="Order", fields=[FieldSpec(name="total", type="i32", rules=["Range<_>"])])

        with pytest.raises(AnnotationSyntaxError) as exc_info:
            build_record(spec)
        assert exc_info.value.location == "Order.total"
        assert str(exc_info.value).startswith("Order.total: ")

    def test_unnamed_field_location_uses_index(self):
        """Test positional fields are located by index."""
        spec = RecordSpec(name="Pair", fields=[
            FieldSpec(type="i32"),
            FieldSpec(type="i32", rules=["Even", "Even"]),
        ])

        with pytest.raises(DuplicateValidatorError) as exc_info:
            build_record(spec)
        assert exc_info.value.location == "Pair.1"

    def test_option_error_location(self):
        """Test struct option failures are reported at the record."""
        with pytest.raises(UnknownOptionError) as exc_info:
            build_record(RecordSpec(name="Order", options=["frozen"]))
        assert exc_info.value.location == "Order"

    def test_build_records_keeps_order(self):
        spec = load_descriptor_data({"records": [{"name": "B"}, {"name": "A"}]})
        assert [r.name for r in build_records(spec)] == ["B", "A"]
