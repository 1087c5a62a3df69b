"""Unit tests for the validgen CLI."""

import json

import pytest
from typer.testing import CliRunner

from validgen import __version__
from validgen.cli import app, output_path_for
from validgen.config import OutputConfig, ValidgenConfig

USERS_YAML = """\
module: users
imports:
  - module: sample_validators
    names: [NumberRange, StringLength]
records:
  - name: User
    options: try_new
    fields:
      - name: name
        type: String
        rules: "StringLength(min = 1, max = 50)"
      - name: age
        type: i32
        rules: "NumberRange(min = 0, max = 150)"
      - name: tags
        type: Vec<String>
        rules: "each(StringLength(min = 1))"
      - name: cache
        type: String
        rules: skip
      - name: note
        type: Option<String>
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary working directory holding users.yaml and no config file."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "users.yaml").write_text(USERS_YAML)
    return tmp_path


class TestVersion:
    """Test --version."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"validgen version {__version__}" in result.stdout


class TestParseCommand:
    """Test the parse command."""

    def test_table(self, runner):
        result = runner.invoke(app, ["parse", "StringLength(min = 1)"])
        assert result.exit_code == 0
        assert "Validators (1 found)" in result.stdout
        assert "StringLength" in result.stdout

    def test_json_with_resolved_types(self, runner):
        result = runner.invoke(app, [
            "parse", "Range::<_>(min = 0), each(Even)",
            "--type", "Option<Vec<i32>>",
            "--format", "json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["modifier"] is None
        field_row, element_row = data["validators"]
        assert field_row == {
            "level": "field",
            "name": "Range",
            "path": "Range",
            "typeMode": "infer_full",
            "arguments": {"min": "0"},
            "resolvedType": "Vec<i32>",
        }
        assert element_row["level"] == "element"
        assert element_row["resolvedType"] is None

    def test_modifier(self, runner):
        result = runner.invoke(app, ["parse", "nested"])
        assert result.exit_code == 0
        assert "Modifier: nested" in result.stdout

    def test_struct_options(self, runner):
        result = runner.invoke(app, ["parse", "try_new, newtype", "--struct", "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"options": ["try_new", "newtype"]}

    def test_unknown_struct_option(self, runner):
        result = runner.invoke(app, ["parse", "frozen", "--struct"])
        assert result.exit_code == 1
        assert "frozen" in result.stdout

    def test_syntax_error_shows_hint(self, runner):
        result = runner.invoke(app, ["parse", "Range<_>"])
        assert result.exit_code == 1
        assert "Error:" in result.stdout
        assert "turbofish" in result.stdout

    def test_invalid_format(self, runner):
        result = runner.invoke(app, ["parse", "Even", "--format", "xml"])
        assert result.exit_code == 1
        assert "Invalid format 'xml'" in result.stdout


class TestGenerateCommand:
    """Test the generate command."""

    def test_writes_module(self, runner, workspace):
        result = runner.invoke(app, ["generate", "users.yaml"])
        assert result.exit_code == 0
        assert "Generated" in result.stdout

        source = (workspace / "users_validation.py").read_text()
        assert source.startswith("# Generated by validgen from users.yaml. Do not edit.")
        assert "class UserValidationError(ValidationError):" in source

    def test_out_directory(self, runner, workspace):
        result = runner.invoke(app, ["generate", "users.yaml", "--out", "gen"])
        assert result.exit_code == 0
        assert (workspace / "gen" / "users_validation.py").exists()

    def test_config_file(self, runner, workspace):
        (workspace / ".validgen.json").write_text(json.dumps({
            "output": {"dir": "build", "moduleSuffix": "_checks"},
        }))
        result = runner.invoke(app, ["generate", "users.yaml"])
        assert result.exit_code == 0
        assert (workspace / "build" / "users_checks.py").exists()

    def test_invalid_config_file(self, runner, workspace):
        (workspace / "bad.json").write_text("{")
        result = runner.invoke(app, ["generate", "users.yaml", "--config", "bad.json"])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout

    def test_stdout(self, runner, workspace):
        result = runner.invoke(app, ["generate", "users.yaml", "--stdout"])
        assert result.exit_code == 0
        assert "class UserTagsElementValidationError(ValidationError):" in result.stdout
        assert not (workspace / "users_validation.py").exists()

    def test_check_missing(self, runner, workspace):
        result = runner.invoke(app, ["generate", "users.yaml", "--check"])
        assert result.exit_code == 1
        assert "is missing" in result.stdout

    def test_check_up_to_date_then_drift(self, runner, workspace):
        assert runner.invoke(app, ["generate", "users.yaml"]).exit_code == 0

        result = runner.invoke(app, ["generate", "users.yaml", "--check"])
        assert result.exit_code == 0
        assert "up to date" in result.stdout

        target = workspace / "users_validation.py"
        target.write_text(target.read_text() + "# edited\n")
        result = runner.invoke(app, ["generate", "users.yaml", "--check"])
        assert result.exit_code == 1
        assert "out of date" in result.stdout

    def test_missing_descriptor(self, runner, workspace):
        result = runner.invoke(app, ["generate", "nope.yaml"])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_generation_error(self, runner, workspace):
        (workspace / "bad.yaml").write_text(
            "records:\n  - name: Bad\n    fields:\n      - {name: x, type: i32, rules: 'Range<_>'}\n"
        )
        result = runner.invoke(app, ["generate", "bad.yaml"])
        assert result.exit_code == 1
        assert "Bad.x" in result.stdout
        assert not (workspace / "bad_validation.py").exists()

    def test_output_path_for(self, tmp_path):
        config = ValidgenConfig(output=OutputConfig(dir="out"))
        assert output_path_for("shop.models", config).as_posix() == "out/models_validation.py"
        assert output_path_for("shop.models", config, tmp_path) == tmp_path / "models_validation.py"


class TestInspectCommand:
    """Test the inspect command."""

    def test_json(self, runner, workspace):
        result = runner.invoke(app, ["inspect", "users.yaml", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 1

        user = data["records"][0]
        assert user["name"] == "User"
        assert user["tryNew"] is True
        assert user["newtype"] is False

        fields = {f["name"]: f for f in user["fields"]}
        assert fields["name"]["validators"] == ["StringLength(min = 1, max = 50)"]
        assert fields["tags"]["type"] == "Vec<String>"
        assert fields["tags"]["elementValidators"] == ["StringLength(min = 1)"]
        assert fields["cache"]["kind"] == "skip"
        assert fields["note"]["kind"] == "unannotated"

    def test_table(self, runner, workspace):
        result = runner.invoke(app, ["inspect", "users.yaml"])
        assert result.exit_code == 0
        assert "User (try_new)" in result.stdout


class TestValidatorsCommand:
    """Test the validators command."""

    def test_json(self, runner):
        result = runner.invoke(app, ["validators", "sample_validators", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 4
        assert data["validators"][0] == {
            "name": "StringLength",
            "description": "String length within bounds",
            "inputType": "str",
        }

    def test_table(self, runner):
        result = runner.invoke(app, ["validators", "sample_validators"])
        assert result.exit_code == 0
        assert "Validators (4 registered)" in result.stdout

    def test_module_without_register_function(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plain_rules_module.py").write_text("LIMIT = 3\n")
        result = runner.invoke(app, ["validators", "plain_rules_module"])
        assert result.exit_code == 1
        assert "does not define" in result.stdout

    def test_unimportable_module(self, runner):
        result = runner.invoke(app, ["validators", "no_such_validator_module"])
        assert result.exit_code == 1
        assert "Cannot import" in result.stdout
