"""Configuration management for validgen using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".validgen.json"

# Rust-flavoured and typing-module spellings mapped to runtime Python names
DEFAULT_TYPE_ALIASES: dict[str, str] = {
    "Option": "Optional",
    "Vec": "list",
    "VecDeque": "list",
    "List": "list",
    "HashSet": "set",
    "BTreeSet": "set",
    "Set": "set",
    "FrozenSet": "frozenset",
    "HashMap": "dict",
    "BTreeMap": "dict",
    "Dict": "dict",
    "String": "str",
    "char": "str",
    "i8": "int",
    "i16": "int",
    "i32": "int",
    "i64": "int",
    "i128": "int",
    "isize": "int",
    "u8": "int",
    "u16": "int",
    "u32": "int",
    "u64": "int",
    "u128": "int",
    "usize": "int",
    "f32": "float",
    "f64": "float",
}


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class OutputConfig(BaseModel):
    """Output configuration section."""
    dir: str = "."
    module_suffix: str = Field(alias="moduleSuffix", default="_validation")
    emit_records: bool = Field(alias="emitRecords", default=True)

    @field_validator("module_suffix")
    @classmethod
    def validate_module_suffix(cls, v):
        if v and not f"m{v}".isidentifier():
            raise ValueError(f"module_suffix must be identifier characters only, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class NamingConfig(BaseModel):
    """Names used for generated types."""
    error_suffix: str = Field(alias="errorSuffix", default="ValidationError")
    validator_suffix: str = Field(alias="validatorSuffix", default="Validator")
    element_infix: str = Field(alias="elementInfix", default="Element")
    mixin_suffix: str = Field(alias="mixinSuffix", default="Validation")

    @field_validator("error_suffix", "validator_suffix", "element_infix", "mixin_suffix")
    @classmethod
    def validate_identifier_part(cls, v):
        if not v.isidentifier():
            raise ValueError(f"naming parts must be valid identifiers, got: {v!r}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class TypesConfig(BaseModel):
    """Type-expression interpretation section."""
    optional: list[str] = Field(default_factory=lambda: ["Option", "Optional"])
    collections: list[str] = Field(default_factory=lambda: [
        "Vec", "VecDeque", "list", "List", "Sequence", "MutableSequence",
        "set", "Set", "HashSet", "BTreeSet", "frozenset", "FrozenSet",
    ])
    aliases: dict[str, str] = Field(default_factory=dict)

    def resolved_aliases(self) -> dict[str, str]:
        """Default alias table overlaid with user aliases."""
        return {**DEFAULT_TYPE_ALIASES, **self.aliases}

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class ValidgenConfig(BaseModel):
    """Complete validgen configuration model."""
    output: OutputConfig = Field(default_factory=OutputConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    types: TypesConfig = Field(default_factory=TypesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ValidgenConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .validgen.json

    Returns:
        ValidgenConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return ValidgenConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .validgen.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> ValidgenConfig:
    """Create default configuration."""
    return ValidgenConfig()
