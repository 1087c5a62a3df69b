"""Load descriptor files (YAML or JSON) into ModuleSpec models."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import ModuleSpec, RecordDescriptor, build_record

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_descriptor(path: str | Path) -> ModuleSpec:
    """Load and validate a descriptor file.

    Args:
        path: Path to a `.yaml`, `.yml` or `.json` descriptor

    Returns:
        ModuleSpec with `module` defaulted to the file stem

    Raises:
        ValueError: If the file is missing, unparseable or does not match the
            descriptor layout
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Descriptor file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid descriptor syntax in {path}: {e}")

    spec = load_descriptor_data(data, source=str(path))
    if spec.module is None:
        spec.module = path.stem.replace("-", "_")
    logger.debug("Loaded descriptor %s with %d record(s)", path, len(spec.records))
    return spec


def load_descriptor_data(data: Any, source: str = "<data>") -> ModuleSpec:
    """Validate already-parsed descriptor data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Descriptor {source} must be a mapping, got {type(data).__name__}")
    try:
        return ModuleSpec(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid descriptor {source}: {e}")


def build_records(spec: ModuleSpec) -> list[RecordDescriptor]:
    """Build every record of a module in declaration order.

    Raises:
        GenerationError: On the first annotation that fails to parse or merge
    """
    return [build_record(record) for record in spec.records]
