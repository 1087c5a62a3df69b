"""Shared fixtures for validgen tests."""

import importlib
import itertools
import sys

import pytest

from validgen.codegen import CodeGenerator
from validgen.config import ValidgenConfig
from validgen.descriptor import load_descriptor_data

_module_counter = itertools.count()

SAMPLE_IMPORTS = [
    {
        "module": "sample_validators",
        "names": ["Even", "Len", "NumberRange", "Range", "Required", "StringLength"],
    }
]


@pytest.fixture
def generate_module(tmp_path, monkeypatch):
    """Generate a module from descriptor data, write it to tmp_path and import it."""
    monkeypatch.syspath_prepend(str(tmp_path))
    imported = []

    def _generate(records, config: ValidgenConfig | None = None, imports=None):
        name = f"generated_{next(_module_counter)}"
        spec = load_descriptor_data({
            "module": name,
            "imports": SAMPLE_IMPORTS if imports is None else imports,
            "records": records,
        })
        generated = CodeGenerator(config).generate_module(spec)
        (tmp_path / f"{name}.py").write_text(generated.source, encoding="utf-8")
        importlib.invalidate_caches()
        module = importlib.import_module(name)
        imported.append(name)
        return module

    yield _generate

    for name in imported:
        sys.modules.pop(name, None)


@pytest.fixture
def user_record():
    """Descriptor data for the canonical name/age record."""
    return {
        "name": "User",
        "fields": [
            {"name": "name", "type": "String", "rules": ["StringLength(min = 1, max = 50)"]},
            {"name": "age", "type": "i32", "rules": ["NumberRange(min = 0, max = 120)"]},
        ],
    }
