"""validgen - build-time validation-rule compiler.

validgen reads record descriptors whose fields carry a compact annotation
language, and generates Python error types, failure enumerations and
`validate` methods so record authors never write validation control flow.
"""

__version__ = "0.1.0"
__author__ = "validgen contributors"
__description__ = "Build-time validation-rule compiler for annotated records"

from validgen.config import ValidgenConfig
from validgen.errors import (
    AnnotationSyntaxError,
    DuplicateValidatorError,
    GenerationError,
    StructuralError,
    UnknownOptionError,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "ValidgenConfig",
    "GenerationError",
    "AnnotationSyntaxError",
    "DuplicateValidatorError",
    "StructuralError",
    "UnknownOptionError",
]
