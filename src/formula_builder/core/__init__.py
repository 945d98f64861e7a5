from .errors import (
    FormulaBuilderError,
    FormulaConfigError,
    FormulaParseError,
    MalformedTreeError,
    NestingDepthError,
)
from .reference_registry import ReferenceRegistry
from .settings import CompilerSettings, load_settings

__all__ = [
    "FormulaBuilderError",
    "FormulaConfigError",
    "FormulaParseError",
    "MalformedTreeError",
    "NestingDepthError",
    "ReferenceRegistry",
    "CompilerSettings",
    "load_settings",
]
