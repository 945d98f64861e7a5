"""Spreadsheet Formula Builder.

Translates between spreadsheet formula text and the expression trees edited
in the structural formula builder, and derives the metadata stored with each
saved formula.
"""

from formula_builder.core.errors import (
    FormulaBuilderError,
    FormulaConfigError,
    FormulaParseError,
    MalformedTreeError,
    NestingDepthError,
)
from formula_builder.core.formula_analyzer import (
    collect_cell_references,
    complexity_score,
    has_conditional,
    has_lookup,
)
from formula_builder.core.formula_engine import (
    FormulaEngine,
    generate_formula,
    parse_formula,
)
from formula_builder.core.reference_registry import ReferenceRegistry
from formula_builder.core.settings import CompilerSettings, load_settings
from formula_builder.converters.formula_generator import FormulaGenerator
from formula_builder.converters.formula_parser import FormulaParser
from formula_builder.converters.tree_codec import dump_tree, load_tree
from formula_builder.models.ast_schema import (
    CellReference,
    ConditionalNode,
    FormulaNode,
    FunctionCall,
    NumberLiteral,
    OperatorNode,
    TextLiteral,
)
from formula_builder.models.formula_record import (
    FormulaImportResult,
    FormulaMetadata,
    FormulaRecord,
)

# Version
__version__ = "0.1.0"

# Public API
__all__ = [
    # Engine and components
    "FormulaEngine",
    "FormulaParser",
    "FormulaGenerator",
    "ReferenceRegistry",
    "CompilerSettings",
    "load_settings",
    # Functions
    "parse_formula",
    "generate_formula",
    "complexity_score",
    "collect_cell_references",
    "has_conditional",
    "has_lookup",
    "load_tree",
    "dump_tree",
    # Tree nodes
    "FormulaNode",
    "CellReference",
    "NumberLiteral",
    "TextLiteral",
    "OperatorNode",
    "ConditionalNode",
    "FunctionCall",
    # Records
    "FormulaMetadata",
    "FormulaRecord",
    "FormulaImportResult",
    # Errors
    "FormulaBuilderError",
    "FormulaParseError",
    "MalformedTreeError",
    "NestingDepthError",
    "FormulaConfigError",
    # Version
    "__version__",
]
