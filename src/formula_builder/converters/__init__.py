from .formula_generator import FormulaGenerator
from .formula_parser import FormulaParser
from .tree_codec import dump_tree, dump_tree_json, load_tree, load_tree_json

__all__ = [
    "FormulaGenerator",
    "FormulaParser",
    "dump_tree",
    "dump_tree_json",
    "load_tree",
    "load_tree_json",
]
