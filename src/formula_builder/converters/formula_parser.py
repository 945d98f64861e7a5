"""
Formula Parser - Convert spreadsheet formula text to an expression tree.

Recursive descent over substrings: each expression is matched against an
ordered list of rules and the first match wins. The rules overlap (a
bracketed reference is also an identifier-ish token, ``IF(...)`` is also a
parenthesised call), so the order below is part of the grammar.

Arithmetic is a flat left-to-right chain: ``2+3*4`` becomes one operator
node with three operands, not a precedence tree.
"""

import logging
import math
import re
from typing import Optional, Tuple, Union

from ..core.errors import FormulaBuilderError, FormulaParseError, NestingDepthError
from ..core.reference_registry import ReferenceRegistry
from ..core.scanner import (
    QUOTE_CHARS,
    contains_top_level_operator,
    extract_call_content,
    find_top_level,
    is_wrapped,
    split_operator_chain,
    split_top_level,
)
from ..core.settings import CompilerSettings, load_settings
from ..models.ast_schema import (
    COMPARATORS,
    EQUALITY_SYMBOLS,
    LOOKUP_FUNCTION,
    CellReference,
    ConditionalNode,
    FormulaNode,
    FunctionCall,
    NumberLiteral,
    OperatorNode,
    TextLiteral,
)

logger = logging.getLogger(__name__)

IF_CALL_PATTERN = re.compile(r"if\s*\(", re.IGNORECASE)
LOOKUP_CALL_PREFIX = "LOOKUP("
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
CELL_REF_PATTERN = re.compile(r"[A-Z]+[0-9]+", re.IGNORECASE)
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_.]+")


def _parse_number(text: str) -> Optional[Union[int, float]]:
    """Return the numeric value of ``text`` or None if it is not a finite number."""
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


class FormulaParser:
    """Rule-ordered recursive descent parser for formula text."""

    def __init__(
        self,
        settings: Optional[CompilerSettings] = None,
        registry: Optional[ReferenceRegistry] = None,
    ):
        """
        Args:
            settings: Compiler settings (packaged defaults if None)
            registry: Known reference names; built from the settings if None
        """
        self.settings = settings or load_settings()
        if registry is None:
            registry = ReferenceRegistry(self.settings.known_references)
        self.registry = registry

    def parse(self, formula: str) -> FormulaNode:
        """Parse formula text into a tree. Never raises.

        When the rule pipeline fails the text is retried as a bare operator
        chain, and failing that it is kept as a text literal.
        """
        text = self._strip_formula(formula)
        logger.debug(f"Parsing formula: {text}")

        try:
            return self._parse_expression(text, 0)
        except NestingDepthError as e:
            logger.warning(f"Formula nests too deeply, keeping it as text: {e}")
            return TextLiteral(value=text)
        except FormulaBuilderError as e:
            logger.warning(f"Failed to parse formula '{text}': {e}")

        if contains_top_level_operator(text):
            logger.debug(f"Retrying as operator expression: {text}")
            try:
                return self._parse_operator_expression(text, 0)
            except FormulaBuilderError as e:
                logger.warning(f"Operator parsing also failed for '{text}': {e}")

        return TextLiteral(value=text)

    def parse_strict(self, formula: str) -> FormulaNode:
        """Parse formula text, raising instead of falling back.

        Raises:
            FormulaParseError: Unterminated call or missing IF arguments
            MalformedTreeError: A rule produced an invalid node
            NestingDepthError: The formula nests beyond the configured limit
        """
        return self._parse_expression(self._strip_formula(formula), 0)

    @staticmethod
    def _strip_formula(formula: str) -> str:
        text = formula.strip()
        if text.startswith("="):
            text = text[1:]
        return text

    def _parse_expression(self, text: str, depth: int) -> FormulaNode:
        """Match ``text`` against the expression rules in priority order."""
        # Depth 0 is the root node, so the deepest tree built here has
        # max_nesting_depth levels
        if depth >= self.settings.max_nesting_depth:
            raise NestingDepthError(depth + 1, self.settings.max_nesting_depth)

        expr = text.strip()

        if IF_CALL_PATTERN.match(expr):
            logger.debug(f"Detected IF call: {expr}")
            return self._parse_conditional(expr, depth)

        if expr.upper().startswith(LOOKUP_CALL_PREFIX):
            logger.debug(f"Detected LOOKUP call: {expr}")
            return self._parse_lookup(expr, depth)

        for quote in QUOTE_CHARS:
            if is_wrapped(expr, quote, quote):
                return TextLiteral(value=expr[1:-1])

        # Brackets are kept, the content is not validated as numeric
        if is_wrapped(expr, "[", "]"):
            return CellReference(name=expr)

        number = _parse_number(expr)
        if number is not None:
            return NumberLiteral(value=number)

        if expr in self.registry:
            logger.debug(f"Detected known reference: {expr}")
            return CellReference(name=expr)

        if CELL_REF_PATTERN.fullmatch(expr):
            logger.debug(f"Detected cell reference: {expr}")
            return CellReference(name=expr)

        if IDENTIFIER_PATTERN.fullmatch(expr):
            logger.debug(f"Detected identifier as cell reference: {expr}")
            return CellReference(name=expr)

        if contains_top_level_operator(expr):
            return self._parse_operator_expression(expr, depth)

        # Grouping only applies when no top-level operator was found
        if is_wrapped(expr, "(", ")"):
            return self._parse_expression(expr[1:-1], depth + 1)

        logger.debug(f"Defaulting to cell reference: {expr}")
        return CellReference(name=expr)

    def _parse_operator_expression(self, text: str, depth: int) -> FormulaNode:
        """Split at top-level arithmetic operators into a flat chain."""
        segments, symbols = split_operator_chain(text)

        if len(segments) < 2:
            if not segments or segments[0] == text.strip():
                raise FormulaParseError(f"No operands around operator in '{text}'")
            return self._parse_expression(segments[0], depth + 1)

        # A trailing operator has no right operand and is dropped
        symbols = symbols[: len(segments) - 1]
        operands = [self._parse_expression(segment, depth + 1) for segment in segments]
        return OperatorNode(operands=operands, operators=symbols)

    def _parse_conditional(self, expr: str, depth: int) -> ConditionalNode:
        """Parse ``IF(condition, when_true, when_false)``; extra arguments are ignored."""
        match = IF_CALL_PATTERN.match(expr)
        content, _ = extract_call_content(expr, match.end() - 1)
        args = split_top_level(content)

        if len(args) < 3:
            raise FormulaParseError(f"IF requires 3 arguments, got {len(args)}")

        comparator, left, right = self._parse_condition(args[0], depth + 1)
        return ConditionalNode.build(
            comparator,
            left,
            right,
            self._parse_expression(args[1], depth + 1),
            self._parse_expression(args[2], depth + 1),
        )

    def _parse_condition(
        self, text: str, depth: int
    ) -> Tuple[str, FormulaNode, FormulaNode]:
        """Split a comparison at the first comparator candidate that occurs.

        Candidates are tried longest first; without any comparator the whole
        text is compared for equality against zero.
        """
        for symbol in COMPARATORS:
            index = find_top_level(text, symbol)
            if index == -1:
                continue

            left = text[:index].strip()
            right = text[index + len(symbol) :].strip()
            return (
                self._canonical_comparator(symbol),
                self._parse_expression(left, depth + 1),
                self._parse_expression(right, depth + 1),
            )

        return (
            self.settings.equality_symbol,
            self._parse_expression(text, depth + 1),
            NumberLiteral(value=0),
        )

    def _canonical_comparator(self, symbol: str) -> str:
        if symbol in EQUALITY_SYMBOLS:
            return self.settings.equality_symbol
        return symbol

    def _parse_lookup(self, expr: str, depth: int) -> FunctionCall:
        """Parse ``LOOKUP(value, lookup_array, result_array)``."""
        content, _ = extract_call_content(expr, len(LOOKUP_CALL_PREFIX) - 1)
        args = split_top_level(content)
        return FunctionCall(
            name=LOOKUP_FUNCTION,
            args=[self._parse_expression(arg, depth + 1) for arg in args],
        )


__all__ = ["FormulaParser"]
