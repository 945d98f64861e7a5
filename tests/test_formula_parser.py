#!/usr/bin/env python3
"""
Tests for parsing spreadsheet formula text into expression trees.

Covers the rule order, the flat operator chain, IF / LOOKUP calls and the
fallback behaviour for text that does not parse.
"""

import pytest

from formula_builder.converters.formula_parser import FormulaParser
from formula_builder.core.errors import FormulaParseError, NestingDepthError
from formula_builder.core.reference_registry import ReferenceRegistry
from formula_builder.core.settings import CompilerSettings
from formula_builder.models.ast_schema import (
    CellReference,
    ConditionalNode,
    FunctionCall,
    NumberLiteral,
    OperatorNode,
    TextLiteral,
)


def ref(name):
    return CellReference(name=name)


def num(value):
    return NumberLiteral(value=value)


def text(value):
    return TextLiteral(value=value)


class TestFormulaParser:
    """Test class for formula text parsing."""

    @pytest.fixture
    def settings(self):
        """Settings with a small set of known reference names."""
        return CompilerSettings(known_references=["A1", "[15401]", "net-pay"])

    @pytest.fixture
    def parser(self, settings):
        """Create a formula parser instance."""
        return FormulaParser(settings)

    # ============================================================================
    # OPERATOR CHAINS
    # ============================================================================

    def test_flat_operator_chain(self, parser):
        """Arithmetic has no precedence: one node, operators in order."""
        expected = OperatorNode(
            operands=[ref("A1"), ref("B1"), num(2)], operators=["+", "*"]
        )

        assert parser.parse("A1+B1*2") == expected
        assert parser.parse("=A1+B1*2") == expected
        assert parser.parse("  = A1 + B1 * 2 ") == expected

    def test_bracketed_operands(self, parser):
        result = parser.parse("[99999]*2.5+[12345]")

        assert result == OperatorNode(
            operands=[ref("[99999]"), num(2.5), ref("[12345]")],
            operators=["*", "+"],
        )

    def test_parenthesised_group(self, parser):
        result = parser.parse("(A1+B1)*C1")

        assert result == OperatorNode(
            operands=[
                OperatorNode(operands=[ref("A1"), ref("B1")], operators=["+"]),
                ref("C1"),
            ],
            operators=["*"],
        )

    def test_redundant_parentheses(self, parser):
        assert parser.parse("((A1))") == ref("A1")
        assert parser.parse("(A1+B1)") == OperatorNode(
            operands=[ref("A1"), ref("B1")], operators=["+"]
        )

    def test_signed_operands(self, parser):
        assert parser.parse("-5+3") == OperatorNode(
            operands=[num(-5), num(3)], operators=["+"]
        )
        assert parser.parse("2*-3") == OperatorNode(
            operands=[num(2), num(-3)], operators=["*"]
        )

    def test_trailing_operator_dropped(self, parser):
        assert parser.parse("A1+") == ref("A1")
        assert parser.parse("A1+B1-") == OperatorNode(
            operands=[ref("A1"), ref("B1")], operators=["+"]
        )

    def test_text_operands(self, parser):
        assert parser.parse('"a"+"b"') == OperatorNode(
            operands=[text("a"), text("b")], operators=["+"]
        )

    # ============================================================================
    # CONDITIONALS
    # ============================================================================

    def test_if_call(self, parser):
        result = parser.parse('IF(A1>10,"High","Low")')

        assert result == ConditionalNode.build(
            ">", ref("A1"), num(10), text("High"), text("Low")
        )

    def test_if_is_case_insensitive(self, parser):
        result = parser.parse("if (A1>1, 2, 3)")

        assert isinstance(result, ConditionalNode)
        assert result.when_true == num(2)
        assert result.when_false == num(3)

    @pytest.mark.parametrize(
        ("formula", "comparator"),
        [
            ("IF(A1<>B1,1,0)", "<>"),
            ("IF(A1>=B1,1,0)", ">="),
            ("IF(A1<=B1,1,0)", "<="),
            ("IF(A1>B1,1,0)", ">"),
            ("IF(A1<B1,1,0)", "<"),
            ("IF(A1=B1,1,0)", "="),
            ("IF(A1==B1,1,0)", "="),
        ],
    )
    def test_comparators(self, parser, formula, comparator):
        """Two-character comparators are never split into their prefixes."""
        result = parser.parse(formula)

        assert isinstance(result, ConditionalNode), f"Failed for {formula}"
        assert result.comparator == comparator, f"Failed for {formula}"
        assert result.left == ref("A1")
        assert result.right == ref("B1")

    def test_equality_symbol_setting(self):
        parser = FormulaParser(CompilerSettings(equality_symbol="=="))

        assert parser.parse("IF(A1=1,2,3)").comparator == "=="
        assert parser.parse("IF(A1==1,2,3)").comparator == "=="

    def test_condition_without_comparator(self, parser):
        """A bare condition is compared for equality against zero."""
        result = parser.parse("IF(A1,1,0)")

        assert result.comparator == "="
        assert result.left == ref("A1")
        assert result.right == num(0)

    def test_condition_with_arithmetic(self, parser):
        result = parser.parse("IF(A1+B1>10,1,0)")

        assert result.left == OperatorNode(
            operands=[ref("A1"), ref("B1")], operators=["+"]
        )

    def test_comparator_inside_quotes_ignored(self, parser):
        result = parser.parse('IF(A1="a>b",1,0)')

        assert result.comparator == "="
        assert result.right == text("a>b")

    def test_nested_if(self, parser):
        result = parser.parse('IF(A1>1,IF(B1<2,"x","y"),0)')

        assert result.when_true == ConditionalNode.build(
            "<", ref("B1"), num(2), text("x"), text("y")
        )
        assert result.when_false == num(0)

    def test_extra_if_arguments_ignored(self, parser):
        result = parser.parse("IF(A1>1,2,3,4)")

        assert result == ConditionalNode.build(">", ref("A1"), num(1), num(2), num(3))

    def test_text_after_call_ignored(self, parser):
        result = parser.parse("IF(A1>1,2,3)+3")

        assert isinstance(result, ConditionalNode)
        assert result.when_false == num(3)

    # ============================================================================
    # LOOKUP
    # ============================================================================

    def test_lookup_call(self, parser):
        result = parser.parse("LOOKUP(A1,B:B,C:C)")

        assert result == FunctionCall(
            name="lookup", args=[ref("A1"), ref("B:B"), ref("C:C")]
        )

    def test_lookup_is_case_insensitive(self, parser):
        result = parser.parse("lookup([15401], A1, B1)")

        assert isinstance(result, FunctionCall)
        assert result.is_lookup
        assert result.args[0] == ref("[15401]")

    def test_lookup_with_nested_operator(self, parser):
        result = parser.parse("LOOKUP(A1+1,B1,C1)")

        assert result.args[0] == OperatorNode(
            operands=[ref("A1"), num(1)], operators=["+"]
        )

    def test_lookup_inside_operator(self, parser):
        result = parser.parse("A1+LOOKUP(B1,C1,D1)")

        assert isinstance(result, OperatorNode)
        assert isinstance(result.operands[1], FunctionCall)

    # ============================================================================
    # LEAF TOKENS
    # ============================================================================

    def test_leaf_tokens(self, parser):
        """Test single-token formulas resolve by rule order."""
        test_cases = [
            ('"hello"', text("hello")),
            ("'hi'", text("hi")),
            ('""', text("")),
            ("[15401]", ref("[15401]")),
            ("[abc]", ref("[abc]")),
            ("42", num(42)),
            ("2.5", num(2.5)),
            ("-3", num(-3)),
            (".5", num(0.5)),
            ("1e3", num(1000)),
            ("A1", ref("A1")),
            ("a1", ref("a1")),
            ("OT1.1", ref("OT1.1")),
            ("STRUC_HRS", ref("STRUC_HRS")),
            ("B:B", ref("B:B")),
            ("\u0663", ref("\u0663")),
            ("\uff11\uff12", ref("\uff11\uff12")),
        ]

        for formula, expected in test_cases:
            result = parser.parse(formula)
            assert result == expected, f"Failed for {formula}: got {result!r}"

    def test_known_reference_wins_over_operator(self, parser):
        assert parser.parse("net-pay") == ref("net-pay")

    def test_unknown_name_with_operator_splits(self):
        parser = FormulaParser(CompilerSettings())

        assert parser.parse("net-pay") == OperatorNode(
            operands=[ref("net"), ref("pay")], operators=["-"]
        )

    def test_registry_shared_with_caller(self):
        registry = ReferenceRegistry()
        parser = FormulaParser(CompilerSettings(), registry)

        registry.add("gross-pay")

        assert parser.parse("gross-pay") == ref("gross-pay")

    # ============================================================================
    # FALLBACKS
    # ============================================================================

    @pytest.mark.parametrize(
        ("formula", "expected"),
        [
            ("", text("")),
            ("=", text("")),
            ("IF(", text("IF(")),
            ("IF(A1>1,2)", text("IF(A1>1,2)")),
            ("LOOKUP(A1", text("LOOKUP(A1")),
            ("+", text("+")),
            ("-A1", text("-A1")),
            ("((((", ref("((((")),
        ],
    )
    def test_parse_never_raises(self, parser, formula, expected):
        assert parser.parse(formula) == expected

    def test_unterminated_call_with_inner_operator(self, parser):
        """Operators inside an unclosed call are not top-level."""
        assert parser.parse("IF(A1+B1") == text("IF(A1+B1")

    def test_deep_nesting_kept_as_text(self, parser):
        formula = "(" * 100 + "A1" + ")" * 100

        assert parser.parse(formula) == text(formula)

    def test_nesting_limit_is_configurable(self):
        parser = FormulaParser(CompilerSettings(max_nesting_depth=200))
        formula = "(" * 100 + "A1" + ")" * 100

        assert parser.parse(formula) == ref("A1")

    def test_parse_strict_raises(self, parser):
        with pytest.raises(FormulaParseError, match="IF requires 3 arguments"):
            parser.parse_strict("IF(A1>1,2)")

        with pytest.raises(FormulaParseError, match="Unterminated call"):
            parser.parse_strict("LOOKUP(A1")

        with pytest.raises(NestingDepthError):
            parser.parse_strict("(" * 100 + "A1" + ")" * 100)

    def test_parse_strict_success(self, parser):
        assert parser.parse_strict("=A1") == ref("A1")
