"""Tests for the equation parser."""

import pytest

from smile import (
    BasicLit,
    BinaryExpr,
    CallExpr,
    Ident,
    IndexExpr,
    InternalError,
    Lexer,
    Op,
    ParenExpr,
    ParseError,
    Parser,
    ParserConfig,
    SourceFile,
    UnaryExpr,
    parse,
    unparse,
    walk,
)
from smile.parser import normalize


def lit(expr) -> str:
    assert isinstance(expr, BasicLit)
    return expr.value


class TestPrecedence:
    def test_multiplication_binds_tighter_than_addition(self):
        expr = parse("eq", "2+3*4")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == Op.ADD
        assert lit(expr.x) == "2"
        assert isinstance(expr.y, BinaryExpr)
        assert expr.y.op == Op.MUL
        assert (lit(expr.y.x), lit(expr.y.y)) == ("3", "4")

    def test_exponentiation_is_left_associative(self):
        expr = parse("eq", "2^3^2")
        assert expr.op == Op.POW
        assert isinstance(expr.x, BinaryExpr)
        assert expr.x.op == Op.POW
        assert (lit(expr.x.x), lit(expr.x.y)) == ("2", "3")
        assert lit(expr.y) == "2"

    def test_exponentiation_binds_tighter_than_multiplication(self):
        expr = parse("eq", "2*3^2")
        assert expr.op == Op.MUL
        assert expr.y.op == Op.POW

    def test_subtraction_is_left_associative(self):
        expr = parse("eq", "8-4-2")
        assert expr.op == Op.SUB
        assert isinstance(expr.x, BinaryExpr)
        assert lit(expr.y) == "2"

    def test_parentheses_override_precedence(self):
        expr = parse("eq", "(2+3)*4")
        assert expr.op == Op.MUL
        assert isinstance(expr.x, ParenExpr)
        assert expr.x.x.op == Op.ADD

    def test_custom_levels(self):
        """A single level folds every operator left to right."""
        parser = Parser("eq", "2+3*4", config=ParserConfig(levels=("+-*/^",)))
        expr = parser.parse()
        assert expr.op == Op.MUL
        assert expr.x.op == Op.ADD


class TestFactors:
    def test_number_literal_keeps_text(self):
        expr = parse("eq", "1.50e+3")
        assert isinstance(expr, BasicLit)
        assert expr.value == "1.50e+3"

    def test_identifier_keeps_raw_name(self):
        expr = parse("eq", "Birth_Rate")
        assert expr == Ident(name_pos=0, name="Birth_Rate")

    def test_call_with_arguments(self):
        expr = parse("eq", "MIN(a,b)+c")
        assert expr.op == Op.ADD
        call = expr.x
        assert isinstance(call, CallExpr)
        assert call.fun.name == "MIN"
        assert [arg.name for arg in call.args] == ["a", "b"]
        assert expr.y.name == "c"

    def test_call_without_arguments(self):
        expr = parse("eq", "TIME()")
        assert isinstance(expr, CallExpr)
        assert expr.args == []

    def test_call_arguments_are_full_expressions(self):
        expr = parse("eq", "MAX(a*2, (b+1)^2, f(c))")
        assert len(expr.args) == 3
        assert isinstance(expr.args[2], CallExpr)

    def test_implicit_multiplication(self):
        expr = parse("eq", "(a)(b)")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == Op.MUL
        assert expr.op_pos == 3
        assert isinstance(expr.x, ParenExpr)
        assert isinstance(expr.y, ParenExpr)

    def test_unary_minus(self):
        expr = parse("eq", "-x*2")
        assert expr.op == Op.MUL
        assert isinstance(expr.x, UnaryExpr)
        assert expr.x.op == Op.SUB
        assert expr.x.x.name == "x"

    def test_subscript(self):
        expr = parse("eq", "pop[age]*.08")
        index = expr.x
        assert isinstance(index, IndexExpr)
        assert index.x.name == "pop"
        assert index.index.name == "age"

    def test_multiline_equation(self):
        expr = parse("eq", "a +\n  b\n")
        assert expr.op == Op.ADD

    def test_explicit_terminator(self):
        assert parse("eq", "a;") == Ident(name_pos=0, name="a")


class TestErrors:
    def diagnostics(self, eqn: str):
        with pytest.raises(ParseError) as exc_info:
            parse("eq", eqn)
        return exc_info.value.diagnostics

    def test_unclosed_paren(self):
        diagnostics = self.diagnostics("a+(b")
        assert diagnostics
        assert diagnostics[0].message == "expected ')'"

    def test_empty_equation(self):
        diagnostics = self.diagnostics("")
        assert diagnostics[0].message.startswith("unexpected token")

    def test_trailing_tokens(self):
        diagnostics = self.diagnostics("a b")
        assert diagnostics[0].message.startswith("expected end-of-equation")
        assert diagnostics[0].offset == 2

    def test_second_statement(self):
        diagnostics = self.diagnostics("a\nb")
        assert diagnostics[0].message.startswith("expected end-of-equation")

    def test_unclosed_call(self):
        diagnostics = self.diagnostics("MIN(a,b")
        assert diagnostics[0].message.startswith("call: expected ',' or ')'")

    def test_missing_argument_reported_once(self):
        """Call errors at an already-reported offset are dropped."""
        diagnostics = self.diagnostics("MIN(a,")
        assert len(diagnostics) == 1
        assert diagnostics[0].message.startswith("unexpected token")

    def test_unclosed_subscript(self):
        diagnostics = self.diagnostics("a[1")
        assert diagnostics[0].message == "expected ']'"

    def test_string_is_not_an_operand(self):
        assert self.diagnostics('a + "b"')

    def test_lexical_error(self):
        diagnostics = self.diagnostics("a + \x01")
        assert diagnostics[0].message.startswith("unrecognized char")

    def test_diagnostics_sorted_by_position(self):
        diagnostics = self.diagnostics("a + \x01")
        offsets = [d.offset for d in diagnostics]
        assert offsets == sorted(offsets)
        assert len(set(offsets)) == len(offsets)

    def test_parser_returns_none_on_failure(self):
        parser = Parser("eq", "a+(b")
        assert parser.parse() is None
        assert len(parser.diagnostics) > 0

    def test_broken_level_table_fails_fast(self):
        parser = Parser("eq", "a+b")
        del parser.levels[1:]
        with pytest.raises(InternalError):
            parser.parse()

    def test_deep_parentheses_are_reported(self):
        diagnostics = self.diagnostics("(" * 500 + "a" + ")" * 500)
        assert [d.message for d in diagnostics] == ["expression nested too deeply"]

    def test_long_run_of_signs_is_reported(self):
        diagnostics = self.diagnostics("-" * 2000 + "a")
        assert [d.message for d in diagnostics] == ["expression nested too deeply"]

    def test_moderate_nesting_parses(self):
        expr = parse("eq", "(" * 50 + "a" + ")" * 50)
        assert isinstance(expr, ParenExpr)
        assert expr.end() == 101

    def test_long_sum_parses(self):
        expr = parse("eq", "+".join(f"v{i}" for i in range(1200)))
        assert isinstance(expr, BinaryExpr)
        assert expr.y == Ident(name_pos=expr.y.pos(), name="v1199")


class TestProperties:
    EQUATIONS = [
        "2+3*4",
        "2^3^2",
        "MIN(a,b)+c",
        "(a)(b)",
        "pop[age]*.08",
        "-x^2/(y-1)",
        "IF_THEN_ELSE(a,MAX(b,c),0)",
    ]

    @pytest.mark.parametrize("eqn", EQUATIONS)
    def test_parsing_is_deterministic(self, eqn):
        assert parse("eq", eqn) == parse("eq", eqn)

    @pytest.mark.parametrize("eqn", EQUATIONS)
    def test_token_text_round_trip(self, eqn):
        tokens = Lexer(SourceFile("eq", normalize(eqn))).tokenize()
        rebuilt = "".join(t.text for t in tokens)
        again = Lexer(SourceFile("eq", rebuilt)).tokenize()
        assert [(t.kind, t.text) for t in again] == [(t.kind, t.text) for t in tokens]

    @pytest.mark.parametrize("eqn", ["2+3*4", "MIN(a,b)+c", "pop[age]*.08", "-x^2/(y-1)"])
    def test_unparse_round_trip(self, eqn):
        expr = parse("eq", eqn)
        assert unparse(expr) == eqn
        assert parse("eq", unparse(expr)) == expr

    @pytest.mark.parametrize("eqn", EQUATIONS)
    def test_spans_cover_children(self, eqn):
        for node in walk(parse("eq", eqn)):
            match node:
                case BinaryExpr(y=y):
                    assert node.end() == y.end()
                case UnaryExpr(x=x):
                    assert node.end() == x.end()
                case ParenExpr(x=x, rparen=rparen):
                    assert x.end() <= rparen
                    assert node.end() == rparen + 1
                case CallExpr(fun=fun, args=args, rparen=rparen):
                    assert all(arg.end() <= rparen for arg in args)
                    assert fun.end() <= node.end()
                case IndexExpr(index=index, rbrack=rbrack):
                    assert index.end() <= rbrack
                    assert node.end() == rbrack + 1

    def test_positions_match_source(self):
        eqn = "growth * (stock + 1)"
        expr = parse("eq", eqn)
        assert eqn[expr.pos() : expr.end()] == eqn
        assert eqn[expr.y.pos() : expr.y.end()] == "(stock + 1)"
