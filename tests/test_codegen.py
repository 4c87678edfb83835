"""
gatecalc Test Suite — Dialects & Netlists
=========================================
Tests for the hardware dialect tables (including NAND/NOR decomposition)
and for netlist generation.

Usage:
    python -m pytest tests/test_codegen.py -v
    python tests/test_codegen.py
"""
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gatecalc.builder import TreeBuilder
from gatecalc.builtins import CALCULATE_TABLE, NAND_TABLE, NOR_TABLE, VERILOG_TABLE
from gatecalc.codegen import declare_wires, generate, render_netlist
from gatecalc.context import ContextStack, Dialect
from gatecalc.errors import ArityError, TypeMismatchError
from gatecalc.evaluator import Evaluator
from gatecalc.lexer import Lexer
from gatecalc.nodes import Call, IdCounter, Literal, Symbol


def run(source: str, dialect: Dialect):
    stack = ContextStack(dialect)
    counter = IdCounter()
    root = TreeBuilder(counter).build(Lexer(source).tokenize())
    return Evaluator(stack, counter).evaluate(root)


def gate_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if line]


# ─────────────────────────────────────────────
#  Dialect Tables
# ─────────────────────────────────────────────

class TestDialectTables(unittest.TestCase):

    def test_table_names(self):
        self.assertEqual(
            set(CALCULATE_TABLE),
            {"add", "negate", "multiply", "inverse", "power", "modulus"},
        )
        self.assertEqual(
            set(VERILOG_TABLE),
            {"add", "multiply", "and", "or", "not", "xor", "nand", "nor", "xnor"},
        )
        self.assertEqual(set(NAND_TABLE), {"add", "multiply", "and", "or", "not"})
        self.assertEqual(set(NOR_TABLE), set(NAND_TABLE))

    def test_builtin_arity(self):
        with self.assertRaises(ArityError):
            VERILOG_TABLE["not"]([Symbol(name="a"), Symbol(name="b")], IdCounter())


class TestVerilog(unittest.TestCase):

    def test_add_maps_to_or(self):
        result = run("a + b", Dialect.VERILOG)
        self.assertEqual(result.name, "or")
        self.assertEqual(result.params, [Symbol(name="a"), Symbol(name="b")])

    def test_multiply_maps_to_and(self):
        self.assertEqual(run("a * b", Dialect.VERILOG).name, "and")

    def test_direct_primitives(self):
        for name in ("nand", "nor", "xnor", "xor"):
            result = run(f"{name}(a, b)", Dialect.VERILOG)
            self.assertEqual(result.name, name)

    def test_not(self):
        result = run("~a", Dialect.VERILOG)
        self.assertEqual(result.name, "not")
        text, wires = generate(result)
        self.assertEqual(text, f"not(w_{result.id}, a);\n")
        self.assertEqual(wires, {result.id})

    def test_constant_folding(self):
        self.assertEqual(run("6 & 3", Dialect.VERILOG), Literal(value=2))
        self.assertEqual(run("6 | 3", Dialect.VERILOG), Literal(value=7))
        self.assertEqual(run("~0", Dialect.VERILOG), Literal(value=-1))
        self.assertEqual(run("xor(6, 3)", Dialect.VERILOG), Literal(value=5))

    def test_arithmetic_names_unknown(self):
        self.assertEqual(run("negate(a, b)", Dialect.VERILOG), Symbol(name="negate"))

    def test_nested_netlist(self):
        result = run("a & b | c", Dialect.VERILOG)
        lines = gate_lines(generate(result)[0])
        inner = result.params[0]
        self.assertEqual(lines, [
            f"and(w_{inner.id}, a, b);",
            f"or(w_{result.id}, w_{inner.id}, c);",
        ])


# ─────────────────────────────────────────────
#  Universal-Gate Decomposition
# ─────────────────────────────────────────────

class TestNandDialect(unittest.TestCase):

    def test_and_shares_inner_nand(self):
        result = run("and(a, b)", Dialect.VERILOG_NAND)
        self.assertEqual(result.name, "nand")
        first, second = result.params
        self.assertIs(first, second)
        self.assertEqual(first.name, "nand")
        self.assertEqual(first.params, [Symbol(name="a"), Symbol(name="b")])

    def test_and_netlist_has_two_gates(self):
        result = run("and(a, b)", Dialect.VERILOG_NAND)
        inner = result.params[0]
        text, wires = generate(result)
        self.assertEqual(gate_lines(text), [
            f"nand(w_{inner.id}, a, b);",
            f"nand(w_{result.id}, w_{inner.id}, w_{inner.id});",
        ])
        self.assertEqual(wires, {inner.id, result.id})

    def test_infix_and(self):
        lines = gate_lines(generate(run("a & b", Dialect.VERILOG_NAND))[0])
        self.assertEqual(len(lines), 2)

    def test_or_uses_three_gates(self):
        result = run("a | b", Dialect.VERILOG_NAND)
        lines = gate_lines(generate(result)[0])
        self.assertEqual(len(lines), 3)
        self.assertTrue(all(line.startswith("nand(") for line in lines))
        left, right = result.params
        self.assertIsNot(left, right)
        self.assertEqual(left.params, [Symbol(name="a"), Symbol(name="a")])

    def test_not(self):
        result = run("~a", Dialect.VERILOG_NAND)
        self.assertEqual(generate(result)[0], f"nand(w_{result.id}, a, a);\n")

    def test_mixed_expression(self):
        result = run("a & b | c", Dialect.VERILOG_NAND)
        lines = gate_lines(generate(result)[0])
        self.assertEqual(len(lines), 5)
        self.assertTrue(all(line.startswith("nand(") for line in lines))

    def test_xor_not_available(self):
        self.assertEqual(run("xor(a, b)", Dialect.VERILOG_NAND), Symbol(name="xor"))

    def test_constant_folding(self):
        self.assertEqual(run("and(1, 1)", Dialect.VERILOG_NAND), Literal(value=1))
        self.assertEqual(run("or(0, 0)", Dialect.VERILOG_NAND), Literal(value=0))


class TestNorDialect(unittest.TestCase):

    def test_or_shares_inner_nor(self):
        result = run("a | b", Dialect.VERILOG_NOR)
        self.assertEqual(result.name, "nor")
        self.assertIs(result.params[0], result.params[1])
        self.assertEqual(len(gate_lines(generate(result)[0])), 2)

    def test_and_uses_three_gates(self):
        result = run("a & b", Dialect.VERILOG_NOR)
        lines = gate_lines(generate(result)[0])
        self.assertEqual(len(lines), 3)
        self.assertTrue(all(line.startswith("nor(") for line in lines))

    def test_not(self):
        result = run("~a", Dialect.VERILOG_NOR)
        self.assertEqual(generate(result)[0], f"nor(w_{result.id}, a, a);\n")

    def test_add_is_or(self):
        result = run("a + b", Dialect.VERILOG_NOR)
        self.assertIs(result.params[0], result.params[1])


# ─────────────────────────────────────────────
#  Netlist Generator
# ─────────────────────────────────────────────

class TestNetlistGenerator(unittest.TestCase):

    def test_three_params_rejected(self):
        call = Call(name="and", params=[Symbol(name=n) for n in "abc"], id=1)
        with self.assertRaises(ArityError):
            generate(call)

    def test_zero_params_rejected(self):
        with self.assertRaises(ArityError):
            generate(Call(name="f", id=1))

    def test_literal_operand_rejected(self):
        call = Call(name="and", params=[Literal(value=1), Symbol(name="a")], id=1)
        with self.assertRaises(TypeMismatchError):
            generate(call)

    def test_dedup_by_id(self):
        shared = Call(name="not", params=[Symbol(name="a")], id=4)
        top = Call(name="and", params=[shared, shared], id=5)
        text, wires = generate(top)
        self.assertEqual(gate_lines(text), [
            "not(w_4, a);",
            "and(w_5, w_4, w_4);",
        ])
        self.assertEqual(wires, {4, 5})

    def test_equal_structure_different_ids_not_merged(self):
        left = Call(name="not", params=[Symbol(name="a")], id=1)
        right = Call(name="not", params=[Symbol(name="a")], id=2)
        text, _ = generate(Call(name="or", params=[left, right], id=3))
        self.assertEqual(len(gate_lines(text)), 3)

    def test_non_call_root(self):
        self.assertEqual(generate(Symbol(name="a")), ("", set()))

    def test_declare_wires(self):
        self.assertEqual(declare_wires({3, 1}), "wire w_1, w_3;")
        self.assertEqual(declare_wires(set()), "")

    def test_render_netlist(self):
        call = Call(name="or", params=[Symbol(name="a"), Symbol(name="b")], id=7)
        self.assertEqual(render_netlist(call), "wire w_7;\nor(w_7, a, b);\n")


if __name__ == "__main__":
    unittest.main()
