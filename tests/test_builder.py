"""Tests for AST normalization and bytecode generation."""

import logging

import pytest

from bytere.config import Config
from bytere.exceptions import CodeGenError, CodeGenErrorKind
from bytere.matcher import compile
from bytere.parser.parser import parse
from bytere.parser.ast import Sequence, Star, Plus, Question, Char, Disjunction
from bytere.vm.builder import ProgramBuilder, build_program
from bytere.vm.inst import Inst, OpCode
from bytere.vm.normalize import normalize
from bytere.vm.program import Program, disassemble

A = Char("a")


def nested_stars(depth: int) -> str:
    return "(" * depth + "a*" + ")*" * depth


class TestNormalize:
    """Collapsing of nested stars."""

    def test_star_of_star(self):
        assert normalize(Star(Star(A))) == Star(A)

    def test_star_of_grouped_star(self):
        assert normalize(Star(Sequence((Star(A),)))) == Star(A)

    def test_star_of_doubly_grouped_star(self):
        assert normalize(Star(Sequence((Sequence((Star(A),)),)))) == Star(A)

    def test_deep_nesting(self):
        assert normalize(parse("((((a*)*)*)*)")) == Sequence((Sequence((Star(A),)),))

    def test_collapses_inside_other_nodes(self):
        node = Disjunction(Sequence((Star(Star(A)),)), Plus(Star(Star(A))))
        assert normalize(node) == Disjunction(Sequence((Star(A),)), Plus(Star(A)))

    @pytest.mark.parametrize(
        "node",
        [
            Plus(Plus(A)),
            Star(Plus(A)),
            Star(Question(A)),
            Question(Star(A)),
            Star(Sequence((Star(A), A))),
        ],
    )
    def test_other_nestings_unchanged(self, node):
        assert normalize(node) == node

    @pytest.mark.parametrize("pattern", ["a**b", "((a*)*|b)*", "(a*)*(b*)*", "x(((a)*)*)+"])
    def test_idempotent(self, pattern):
        once = normalize(parse(pattern))
        assert normalize(once) == once


class TestBuildProgram:
    """Exact code generated for each construct."""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("abc", [Inst.char("a"), Inst.char("b"), Inst.char("c"), Inst.match()]),
            ("a.", [Inst.char("a"), Inst.any_char(), Inst.match()]),
            ("^a$", [Inst.head(), Inst.char("a"), Inst.match_end(), Inst.match()]),
            (
                "a|b",
                [
                    Inst.split(1, 3),
                    Inst.char("a"),
                    Inst.jump(4),
                    Inst.char("b"),
                    Inst.match(),
                ],
            ),
            ("a+", [Inst.char("a"), Inst.split(0, 2), Inst.match()]),
            ("a*", [Inst.split(1, 3), Inst.char("a"), Inst.jump(0), Inst.match()]),
            ("a?", [Inst.split(1, 2), Inst.char("a"), Inst.match()]),
            (
                "x(ab)*",
                [
                    Inst.char("x"),
                    Inst.split(2, 5),
                    Inst.char("a"),
                    Inst.char("b"),
                    Inst.jump(1),
                    Inst.match(),
                ],
            ),
            (
                "a**b",
                [
                    Inst.split(1, 3),
                    Inst.char("a"),
                    Inst.jump(0),
                    Inst.char("b"),
                    Inst.match(),
                ],
            ),
            (
                "((((a*)*)*)*)",
                [Inst.split(1, 3), Inst.char("a"), Inst.jump(0), Inst.match()],
            ),
        ],
    )
    def test_code(self, pattern, expected):
        assert list(compile(pattern)) == expected

    def test_three_way_alternation(self):
        assert list(compile("a|b|c")) == [
            Inst.split(1, 3),
            Inst.char("a"),
            Inst.jump(7),
            Inst.split(4, 6),
            Inst.char("b"),
            Inst.jump(7),
            Inst.char("c"),
            Inst.match(),
        ]

    @pytest.mark.parametrize("pattern", ["a|b|c", "(ab|cd)+x?", "((a|^b)*c$)?", "a**b", ".+"])
    def test_program_invariants(self, pattern):
        program = compile(pattern)
        assert program.is_valid()
        ops = [inst.op for inst in program]
        assert ops.count(OpCode.MATCH) == 1
        assert ops[-1] == OpCode.MATCH

    @pytest.mark.parametrize("pattern", ["abc|def", "(a|^b)c", "((a*)*)*x+y?"])
    def test_deterministic(self, pattern):
        assert compile(pattern) == compile(pattern)

    def test_nested_stars_do_not_grow_code(self):
        for depth in (1, 10, 100):
            assert len(compile(nested_stars(depth))) == 4

    def test_build_program_takes_ast(self):
        assert build_program(parse("ab")) == Program(
            (Inst.char("a"), Inst.char("b"), Inst.match())
        )


class TestCodeGenErrors:
    """Address overflow and patching invariants."""

    def test_pc_overflow(self):
        with pytest.raises(CodeGenError) as exc_info:
            compile("abc", Config(max_address=2))
        assert exc_info.value.kind == CodeGenErrorKind.PC_OVERFLOW

    def test_fits_exactly(self):
        assert len(compile("a", Config(max_address=2))) == 2

    def test_last_address_is_one_below_ceiling(self):
        program = compile("ab", Config(max_address=3))
        assert len(program) == 3
        assert program[2] == Inst.match()
        with pytest.raises(CodeGenError):
            compile("abc", Config(max_address=3))

    def test_final_match_counts(self):
        with pytest.raises(CodeGenError):
            compile("a", Config(max_address=1))

    @pytest.mark.parametrize(
        "kind", [CodeGenErrorKind.FAIL_STAR, CodeGenErrorKind.FAIL_QUESTION, CodeGenErrorKind.FAIL_OR]
    )
    def test_patch_on_wrong_instruction(self, kind):
        builder = ProgramBuilder()
        builder._emit(Inst.char("a"))
        with pytest.raises(CodeGenError) as exc_info:
            builder._patch(0, OpCode.SPLIT, kind, target2=1)
        assert exc_info.value.kind == kind

    def test_patch_out_of_range(self):
        builder = ProgramBuilder()
        with pytest.raises(CodeGenError) as exc_info:
            builder._patch(3, OpCode.JUMP, CodeGenErrorKind.FAIL_OR, target1=1)
        assert exc_info.value.kind == CodeGenErrorKind.FAIL_OR


class TestWarnings:
    def test_content_after_end_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="bytere"):
            compile("a$b")
        assert "content after '$'" in caplog.text

    def test_warning_can_be_disabled(self, caplog):
        with caplog.at_level(logging.WARNING, logger="bytere"):
            compile("a$b", Config(warn_unreachable_end=False))
        assert caplog.text == ""

    def test_plain_end_anchor_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="bytere"):
            compile("ab$")
        assert caplog.text == ""

    def test_debug_summary(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bytere"):
            compile("^a$")
        assert "generated 4 instructions from 4 nodes (head anchor: True, end anchor: True)" in caplog.text


class TestDisassemble:
    def test_alternation_listing(self):
        assert disassemble(compile("a|b")) == "\n".join(
            [
                "0000: split 0001, 0003",
                "0001: char a",
                "0002: jump 0004",
                "0003: char b",
                "0004: match",
            ]
        )

    def test_all_mnemonics(self):
        assert compile("^.$").dump() == "\n".join(
            ["0000: head", "0001: any", "0002: match_end", "0003: match"]
        )

    def test_repr(self):
        assert repr(Inst.split(1, 2)) == "Inst(SPLIT, 1, 2)"
        assert repr(Inst.char("a")) == "Inst(CHAR, 'a')"
        assert repr(Inst.match()) == "Inst(MATCH)"

    @pytest.mark.parametrize(
        "char,listing",
        [("\n", "char 0x000a"), ("\t", "char 0x0009"), ("\x00", "char 0x0000"), (" ", "char  ")],
    )
    def test_unprintable_char_stays_on_one_line(self, char, listing):
        assert str(Inst.char(char)) == listing
        assert compile(f"a{char}").dump().splitlines() == [
            "0000: char a",
            f"0001: {listing}",
            "0002: match",
        ]
