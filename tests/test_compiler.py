"""
Compiler tests: run-length folding, jump backpatching and bracket balance.
"""

import pytest

from bfvm import IRCompiler, Instruction, Operator, UnbalancedLoopError, compile_source


def ops(source):
    return [(inst.opcode, inst.operand) for inst in compile_source(source)]


def test_folds_runs_of_identical_operators():
    for ch in "<>+-.,":
        for k in (1, 2, 7, 300):
            assert ops(ch * k) == [(Operator(ord(ch)), k)]


def test_different_operators_are_not_combined():
    assert ops("++--><") == [
        (Operator.INCREMENT, 2),
        (Operator.DECREMENT, 2),
        (Operator.MOVE_RIGHT, 1),
        (Operator.MOVE_LEFT, 1),
    ]


def test_comment_characters_are_skipped():
    assert ops("hello world") == []
    assert ops("") == []
    assert ops("+ +") == [(Operator.INCREMENT, 1), (Operator.INCREMENT, 1)]


def test_increment_then_output():
    assert compile_source("++.") == [
        Instruction(Operator.INCREMENT, 2),
        Instruction(Operator.OUTPUT, 1),
    ]


def test_simple_loop_is_backpatched():
    assert compile_source("+[-]") == [
        Instruction(Operator.INCREMENT, 1),
        Instruction(Operator.JUMP_IF_ZERO, 4),
        Instruction(Operator.DECREMENT, 1),
        Instruction(Operator.JUMP_IF_NONZERO, 2),
    ]


def test_empty_loop():
    assert ops("[]") == [(Operator.JUMP_IF_ZERO, 2), (Operator.JUMP_IF_NONZERO, 1)]


def test_nested_loops_resolve_to_matching_brackets():
    instructions = compile_source("[>[+]<]")
    assert ops("[>[+]<]") == [
        (Operator.JUMP_IF_ZERO, 7),
        (Operator.MOVE_RIGHT, 1),
        (Operator.JUMP_IF_ZERO, 5),
        (Operator.INCREMENT, 1),
        (Operator.JUMP_IF_NONZERO, 3),
        (Operator.MOVE_LEFT, 1),
        (Operator.JUMP_IF_NONZERO, 1),
    ]
    for addr, inst in enumerate(instructions):
        if inst.opcode is Operator.JUMP_IF_NONZERO:
            opener = inst.operand - 1
            assert instructions[opener].opcode is Operator.JUMP_IF_ZERO
            assert instructions[opener].operand == addr + 1


def test_brackets_are_never_folded():
    assert ops("[[]]") == [
        (Operator.JUMP_IF_ZERO, 4),
        (Operator.JUMP_IF_ZERO, 3),
        (Operator.JUMP_IF_NONZERO, 2),
        (Operator.JUMP_IF_NONZERO, 1),
    ]


def test_unmatched_closing_bracket():
    with pytest.raises(UnbalancedLoopError) as exc:
        compile_source("]")
    assert "unmatched closing bracket" in str(exc.value)
    assert exc.value.position == 0


def test_closing_before_opening():
    with pytest.raises(UnbalancedLoopError):
        compile_source("+][")


def test_unmatched_opening_bracket_reports_location():
    with pytest.raises(UnbalancedLoopError) as exc:
        compile_source("+\n+[\n[-]\n")
    err = exc.value
    assert "unmatched opening bracket" in str(err)
    assert (err.line, err.column) == (2, 2)
    assert ">    2 | +[" in err.context
    assert "Hint:" in str(err)


def test_compilation_is_repeatable():
    source = "++[>+++<-]>.,,<<"
    compiler = IRCompiler()
    assert compiler.compile(source) == compiler.compile(source)
    assert compile_source(source) == compile_source(source)


def test_compiler_state_is_reset_after_failure():
    compiler = IRCompiler()
    with pytest.raises(UnbalancedLoopError):
        compiler.compile("[[")
    assert compiler.compile("[-]") == compile_source("[-]")


def test_instruction_listing_format():
    assert str(Instruction(Operator.MOVE_LEFT, 3)) == "OP_SHL\t3"
    assert str(Instruction(Operator.JUMP_IF_NONZERO, 2)) == "OP_JNZ\t2"
