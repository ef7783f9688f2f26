"""Compiler from raw source bytes to a run-length-encoded Program.

The pipeline has two stages:

1. **Lexing and parsing**: the source is decoded as latin-1 (one
   character per byte) and fed to a Lark parser whose grammar knows the
   eight operator characters. Every other character is a comment and is
   dropped by the lexer through an ignored COMMENT terminal.

2. **Folding**: a transformer walks the operator tokens in order and
   merges consecutive identical operators into one `Instruction` with a
   repeat count. Because comments never reach the transformer, text
   between two repeats does not break a run. Loop brackets are never
   merged, even when adjacent.

`parse_program` is the public entry point. Bracket balance is not
checked here; see `brainrun.loops`.
"""

from __future__ import annotations

from typing import List, Optional, Union

from lark import Lark, Token, Transformer

from .types import Instruction, Op, Program


PROGRAM_GRAMMAR = r"""
    start: _command*

    _command: MOVE_RIGHT
            | MOVE_LEFT
            | INCREMENT
            | DECREMENT
            | OUTPUT
            | INPUT
            | LOOP_OPEN
            | LOOP_CLOSE

    MOVE_RIGHT: ">"
    MOVE_LEFT: "<"
    INCREMENT: "+"
    DECREMENT: "-"
    OUTPUT: "."
    INPUT: ","
    LOOP_OPEN: "["
    LOOP_CLOSE: "]"

    // Anything that is not an operator is a comment, newlines included
    COMMENT: /[^<>+\-.,\[\]]+/
    %ignore COMMENT
"""


PROGRAM_PARSER = Lark(
    PROGRAM_GRAMMAR,
    parser='lalr',
    lexer='basic',
    maybe_placeholders=False,
)


def decode_source(source: Union[bytes, bytearray, str]) -> str:
    """Map source bytes one-to-one onto characters."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source).decode('latin-1')
    return source


class ProgramBuilder(Transformer):
    """Folds the flat operator token list into a Program."""

    def start(self, tokens: List[Token]) -> Program:
        instructions: List[Instruction] = []
        run_op: Optional[Op] = None
        run_count = 0
        run_token: Optional[Token] = None

        def flush():
            if run_op is not None:
                instructions.append(Instruction(run_op, run_count, run_token.line, run_token.column))

        for token in tokens:
            op = Op(token.value)
            if op.is_loop:
                flush()
                run_op = None
                instructions.append(Instruction(op, 1, token.line, token.column))
                continue
            if op is run_op:
                run_count += 1
                continue
            flush()
            run_op, run_count, run_token = op, 1, token
        flush()
        return Program(tuple(instructions))


def parse_program(source: Union[bytes, bytearray, str]) -> Program:
    """Compile source text into a Program.

    The whole input is consumed before anything is returned. An input with
    no operator characters yields an empty Program.
    """
    tree = PROGRAM_PARSER.parse(decode_source(source))
    return ProgramBuilder().transform(tree)


def to_source(program: Program) -> str:
    """Serialize a Program back to canonical source with no comments.

    Each instruction becomes `count` copies of its operator character, so
    `parse_program(to_source(p)) == p` for any compiled `p`.
    """
    return ''.join(instr.op.value * instr.count for instr in program)
