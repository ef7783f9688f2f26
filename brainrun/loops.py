"""Loop matching for compiled programs.

Two strategies are provided. `resolve_loop_end` scans forward from a
loop head with a nesting counter every time it is called, which is how
an unvalidated program finds where to resume after skipping a loop body.
`build_jump_table` pairs every bracket once, up front, and rejects
programs whose brackets do not balance.
"""

from __future__ import annotations

from typing import Dict, List

from .errors import BrainrunError
from .types import ErrorVal, Op, Program


def _located(program: Program, position: int) -> str:
    where = program[position].where()
    return f' ({where})' if where else ''


def resolve_loop_end(program: Program, position: int) -> int:
    """Return the position of the `]` matching the `[` at `position`.

    Nested loops are accounted for by counting opens and closes. Running
    off the end of the program means the loop head is unmatched.
    """
    if program[position].op is not Op.LOOP_OPEN:
        raise BrainrunError(ErrorVal(
            'BracketError', f'instruction {position} is not a loop open', position,
        ))
    depth = 0
    for index in range(position, len(program)):
        op = program[index].op
        if op is Op.LOOP_OPEN:
            depth += 1
        elif op is Op.LOOP_CLOSE:
            depth -= 1
            if depth == 0:
                return index
    raise BrainrunError(ErrorVal(
        'BracketError', f'unmatched [{_located(program, position)}', position,
    ))


def build_jump_table(program: Program) -> Dict[int, int]:
    """Pair every `[` with its `]`, in both directions.

    Raises BracketError naming the first unmatched `]`, or the innermost
    unmatched `[` left open at the end of the program.
    """
    jumps: Dict[int, int] = {}
    opens: List[int] = []
    for index, instr in enumerate(program):
        if instr.op is Op.LOOP_OPEN:
            opens.append(index)
        elif instr.op is Op.LOOP_CLOSE:
            if not opens:
                raise BrainrunError(ErrorVal(
                    'BracketError', f'unmatched ]{_located(program, index)}', index,
                ))
            start = opens.pop()
            jumps[start] = index
            jumps[index] = start
    if opens:
        start = opens[-1]
        raise BrainrunError(ErrorVal(
            'BracketError', f'unmatched [{_located(program, start)}', start,
        ))
    return jumps
