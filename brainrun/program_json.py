"""JSON serialization/deserialization for compiled programs.

This module converts between `Program` and plain Python dict/list
structures suitable for JSON encoding. Instructions are stored as
`[operator, count]` pairs; source positions are not kept.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .errors import BrainrunError
from .types import ErrorVal, Instruction, Op, Program


FORMAT_NAME = "brainrun-program"
FORMAT_VERSION = 1


def program_to_obj(program: Program) -> Dict[str, Any]:
    return {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "instructions": [[instr.op.value, instr.count] for instr in program],
    }


def _format_error(message: str) -> BrainrunError:
    return BrainrunError(ErrorVal('FormatError', message))


def instruction_from_obj(o: Any, index: int) -> Instruction:
    if not isinstance(o, list) or len(o) != 2:
        raise _format_error(f"instruction {index}: expected [operator, count]")
    char, count = o
    try:
        op = Op(char)
    except ValueError:
        raise _format_error(f"instruction {index}: unknown operator {char!r}")
    # bool is a subclass of int; reject it explicitly
    if isinstance(count, bool) or not isinstance(count, int):
        raise _format_error(f"instruction {index}: count must be an integer")
    try:
        return Instruction(op, count)
    except ValueError as e:
        raise _format_error(f"instruction {index}: {e}")


def program_from_obj(o: Any) -> Program:
    if not isinstance(o, dict) or o.get("format") != FORMAT_NAME:
        raise _format_error("not a brainrun program document")
    if o.get("version") != FORMAT_VERSION:
        raise _format_error(f"unsupported version {o.get('version')!r}")
    items = o.get("instructions")
    if not isinstance(items, list):
        raise _format_error("instructions must be a list")
    instructions: List[Instruction] = [instruction_from_obj(item, i) for i, item in enumerate(items)]
    return Program(tuple(instructions))
