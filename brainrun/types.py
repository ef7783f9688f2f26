"""Type definitions and helpers for brainrun.

This module defines the values the compiler produces and the engine
consumes: the closed set of operator kinds, run-length-encoded
instructions, compiled programs, and the error value carried by
`BrainrunError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple


CELL_MODULUS = 256


class Op(Enum):
    """The eight operator kinds, each valued by its source character."""
    MOVE_RIGHT = '>'
    MOVE_LEFT = '<'
    INCREMENT = '+'
    DECREMENT = '-'
    OUTPUT = '.'
    INPUT = ','
    LOOP_OPEN = '['
    LOOP_CLOSE = ']'

    @property
    def is_loop(self) -> bool:
        return self is Op.LOOP_OPEN or self is Op.LOOP_CLOSE


@dataclass(frozen=True)
class Instruction:
    """One compiled unit of work: an operator and its repeat count.

    `line` and `column` locate the first source character of the run.
    They are informational only and do not take part in equality, so two
    programs compiled from differently commented sources compare equal.
    """
    op: Op
    count: int = 1
    line: Optional[int] = field(default=None, compare=False)
    column: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if self.count < 1:
            raise ValueError(f"instruction count must be positive, got {self.count}")
        if self.op.is_loop and self.count != 1:
            raise ValueError(f"loop instruction {self.op.value!r} must have count 1")

    def __repr__(self) -> str:
        return f"Instruction({self.op.value!r} x{self.count})"

    def where(self) -> str:
        if self.line is None:
            return ''
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class Program:
    """An immutable, indexable sequence of instructions."""
    instructions: Tuple[Instruction, ...] = ()

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __repr__(self) -> str:
        return f"Program({len(self.instructions)} instructions)"


@dataclass
class ErrorVal:
    """Represents a brainrun error.

    Errors carry a name (e.g. 'TapeError', 'BracketError') and a message.
    `position` is the index of the offending instruction in the program,
    when one is known.
    """
    name: str
    message: str
    position: Optional[int] = None

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r}, position={self.position!r})"


def wrap_cell(value: int) -> int:
    """Reduce an integer into the 8-bit cell range, wrapping silently."""
    return value % CELL_MODULUS
