"""Execution engine for compiled brainrun programs.

The engine walks a `Program` with a single instruction cursor, a tape and
a stack of open loop heads. A `[` on a zero cell jumps past its matching
`]`; otherwise its position is pushed and the body runs. A `]` always
pops the stack and returns control to the `[`, which tests the cell
again. There is no halt instruction: the run ends when the cursor walks
off the end of the program.
"""

from __future__ import annotations

import sys
from typing import BinaryIO, Dict, List, Optional, Union

from .errors import BrainrunError
from .loops import build_jump_table, resolve_loop_end
from .parser import parse_program
from .streams import EOF_POLICIES, ByteInput, ByteOutput
from .tape import Tape
from .types import ErrorVal, Op, Program


class Interpreter:
    """Core interpreter that executes a compiled Program."""
    def __init__(
        self,
        debug_level: int = 0,
        debug_file: str = 'debug.txt',
        strict: bool = True,
        eof: str = 'unchanged',
        skip_whitespace: bool = False,
        max_steps: Optional[int] = None,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        if max_steps is not None and max_steps < 0:
            raise BrainrunError(ErrorVal('ValueError', f'max_steps must not be negative, got {max_steps}'))
        if eof not in EOF_POLICIES:
            raise BrainrunError(ErrorVal('ValueError', f'unknown eof policy {eof!r}; expected one of {", ".join(EOF_POLICIES)}'))
        self.strict = strict
        self.eof = eof
        self.skip_whitespace = skip_whitespace
        self.max_steps = max_steps
        self.stdin = stdin
        self.stdout = stdout
        self.tape = Tape()
        self.steps = 0
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0 and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    # Public API
    def run(self, program: Program) -> Tape:
        """Execute `program` to completion and return the final tape.

        In strict mode bracket balance is checked before the first
        instruction runs, so an unbalanced program produces no output.
        """
        # Later runs append to the log the first run started
        if self.debug_level > 0 and self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'a')
        self.tape = Tape()
        self.steps = 0
        try:
            jumps = build_jump_table(program) if self.strict else None
            source = ByteInput(
                self.stdin if self.stdin is not None else sys.stdin.buffer,
                eof=self.eof,
                skip_whitespace=self.skip_whitespace,
            )
            sink = ByteOutput(self.stdout if self.stdout is not None else sys.stdout.buffer)
            if self.debug_level >= 1:
                mode = 'strict' if self.strict else 'lenient'
                self.debug(f"run {len(program)} instructions ({mode})")
            self.execute(program, jumps, source, sink)
            if self.debug_level >= 1:
                self.debug(f"halted after {self.steps} steps; cursor {self.tape.cursor}, tape size {len(self.tape)}")
            return self.tape
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def execute(self, program: Program, jumps: Optional[Dict[int, int]], source: ByteInput, sink: ByteOutput):
        tape = self.tape
        loop_stack: List[int] = []
        end = len(program)
        it = 0
        while it < end:
            if self.max_steps is not None and self.steps >= self.max_steps:
                raise BrainrunError(ErrorVal(
                    'StepLimitError', f'step limit of {self.max_steps} exceeded', it,
                ))
            self.steps += 1
            instr = program[it]
            op = instr.op
            if self.debug_level >= 3:
                self.debug(f"{it:6d} {op.value} x{instr.count} cursor={tape.cursor} cell={tape.read()}")

            if op is Op.LOOP_OPEN:
                if tape.read() == 0:
                    target = jumps[it] if jumps is not None else resolve_loop_end(program, it)
                    if self.debug_level >= 2:
                        self.debug(f"skip loop {it} -> {target}")
                    it = target
                else:
                    if self.debug_level >= 2:
                        self.debug(f"enter loop {it} (depth {len(loop_stack) + 1})")
                    loop_stack.append(it)
                it += 1
            elif op is Op.LOOP_CLOSE:
                if not loop_stack:
                    where = instr.where()
                    suffix = f' ({where})' if where else ''
                    raise BrainrunError(ErrorVal('BracketError', f'unmatched ]{suffix}', it))
                # Back to the loop head without advancing, so it re-tests the cell
                it = loop_stack.pop()
                if self.debug_level >= 2:
                    self.debug(f"return to loop {it}")
            elif op is Op.MOVE_RIGHT:
                tape.advance(instr.count)
                it += 1
            elif op is Op.MOVE_LEFT:
                try:
                    tape.retreat(instr.count)
                except BrainrunError as e:
                    raise BrainrunError(ErrorVal(e.err.name, e.err.message, it)) from e
                it += 1
            elif op is Op.INCREMENT:
                tape.write(tape.read() + instr.count)
                it += 1
            elif op is Op.DECREMENT:
                tape.write(tape.read() - instr.count)
                it += 1
            elif op is Op.OUTPUT:
                sink.write(tape.read(), instr.count)
                it += 1
            elif op is Op.INPUT:
                for _ in range(instr.count):
                    tape.write(source.read_cell(tape.read()))
                it += 1
            else:
                raise BrainrunError(ErrorVal('RuntimeError', f'unknown operator {op!r}', it))


def run_program(
    source: Union[bytes, str],
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    debug_level: int = 0,
    **options,
) -> Tape:
    """Convenience function to compile and run a program from source."""
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level, stdin=stdin, stdout=stdout, **options)
    return interpreter.run(program)


def compile_module(file_path: str) -> Program:
    """Compile a source file, read as raw bytes, into a Program."""
    with open(file_path, 'rb') as f:
        source = f.read()
    return parse_program(source)
