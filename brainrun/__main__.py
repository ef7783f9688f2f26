"""CLI entry point for the brainrun interpreter.

Usage:
    python -m brainrun [options] <program_file>
    python -m brainrun [-v...] --emit-program <program_file>
    python -m brainrun [options] --program <program_json_file>

Options:
  -v                 Increase debug verbosity (can be repeated)
  --emit-program     Compile the given source file and emit a Program JSON file
  --program          Execute a previously emitted Program JSON file
  --lenient          Skip the up-front bracket check and resolve skipped loops by scanning
  --eof POLICY       Cell value on end of input: unchanged (default), zero or max
  --skip-whitespace  Skip whitespace bytes before each input read
  --max-steps N      Abort after N executed instructions

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Program output goes to stdout as raw
bytes and input is read from stdin as raw bytes.
"""

import argparse
import json
import sys
from pathlib import Path
from .errors import BrainrunError
from .interpreter import Interpreter, compile_module
from .program_json import program_to_obj, program_from_obj
from .streams import EOF_POLICIES


def fail(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


def run(program, args) -> None:
    try:
        interpreter = Interpreter(
            debug_level=args.v,
            strict=not args.lenient,
            eof=args.eof,
            skip_whitespace=args.skip_whitespace,
            max_steps=args.max_steps,
        )
        interpreter.run(program)
    except BrainrunError as e:
        fail(f"Runtime error: {e}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="brainrun byte tape interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-program', metavar='SOURCE_FILE', help='emit Program JSON for the given source file')
    group.add_argument('--program', metavar='PROGRAM_JSON_FILE', help='execute a Program from a JSON file')
    parser.add_argument('--lenient', action='store_true', help='do not reject unbalanced brackets before running')
    parser.add_argument('--eof', choices=EOF_POLICIES, default='unchanged', help='cell value when input is exhausted')
    parser.add_argument('--skip-whitespace', action='store_true', help='skip whitespace bytes before each input read')
    parser.add_argument('--max-steps', type=int, default=None, metavar='N', help='abort after N executed instructions')
    parser.add_argument('source', nargs='?', help='source file to execute')
    args = parser.parse_args(argv)
    if (args.emit_program or args.program) and args.source:
        fail("Error: a source file cannot be combined with --emit-program or --program")

    # Emit program mode
    if args.emit_program:
        source_file = Path(args.emit_program)
        try:
            program = compile_module(str(source_file))
        except OSError:
            fail(f"Error: cannot open source file {source_file}")
        out_path = source_file.with_name(source_file.name + '.program.json')
        try:
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(program_to_obj(program), out, indent=2)
        except OSError as e:
            fail(f"Error: cannot write program file {out_path}: {e}")
        print(str(out_path))
        return

    # Execute from program JSON
    if args.program:
        program_path = Path(args.program)
        try:
            with open(program_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError:
            fail(f"Error: cannot open program file {program_path}")
        except UnicodeDecodeError:
            fail(f"Error: {program_path} is not UTF-8 text")
        except json.JSONDecodeError as e:
            fail(f"Error: {program_path} is not valid JSON: {e}")
        try:
            program = program_from_obj(data)
        except BrainrunError as e:
            fail(f"Error: {e}")
        run(program, args)
        return

    # Default: execute source file
    if not args.source:
        fail("Error: source file name needed")
    source_file = Path(args.source)
    try:
        program = compile_module(str(source_file))
    except OSError:
        fail(f"Error: cannot open source file {source_file}")
    run(program, args)


if __name__ == '__main__':
    main()
