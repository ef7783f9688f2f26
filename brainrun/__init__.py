# brainrun package
# This package provides a compiler and interpreter for the eight-operator
# byte tape language.
from .interpreter import run_program, compile_module, Interpreter
from .parser import parse_program, to_source
from .errors import BrainrunError

__all__ = [
    'run_program',
    'compile_module',
    'parse_program',
    'to_source',
    'Interpreter',
    'BrainrunError',
]
