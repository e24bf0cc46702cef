
from .api import CompileOptions, CompileResult, RunOptions, compile_file, compile_string, load_program, run_file, run_string
from .codegen import generate, generate_bf, generate_c
from .errors import BFError, BFSyntaxError, StepLimitExceeded, TapeUnderflow
from .interpreter import ExecutionResult, Interpreter, run
from .ir import Add, Input, Loop, Multiply, Output, Program, SetZero, Shift, to_source
from .lexer import parse, tokenize
from .optimizer import OptimizeOptions, optimize

__all__ = [
    'Add',
    'Shift',
    'Input',
    'Output',
    'Loop',
    'SetZero',
    'Multiply',
    'Program',
    'to_source',
    'parse',
    'tokenize',
    'optimize',
    'OptimizeOptions',
    'Interpreter',
    'ExecutionResult',
    'run',
    'generate',
    'generate_c',
    'generate_bf',
    'BFError',
    'BFSyntaxError',
    'TapeUnderflow',
    'StepLimitExceeded',
    'CompileOptions',
    'CompileResult',
    'RunOptions',
    'compile_string',
    'compile_file',
    'run_string',
    'run_file',
    'load_program',
]
