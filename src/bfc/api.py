from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .codegen import generate
from .interpreter import ExecutionResult, Interpreter
from .ir import Program, count_nodes, count_static_ops
from .lexer import parse
from .logger import OPT_LOG
from .optimizer import OptimizeOptions, optimize


@dataclass(frozen=True)
class CompileOptions:
    optimize: bool = True
    target: str = "c"


@dataclass(frozen=True)
class CompileResult:
    code: str
    program: Program
    raw_nodes: int
    optimized_nodes: int


@dataclass(frozen=True)
class RunOptions:
    optimize: bool = True
    max_steps: Optional[int] = None


def load_program(source: str, optimize_enabled: bool = True, *, name: Optional[str] = None) -> Program:
    raw = parse(source, name=name)
    prog = optimize(raw, OptimizeOptions(enabled=optimize_enabled))
    OPT_LOG.debug(
        "program size: %d -> %d nodes, %d -> %d ops",
        count_nodes(raw), count_nodes(prog), count_static_ops(raw), count_static_ops(prog),
    )
    return prog


def compile_string(source: str, *, options: Optional[CompileOptions] = None, name: Optional[str] = None) -> CompileResult:
    opts = options if options is not None else CompileOptions()
    raw = parse(source, name=name)
    prog = optimize(raw, OptimizeOptions(enabled=opts.optimize))
    return CompileResult(
        code=generate(prog, opts.target),
        program=prog,
        raw_nodes=count_nodes(raw),
        optimized_nodes=count_nodes(prog),
    )


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None, encoding: str = "utf-8") -> CompileResult:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding), options=options, name=str(p))


def run_string(source: str, input=b"", *, options: Optional[RunOptions] = None, output=None, name: Optional[str] = None) -> ExecutionResult:
    opts = options if options is not None else RunOptions()
    prog = load_program(source, opts.optimize, name=name)
    return Interpreter(prog, input=input, output=output, max_steps=opts.max_steps).run()


def run_file(path: str | Path, input=b"", *, options: Optional[RunOptions] = None, output=None, encoding: str = "utf-8") -> ExecutionResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), input, options=options, output=output, name=str(p))
