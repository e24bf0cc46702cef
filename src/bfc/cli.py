from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .api import load_program
from .codegen import TARGETS, generate
from .errors import BFSyntaxError, StepLimitExceeded, TapeUnderflow
from .interpreter import BytesInput, Interpreter, StreamInput, StreamOutput
from .logger import CLI_LOG, init_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfc",
        description="Interpret or compile tape language programs.",
    )
    src = parser.add_mutually_exclusive_group()
    src.add_argument("-s", "--src", metavar="TEXT", help="Program source text; use --src=TEXT when it starts with '-'")
    src.add_argument("-f", "--src-file", help="Read the program from a file")
    parser.add_argument("-i", "--input", help="Literal program input (default: read stdin)")
    parser.add_argument("-c", "--compile", action="store_true", help="Compile instead of interpreting")
    parser.add_argument("-t", "--target", choices=sorted(TARGETS), default="c", help="Compilation target (default c)")
    parser.add_argument("-o", "--output-file", help="Write compiled code here (default stdout)")
    parser.add_argument("-O0", "--no-optimize", dest="no_optimize", action="store_true", help="Skip the optimizer pipeline")
    parser.add_argument("--max-steps", type=int, default=None, help="Abort interpretation after N steps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def _interpret(prog, args) -> int:
    if args.input is not None:
        source = BytesInput(args.input.encode("utf-8"))
    else:
        source = StreamInput(getattr(sys.stdin, "buffer", sys.stdin))
    # raw bytes go to the binary layer, text written so far must land first
    sys.stdout.flush()
    out = getattr(sys.stdout, "buffer", sys.stdout)
    interp = Interpreter(prog, input=source, output=StreamOutput(out), max_steps=args.max_steps)
    result = interp.run()
    if sys.stdout.isatty() and interp.last_output not in (None, 0x0A):
        sys.stdout.flush()
        StreamOutput(out).write_byte(0x0A)
    CLI_LOG.debug("halted after %d steps", result.steps)
    return 0


def _compile(prog, args) -> int:
    code = generate(prog, args.target)
    if args.output_file:
        Path(args.output_file).write_text(code, encoding="utf-8")
        CLI_LOG.debug("wrote %s target to %s", args.target, args.output_file)
    else:
        sys.stdout.write(code)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(args.verbose)

    name = None
    if args.src is not None:
        src = args.src
    elif args.src_file is not None:
        name = args.src_file
        try:
            src = Path(args.src_file).read_text(encoding="utf-8")
        except OSError as e:
            print(f"Couldn't read {args.src_file}: {e}", file=sys.stderr)
            return 1
    else:
        print("No source code, nothing to do.")
        return 0

    try:
        prog = load_program(src, not args.no_optimize, name=name)
    except BFSyntaxError as e:
        print(e, file=sys.stderr)
        return 1

    if args.compile:
        return _compile(prog, args)
    try:
        return _interpret(prog, args)
    except (TapeUnderflow, StepLimitExceeded) as e:
        sys.stdout.flush()
        print(e, file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
