from __future__ import annotations

from typing import List, Optional, Tuple

from .errors import UNMATCHED_CLOSE, UNMATCHED_OPEN, BracketError, locate, make_syntax_error
from .ir import BF_OPS, Add, Input, Loop, Node, Output, Program, Shift
from .logger import LEXER_LOG

_SIMPLE = {
    '>': Shift(1),
    '<': Shift(-1),
    '+': Add(1),
    '-': Add(-1),
    ',': Input(),
    '.': Output(),
}


def tokenize(source: str) -> List[Tuple[int, str]]:
    """Keep the instruction characters with their offsets; the rest is comment."""
    return [(pos, ch) for pos, ch in enumerate(source) if ch in BF_OPS]


def parse(source: str, *, name: Optional[str] = None) -> Program:
    """
    Parse source text into a Program.

    Every bracket problem in the source is collected before failing, so a
    single BFSyntaxError reports all of them in source order.
    """
    # One scope per open bracket; the bottom scope is the whole program.
    stack: List[Tuple[Optional[int], List[Node]]] = [(None, [])]
    errors: List[BracketError] = []

    for pos, ch in tokenize(source):
        if ch == '[':
            stack.append((pos, []))
        elif ch == ']':
            if len(stack) == 1:
                line, column = locate(source, pos)
                errors.append(BracketError(UNMATCHED_CLOSE, pos, line, column))
                continue
            _, body = stack.pop()
            stack[-1][1].append(Loop(tuple(body)))
        else:
            stack[-1][1].append(_SIMPLE[ch])

    for open_pos, _ in stack[1:]:
        line, column = locate(source, open_pos)
        errors.append(BracketError(UNMATCHED_OPEN, open_pos, line, column))

    if errors:
        errors.sort(key=lambda e: e.pos)
        LEXER_LOG.debug("rejected source with %d bracket error(s)", len(errors))
        raise make_syntax_error(source=source, errors=errors, name=name)

    prog = tuple(stack[0][1])
    LEXER_LOG.debug("parsed %d top-level nodes", len(prog))
    return prog
