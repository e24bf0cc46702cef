from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

UNMATCHED_OPEN = 'unmatched_open'
UNMATCHED_CLOSE = 'unmatched_close'

_KIND_TEXT = {
    UNMATCHED_OPEN: "Unmatched opening bracket '['",
    UNMATCHED_CLOSE: "Unmatched closing bracket ']'",
}


def _build_context(lines: List[str], line_no_1: int, column_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            # tabs keep their width so the caret lines up
            lead = ''.join('\t' if ch == '\t' else ' ' for ch in lines[i - 1][:column_1 - 1])
            out.append(f"       | {lead}^ here")
    return "\n".join(out)


def _hint_for(kind: str) -> Optional[str]:
    if kind == UNMATCHED_OPEN:
        return 'Every "[" needs a matching "]" later in the program.'
    if kind == UNMATCHED_CLOSE:
        return 'A "]" closes the innermost open "["; check for a missing "[" before it.'
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class BracketError:
    kind: str
    pos: int
    line: int
    column: int

    def describe(self) -> str:
        return f"{_KIND_TEXT[self.kind]} on line {self.line} column {self.column}"


@dataclass
class BFSyntaxError(BFError):
    errors: List[BracketError] = field(default_factory=list)


@dataclass
class TapeUnderflow(BFError):
    pointer: int = -1


@dataclass
class StepLimitExceeded(BFError):
    limit: int = 0


def locate(source: str, pos: int) -> tuple:
    """Return the 1-based (line, column) of character offset ``pos``."""
    line = source.count('\n', 0, pos) + 1
    line_start = source.rfind('\n', 0, pos) + 1
    return line, pos - line_start + 1


def make_syntax_error(*, source: str, errors: List[BracketError], name: Optional[str] = None) -> BFSyntaxError:
    lines = source.split('\n')
    where = f" of {name}" if name else ""
    blocks: List[str] = []
    for err in errors:
        ctx = _build_context(lines, err.line, err.column)
        hint = _hint_for(err.kind)
        hint_block = f"\nHint: {hint}" if hint else ""
        blocks.append(f"SyntaxError{where}: {err.describe()}\n{ctx}{hint_block}")
    return BFSyntaxError(message="\n\n".join(blocks), errors=list(errors))


def make_tape_underflow(pointer: int) -> TapeUnderflow:
    return TapeUnderflow(
        message=f"TapeUnderflow: access to cell {pointer}, left of the tape start",
        pointer=pointer,
    )


def make_step_limit(limit: int) -> StepLimitExceeded:
    return StepLimitExceeded(
        message=f"StepLimitExceeded: program did not halt within {limit} steps",
        limit=limit,
    )
