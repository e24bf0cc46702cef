from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union

CELL_SIZE = 256
BF_OPS = set("+-<>[],.")


# ---------------- IR Nodes ----------------
@dataclass(frozen=True)
class Shift:
    delta: int  # net >/<


@dataclass(frozen=True)
class Add:
    delta: int  # net +/-
    offset: int = 0  # relative to the pointer


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Loop:
    body: "Program"


@dataclass(frozen=True)
class SetZero:
    pass  # emits "[-]"


@dataclass(frozen=True)
class Multiply:
    # (offset, factor) pairs; the origin cell is zeroed afterwards
    factors: Tuple[Tuple[int, int], ...]


Node = Union[Shift, Add, Input, Output, Loop, SetZero, Multiply]
Program = Tuple[Node, ...]


def wrap_delta(delta: int) -> int:
    """Normalize a cell delta into [-128, 127]."""
    v = delta % CELL_SIZE
    return v - CELL_SIZE if v >= CELL_SIZE // 2 else v


# ---------------- Emit + counts ----------------
def _shift_text(n: int) -> str:
    return (">" * n) if n > 0 else ("<" * (-n))


def _add_text(n: int) -> str:
    return ("+" * n) if n > 0 else ("-" * (-n))


def to_source(nodes: Program) -> str:
    """Render IR back into the eight-character grammar."""
    out: List[str] = []
    for n in nodes:
        if isinstance(n, Add):
            out.append(_shift_text(n.offset) + _add_text(n.delta) + _shift_text(-n.offset))
        elif isinstance(n, Shift):
            out.append(_shift_text(n.delta))
        elif isinstance(n, Input):
            out.append(",")
        elif isinstance(n, Output):
            out.append(".")
        elif isinstance(n, SetZero):
            out.append("[-]")
        elif isinstance(n, Multiply):
            body = ["-"]
            for off, factor in n.factors:
                body.append(_shift_text(off) + _add_text(factor) + _shift_text(-off))
            out.append("[" + "".join(body) + "]")
        elif isinstance(n, Loop):
            out.append("[" + to_source(n.body) + "]")
        else:
            raise TypeError(f"Unknown IR node: {n!r}")
    return "".join(out)


def count_nodes(nodes: Program) -> int:
    c = 0
    for n in nodes:
        c += 1
        if isinstance(n, Loop):
            c += count_nodes(n.body)
    return c


def count_static_ops(nodes: Program) -> int:
    """Static primitive ops count of emitted source."""
    return len(to_source(nodes))
