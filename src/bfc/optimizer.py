#
# IR optimizer.
#
# Passes, in pipeline order (each one can be switched off through OptimizeOptions):
#   merge_runs      pack adjacent +/- and </> runs, drop cancelled runs
#   fold_offsets    straight Add/Shift runs -> offset Adds + one trailing Shift
#   clear_loops     [-] / [+] (any odd delta) -> SetZero
#   multiply_loops  proven-linear transfer loops (net ptr 0, origin -1) -> Multiply
#   propagate_constants  drop loops/SetZero/Multiply on cells known to be zero
#   dead_stores     drop Add/SetZero overwritten by a later SetZero before any read
#
# Every pass is Program -> Program, recurses into loop bodies first, and never
# reorders across IO or loops. The pipeline is repeated until a fixpoint so that
# optimize(optimize(p)) == optimize(p).
#
# NOTE: programs that move left of cell 0 have no defined meaning; the passes
#       only preserve behavior for programs that stay on the tape.
#
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .ir import Add, Input, Loop, Multiply, Node, Output, Program, SetZero, Shift, count_nodes, wrap_delta
from .logger import OPT_LOG

Pass = Callable[[Program], Program]


# ---------------- Run-length merging ----------------
def merge_runs(nodes: Program) -> Program:
    """Combine adjacent Shift/Shift and same-offset Add/Add; remove zeros."""
    out: List[Node] = []
    for n in nodes:
        if isinstance(n, Loop):
            out.append(Loop(merge_runs(n.body)))
            continue
        last = out[-1] if out else None
        if isinstance(n, Shift) and isinstance(last, Shift):
            out.pop()
            n = Shift(last.delta + n.delta)
        elif isinstance(n, Add) and isinstance(last, Add) and last.offset == n.offset:
            out.pop()
            n = Add(last.delta + n.delta, n.offset)

        if isinstance(n, Shift) and n.delta == 0:
            continue
        if isinstance(n, Add):
            d = wrap_delta(n.delta)
            if d == 0:
                continue
            n = Add(d, n.offset)
        out.append(n)
    return tuple(out)


# ---------------- Offset folding ----------------
def fold_offsets(nodes: Program) -> Program:
    """
    Rewrite each maximal Add/Shift run as offset Adds followed by one Shift.

    Adds to distinct cells commute, so the run keeps only one Add per cell
    (in first-touch order) and a single net pointer move.
    """
    out: List[Node] = []
    run: List[Node] = []

    def flush():
        if not run:
            return
        p = 0
        deltas: Dict[int, int] = {}
        for n in run:
            if isinstance(n, Shift):
                p += n.delta
            else:
                key = p + n.offset
                deltas[key] = deltas.get(key, 0) + n.delta
        for off, d in deltas.items():
            d = wrap_delta(d)
            if d != 0:
                out.append(Add(d, off))
        if p != 0:
            out.append(Shift(p))
        run.clear()

    for n in nodes:
        if isinstance(n, (Add, Shift)):
            run.append(n)
            continue
        flush()
        if isinstance(n, Loop):
            out.append(Loop(fold_offsets(n.body)))
        else:
            out.append(n)
    flush()
    return tuple(out)


# ---------------- Clear-loop recognition ----------------
def is_clear_loop(body: Program) -> bool:
    # an odd step generates Z/256, so the cell reaches 0 from any start value
    return (
        len(body) == 1
        and isinstance(body[0], Add)
        and body[0].offset == 0
        and body[0].delta % 2 == 1
    )


def clear_loops(nodes: Program) -> Program:
    out: List[Node] = []
    for n in nodes:
        if isinstance(n, Loop):
            body = clear_loops(n.body)
            if is_clear_loop(body):
                out.append(SetZero())
            else:
                out.append(Loop(body))
        else:
            out.append(n)
    return tuple(out)


# ---------------- Linear loop analysis ----------------
def analyze_linear_loop(body: Program) -> Optional[Dict[int, int]]:
    """
    If loop body consists only of Add/Shift, and net pointer shift is 0,
    return per-iteration delta map: offset -> delta (relative to loop entry pointer).
    Otherwise None.
    """
    p = 0
    delta: Dict[int, int] = {}
    for n in body:
        if isinstance(n, Shift):
            p += n.delta
        elif isinstance(n, Add):
            key = p + n.offset
            delta[key] = delta.get(key, 0) + n.delta
        else:
            return None
    if p != 0:
        return None
    return {k: wrap_delta(v) for k, v in delta.items() if wrap_delta(v) != 0}


def multiply_loops(nodes: Program) -> Program:
    out: List[Node] = []
    for n in nodes:
        if not isinstance(n, Loop):
            out.append(n)
            continue
        body = multiply_loops(n.body)
        delta = analyze_linear_loop(body)
        # a bare origin decrement is a clear loop, not a transfer
        if delta is not None and delta.get(0) == -1 and len(delta) > 1:
            factors = tuple(sorted((off, k) for off, k in delta.items() if off != 0))
            out.append(Multiply(factors))
        else:
            out.append(Loop(body))
    return tuple(out)


# ---------------- Const-prop / known-zero removal ----------------
Known = Optional[int]  # known cell value mod 256; None means unknown


def _propagate(nodes: Program, fresh: bool) -> Program:
    p = 0
    tape: Dict[int, Known] = {}  # cell -> known value, None once clobbered

    def get(idx: int) -> Known:
        if idx in tape:
            return tape[idx]
        return 0 if fresh else None

    def setv(idx: int, v: Known) -> None:
        tape[idx] = None if v is None else v % 256

    out: List[Node] = []
    for n in nodes:
        if isinstance(n, Shift):
            p += n.delta
        elif isinstance(n, Add):
            kv = get(p + n.offset)
            setv(p + n.offset, None if kv is None else kv + n.delta)
        elif isinstance(n, SetZero):
            if get(p) == 0:
                continue
            setv(p, 0)
        elif isinstance(n, Multiply):
            x = get(p)
            if x == 0:
                continue
            for off, k in n.factors:
                kv = get(p + off)
                setv(p + off, None if x is None or kv is None else kv + x * k)
            setv(p, 0)
        elif isinstance(n, Input):
            setv(p, None)
        elif isinstance(n, Loop):
            if get(p) == 0:
                continue
            n = Loop(_propagate(n.body, fresh=False))
            # unknown trip count: only the exit condition survives
            tape.clear()
            fresh = False
            setv(p, 0)
        out.append(n)
    return tuple(out)


def propagate_constants(nodes: Program) -> Program:
    """
    Forward pass tracking known constants for absolute tape cells (relative to
    program start). Every cell is known zero until the first loop; a loop is a
    barrier that leaves only its exit cell known (zero).

    Loops, SetZero and Multiply whose origin is known zero are dropped.
    """
    return _propagate(nodes, fresh=True)


# ---------------- Dead-store elimination ----------------
def eliminate_dead_stores(nodes: Program) -> Program:
    """
    Remove stores that a later SetZero to the same cell overwrites unread.

    Cells are tracked relative to the start of the current straight-line run;
    Loop, Input and Output end the run and keep every pending store.
    """
    out: List[Optional[Node]] = []
    pending: Dict[int, List[int]] = {}  # cell -> indices of unread stores
    p = 0
    for n in nodes:
        if isinstance(n, Shift):
            p += n.delta
            out.append(n)
        elif isinstance(n, Add):
            pending.setdefault(p + n.offset, []).append(len(out))
            out.append(n)
        elif isinstance(n, SetZero):
            for i in pending.pop(p, []):
                out[i] = None
            pending[p] = [len(out)]
            out.append(n)
        elif isinstance(n, Multiply):
            # reads the origin and every target
            pending.pop(p, None)
            for off, _ in n.factors:
                pending.pop(p + off, None)
            out.append(n)
        elif isinstance(n, Loop):
            pending.clear()
            out.append(Loop(eliminate_dead_stores(n.body)))
        else:
            pending.clear()
            out.append(n)
    return tuple(n for n in out if n is not None)


# ---------------- Main optimizer pipeline ----------------
PASSES: List[Tuple[str, Pass]] = [
    ("merge_runs", merge_runs),
    ("fold_offsets", fold_offsets),
    ("clear_loops", clear_loops),
    ("multiply_loops", multiply_loops),
    ("propagate_constants", propagate_constants),
    ("dead_stores", eliminate_dead_stores),
]


@dataclass(frozen=True)
class OptimizeOptions:
    enabled: bool = True
    merge_runs: bool = True
    fold_offsets: bool = True
    clear_loops: bool = True
    multiply_loops: bool = True
    propagate_constants: bool = True
    dead_stores: bool = True
    max_rounds: int = 16


def enabled_passes(options: OptimizeOptions) -> List[Tuple[str, Pass]]:
    if not options.enabled:
        return []
    return [(name, fn) for name, fn in PASSES if getattr(options, name)]


def optimize(nodes: Program, options: Optional[OptimizeOptions] = None) -> Program:
    opts = options if options is not None else OptimizeOptions()
    passes = enabled_passes(opts)
    cur = tuple(nodes)
    if not passes:
        return cur

    for round_no in range(1, opts.max_rounds + 1):
        prev = cur
        for name, fn in passes:
            before = count_nodes(cur)
            cur = fn(cur)
            OPT_LOG.debug("round %d %-14s %d -> %d nodes", round_no, name, before, count_nodes(cur))
        if cur == prev:
            break
    else:
        OPT_LOG.warning("optimizer stopped after %d rounds without reaching a fixpoint", opts.max_rounds)
    return cur
