from __future__ import annotations

from typing import Callable, Dict, List

from .ir import CELL_SIZE, Add, Input, Loop, Multiply, Node, Output, Program, SetZero, Shift, to_source
from .logger import CODEGEN_LOG

# Runtime shared by every generated C program. The tape grows to the right on
# demand; moving or addressing left of cell 0 aborts with status 1. Helpers
# are inline so unused ones stay silent under -Wall.
C_PRELUDE = r"""#include <stdio.h>
#include <stdlib.h>
#include <string.h>

static unsigned char *m = NULL;
static size_t cap = 0;
static size_t h = 0;

static inline void underflow(void)
{
	fflush(stdout);
	fputs("tape underflow\n", stderr);
	exit(1);
}

static inline void grow(size_t i)
{
	size_t n;
	if (i < cap)
		return;
	n = cap ? cap : 32768;
	while (n <= i)
		n *= 2;
	m = realloc(m, n);
	if (m == NULL) {
		fputs("out of memory\n", stderr);
		exit(1);
	}
	memset(m + cap, 0, n - cap);
	cap = n;
}

static inline unsigned char *cell(long off)
{
	if (off < 0 && (size_t)(-off) > h)
		underflow();
	grow(h + off);
	return &m[h + off];
}

static inline void move(long d)
{
	if (d < 0 && (size_t)(-d) > h)
		underflow();
	h += d;
	grow(h);
}

static inline unsigned char read_input(void)
{
	int c = getchar();
	return c == EOF ? 0 : (unsigned char)c;
}
"""


class CEmitter:
    """Emits a freestanding C99 program equivalent to an IR Program."""

    def __init__(self):
        self.lines: List[str] = []
        self.indent_level = 0

    def emit_line(self, content: str) -> None:
        self.lines.append("\t" * self.indent_level + content)

    def emit_seq(self, nodes: Program) -> None:
        for n in nodes:
            self.emit_node(n)

    def emit_node(self, n: Node) -> None:
        if isinstance(n, Add):
            self.emit_line(f"*cell({n.offset}) += {n.delta % CELL_SIZE};")
        elif isinstance(n, Shift):
            self.emit_line(f"move({n.delta});")
        elif isinstance(n, Output):
            self.emit_line("putchar(*cell(0));")
        elif isinstance(n, Input):
            self.emit_line("*cell(0) = read_input();")
        elif isinstance(n, SetZero):
            self.emit_line("*cell(0) = 0;")
        elif isinstance(n, Multiply):
            self.emit_line("if (*cell(0)) {")
            self.indent_level += 1
            self.emit_line("unsigned char v = *cell(0);")
            for off, factor in n.factors:
                self.emit_line(f"*cell({off}) += (unsigned char)(v * {factor % CELL_SIZE}u);")
            self.emit_line("*cell(0) = 0;")
            self.indent_level -= 1
            self.emit_line("}")
        elif isinstance(n, Loop):
            self.emit_line("while (*cell(0)) {")
            self.indent_level += 1
            self.emit_seq(n.body)
            self.indent_level -= 1
            self.emit_line("}")
        else:
            raise TypeError(f"Unknown IR node: {n!r}")

    def emit_program(self, nodes: Program) -> str:
        self.lines = C_PRELUDE.rstrip("\n").split("\n")
        self.emit_line("")
        self.emit_line("int main(void)")
        self.emit_line("{")
        self.indent_level += 1
        self.emit_line("grow(0);")
        self.emit_seq(nodes)
        self.emit_line("fflush(stdout);")
        self.emit_line("return 0;")
        self.indent_level -= 1
        self.emit_line("}")
        if self.indent_level != 0:
            raise RuntimeError(f"unbalanced block nesting (indent level {self.indent_level})")
        return "\n".join(self.lines) + "\n"


def generate_c(nodes: Program) -> str:
    code = CEmitter().emit_program(nodes)
    CODEGEN_LOG.debug("generated %d lines of C", code.count("\n"))
    return code


def generate_bf(nodes: Program) -> str:
    return to_source(nodes) + "\n"


TARGETS: Dict[str, Callable[[Program], str]] = {
    "c": generate_c,
    "bf": generate_bf,
}


def generate(nodes: Program, target: str = "c") -> str:
    try:
        gen = TARGETS[target]
    except KeyError:
        raise ValueError(f"Unknown target {target!r} (expected one of: {', '.join(sorted(TARGETS))})") from None
    return gen(nodes)
