#!/usr/bin/env python3
"""
Tests for the code generators. The C tests build the generated program with
the system C compiler and are skipped when none is installed.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import shutil
import subprocess

import pytest

from bfc import generate, generate_bf, generate_c, optimize, parse, run
from bfc.codegen import CEmitter
from corpus import PROGRAMS

CC = shutil.which("cc") or shutil.which("gcc") or shutil.which("clang")
needs_cc = pytest.mark.skipif(CC is None, reason="no C compiler available")


def build_and_run(tmp_path, src, input_data=b"", optimized=True):
    prog = parse(src)
    if optimized:
        prog = optimize(prog)
    c_file = tmp_path / "prog.c"
    exe = tmp_path / "prog"
    c_file.write_text(generate_c(prog))
    subprocess.run([CC, "-std=c99", "-O1", "-o", str(exe), str(c_file)], check=True, capture_output=True)
    return subprocess.run([str(exe)], input=input_data, capture_output=True, timeout=30)


def test_c_program_shape():
    code = generate_c(parse("+[>.<-]"))
    assert "int main(void)" in code
    assert "while (*cell(0)) {" in code
    assert "\t\tputchar(*cell(0));" in code
    assert code.rstrip().endswith("}")
    assert code.count("{") == code.count("}")


def test_c_idioms_are_straight_line():
    code = generate_c(optimize(parse(",[-]>,[->++<]")))
    assert "while" not in code.split("int main(void)")[1]
    assert "*cell(0) = 0;" in code
    assert "if (*cell(0)) {" in code
    assert "*cell(1) += (unsigned char)(v * 2u);" in code


def test_c_add_uses_unsigned_delta():
    code = generate_c(optimize(parse(">---")))
    assert "*cell(1) += 253;" in code
    assert "move(1);" in code


def test_bf_target():
    assert generate_bf(optimize(parse(",[->>+<<]"))) == ",[->>+<<]\n"
    assert generate_bf(optimize(parse(",+++[-]>+<-"))) == ",[-]>+<-\n"
    assert generate_bf(optimize(parse("+++[-]>+<-"))) == ">+<-\n"
    assert generate(parse("+-"), "bf") == "+-\n"


def test_unknown_target():
    with pytest.raises(ValueError) as exc:
        generate(parse("+"), "llvm")
    assert "llvm" in str(exc.value)


def test_c_helpers_are_inline():
    code = generate_c(parse("+."))
    assert "static inline void underflow(void)" in code
    assert "static inline void grow(size_t i)" in code
    assert "static inline unsigned char *cell(long off)" in code
    assert "static inline void move(long d)" in code
    assert "static inline unsigned char read_input(void)" in code


def test_emitter_rejects_unbalanced_nesting():
    emitter = CEmitter()
    emitter.indent_level = 1
    with pytest.raises(RuntimeError):
        emitter.emit_program(parse("+"))


@needs_cc
@pytest.mark.parametrize("src", ["", "+.", ">+."])
def test_compiles_cleanly_with_warnings_as_errors(tmp_path, src):
    c_file = tmp_path / "prog.c"
    c_file.write_text(generate_c(optimize(parse(src))))
    proc = subprocess.run(
        [CC, "-std=c99", "-Wall", "-Werror", "-c", "-o", str(tmp_path / "prog.o"), str(c_file)],
        capture_output=True,
    )
    assert proc.returncode == 0, proc.stderr.decode()


@needs_cc
def test_compiled_echo(tmp_path):
    assert build_and_run(tmp_path, ",.", b"A").stdout == b"A"


@needs_cc
def test_compiled_eight_by_eight(tmp_path):
    assert build_and_run(tmp_path, "++++++++[>++++++++<-]>.").stdout == bytes([64])


@needs_cc
def test_compiled_eof_is_zero(tmp_path):
    assert build_and_run(tmp_path, "+,.").stdout == b"\x00"


@needs_cc
def test_compiled_underflow_aborts(tmp_path):
    proc = build_and_run(tmp_path, "+.<.", optimized=False)
    assert proc.returncode == 1
    assert proc.stdout == b"\x01"
    assert b"tape underflow" in proc.stderr


@needs_cc
def test_compiled_tape_grows(tmp_path):
    proc = build_and_run(tmp_path, ">" * 70000 + "+++.")
    assert proc.stdout == b"\x03"


@needs_cc
@pytest.mark.parametrize("optimized", [True, False])
@pytest.mark.parametrize("name,src,data,expected", PROGRAMS)
def test_compiled_matches_interpreter(tmp_path, name, src, data, expected, optimized):
    proc = build_and_run(tmp_path, src, data, optimized=optimized)
    assert proc.returncode == 0
    assert proc.stdout == expected == run(optimize(parse(src)), data).output
