#!/usr/bin/env python3
"""
Tests for turning source text into the raw IR.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from bfc import Add, BFSyntaxError, Input, Loop, Output, Shift, parse, tokenize
from bfc.errors import UNMATCHED_CLOSE, UNMATCHED_OPEN


def test_each_instruction():
    assert parse("+-<>,.") == (Add(1), Add(-1), Shift(-1), Shift(1), Input(), Output())


def test_runs_are_not_merged():
    """The parser emits run length 1; merging is the optimizer's job."""
    assert parse("+++") == (Add(1), Add(1), Add(1))


def test_comments_are_ignored():
    assert parse("add one + then\nprint it .") == (Add(1), Output())
    assert parse("") == ()
    assert parse("no instructions here") == ()


def test_nested_loops():
    assert parse("+[>[-]<-]") == (
        Add(1),
        Loop((Shift(1), Loop((Add(-1),)), Shift(-1), Add(-1))),
    )


def test_empty_loop():
    assert parse("[]") == (Loop(()),)


def test_tokenize_keeps_positions():
    assert tokenize("a+\n[x]") == [(1, '+'), (3, '['), (5, ']')]


def test_unmatched_closing_bracket():
    with pytest.raises(BFSyntaxError) as exc:
        parse("+-]")
    errors = exc.value.errors
    assert len(errors) == 1
    assert errors[0].kind == UNMATCHED_CLOSE
    assert (errors[0].pos, errors[0].line, errors[0].column) == (2, 1, 3)


def test_unmatched_opening_brackets_are_all_reported():
    with pytest.raises(BFSyntaxError) as exc:
        parse("[\n  [+")
    errors = exc.value.errors
    assert [e.kind for e in errors] == [UNMATCHED_OPEN, UNMATCHED_OPEN]
    assert [(e.line, e.column) for e in errors] == [(1, 1), (2, 3)]


def test_errors_are_sorted_by_position():
    with pytest.raises(BFSyntaxError) as exc:
        parse("[+]]x[")
    errors = exc.value.errors
    assert [(e.kind, e.pos) for e in errors] == [(UNMATCHED_CLOSE, 3), (UNMATCHED_OPEN, 5)]


def test_error_message_points_at_bracket():
    with pytest.raises(BFSyntaxError) as exc:
        parse("+\n-]\n.", name="prog.b")
    message = str(exc.value)
    assert "SyntaxError of prog.b" in message
    assert "Unmatched closing bracket ']' on line 2 column 2" in message
    assert ">    2 | -]" in message
    assert "       |  ^ here" in message
    assert "Hint:" in message
