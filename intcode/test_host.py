"""Tests for program parsing and the ASCII host."""

from __future__ import annotations

import pytest

from intcode.host import (
    IntcodeHost, parse_program, run_program,
    encode_ascii, decode_ascii, split_ascii,
)
from intcode.machine import StepResult, MachineBlocked


def test_parse_program():
    assert parse_program("1,0,0,3,99\n") == [1, 0, 0, 3, 99]
    assert parse_program("  109, -1 ,204,-1\n\n") == [109, -1, 204, -1]
    assert parse_program("\n") == []


def test_parse_program_rejects_garbage():
    with pytest.raises(ValueError):
        parse_program("1,2,,3")
    with pytest.raises(ValueError):
        parse_program("1,two,3")


def test_run_program():
    assert run_program([3, 0, 4, 0, 99], [77]) == [77]
    with pytest.raises(MachineBlocked):
        run_program([3, 0, 4, 0, 99])


def test_ascii_round_trip():
    assert encode_ascii("A\n") == [65, 10]
    assert decode_ascii([72, 105, 10]) == "Hi\n"


def test_decode_ascii_rejects_words():
    with pytest.raises(ValueError):
        decode_ascii([72, 1000])
    with pytest.raises(ValueError):
        decode_ascii([-1])


def test_split_ascii():
    text, rest = split_ascii([79, 75, 10, 19349530])
    assert text == "OK\n"
    assert rest == [19349530]
    assert split_ascii([65]) == ("A", [])


def test_split_ascii_keeps_utf8():
    values = encode_ascii("caf\u00e9\n") + [1000]
    assert split_ascii(values) == ("caf\u00e9\n", [1000])


def test_send_line():
    # reads two words, prints their sum
    host = IntcodeHost([3, 11, 3, 12, 1, 11, 12, 13, 4, 13, 99])
    host.send_line("A")
    assert host.run() == StepResult.HALTED
    assert host.recv() == [65 + 10]


def test_interact():
    # prints "?\n", reads a character, echoes it
    host = IntcodeHost([104, 63, 104, 10, 3, 20, 4, 20, 99])
    result, text = host.interact()
    assert result == StepResult.BLOCKED
    assert text == "?\n"

    fork = host.clone()
    result, text = host.interact("Z")
    assert result == StepResult.HALTED
    assert text == "Z"
    assert host.transcript == ["?\n", "Z"]

    result, text = fork.interact("Q")
    assert (result, text) == (StepResult.HALTED, "Q")
    assert fork.halted and host.halted
