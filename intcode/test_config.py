"""Tests for logging setup."""

from __future__ import annotations

import io
import logging

import pytest

from intcode import config
from intcode.machine import IntcodeMachine, InvalidOpcode


def _reset():
    config.configure_logging(logging.WARNING)


def test_configure_logging_level():
    stream = io.StringIO()
    logger = config.configure_logging("debug", stream=stream)
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        IntcodeMachine([104, 1, 99]).run()
        assert "Write output: 1" in stream.getvalue()
    finally:
        _reset()


def test_configure_logging_replaces_handler():
    config.configure_logging(logging.INFO, stream=io.StringIO())
    logger = config.configure_logging(logging.INFO, stream=io.StringIO())
    try:
        assert len(logger.handlers) == 1
    finally:
        _reset()


def test_configure_logging_from_env(monkeypatch):
    monkeypatch.setenv(config.LOG_LEVEL_ENV, "info")
    logger = config.configure_logging(stream=io.StringIO())
    try:
        assert logger.level == logging.INFO
    finally:
        _reset()


def test_configure_logging_bad_level(monkeypatch):
    monkeypatch.setenv(config.LOG_LEVEL_ENV, "chatty")
    logger = config.configure_logging(stream=io.StringIO())
    try:
        assert logger.level == logging.WARNING
    finally:
        _reset()


def test_errors_are_logged():
    stream = io.StringIO()
    config.configure_logging(logging.ERROR, stream=stream)
    try:
        with pytest.raises(InvalidOpcode):
            IntcodeMachine([42]).run()
        assert "ERROR" in stream.getvalue()
    finally:
        _reset()
