"""Tests for RegistryCompleter."""

import pytest
from prompt_toolkit.document import Document

from cli.completer import RegistryCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    """Create a completer that already knows two file names."""
    completer = RegistryCompleter()
    completer.remember("report.pdf")
    completer.remember("readme.md")
    return completer


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


def test_empty_input_offers_every_command(completer):
    assert get_completions_list(completer, "") == COMMANDS


def test_partial_command(completer):
    assert get_completions_list(completer, "re") == ["read", "read-details"]


def test_partial_command_is_case_insensitive(completer):
    assert "transfer" in get_completions_list(completer, "TR")


def test_name_completion_after_name_command(completer):
    assert get_completions_list(completer, "read ") == ["readme.md", "report.pdf"]
    assert get_completions_list(completer, "delete rep") == ["report.pdf"]


def test_only_first_argument_is_completed(completer):
    assert get_completions_list(completer, "transfer report.pdf ") == []
    assert get_completions_list(completer, "transfer report.pdf o") == []


def test_no_name_completion_for_other_commands(completer):
    assert get_completions_list(completer, "by-hash ") == []
    assert get_completions_list(completer, "create r") == []


def test_forgotten_names_are_not_offered(completer):
    completer.forget("report.pdf")
    completer.forget("never-known")
    assert get_completions_list(completer, "hash ") == ["readme.md"]
