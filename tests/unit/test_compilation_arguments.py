"""Unit tests for CompilationArguments."""

import pytest

from texjob.contexts.rendering.arguments import CompilationArguments


@pytest.mark.unit
def test_tokens_bare_flag_and_value():
    """Flags without value render as `name`, others as `name=value`."""
    arguments = CompilationArguments()
    arguments.set("-interaction", "nonstopmode")
    arguments.set("-shell-escape")

    assert arguments.tokens() == ["-interaction=nonstopmode", "-shell-escape"]


@pytest.mark.unit
def test_last_write_wins_keeps_position():
    arguments = CompilationArguments({"-a": "1", "-b": "2"})
    arguments.set("-a", "3")

    assert arguments.tokens() == ["-a=3", "-b=2"]
    assert len(arguments) == 2


@pytest.mark.unit
def test_mutations_bump_generation():
    arguments = CompilationArguments()
    assert arguments.generation == 0

    arguments.set("-draftmode")
    arguments.remove("-draftmode")
    # Removing an absent name still counts as a mutation
    arguments.remove("-missing")

    assert arguments.generation == 3
    assert "-draftmode" not in arguments


@pytest.mark.unit
def test_setdefault_does_not_bump_generation():
    arguments = CompilationArguments()

    assert arguments.setdefault("-jobname", "texput") == "texput"
    assert arguments.setdefault("-jobname", "other") == "texput"
    assert arguments["-jobname"] == "texput"
    assert arguments.generation == 0


@pytest.mark.unit
def test_initial_values_are_copied():
    initial = {"-output-directory": "/tmp/out"}
    arguments = CompilationArguments(initial)
    arguments.set("-jobname", "report")

    assert initial == {"-output-directory": "/tmp/out"}
    assert list(arguments) == ["-output-directory", "-jobname"]
    assert arguments.get("-missing") is None


@pytest.mark.unit
def test_setdefault_fills_valueless_entry():
    arguments = CompilationArguments()
    arguments.set("-jobname")
    generation = arguments.generation

    assert arguments.setdefault("-jobname", "texput") == "texput"
    assert arguments.tokens() == ["-jobname=texput"]
    assert arguments.generation == generation
