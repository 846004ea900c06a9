"""Tests for assembly reference stub generation."""

from pathlib import Path

import pytest

from ilproj_runtime.core.exceptions import ArgumentInvalidError
from ilproj_runtime.tasks.references import write_reference_stubs


def test_writes_one_line_per_reference(tmp_path: Path):
    target = tmp_path / "obj" / "Debug" / "references.il"
    result = write_reference_stubs(["mscorlib", "System.Core"], target)

    assert result == target
    assert target.read_text().splitlines() == [
        ".assembly extern mscorlib { }",
        ".assembly extern System.Core { }",
    ]


def test_replaces_existing_file(tmp_path: Path):
    target = tmp_path / "references.il"
    target.write_text("old content\n" * 5)
    write_reference_stubs(["mscorlib"], target)
    assert target.read_text() == ".assembly extern mscorlib { }\n"


def test_empty_reference_list(tmp_path: Path):
    target = tmp_path / "references.il"
    write_reference_stubs([], target)
    assert target.read_text() == ""


def test_custom_template(tmp_path: Path):
    target = tmp_path / "refs.txt"
    write_reference_stubs(["a", "b"], target, template="ref {name}")
    assert target.read_text() == "ref a\nref b\n"


def test_requires_target():
    with pytest.raises(ArgumentInvalidError):
        write_reference_stubs(["a"], "")
