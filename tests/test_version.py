"""Tests for version parsing and ordering."""

import pytest

from ilproj_runtime.core.exceptions import (
    ErrorKind,
    VersionFormatError,
    VersionOutOfRangeError,
    VersionReadFailure,
)
from ilproj_runtime.core.version import Version


@pytest.mark.parametrize("text,components", [
    ("1.2", (1, 2)),
    ("1.2.3", (1, 2, 3)),
    ("1.2.3.4", (1, 2, 3, 4)),
    ("  2.0.1\r\n", (2, 0, 1)),
    ("0.0", (0, 0)),
    ("2147483647.0", (2147483647, 0)),
])
def test_parse_valid(text, components):
    v = Version.parse(text)
    assert v.components == components
    assert v.major == components[0]
    assert v.minor == components[1]


@pytest.mark.parametrize("text", ["1", "1.2.3.4.5", "1.a", "", "1..2", "1.-2", "1.+2", "1.2.", "v1.2", "1,2"])
def test_parse_malformed(text):
    with pytest.raises(VersionFormatError) as exc_info:
        Version.parse(text)
    assert exc_info.value.kind == ErrorKind.VERSION_MALFORMED
    assert exc_info.value.failure == VersionReadFailure.MALFORMED


def test_parse_overflow():
    with pytest.raises(VersionOutOfRangeError) as exc_info:
        Version.parse("1.99999999999")
    assert exc_info.value.kind == ErrorKind.VERSION_OUT_OF_RANGE
    # Out-of-range is still a malformed marker for callers reading versions
    assert exc_info.value.failure == VersionReadFailure.MALFORMED


def test_parse_just_over_int32():
    with pytest.raises(VersionOutOfRangeError):
        Version.parse("2147483648.0")


def test_ordering():
    assert Version.parse("1.0") < Version.parse("1.1")
    assert Version.parse("2.0") > Version.parse("1.9.9.9")
    assert Version.parse("1.2.3") == Version.parse("1.2.3")
    assert Version.parse("1.10") > Version.parse("1.9")
    assert not Version.parse("1.1") < Version.parse("1.1")


def test_missing_components_sort_first():
    assert Version.parse("1.0") < Version.parse("1.0.0")
    assert Version.parse("1.0") != Version.parse("1.0.0")
    assert Version.parse("1.0.0") < Version.parse("1.0.0.0")


def test_str_and_optional_parts():
    v = Version.parse("3.4")
    assert str(v) == "3.4"
    assert v.build is None
    assert v.revision is None
    v = Version.parse("3.4.5.6")
    assert str(v) == "3.4.5.6"
    assert v.build == 5
    assert v.revision == 6


def test_hashable():
    assert len({Version.parse("1.0"), Version(1, 0), Version.parse("1.0.0")}) == 2


def test_constructor_validation():
    with pytest.raises(VersionFormatError):
        Version(1, -1)
    with pytest.raises(VersionOutOfRangeError):
        Version(1, 2**31)
    with pytest.raises(VersionFormatError):
        Version(1, 0, None, 3)


@pytest.mark.parametrize("text", ["1\n.2", "1.2\n.3", "1. 2", "1.2 .3"])
def test_parse_rejects_whitespace_inside_components(text):
    with pytest.raises(VersionFormatError):
        Version.parse(text)
