"""Four-part version numbers as stored in version.txt markers."""

from __future__ import annotations

import re
from functools import total_ordering
from typing import Optional, Tuple

from ilproj_runtime.core.exceptions import VersionFormatError, VersionOutOfRangeError

MAX_COMPONENT = 2**31 - 1
MIN_COMPONENTS = 2
MAX_COMPONENTS = 4

_COMPONENT_RE = re.compile(r"[0-9]+")


@total_ordering
class Version:
    """Immutable major.minor[.build[.revision]] version.

    Undeclared trailing components sort before any declared value, so
    ``1.0 < 1.0.0`` and the two are not equal.
    """

    __slots__ = ("_components",)

    def __init__(self, major: int, minor: int, build: Optional[int] = None, revision: Optional[int] = None):
        if build is None and revision is not None:
            raise VersionFormatError("Revision requires a build component")
        components = tuple(c for c in (major, minor, build, revision) if c is not None)
        for component in components:
            if component < 0:
                raise VersionFormatError(f"Version component must not be negative: {component}")
            if component > MAX_COMPONENT:
                raise VersionOutOfRangeError(f"Version component out of range: {component}")
        self._components: Tuple[int, ...] = components

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``text`` such as ``"1.2.3"``.

        Raises:
            VersionFormatError: wrong component count or non-numeric component
            VersionOutOfRangeError: component greater than 2**31 - 1
        """
        if text is None:
            raise VersionFormatError("Version text is None")
        parts = text.strip().split(".")
        if not MIN_COMPONENTS <= len(parts) <= MAX_COMPONENTS:
            raise VersionFormatError(
                f"Version must have {MIN_COMPONENTS} to {MAX_COMPONENTS} components: {text!r}"
            )
        values = []
        for part in parts:
            if not _COMPONENT_RE.fullmatch(part):
                raise VersionFormatError(f"Version component is not a non-negative integer: {part!r}")
            value = int(part)
            if value > MAX_COMPONENT:
                raise VersionOutOfRangeError(f"Version component out of range: {part}")
            values.append(value)
        return cls(*values)

    @property
    def components(self) -> Tuple[int, ...]:
        return self._components

    @property
    def major(self) -> int:
        return self._components[0]

    @property
    def minor(self) -> int:
        return self._components[1]

    @property
    def build(self) -> Optional[int]:
        return self._components[2] if len(self._components) > 2 else None

    @property
    def revision(self) -> Optional[int]:
        return self._components[3] if len(self._components) > 3 else None

    def _key(self) -> Tuple[int, ...]:
        return self._components + (-1,) * (MAX_COMPONENTS - len(self._components))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._components == other._components

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._components)

    def __str__(self) -> str:
        return ".".join(str(c) for c in self._components)

    def __repr__(self) -> str:
        return f"Version('{self}')"
