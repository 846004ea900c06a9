"""Writes assembly reference stubs for CIL sources."""

from pathlib import Path
from typing import Iterable

import structlog

from ilproj_runtime.core.exceptions import ArgumentInvalidError

logger = structlog.get_logger()

REFERENCE_TEMPLATE = ".assembly extern {name} {{ }}"


def write_reference_stubs(references: Iterable[str], target: Path, template: str = REFERENCE_TEMPLATE) -> Path:
    """Write one declaration line per reference to ``target``.

    The parent folder is created when missing; an existing file is replaced.
    """
    if target is None or str(target) == "":
        raise ArgumentInvalidError("target must not be empty")
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(target, "w", encoding="utf-8", newline="\n") as f:
        for reference in references:
            f.write(template.format(name=reference) + "\n")
            count += 1

    logger.info("Wrote reference stubs", target=str(target), count=count)
    return target
