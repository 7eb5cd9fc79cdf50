"""Spec file I/O: reading and persisting spec documents.

The merge engine only ever produces text; this module is where that text
reaches disk. Every read and write uses ``encoding="utf-8"`` explicitly.

Public API
----------
- ``read_spec``          : read a spec file
- ``write_spec_atomic``  : write-then-rename a single spec file
- ``write_specs``        : persist a batch of merged specs
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Mapping, Union

PathLike = Union[str, Path]


def read_spec(file_path: PathLike) -> str:
    """Read a spec file as UTF-8 text."""
    return Path(file_path).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


def write_spec_atomic(file_path: PathLike, content: str) -> Path:
    """Write a spec file so readers never observe partial content.

    The text goes to a temporary file in the target directory, which is
    then renamed over the target. Parent directories are created.

    Args:
        file_path: Destination spec path.
        content: Full document text.

    Returns:
        The destination path.
    """
    target = Path(file_path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if target.exists():
            os.chmod(tmp_name, target.stat().st_mode & 0o777)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    return target


def write_specs(merged: Mapping[PathLike, str]) -> list[Path]:
    """Persist merged specs, one atomic write per target.

    Args:
        merged: Mapping of target path to merged text.

    Returns:
        Written paths in mapping order.
    """
    return [write_spec_atomic(path, content) for path, content in merged.items()]
