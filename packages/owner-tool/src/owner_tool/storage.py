# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Artifact persistence.

Artifacts are never written in place: data goes to a sibling "<name>.new"
file which is then renamed over the target, so a crash leaves either the old
file or the new one, never a truncated mix. New artifacts are hard-linked
into place instead, which never replaces an existing file.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .errors import ArtifactLoadError, OutputExistsError
from .formats.credential import DeviceCredential
from .formats.voucher import OwnershipVoucher

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Secret artifacts (device credentials) are only readable by the owner
SECRET_FILE_MODE = 0o600


def temporary_path(path: PathLike) -> Path:
    path = Path(path)
    return path.with_name(f"{path.name}.new")


def ensure_absent(path: PathLike, kind: str) -> None:
    """Raise OutputExistsError if an output artifact already exists."""
    if Path(path).exists():
        raise OutputExistsError(kind, path)


def read_artifact(path: PathLike, what: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ArtifactLoadError(f"Error opening {what} at {path}: {e}") from e


def _write_temporary(path: PathLike, data: bytes, mode: Optional[int] = None) -> Path:
    tmp = temporary_path(path)
    with open(tmp, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    if mode is not None:
        tmp.chmod(mode)
    return tmp


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def atomic_write(path: PathLike, data: bytes, mode: Optional[int] = None) -> None:
    """
    Replace path with data atomically.

    On any failure the temporary file is removed and the original file, if
    there was one, is left untouched.
    """
    tmp = temporary_path(path)
    try:
        _write_temporary(path, data, mode)
        os.replace(tmp, path)
    except BaseException:
        _discard(tmp)
        raise
    logger.debug(f"Wrote {len(data)} bytes to {path}")


def commit_all(outputs: Sequence[Tuple[PathLike, bytes, Optional[int]]]) -> None:
    """
    Write several new artifacts so that either all of them appear or none.

    Every artifact is first written to its temporary path; only then are they
    linked into place. Linking fails if a target already exists, so a file
    that appeared after the caller's checks is neither overwritten nor
    removed. If a link fails, artifacts already committed by this call are
    removed again.
    """
    temporaries: List[Path] = []
    committed: List[Path] = []
    try:
        for path, data, mode in outputs:
            temporaries.append(temporary_path(path))
            _write_temporary(path, data, mode)
        for (path, _, _), tmp in zip(outputs, temporaries):
            os.link(tmp, path)
            committed.append(Path(path))
            _discard(tmp)
    except BaseException:
        for tmp in temporaries:
            _discard(tmp)
        for path in committed:
            _discard(path)
        raise


def load_voucher(path: PathLike) -> OwnershipVoucher:
    """Read and decode an ownership voucher file."""
    return OwnershipVoucher.from_bytes(read_artifact(path, "ownership voucher"))


def load_credential(path: PathLike) -> DeviceCredential:
    """Read and decode a device credential file."""
    return DeviceCredential.from_bytes(read_artifact(path, "device credential"))
