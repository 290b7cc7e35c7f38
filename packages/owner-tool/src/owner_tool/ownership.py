# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Ownership transfer: extend a persisted voucher for a new owner."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import Settings
from .crypto.keys import load_certificate, load_private_key
from .errors import ArtifactLoadError, ArtifactWriteError, ExtensionError
from .formats.publickey import PublicKey
from .formats.voucher import OwnershipVoucher
from .storage import atomic_write, load_voucher

logger = logging.getLogger(__name__)


def extend_voucher(
    voucher_path: Union[str, Path],
    current_owner_key_path: Union[str, Path],
    new_owner_cert_path: Union[str, Path],
    settings: Optional[Settings] = None,
) -> OwnershipVoucher:
    """
    Append an ownership entry and rewrite the voucher in place.

    The new voucher is written next to the original and renamed over it, so
    the original survives any failure.

    Raises:
        ArtifactLoadError: The voucher cannot be loaded
        ExtensionError: Current owner key or new owner certificate cannot be
            read, owner key mismatch or signing failure
        ArtifactWriteError: The updated voucher could not be written
    """
    settings = settings or Settings()

    voucher = load_voucher(voucher_path)

    try:
        current_owner_key = load_private_key(current_owner_key_path, "current owner private key")
    except ArtifactLoadError as e:
        raise ExtensionError(f"Error reading current owner key: {e}") from e

    try:
        new_owner_cert = load_certificate(new_owner_cert_path, "new owner certificate")
        new_owner = PublicKey.from_certificate(new_owner_cert)
    except ValueError as e:
        raise ExtensionError(f"Error creating new public key: {e}") from e

    voucher.extend(
        current_owner_key,
        new_owner,
        check_owner_key=settings.strict_owner_key_check,
    )

    try:
        atomic_write(voucher_path, voucher.to_bytes())
    except OSError as e:
        raise ArtifactWriteError(f"Error writing new ownership voucher to {voucher_path}: {e}") from e

    logger.info(f"Ownership voucher {voucher_path} now has {len(voucher.entries)} entries")
    return voucher


def verify_voucher(voucher_path: Union[str, Path]) -> int:
    """
    Load a voucher and verify its ownership chain.

    Returns:
        Number of entries verified
    """
    voucher = load_voucher(voucher_path)
    count = voucher.verify_chain()
    logger.info(f"Verified {count} entries in {voucher_path}")
    return count
