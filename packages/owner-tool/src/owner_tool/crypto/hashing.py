# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Digest and HMAC helpers.

All voucher hashing goes through these functions so every component uses the
same algorithm mapping.
"""

import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from ..constants import HashType
from ..errors import HMACError

_HMAC_DIGESTS = {
    HashType.HMAC_SHA256: hashes.SHA256,
    HashType.HMAC_SHA384: hashes.SHA384,
}


def compute_digest(hash_type: HashType, data: bytes) -> bytes:
    """
    Compute a plain digest.

    Example:
        >>> len(compute_digest(HashType.SHA384, b"header"))
        48
    """
    if hash_type.is_hmac:
        raise ValueError(f"{hash_type.name} is a MAC, not a digest")
    return hashlib.new(hash_type.digest_name, data).digest()


def compute_hmac(hash_type: HashType, key: bytes, data: bytes) -> bytes:
    """
    Compute an HMAC over data.

    Raises:
        HMACError: Unknown HMAC type or invalid key
    """
    digest = _HMAC_DIGESTS.get(hash_type)
    if digest is None:
        raise HMACError(f"{hash_type.name} is not an HMAC type")
    try:
        mac = crypto_hmac.HMAC(key, digest())
        mac.update(data)
        return mac.finalize()
    except Exception as e:
        raise HMACError(f"Error computing HMAC: {e}") from e


def verify_hmac(hash_type: HashType, key: bytes, data: bytes, expected: bytes) -> bool:
    """Constant-time HMAC check."""
    digest = _HMAC_DIGESTS.get(hash_type)
    if digest is None:
        raise HMACError(f"{hash_type.name} is not an HMAC type")
    mac = crypto_hmac.HMAC(key, digest())
    mac.update(data)
    try:
        mac.verify(expected)
        return True
    except InvalidSignature:
        return False
