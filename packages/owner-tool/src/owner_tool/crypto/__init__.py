# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Cryptographic utilities for the owner tool.

Modules:
    keys: device key generation, key and certificate loading
    certificate: device leaf certificate building
    hashing: digests and HMACs
    cose: COSE_Sign1 signing of voucher entries
"""

from .keys import (
    DeviceIdentity,
    HasPublicKey,
    generate_device_identity,
    load_certificate,
    load_certificate_chain,
    load_private_key,
    public_key_type,
    public_keys_equal,
)

from .certificate import (
    build_device_certificate,
    build_device_chain,
)

from .hashing import (
    compute_digest,
    compute_hmac,
    verify_hmac,
)

from .cose import (
    Sign1Message,
    sign1,
    verify_sign1,
)

__all__ = [
    # Keys
    "DeviceIdentity",
    "HasPublicKey",
    "generate_device_identity",
    "load_certificate",
    "load_certificate_chain",
    "load_private_key",
    "public_key_type",
    "public_keys_equal",
    # Certificates
    "build_device_certificate",
    "build_device_chain",
    # Hashing
    "compute_digest",
    "compute_hmac",
    "verify_hmac",
    # COSE
    "Sign1Message",
    "sign1",
    "verify_sign1",
]
