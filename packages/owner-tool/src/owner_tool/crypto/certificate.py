# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Device certificate generation.

Builds the X.509 leaf certificate for a newly provisioned device, signed by
the device CA whose chain is supplied by the operator.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID

from ..errors import CertificateBuildError
from ..randomness import RandomSource, default_random_source
from .keys import HasPublicKey

logger = logging.getLogger(__name__)

# 64 bits of CSPRNG output for serial numbers, per section 7.1 of the
# CA/Browser Forum Baseline Requirements
SERIAL_NUMBER_BYTES = 8

DEFAULT_VALIDITY_DAYS = 3650


def random_serial_number(rng: RandomSource) -> int:
    """Draw a positive certificate serial number from rng."""
    serial = 0
    while serial == 0:
        serial = int.from_bytes(rng.token_bytes(SERIAL_NUMBER_BYTES), "big")
    return serial


def build_device_certificate(
    subject_cn: str,
    device_key: HasPublicKey,
    signer,
    ca_chain: Sequence[x509.Certificate],
    rng: Optional[RandomSource] = None,
    validity_days: int = DEFAULT_VALIDITY_DAYS,
) -> x509.Certificate:
    """
    Build and sign a device leaf certificate.

    Args:
        subject_cn: Device identifier, used as the subject common name
        device_key: Supplies the public key to certify
        signer: Device CA private key
        ca_chain: Device CA certificates, issuer first
        rng: Random source for the serial number
        validity_days: Lifetime starting now (default 10 years)

    Returns:
        Signed X.509 v3 certificate (SHA-384)

    Raises:
        CertificateBuildError: Empty chain, invalid field or failed signature
    """
    if not ca_chain:
        raise CertificateBuildError("Insufficient device CA certs in the chain")

    rng = rng or default_random_source()
    now = datetime.now(timezone.utc)

    steps = [
        ("subject name", lambda b: b.subject_name(
            x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_cn)])
        )),
        ("issuer name", lambda b: b.issuer_name(ca_chain[0].subject)),
        ("device public key", lambda b: b.public_key(device_key.public_key())),
        ("not-before", lambda b: b.not_valid_before(now)),
        ("not-after", lambda b: b.not_valid_after(now + timedelta(days=validity_days))),
        ("serial number", lambda b: b.serial_number(random_serial_number(rng))),
    ]

    # CertificateBuilder always produces v3 certificates
    builder = x509.CertificateBuilder()
    for field, apply in steps:
        try:
            builder = apply(builder)
        except Exception as e:
            raise CertificateBuildError(f"Error setting {field}: {e}") from e

    try:
        cert = builder.sign(signer, hashes.SHA384())
    except Exception as e:
        raise CertificateBuildError(f"Error signing certificate: {e}") from e

    logger.info(f"Built device certificate for {subject_cn} (serial {cert.serial_number:x})")
    return cert


def build_device_chain(
    leaf: x509.Certificate,
    ca_chain: Sequence[x509.Certificate],
) -> List[x509.Certificate]:
    """Device certificate chain: leaf followed by the CA chain."""
    return [leaf, *ca_chain]
