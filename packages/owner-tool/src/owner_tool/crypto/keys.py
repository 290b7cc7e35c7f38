# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Key generation and key/certificate loading.

Device keys are ECDSA (P-256 by default). Operator-supplied material is read
from PEM or DER files.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..constants import PublicKeyType
from ..errors import ArtifactLoadError, KeyGenerationError, UnsupportedKeyError
from ..randomness import RandomSource

logger = logging.getLogger(__name__)

# Curve objects and group orders for supported device key curves
CURVES = {
    "secp256r1": (
        ec.SECP256R1,
        0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
    ),
    "secp384r1": (
        ec.SECP384R1,
        0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFC7634D81F4372DDF581A0DB248B0A77AECEC196ACCC52973,
    ),
}

_KEY_TYPES = {
    "secp256r1": PublicKeyType.SECP256R1,
    "secp384r1": PublicKeyType.SECP384R1,
}


class HasPublicKey(Protocol):
    """
    Something that can supply a public key for certificate embedding.

    Satisfied by DeviceIdentity, loaded private keys and X.509 certificates.
    """

    def public_key(self):
        ...


@dataclass
class DeviceIdentity:
    """Freshly generated device key pair."""

    private_key: ec.EllipticCurvePrivateKey

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.private_key.public_key()

    def private_key_der(self) -> bytes:
        """PKCS#8 DER encoding, as stored in the device credential."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


def generate_device_identity(curve_name: str, rng: RandomSource) -> DeviceIdentity:
    """
    Generate a device key pair from the given random source.

    The private scalar is drawn from rng with 64 extra bits and reduced into
    [1, n - 1], keeping the modulo bias negligible.

    Args:
        curve_name: "secp256r1" or "secp384r1"
        rng: Random byte provider

    Returns:
        DeviceIdentity holding the new private key

    Raises:
        KeyGenerationError: If the curve is unknown or key derivation fails
    """
    if curve_name not in CURVES:
        raise KeyGenerationError(f"Unsupported device key curve: {curve_name}")

    curve_class, order = CURVES[curve_name]
    byte_length = (order.bit_length() + 7) // 8 + 8

    try:
        candidate = int.from_bytes(rng.token_bytes(byte_length), "big")
        scalar = candidate % (order - 1) + 1
        private_key = ec.derive_private_key(scalar, curve_class())
    except Exception as e:
        raise KeyGenerationError(f"Error generating device key: {e}") from e

    logger.debug(f"Generated {curve_name} device key")
    return DeviceIdentity(private_key=private_key)


def public_key_type(public_key) -> PublicKeyType:
    """
    Map a cryptography public key to its FDO key type.

    Raises:
        UnsupportedKeyError: If the key is not ECDSA P-256 or P-384
    """
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise UnsupportedKeyError(f"Unsupported key algorithm: {type(public_key).__name__}")

    key_type = _KEY_TYPES.get(public_key.curve.name)
    if key_type is None:
        raise UnsupportedKeyError(f"Unsupported curve: {public_key.curve.name}")
    return key_type


def public_key_der(public_key) -> bytes:
    """DER SubjectPublicKeyInfo bytes."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def public_keys_equal(first, second) -> bool:
    """Compare two public keys by their SubjectPublicKeyInfo encoding."""
    return public_key_der(first) == public_key_der(second)


def _read(path: Union[str, Path], what: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ArtifactLoadError(f"Error loading {what} at {path}: {e}") from e


def load_private_key(path: Union[str, Path], what: str = "private key"):
    """
    Load a private key from a DER (PKCS#8 / SEC1) or PEM file.

    Raises:
        ArtifactLoadError: If the file is missing or does not hold a key
    """
    contents = _read(path, what)
    try:
        if contents.lstrip().startswith(b"-----BEGIN"):
            return serialization.load_pem_private_key(contents, password=None)
        return serialization.load_der_private_key(contents, password=None)
    except (ValueError, TypeError) as e:
        raise ArtifactLoadError(f"Error loading {what} at {path}: {e}") from e


def load_certificate(path: Union[str, Path], what: str = "certificate") -> x509.Certificate:
    """Load a single PEM (or DER) certificate."""
    contents = _read(path, what)
    try:
        if contents.lstrip().startswith(b"-----BEGIN"):
            return x509.load_pem_x509_certificate(contents)
        return x509.load_der_x509_certificate(contents)
    except ValueError as e:
        raise ArtifactLoadError(f"Error loading {what} at {path}: {e}") from e


def load_certificate_chain(path: Union[str, Path], what: str = "certificate chain") -> List[x509.Certificate]:
    """Load an ordered PEM bundle of certificates."""
    contents = _read(path, what)
    try:
        return x509.load_pem_x509_certificates(contents)
    except ValueError as e:
        raise ArtifactLoadError(f"Error loading {what} at {path}: {e}") from e


def save_private_key(key, path: Path) -> None:
    """Save a private key as unencrypted PKCS#8 DER."""
    with open(path, "wb") as f:
        f.write(
            key.private_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )


def save_certificates(certs: List[x509.Certificate], path: Path) -> None:
    """Save one or more certificates as a PEM bundle."""
    with open(path, "wb") as f:
        for cert in certs:
            f.write(cert.public_bytes(serialization.Encoding.PEM))
