# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
COSE_Sign1 signing for ownership voucher entries (RFC 9052).

Signatures are ECDSA with the raw r || s encoding COSE requires; the
cryptography library produces and consumes DER, so we convert at the edges.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict

import cbor2
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from ..constants import (
    COSE_HEADER_ALG,
    COSE_SIGN1_TAG,
    SIGNATURE_ALGORITHMS,
    CoseAlgorithm,
)
from ..errors import SigningError
from .keys import public_key_type

_ALGORITHM_HASHES = {
    CoseAlgorithm.ES256: (hashes.SHA256, 32),
    CoseAlgorithm.ES384: (hashes.SHA384, 48),
}


@dataclass
class Sign1Message:
    """Decoded COSE_Sign1 structure."""

    protected: bytes
    payload: bytes
    signature: bytes
    unprotected: Dict[Any, Any] = field(default_factory=dict)

    @property
    def algorithm(self) -> CoseAlgorithm:
        header = cbor2.loads(self.protected) if self.protected else {}
        if not isinstance(header, Mapping):
            raise ValueError("COSE protected header must be a map")
        return CoseAlgorithm(header[COSE_HEADER_ALG])

    def to_cbor(self) -> cbor2.CBORTag:
        return cbor2.CBORTag(
            COSE_SIGN1_TAG,
            [self.protected, self.unprotected, self.payload, self.signature],
        )

    def encode(self) -> bytes:
        return cbor2.dumps(self.to_cbor())

    @classmethod
    def decode(cls, data: bytes) -> "Sign1Message":
        """
        Parse an encoded COSE_Sign1 (tagged or untagged).

        Raises:
            ValueError: If the bytes are not a COSE_Sign1 structure
        """
        return cls.from_cbor(cbor2.loads(data))

    @classmethod
    def from_cbor(cls, value: Any) -> "Sign1Message":
        """
        Build a message from a decoded CBOR item.

        Decoders may hand back arrays as tuples and maps as read-only
        mappings, so any sequence or mapping is accepted.

        Raises:
            ValueError: If the item is not a COSE_Sign1 structure
        """
        if isinstance(value, cbor2.CBORTag):
            if value.tag != COSE_SIGN1_TAG:
                raise ValueError(f"Unexpected CBOR tag {value.tag}")
            value = value.value
        if not isinstance(value, (list, tuple)) or len(value) != 4:
            raise ValueError("COSE_Sign1 must be an array of four elements")

        protected, unprotected, payload, signature = value
        if not isinstance(protected, bytes) or not isinstance(payload, bytes):
            raise ValueError("COSE_Sign1 protected header and payload must be byte strings")
        if not isinstance(signature, bytes) or not isinstance(unprotected, Mapping):
            raise ValueError("Malformed COSE_Sign1 signature or unprotected header")
        return cls(
            protected=protected,
            payload=payload,
            signature=signature,
            unprotected=dict(unprotected),
        )


def _sig_structure(protected: bytes, payload: bytes) -> bytes:
    return cbor2.dumps(["Signature1", protected, b"", payload])


def sign1(payload: bytes, private_key) -> Sign1Message:
    """
    Sign a payload with an ECDSA private key.

    The algorithm (ES256 / ES384) follows the key's curve.

    Raises:
        SigningError: Unsupported key or failed signature
    """
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise SigningError(f"Unsupported signing key: {type(private_key).__name__}")

    try:
        key_type = public_key_type(private_key.public_key())
    except ValueError as e:
        raise SigningError(str(e)) from e

    algorithm, _ = SIGNATURE_ALGORITHMS[key_type]
    hash_class, coordinate_size = _ALGORITHM_HASHES[algorithm]
    protected = cbor2.dumps({COSE_HEADER_ALG: int(algorithm)})

    try:
        der_signature = private_key.sign(
            _sig_structure(protected, payload),
            ec.ECDSA(hash_class()),
        )
    except Exception as e:
        raise SigningError(f"Error signing entry: {e}") from e

    r, s = decode_dss_signature(der_signature)
    signature = r.to_bytes(coordinate_size, "big") + s.to_bytes(coordinate_size, "big")
    return Sign1Message(protected=protected, payload=payload, signature=signature)


def verify_sign1(message: Sign1Message, public_key) -> bool:
    """
    Verify a COSE_Sign1 signature.

    The algorithm named in the protected header must be the one that belongs
    to the key's curve.

    Returns:
        True if the signature is valid for public_key, False otherwise
    """
    try:
        algorithm = message.algorithm
        expected, _ = SIGNATURE_ALGORITHMS[public_key_type(public_key)]
    except (KeyError, TypeError, ValueError):
        return False
    if algorithm != expected:
        return False

    hash_class, coordinate_size = _ALGORITHM_HASHES[algorithm]
    if len(message.signature) != 2 * coordinate_size:
        return False

    r = int.from_bytes(message.signature[:coordinate_size], "big")
    s = int.from_bytes(message.signature[coordinate_size:], "big")
    try:
        public_key.verify(
            encode_dss_signature(r, s),
            _sig_structure(message.protected, message.payload),
            ec.ECDSA(hash_class()),
        )
        return True
    except InvalidSignature:
        return False
