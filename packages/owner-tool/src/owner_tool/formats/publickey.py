# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Public key and certificate chain representations.

A PublicKey is [pk_type, pk_encoding, body], where the body is a DER
SubjectPublicKeyInfo (Crypto), a DER certificate (X509) or an array of DER
certificates (X5Chain).
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

from ..constants import PublicKeyEncoding, PublicKeyType
from ..crypto.keys import public_key_der, public_key_type
from ..errors import ArtifactDecodeError
from .codec import decode, encode, expect_array, expect_type


@dataclass(frozen=True)
class X5Chain:
    """Ordered certificate chain, leaf first, kept as DER."""

    certificates: Tuple[bytes, ...]

    @classmethod
    def from_certificates(cls, certs: Sequence[x509.Certificate]) -> "X5Chain":
        return cls(tuple(cert.public_bytes(serialization.Encoding.DER) for cert in certs))

    def parsed(self) -> List[x509.Certificate]:
        return [x509.load_der_x509_certificate(der) for der in self.certificates]

    def to_cbor(self) -> list:
        return list(self.certificates)

    def to_bytes(self) -> bytes:
        """Canonical serialized form, used for the device chain digest."""
        return encode(self.to_cbor())

    @classmethod
    def from_cbor(cls, value: Any, what: str = "certificate chain") -> "X5Chain":
        expect_type(value, list, what)
        for der in value:
            expect_type(der, bytes, f"{what} entry")
        return cls(tuple(value))

    @classmethod
    def from_bytes(cls, data: bytes) -> "X5Chain":
        return cls.from_cbor(decode(data, "certificate chain"))

    def __len__(self) -> int:
        return len(self.certificates)


@dataclass(frozen=True)
class PublicKey:
    """Type-tagged public key."""

    key_type: PublicKeyType
    encoding: PublicKeyEncoding
    body: Union[bytes, Tuple[bytes, ...]]

    @classmethod
    def from_public_key(cls, public_key) -> "PublicKey":
        """Raw key (Crypto encoding)."""
        return cls(public_key_type(public_key), PublicKeyEncoding.CRYPTO, public_key_der(public_key))

    @classmethod
    def from_certificate(cls, cert: x509.Certificate) -> "PublicKey":
        """Key carried inside a single X.509 certificate."""
        return cls(
            public_key_type(cert.public_key()),
            PublicKeyEncoding.X509,
            cert.public_bytes(serialization.Encoding.DER),
        )

    @classmethod
    def from_chain(cls, chain: X5Chain) -> "PublicKey":
        """Key of the leaf of a certificate chain."""
        if not len(chain):
            raise ValueError("Certificate chain is empty")
        leaf = chain.parsed()[0]
        return cls(public_key_type(leaf.public_key()), PublicKeyEncoding.X5CHAIN, chain.certificates)

    def certificates(self) -> List[x509.Certificate]:
        if self.encoding == PublicKeyEncoding.X509:
            return [x509.load_der_x509_certificate(self.body)]
        if self.encoding == PublicKeyEncoding.X5CHAIN:
            return [x509.load_der_x509_certificate(der) for der in self.body]
        return []

    def public_key(self):
        """Return the cryptography public key object."""
        if self.encoding == PublicKeyEncoding.CRYPTO:
            return serialization.load_der_public_key(self.body)
        return self.certificates()[0].public_key()

    def to_cbor(self) -> list:
        body = list(self.body) if self.encoding == PublicKeyEncoding.X5CHAIN else self.body
        return [int(self.key_type), int(self.encoding), body]

    @classmethod
    def from_cbor(cls, value: Any, what: str = "public key") -> "PublicKey":
        key_type, encoding, body = expect_array(value, 3, what)
        expect_type(key_type, int, f"{what} type")
        expect_type(encoding, int, f"{what} encoding")
        try:
            key_type = PublicKeyType(key_type)
            encoding = PublicKeyEncoding(encoding)
        except ValueError as e:
            raise ArtifactDecodeError(f"Invalid {what}: {e}") from e

        if encoding == PublicKeyEncoding.X5CHAIN:
            body = X5Chain.from_cbor(body, f"{what} chain").certificates
        else:
            expect_type(body, bytes, f"{what} body")
        return cls(key_type, encoding, body)

    def __str__(self) -> str:
        description = f"{self.key_type.name} {self.encoding.name}"
        if self.encoding == PublicKeyEncoding.CRYPTO:
            return f"{description} ({self.body.hex()})"
        try:
            leaf = self.certificates()[0]
        except ValueError:
            return f"{description} (<unparseable certificate>)"
        fingerprint = leaf.fingerprint(hashes.SHA256()).hex()
        return f"{description} (subject: {leaf.subject.rfc4514_string()}, sha256 fingerprint: {fingerprint})"
