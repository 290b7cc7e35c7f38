# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Protocol constants for FIDO Device Onboard artifacts.

Numeric values follow the FDO specification and the COSE algorithm registry,
so vouchers produced here interoperate with other FDO implementations.
"""

from enum import IntEnum
from typing import Dict, Optional

# Protocol version written into new headers and credentials (FDO 1.0)
PROTOCOL_VERSION = 100

# COSE_Sign1 CBOR tag (RFC 9052)
COSE_SIGN1_TAG = 18

# COSE header label for the signature algorithm
COSE_HEADER_ALG = 1


class HashType(IntEnum):
    """Digest and MAC algorithm identifiers."""

    SHA256 = -16
    SHA384 = -43
    HMAC_SHA256 = 5
    HMAC_SHA384 = 6

    @property
    def is_hmac(self) -> bool:
        return self in (HashType.HMAC_SHA256, HashType.HMAC_SHA384)

    @property
    def digest_name(self) -> str:
        """hashlib name of the underlying digest."""
        if self in (HashType.SHA256, HashType.HMAC_SHA256):
            return "sha256"
        return "sha384"

    @property
    def digest_size(self) -> int:
        return 32 if self.digest_name == "sha256" else 48

    def plain(self) -> "HashType":
        """Digest type of the same family (HMAC-SHA384 -> SHA384)."""
        return HashType.SHA256 if self.digest_name == "sha256" else HashType.SHA384


class PublicKeyType(IntEnum):
    """Owner and manufacturer key types."""

    SECP256R1 = 10
    SECP384R1 = 11


class PublicKeyEncoding(IntEnum):
    """How a public key body is carried inside a PublicKey structure."""

    CRYPTO = 0   # DER SubjectPublicKeyInfo
    X509 = 1     # DER certificate
    X5CHAIN = 2  # array of DER certificates, leaf first


class CoseAlgorithm(IntEnum):
    """COSE signature algorithms used for voucher entries."""

    ES256 = -7
    ES384 = -35


# Signature algorithm and digest for each supported key type
SIGNATURE_ALGORITHMS = {
    PublicKeyType.SECP256R1: (CoseAlgorithm.ES256, HashType.SHA256),
    PublicKeyType.SECP384R1: (CoseAlgorithm.ES384, HashType.SHA384),
}


class RendezvousVariable(IntEnum):
    """Rendezvous instruction variables."""

    DEV_ONLY = 0
    OWNER_ONLY = 1
    IP_ADDRESS = 2
    DEVICE_PORT = 3
    OWNER_PORT = 4
    DNS = 5
    SERVER_CERT_HASH = 6
    CA_CERT_HASH = 7
    USER_INPUT = 8
    WIFI_SSID = 9
    WIFI_PW = 10
    MEDIUM = 11
    PROTOCOL = 12
    DELAY_SEC = 13
    BYPASS = 14
    EXT_RV = 15

    @property
    def document_name(self) -> str:
        """Name used for this variable in rendezvous documents."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_document_name(cls, name: str) -> Optional["RendezvousVariable"]:
        """Exact, case-sensitive lookup; None if the name is not in the table."""
        return _RENDEZVOUS_NAMES.get(name)


# Older rendezvous documents use these spellings
_LEGACY_RENDEZVOUS_NAMES = {
    "dev_only": RendezvousVariable.DEV_ONLY,
    "owner_only": RendezvousVariable.OWNER_ONLY,
    "ip_address": RendezvousVariable.IP_ADDRESS,
    "deviceport": RendezvousVariable.DEVICE_PORT,
    "ownerport": RendezvousVariable.OWNER_PORT,
    "server_cert_hash": RendezvousVariable.SERVER_CERT_HASH,
    "ca_cert_hash": RendezvousVariable.CA_CERT_HASH,
    "user_input": RendezvousVariable.USER_INPUT,
    "wifi_ssid": RendezvousVariable.WIFI_SSID,
    "wifi_pw": RendezvousVariable.WIFI_PW,
    "delaysec": RendezvousVariable.DELAY_SEC,
    "ext_rv": RendezvousVariable.EXT_RV,
}

_RENDEZVOUS_NAMES: Dict[str, RendezvousVariable] = {
    variable.document_name: variable for variable in RendezvousVariable
}
_RENDEZVOUS_NAMES.update(_LEGACY_RENDEZVOUS_NAMES)
