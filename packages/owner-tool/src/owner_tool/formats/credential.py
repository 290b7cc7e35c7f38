# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Device credential: the secret artifact kept by the device.

    DeviceCredential = [
        active, protocol_version, hmac_secret, device_info, guid,
        rendezvous_info, pubkey_hash, private_key,
    ]

The HMAC secret reproduces the header tag of the paired ownership voucher;
private_key is the device key as PKCS#8 DER. Never log or print either.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..crypto.hashing import verify_hmac
from .codec import decode, encode, expect_array, expect_type
from .guid import Guid
from .hash import Hash
from .rendezvous import RendezvousInfo, rendezvous_from_cbor, rendezvous_to_cbor

if TYPE_CHECKING:
    from .voucher import OwnershipVoucher


@dataclass
class DeviceCredential:
    active: bool
    protocol_version: int
    hmac_secret: bytes = field(repr=False)
    device_info: str
    guid: Guid
    rendezvous_info: RendezvousInfo
    pubkey_hash: Hash
    private_key: bytes = field(repr=False)

    def verify_header_hmac(self, voucher: "OwnershipVoucher") -> bool:
        """Check that this credential's secret reproduces the voucher header tag."""
        return verify_hmac(
            voucher.header_hmac.hash_type,
            self.hmac_secret,
            voucher.header_bytes,
            voucher.header_hmac.value,
        )

    def to_cbor(self) -> list:
        return [
            self.active,
            self.protocol_version,
            self.hmac_secret,
            self.device_info,
            self.guid.to_cbor(),
            rendezvous_to_cbor(self.rendezvous_info),
            self.pubkey_hash.to_cbor(),
            self.private_key,
        ]

    def to_bytes(self) -> bytes:
        return encode(self.to_cbor())

    @classmethod
    def from_bytes(cls, data: bytes) -> "DeviceCredential":
        """
        Decode a device credential.

        Raises:
            ArtifactDecodeError: If the credential structure is malformed
        """
        value = decode(data, "device credential")
        (
            active,
            protocol_version,
            hmac_secret,
            device_info,
            guid,
            rendezvous_info,
            pubkey_hash,
            private_key,
        ) = expect_array(value, 8, "device credential")

        return cls(
            active=expect_type(active, bool, "credential active flag"),
            protocol_version=expect_type(protocol_version, int, "credential protocol version"),
            hmac_secret=expect_type(hmac_secret, bytes, "credential HMAC secret"),
            device_info=expect_type(device_info, str, "credential device info"),
            guid=Guid.from_cbor(guid),
            rendezvous_info=rendezvous_from_cbor(rendezvous_info),
            pubkey_hash=Hash.from_cbor(pubkey_hash, "owner public key hash"),
            private_key=expect_type(private_key, bytes, "credential private key"),
        )
