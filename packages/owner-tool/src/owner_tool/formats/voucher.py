# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Ownership voucher data model.

Wire layout (CBOR):

    OwnershipVoucher = [
        protocol_version,
        header_bytes,             ; bstr .cbor OwnershipVoucherHeader
        header_hmac,              ; HMac over header_bytes
        device_cert_chain / null, ; X5Chain
        [* entry_bytes],          ; bstr .cbor COSE_Sign1(OwnershipVoucherEntry)
    ]

    OwnershipVoucherHeader = [
        protocol_version, guid, rendezvous_info, device_info,
        manufacturer_public_key, device_cert_chain_hash / null,
    ]

    OwnershipVoucherEntry payload = [
        hash_previous_entry, hash_header_info, extra / null, owner_public_key,
    ]

The header and the entries are kept as the exact bytes they were created
with. Hashes are always computed over those bytes, never over re-encoded
structures.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from ..constants import PROTOCOL_VERSION, HashType
from ..crypto.cose import Sign1Message, sign1, verify_sign1
from ..crypto.keys import public_keys_equal
from ..errors import (
    ArtifactDecodeError,
    ChainVerificationError,
    EntryParseError,
    ExtensionError,
    OwnerKeyMismatch,
    SigningError,
)
from .codec import decode, encode, expect_array, expect_type
from .guid import Guid
from .hash import Hash, HMac
from .publickey import PublicKey, X5Chain
from .rendezvous import RendezvousInfo, rendezvous_from_cbor, rendezvous_to_cbor

logger = logging.getLogger(__name__)


@dataclass
class OwnershipVoucherHeader:
    """Immutable provenance record for a device."""

    protocol_version: int
    guid: Guid
    rendezvous_info: RendezvousInfo
    device_info: str
    public_key: PublicKey
    device_certificate_chain_hash: Optional[Hash] = None

    def to_cbor(self) -> list:
        chain_hash = self.device_certificate_chain_hash
        return [
            self.protocol_version,
            self.guid.to_cbor(),
            rendezvous_to_cbor(self.rendezvous_info),
            self.device_info,
            self.public_key.to_cbor(),
            chain_hash.to_cbor() if chain_hash is not None else None,
        ]

    def to_bytes(self) -> bytes:
        """Canonical serialized form. Serialize once and keep the bytes."""
        return encode(self.to_cbor())

    @classmethod
    def from_bytes(cls, data: bytes) -> "OwnershipVoucherHeader":
        value = decode(data, "ownership voucher header")
        (
            protocol_version,
            guid,
            rendezvous_info,
            device_info,
            public_key,
            chain_hash,
        ) = expect_array(value, 6, "ownership voucher header")

        expect_type(protocol_version, int, "header protocol version")
        expect_type(device_info, str, "header device info")
        return cls(
            protocol_version=protocol_version,
            guid=Guid.from_cbor(guid),
            rendezvous_info=rendezvous_from_cbor(rendezvous_info),
            device_info=device_info,
            public_key=PublicKey.from_cbor(public_key, "manufacturer public key"),
            device_certificate_chain_hash=(
                Hash.from_cbor(chain_hash, "device certificate chain hash")
                if chain_hash is not None else None
            ),
        )


@dataclass
class OwnershipVoucherEntry:
    """One ownership transfer: links to the previous entry and names the new owner."""

    hash_previous_entry: Hash
    hash_header_info: Hash
    public_key: PublicKey
    extra: Any = None
    message: Optional[Sign1Message] = field(default=None, compare=False, repr=False)

    def payload_bytes(self) -> bytes:
        return encode([
            self.hash_previous_entry.to_cbor(),
            self.hash_header_info.to_cbor(),
            self.extra,
            self.public_key.to_cbor(),
        ])

    @classmethod
    def decode(cls, data: bytes) -> "OwnershipVoucherEntry":
        """
        Decode a signed entry.

        Raises:
            ValueError: If the entry or its payload is malformed
        """
        message = Sign1Message.decode(data)
        payload = decode(message.payload, "entry payload")
        hash_previous, hash_header, extra, public_key = expect_array(payload, 4, "entry payload")
        return cls(
            hash_previous_entry=Hash.from_cbor(hash_previous, "previous entry hash"),
            hash_header_info=Hash.from_cbor(hash_header, "header info hash"),
            public_key=PublicKey.from_cbor(public_key, "entry public key"),
            extra=extra,
            message=message,
        )


@dataclass
class OwnershipVoucher:
    """
    Ownership voucher: header, its integrity tag, the device certificate
    chain and an append-only list of signed entries.
    """

    header_bytes: bytes
    header_hmac: HMac
    device_certificate_chain: Optional[X5Chain] = None
    entries: List[bytes] = field(default_factory=list)
    protocol_version: int = PROTOCOL_VERSION

    def header(self) -> OwnershipVoucherHeader:
        """Parse the stored header bytes (for display and key lookup)."""
        return OwnershipVoucherHeader.from_bytes(self.header_bytes)

    @property
    def entry_hash_type(self) -> HashType:
        """Entry hashes use the digest family of the header HMAC."""
        return self.header_hmac.hash_type.plain()

    def genesis_hash(self) -> Hash:
        """Previous-entry hash for entry 0: header bytes followed by the HMAC."""
        return Hash.new(
            self.entry_hash_type,
            self.header_bytes + encode(self.header_hmac.to_cbor()),
        )

    def header_info_hash(self) -> Hash:
        return Hash.new(self.entry_hash_type, self.header_bytes)

    def iter_entries(self) -> Iterator[OwnershipVoucherEntry]:
        """
        Lazily decode entries in chain order.

        Each call returns a fresh single-pass iterator. Decoding stops with
        EntryParseError(index) at the first malformed entry.
        """
        for index, raw_entry in enumerate(self.entries):
            try:
                entry = OwnershipVoucherEntry.decode(raw_entry)
            except ValueError as e:
                raise EntryParseError(index, str(e)) from e
            yield entry

    def current_owner_public_key(self) -> PublicKey:
        """Key at the end of the chain (the manufacturer key if no entries)."""
        if not self.entries:
            return self.header().public_key
        index = len(self.entries) - 1
        try:
            return OwnershipVoucherEntry.decode(self.entries[index]).public_key
        except ValueError as e:
            raise EntryParseError(index, str(e)) from e

    def extend(
        self,
        current_owner_key,
        new_owner: PublicKey,
        check_owner_key: bool = True,
    ) -> OwnershipVoucherEntry:
        """
        Append an entry transferring ownership to new_owner.

        Args:
            current_owner_key: Private key of the current owner (the
                manufacturer for the first extension)
            new_owner: Public key of the new owner
            check_owner_key: Refuse to sign if current_owner_key does not
                match the key at the end of the chain

        Returns:
            The new entry

        Raises:
            OwnerKeyMismatch: current_owner_key is not the current owner's key
            ExtensionError: The chain end cannot be read or signing fails
        """
        if self.entries:
            hash_previous = Hash.new(self.entry_hash_type, self.entries[-1])
        else:
            hash_previous = self.genesis_hash()
        hash_header = self.header_info_hash()

        entry = OwnershipVoucherEntry(
            hash_previous_entry=hash_previous,
            hash_header_info=hash_header,
            public_key=new_owner,
        )

        if check_owner_key:
            try:
                expected = self.current_owner_public_key().public_key()
                supplied = current_owner_key.public_key()
            except (ValueError, AttributeError) as e:
                raise ExtensionError(f"Error determining current owner key: {e}") from e
            if not public_keys_equal(supplied, expected):
                raise OwnerKeyMismatch(
                    "Current owner private key does not match the last owner public key in the voucher"
                )

        try:
            message = sign1(entry.payload_bytes(), current_owner_key)
        except SigningError as e:
            raise ExtensionError(f"Error signing new entry: {e}") from e

        entry.message = message
        self.entries.append(message.encode())
        logger.info(f"Extended ownership voucher to {len(self.entries)} entries")
        logger.debug(f"Entry {len(self.entries) - 1} previous hash: {hash_previous}")
        return entry

    def verify_chain(self) -> int:
        """
        Check every entry's hashes and signature.

        Returns:
            Number of verified entries

        Raises:
            ChainVerificationError: First entry that breaks the chain
            EntryParseError: An entry cannot be decoded
        """
        expected_previous = self.genesis_hash()
        expected_header = self.header_info_hash()
        owner = self.header().public_key

        for index, entry in enumerate(self.iter_entries()):
            if entry.hash_previous_entry != expected_previous:
                raise ChainVerificationError(index, "previous entry hash mismatch")
            if entry.hash_header_info != expected_header:
                raise ChainVerificationError(index, "header info hash mismatch")
            try:
                owner_key = owner.public_key()
            except ValueError as e:
                raise ChainVerificationError(index, f"unusable signer key: {e}") from e
            if not verify_sign1(entry.message, owner_key):
                raise ChainVerificationError(index, "signature does not match previous owner key")

            expected_previous = Hash.new(self.entry_hash_type, self.entries[index])
            owner = entry.public_key

        return len(self.entries)

    def to_cbor(self) -> list:
        chain = self.device_certificate_chain
        return [
            self.protocol_version,
            self.header_bytes,
            self.header_hmac.to_cbor(),
            chain.to_cbor() if chain is not None else None,
            list(self.entries),
        ]

    def to_bytes(self) -> bytes:
        return encode(self.to_cbor())

    @classmethod
    def from_bytes(cls, data: bytes) -> "OwnershipVoucher":
        """
        Decode a voucher. Entries stay encoded until iterated.

        Raises:
            ArtifactDecodeError: If the voucher structure is malformed
        """
        value = decode(data, "ownership voucher")
        protocol_version, header_bytes, header_hmac, chain, entries = expect_array(
            value, 5, "ownership voucher"
        )
        expect_type(protocol_version, int, "voucher protocol version")
        expect_type(header_bytes, bytes, "voucher header")
        expect_type(entries, list, "voucher entries")
        for raw_entry in entries:
            expect_type(raw_entry, bytes, "voucher entry")

        hmac = HMac.from_cbor(header_hmac, "header HMAC")
        if not hmac.hash_type.is_hmac:
            raise ArtifactDecodeError(f"Invalid header HMAC type {hmac.hash_type.name}")

        return cls(
            header_bytes=header_bytes,
            header_hmac=hmac,
            device_certificate_chain=X5Chain.from_cbor(chain) if chain is not None else None,
            entries=list(entries),
            protocol_version=protocol_version,
        )
