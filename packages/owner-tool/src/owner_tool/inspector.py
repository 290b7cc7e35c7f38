# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Human readable reports for vouchers and device credentials.

Reports are produced line by line so a caller printing them shows every entry
up to the first one that fails to decode. Nothing is verified here.
"""

from pathlib import Path
from typing import Iterator, Union

from .formats.credential import DeviceCredential
from .formats.rendezvous import format_rendezvous_entry
from .formats.voucher import OwnershipVoucher
from .storage import load_credential, load_voucher

SECRET_PLACEHOLDER = "<secret>"


def render_voucher(voucher: OwnershipVoucher) -> Iterator[str]:
    """
    Yield report lines for a voucher.

    Raises:
        ArtifactDecodeError: Header cannot be decoded
        EntryParseError: An entry cannot be decoded (after earlier entries
            have been yielded)
    """
    header = voucher.header()

    yield "Header:"
    yield f"\tProtocol Version: {header.protocol_version}"
    yield f"\tDevice GUID: {header.guid}"
    yield "\tRendezvous Info:"
    for rv_entry in header.rendezvous_info:
        yield f"\t\t- {format_rendezvous_entry(rv_entry)}"
    yield f"\tDevice Info: {header.device_info}"
    yield f"\tManufacturer public key: {header.public_key}"
    if header.device_certificate_chain_hash is None:
        yield "\tDevice certificate chain hash: <none>"
    else:
        yield f"\tDevice certificate chain hash: {header.device_certificate_chain_hash}"
    yield f"\tHeader HMAC: {voucher.header_hmac}"

    yield "Entries:"
    for pos, entry in enumerate(voucher.iter_entries()):
        yield f"\tEntry {pos}"
        yield f"\t\tPrevious entry hash: {entry.hash_previous_entry}"
        yield f"\t\tHeader info hash: {entry.hash_header_info}"
        yield f"\t\tPublic key: {entry.public_key}"


def render_credential(credential: DeviceCredential) -> Iterator[str]:
    """Yield report lines for a device credential, with secrets redacted."""
    yield f"Active: {credential.active}"
    yield f"Protocol Version: {credential.protocol_version}"
    yield f"HMAC key: {SECRET_PLACEHOLDER}"
    yield f"Device Info: {credential.device_info}"
    yield f"Device GUID: {credential.guid}"
    yield "Rendezvous Info:"
    for rv_entry in credential.rendezvous_info:
        yield f"\t- {format_rendezvous_entry(rv_entry)}"
    yield f"Public key hash: {credential.pubkey_hash}"
    yield f"Private key: {SECRET_PLACEHOLDER}"


def inspect_voucher(path: Union[str, Path]) -> Iterator[str]:
    """Load a voucher file and render it."""
    return render_voucher(load_voucher(path))


def inspect_credential(path: Union[str, Path]) -> Iterator[str]:
    """Load a device credential file and render it."""
    return render_credential(load_credential(path))
