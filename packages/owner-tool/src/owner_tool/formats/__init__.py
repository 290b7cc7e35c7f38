# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
FDO artifact formats: ownership vouchers, device credentials and the types
they are built from. Everything is CBOR encoded.
"""

from .hash import Hash, HMac
from .guid import Guid
from .publickey import PublicKey, X5Chain
from .rendezvous import (
    RendezvousEntry,
    RendezvousInfo,
    format_rendezvous_entry,
    load_rendezvous_info,
    parse_rendezvous_info,
    to_protocol_value,
)
from .voucher import (
    OwnershipVoucher,
    OwnershipVoucherEntry,
    OwnershipVoucherHeader,
)
from .credential import DeviceCredential

__all__ = [
    "Hash",
    "HMac",
    "Guid",
    "PublicKey",
    "X5Chain",
    "RendezvousEntry",
    "RendezvousInfo",
    "format_rendezvous_entry",
    "load_rendezvous_info",
    "parse_rendezvous_info",
    "to_protocol_value",
    "OwnershipVoucher",
    "OwnershipVoucherEntry",
    "OwnershipVoucherHeader",
    "DeviceCredential",
]
