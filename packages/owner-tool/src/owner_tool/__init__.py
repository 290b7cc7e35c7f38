# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
FDO Owner Tool Package

Creates and transfers FIDO Device Onboard ownership vouchers and the device
credentials that pair with them.
"""

__version__ = "0.1.0"

# Export main classes and functions
from .config import Settings, load_settings

from .errors import (
    OwnerToolError,
    CertificateBuildError,
    ConfigurationError,
    EntryParseError,
    ExtensionError,
    OwnerKeyMismatch,
    UnknownRendezvousVariable,
    UnsupportedValueType,
)

from .randomness import (
    RandomSource,
    SystemRandomSource,
    DeterministicRandomSource,
)

from .formats import (
    DeviceCredential,
    OwnershipVoucher,
    OwnershipVoucherEntry,
    OwnershipVoucherHeader,
    PublicKey,
)

from .provisioning import (
    DeviceInitializer,
    InitializationRequest,
    InitializationResult,
    initialize_device,
)

from .ownership import extend_voucher, verify_voucher

from .inspector import (
    inspect_credential,
    inspect_voucher,
    render_credential,
    render_voucher,
)

__all__ = [
    # Version
    '__version__',

    # Configuration
    'Settings',
    'load_settings',

    # Errors
    'OwnerToolError',
    'CertificateBuildError',
    'ConfigurationError',
    'EntryParseError',
    'ExtensionError',
    'OwnerKeyMismatch',
    'UnknownRendezvousVariable',
    'UnsupportedValueType',

    # Randomness
    'RandomSource',
    'SystemRandomSource',
    'DeterministicRandomSource',

    # Artifacts
    'DeviceCredential',
    'OwnershipVoucher',
    'OwnershipVoucherEntry',
    'OwnershipVoucherHeader',
    'PublicKey',

    # Operations
    'DeviceInitializer',
    'InitializationRequest',
    'InitializationResult',
    'initialize_device',
    'extend_voucher',
    'verify_voucher',
    'inspect_credential',
    'inspect_voucher',
    'render_credential',
    'render_voucher',
]
