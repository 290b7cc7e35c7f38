# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Device initialization.

Handles the complete provisioning workflow:
1. Generate device keypair
2. Build the device certificate and chain
3. Generate the device HMAC secret and GUID
4. Assemble the device credential
5. Build, serialize and HMAC-tag the ownership voucher header
6. Write the voucher and credential together
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from cryptography import x509

from .config import Settings
from .constants import HashType
from .crypto.certificate import build_device_certificate, build_device_chain
from .crypto.keys import (
    DeviceIdentity,
    generate_device_identity,
    load_certificate,
    load_certificate_chain,
    load_private_key,
)
from .errors import ArtifactWriteError, CryptoError, OutputExistsError
from .formats.credential import DeviceCredential
from .formats.guid import Guid
from .formats.hash import Hash, HMac
from .formats.publickey import PublicKey, X5Chain
from .formats.rendezvous import RendezvousInfo, load_rendezvous_info
from .formats.voucher import OwnershipVoucher, OwnershipVoucherHeader
from .randomness import RandomSource, default_random_source
from .storage import SECRET_FILE_MODE, commit_all, ensure_absent

logger = logging.getLogger(__name__)

# Digest over the device certificate chain is always SHA-384
DEVICE_CHAIN_HASH_TYPE = HashType.SHA384


@dataclass
class InitializationRequest:
    """Inputs for initializing one device."""

    device_id: str
    manufacturer_cert: x509.Certificate
    ca_private_key: object
    ca_chain: List[x509.Certificate]
    rendezvous_info: RendezvousInfo


@dataclass
class InitializationResult:
    """
    Artifacts produced by one provisioning run.

    The voucher travels with the device through the supply chain; the
    credential is installed on the device and never leaves it.
    """

    voucher: OwnershipVoucher
    credential: DeviceCredential
    device_certificate: x509.Certificate


def assemble_device_credential(
    device_info: str,
    identity: DeviceIdentity,
    rendezvous_info: RendezvousInfo,
    hmac_secret: bytes,
    guid: Guid,
    protocol_version: int,
) -> DeviceCredential:
    """
    Package the device secrets. No owner is trusted yet, so the owner key
    hash is empty.
    """
    try:
        private_key = identity.private_key_der()
    except ValueError as e:
        raise CryptoError(f"Error serializing device private key: {e}") from e

    return DeviceCredential(
        active=True,
        protocol_version=protocol_version,
        hmac_secret=hmac_secret,
        device_info=device_info,
        guid=guid,
        rendezvous_info=list(rendezvous_info),
        pubkey_hash=Hash.empty(HashType.SHA384),
        private_key=private_key,
    )


def build_voucher_header(
    device_info: str,
    guid: Guid,
    rendezvous_info: RendezvousInfo,
    manufacturer_key: PublicKey,
    device_chain: Optional[X5Chain],
    protocol_version: int,
) -> OwnershipVoucherHeader:
    """Assemble the header; the chain digest is only present with a chain."""
    chain_hash = None
    if device_chain is not None:
        chain_hash = Hash.new(DEVICE_CHAIN_HASH_TYPE, device_chain.to_bytes())

    return OwnershipVoucherHeader(
        protocol_version=protocol_version,
        guid=guid,
        rendezvous_info=rendezvous_info,
        device_info=device_info,
        public_key=manufacturer_key,
        device_certificate_chain_hash=chain_hash,
    )


class DeviceInitializer:
    """
    Produces a matching ownership voucher and device credential.

    Both artifacts must come from the same run: the HMAC secret only exists
    in memory until it is written into the credential.
    """

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[RandomSource] = None):
        self.settings = settings or Settings()
        self.rng = rng or default_random_source()

    def initialize(self, request: InitializationRequest) -> InitializationResult:
        """
        Run the provisioning steps in memory.

        Raises:
            CryptoError: Key generation, certificate building or HMAC failure
        """
        settings = self.settings

        try:
            manufacturer_key = PublicKey.from_certificate(request.manufacturer_cert)
        except ValueError as e:
            raise CryptoError(f"Error creating manufacturer public key representation: {e}") from e

        # Step 1: Device keypair
        identity = generate_device_identity(settings.device_key_curve, self.rng)

        # Step 2: Device certificate chain
        device_cert = build_device_certificate(
            request.device_id,
            identity,
            request.ca_private_key,
            request.ca_chain,
            rng=self.rng,
            validity_days=settings.cert_validity_days,
        )
        device_chain = X5Chain.from_certificates(build_device_chain(device_cert, request.ca_chain))

        # Step 3: Device secrets
        hmac_secret = self.rng.token_bytes(settings.hmac_key_length)
        guid = Guid.new(self.rng)
        logger.info(f"Initializing device {request.device_id} with GUID {guid}")

        # Step 4: Device credential
        credential = assemble_device_credential(
            request.device_id,
            identity,
            request.rendezvous_info,
            hmac_secret,
            guid,
            settings.protocol_version,
        )

        # Step 5: Header, serialized once and tagged
        header = build_voucher_header(
            request.device_id,
            guid,
            request.rendezvous_info,
            manufacturer_key,
            device_chain,
            settings.protocol_version,
        )
        header_bytes = header.to_bytes()
        header_hmac = HMac.compute(settings.header_hmac_hash_type, hmac_secret, header_bytes)
        logger.debug(f"Header HMAC: {header_hmac}")

        voucher = OwnershipVoucher(
            header_bytes=header_bytes,
            header_hmac=header_hmac,
            device_certificate_chain=device_chain,
            protocol_version=settings.protocol_version,
        )

        return InitializationResult(
            voucher=voucher,
            credential=credential,
            device_certificate=device_cert,
        )


def initialize_device(
    device_id: str,
    voucher_out: Union[str, Path],
    credential_out: Union[str, Path],
    manufacturer_cert_path: Union[str, Path],
    ca_private_key_path: Union[str, Path],
    ca_chain_path: Union[str, Path],
    rendezvous_info_path: Union[str, Path],
    settings: Optional[Settings] = None,
    rng: Optional[RandomSource] = None,
) -> InitializationResult:
    """
    Initialize a device and write its ownership voucher and credential.

    Output paths are checked before any work is done. Both files are
    committed together: if either cannot be written, neither is left behind.

    Raises:
        OutputExistsError: An output file already exists
        ArtifactLoadError: An input file cannot be loaded
        FormatError: The rendezvous document is invalid
        CryptoError: A cryptographic step failed
        ArtifactWriteError: The outputs could not be written
    """
    ensure_absent(credential_out, "Device credential")
    ensure_absent(voucher_out, "Ownership voucher")

    request = InitializationRequest(
        device_id=device_id,
        manufacturer_cert=load_certificate(manufacturer_cert_path, "manufacturer cert"),
        ca_private_key=load_private_key(ca_private_key_path, "device CA private key"),
        ca_chain=load_certificate_chain(ca_chain_path, "device cert CA chain"),
        rendezvous_info=load_rendezvous_info(rendezvous_info_path),
    )

    result = DeviceInitializer(settings, rng).initialize(request)

    try:
        commit_all([
            (voucher_out, result.voucher.to_bytes(), None),
            (credential_out, result.credential.to_bytes(), SECRET_FILE_MODE),
        ])
    except FileExistsError as e:
        raise OutputExistsError("Output", e.filename2 or e.filename) from e
    except OSError as e:
        raise ArtifactWriteError(f"Error writing device artifacts: {e}") from e

    logger.info(f"Wrote ownership voucher to {voucher_out} and device credential to {credential_out}")
    return result
