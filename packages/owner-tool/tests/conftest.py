# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Pytest configuration and fixtures."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from owner_tool.config import Settings
from owner_tool.constants import RendezvousVariable
from owner_tool.crypto.keys import save_certificates, save_private_key
from owner_tool.provisioning import DeviceInitializer, InitializationRequest
from owner_tool.randomness import DeterministicRandomSource

RENDEZVOUS_YAML = """\
- device-port: 8080
"""


def make_certificate(common_name, key, issuer_cert=None, issuer_key=None, ca=False):
    """Build a test certificate, self-signed unless an issuer is given."""
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer = issuer_cert.subject if issuer_cert is not None else subject
    now = datetime.now(timezone.utc)

    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(now + timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key or key, hashes.SHA256())
    )


@dataclass
class DevicePKI:
    """Device CA hierarchy plus manufacturer and owner identities."""

    root_key: ec.EllipticCurvePrivateKey
    root_cert: x509.Certificate
    ca_key: ec.EllipticCurvePrivateKey
    ca_cert: x509.Certificate
    manufacturer_key: ec.EllipticCurvePrivateKey
    manufacturer_cert: x509.Certificate
    owner1_key: ec.EllipticCurvePrivateKey
    owner1_cert: x509.Certificate
    owner2_key: ec.EllipticCurvePrivateKey
    owner2_cert: x509.Certificate

    @property
    def ca_chain(self):
        return [self.ca_cert, self.root_cert]


@pytest.fixture(scope="session")
def pki() -> DevicePKI:
    root_key = ec.generate_private_key(ec.SECP384R1())
    root_cert = make_certificate("Test Device Root CA", root_key, ca=True)

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = make_certificate("Test Device CA", ca_key, root_cert, root_key, ca=True)

    manufacturer_key = ec.generate_private_key(ec.SECP256R1())
    owner1_key = ec.generate_private_key(ec.SECP256R1())
    owner2_key = ec.generate_private_key(ec.SECP384R1())

    return DevicePKI(
        root_key=root_key,
        root_cert=root_cert,
        ca_key=ca_key,
        ca_cert=ca_cert,
        manufacturer_key=manufacturer_key,
        manufacturer_cert=make_certificate("Test Manufacturer", manufacturer_key),
        owner1_key=owner1_key,
        owner1_cert=make_certificate("Test Owner 1", owner1_key),
        owner2_key=owner2_key,
        owner2_cert=make_certificate("Test Owner 2", owner2_key),
    )


@pytest.fixture
def pki_files(tmp_path: Path, pki: DevicePKI) -> SimpleNamespace:
    """Write the PKI material to disk the way an operator would supply it."""
    files = SimpleNamespace(
        manufacturer_cert=tmp_path / "manufacturer.pem",
        manufacturer_key=tmp_path / "manufacturer.der",
        ca_key=tmp_path / "device-ca.der",
        ca_chain=tmp_path / "device-ca-chain.pem",
        owner1_cert=tmp_path / "owner1.pem",
        owner1_key=tmp_path / "owner1.der",
        owner2_cert=tmp_path / "owner2.pem",
        owner2_key=tmp_path / "owner2.der",
        rendezvous=tmp_path / "rendezvous.yml",
        voucher=tmp_path / "dev-1.ov",
        credential=tmp_path / "dev-1.dc",
    )

    save_certificates([pki.manufacturer_cert], files.manufacturer_cert)
    save_private_key(pki.manufacturer_key, files.manufacturer_key)
    save_private_key(pki.ca_key, files.ca_key)
    save_certificates(pki.ca_chain, files.ca_chain)
    save_certificates([pki.owner1_cert], files.owner1_cert)
    save_private_key(pki.owner1_key, files.owner1_key)
    save_certificates([pki.owner2_cert], files.owner2_cert)
    save_private_key(pki.owner2_key, files.owner2_key)
    files.rendezvous.write_text(RENDEZVOUS_YAML, encoding="utf-8")

    return files


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def rng() -> DeterministicRandomSource:
    return DeterministicRandomSource(1234)


@pytest.fixture
def provisioned(pki: DevicePKI, settings: Settings, rng):
    """A freshly initialized device (voucher with zero entries + credential)."""
    request = InitializationRequest(
        device_id="dev-1",
        manufacturer_cert=pki.manufacturer_cert,
        ca_private_key=pki.ca_key,
        ca_chain=pki.ca_chain,
        rendezvous_info=[[(RendezvousVariable.DEVICE_PORT, 8080)]],
    )
    return DeviceInitializer(settings, rng).initialize(request)


@pytest.fixture
def rsa_cert_file(tmp_path: Path) -> Path:
    """Self-signed RSA certificate, a key type vouchers cannot carry."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    path = tmp_path / "rsa-owner.pem"
    save_certificates([make_certificate("RSA Owner", key)], path)
    return path
