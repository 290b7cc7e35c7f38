# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Integration tests for device initialization.

Tests:
- Complete initialization workflow from operator files
- Output file handling
- Settings
- Error handling
"""

import os
import stat

import pytest
from pydantic import ValidationError

from owner_tool.config import Settings, load_settings
from owner_tool.constants import HashType, RendezvousVariable
from owner_tool.errors import (
    ArtifactLoadError,
    ArtifactWriteError,
    CertificateBuildError,
    ConfigurationError,
    OutputExistsError,
    UnknownRendezvousVariable,
)
from owner_tool.provisioning import DeviceInitializer, InitializationRequest, initialize_device
from owner_tool.randomness import DeterministicRandomSource
from owner_tool.storage import SECRET_FILE_MODE, commit_all, load_credential, load_voucher


def _initialize(files, settings, rng=None):
    return initialize_device(
        "dev-1",
        files.voucher,
        files.credential,
        files.manufacturer_cert,
        files.ca_key,
        files.ca_chain,
        files.rendezvous,
        settings=settings,
        rng=rng,
    )


class TestInitializeDevice:
    """Test the file based initialization workflow."""

    def test_complete_workflow(self, pki_files, settings):
        result = _initialize(pki_files, settings)

        voucher = load_voucher(pki_files.voucher)
        credential = load_credential(pki_files.credential)

        assert voucher.to_bytes() == result.voucher.to_bytes()
        assert voucher.entries == []
        assert voucher.verify_chain() == 0
        assert credential.guid == voucher.header().guid
        assert credential.rendezvous_info == [[(RendezvousVariable.DEVICE_PORT, 8080)]]
        assert credential.verify_header_hmac(voucher)

    def test_credential_is_private(self, pki_files, settings):
        _initialize(pki_files, settings)

        mode = stat.S_IMODE(os.stat(pki_files.credential).st_mode)
        assert mode == 0o600

    def test_no_temporary_files_left(self, pki_files, settings):
        _initialize(pki_files, settings)

        leftovers = list(pki_files.voucher.parent.glob("*.new"))
        assert leftovers == []

    def test_fresh_secrets_per_device(self, pki_files, settings, tmp_path):
        first = _initialize(pki_files, settings)
        pki_files.voucher = tmp_path / "dev-1b.ov"
        pki_files.credential = tmp_path / "dev-1b.dc"
        second = _initialize(pki_files, settings)

        assert first.credential.guid != second.credential.guid
        assert first.credential.hmac_secret != second.credential.hmac_secret
        assert first.credential.private_key != second.credential.private_key

    def test_deterministic_with_seeded_source(self, pki, settings):
        request = InitializationRequest(
            device_id="dev-1",
            manufacturer_cert=pki.manufacturer_cert,
            ca_private_key=pki.ca_key,
            ca_chain=pki.ca_chain,
            rendezvous_info=[],
        )
        first = DeviceInitializer(settings, DeterministicRandomSource(3)).initialize(request)
        second = DeviceInitializer(settings, DeterministicRandomSource(3)).initialize(request)

        assert first.credential.guid == second.credential.guid
        assert first.credential.hmac_secret == second.credential.hmac_secret
        assert first.credential.private_key == second.credential.private_key

    def test_existing_voucher(self, pki_files, settings):
        pki_files.voucher.write_bytes(b"existing")

        with pytest.raises(OutputExistsError) as exc_info:
            _initialize(pki_files, settings)
        assert "Ownership voucher" in str(exc_info.value)
        assert pki_files.voucher.read_bytes() == b"existing"
        assert not pki_files.credential.exists()

    def test_existing_credential(self, pki_files, settings):
        pki_files.credential.write_bytes(b"existing")

        with pytest.raises(OutputExistsError, match="Device credential"):
            _initialize(pki_files, settings)
        assert not pki_files.voucher.exists()

    def test_missing_input(self, pki_files, settings):
        pki_files.ca_chain.unlink()

        with pytest.raises(ArtifactLoadError):
            _initialize(pki_files, settings)
        assert not pki_files.voucher.exists()
        assert not pki_files.credential.exists()

    def test_bad_rendezvous(self, pki_files, settings):
        pki_files.rendezvous.write_text("- foo: 1\n", encoding="utf-8")

        with pytest.raises(UnknownRendezvousVariable):
            _initialize(pki_files, settings)
        assert not pki_files.voucher.exists()

    def test_empty_ca_chain(self, pki, settings):
        request = InitializationRequest(
            device_id="dev-1",
            manufacturer_cert=pki.manufacturer_cert,
            ca_private_key=pki.ca_key,
            ca_chain=[],
            rendezvous_info=[],
        )
        with pytest.raises(CertificateBuildError):
            DeviceInitializer(settings).initialize(request)

    def test_write_failure_leaves_nothing(self, pki_files, settings, monkeypatch):
        """If the second link fails, the first artifact is removed again."""
        real_link = os.link
        calls = []

        def failing_link(src, dst):
            calls.append(dst)
            if len(calls) == 2:
                raise OSError("disk full")
            real_link(src, dst)

        monkeypatch.setattr("owner_tool.storage.os.link", failing_link)

        with pytest.raises(ArtifactWriteError):
            _initialize(pki_files, settings)

        assert len(calls) == 2
        assert not pki_files.voucher.exists()
        assert not pki_files.credential.exists()
        assert list(pki_files.voucher.parent.glob("*.new")) == []

    def test_output_created_during_initialization(self, pki_files, settings, monkeypatch):
        """A credential that appears after the existence checks is kept."""
        monkeypatch.setattr("owner_tool.provisioning.ensure_absent", lambda path, kind: None)
        pki_files.credential.write_bytes(b"created concurrently")

        with pytest.raises(OutputExistsError):
            _initialize(pki_files, settings)

        assert pki_files.credential.read_bytes() == b"created concurrently"
        assert not pki_files.voucher.exists()
        assert list(pki_files.voucher.parent.glob("*.new")) == []


class TestCommitAll:
    """Test writing several new artifacts together."""

    def test_writes_all(self, tmp_path):
        first, second = tmp_path / "a.bin", tmp_path / "b.bin"
        commit_all([(first, b"one", None), (second, b"two", SECRET_FILE_MODE)])

        assert first.read_bytes() == b"one"
        assert second.read_bytes() == b"two"
        assert stat.S_IMODE(second.stat().st_mode) == SECRET_FILE_MODE
        assert list(tmp_path.glob("*.new")) == []

    def test_existing_target_not_overwritten(self, tmp_path):
        first, second = tmp_path / "a.bin", tmp_path / "b.bin"
        second.write_bytes(b"existing")

        with pytest.raises(FileExistsError):
            commit_all([(first, b"one", None), (second, b"two", None)])

        assert second.read_bytes() == b"existing"
        assert not first.exists()
        assert list(tmp_path.glob("*.new")) == []


class TestSettings:
    """Test settings that change initialization output."""

    def test_defaults(self, settings):
        assert settings.protocol_version == 100
        assert settings.device_key_curve == "secp256r1"
        assert settings.header_hmac_hash_type == HashType.HMAC_SHA384
        assert settings.strict_owner_key_check is True

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("OWNER_TOOL_HEADER_HMAC_TYPE", "hmac-sha256")
        monkeypatch.setenv("OWNER_TOOL_DEVICE_KEY_CURVE", "secp384r1")

        settings = Settings(_env_file=None)
        assert settings.header_hmac_hash_type == HashType.HMAC_SHA256
        assert settings.device_key_curve == "secp384r1"

    @pytest.mark.parametrize("field,value", [
        ("cert_validity_days", 0),
        ("cert_validity_days", -1),
        ("hmac_key_length", 0),
        ("hmac_key_length", 8),
    ])
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_load_settings_invalid_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OWNER_TOOL_HMAC_KEY_LENGTH", "-5")

        with pytest.raises(ConfigurationError, match="hmac_key_length"):
            load_settings()

    def test_hmac_sha256_voucher(self, pki, rng):
        settings = Settings(_env_file=None, header_hmac_type="hmac-sha256", hmac_key_length=16)
        request = InitializationRequest(
            device_id="dev-1",
            manufacturer_cert=pki.manufacturer_cert,
            ca_private_key=pki.ca_key,
            ca_chain=pki.ca_chain,
            rendezvous_info=[],
        )
        result = DeviceInitializer(settings, rng).initialize(request)

        assert result.voucher.header_hmac.hash_type == HashType.HMAC_SHA256
        assert len(result.voucher.header_hmac.value) == 32
        assert result.voucher.entry_hash_type == HashType.SHA256
        assert len(result.credential.hmac_secret) == 16
        assert result.credential.verify_header_hmac(result.voucher)
