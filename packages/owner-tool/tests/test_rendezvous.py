# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Unit tests for rendezvous document parsing.
"""

import math

import cbor2
import pytest

from owner_tool.constants import RendezvousVariable
from owner_tool.errors import (
    ArtifactDecodeError,
    ArtifactLoadError,
    RendezvousFormatError,
    UnknownRendezvousVariable,
    UnsupportedValueType,
)
from owner_tool.formats.rendezvous import (
    format_rendezvous_entry,
    load_rendezvous_info,
    parse_rendezvous_info,
    rendezvous_from_cbor,
    rendezvous_to_cbor,
    to_protocol_value,
)


class TestParsing:
    """Test YAML rendezvous documents."""

    def test_single_entry(self):
        info = parse_rendezvous_info("- device-port: 8080\n")
        assert info == [[(RendezvousVariable.DEVICE_PORT, 8080)]]

    def test_entry_order_and_key_order_kept(self):
        document = """\
- ip-address: 192.0.2.10
  device-port: 8082
  protocol: http
- dns: rv.example.com
  owner-port: 443
"""
        info = parse_rendezvous_info(document)

        assert [variable for variable, _ in info[0]] == [
            RendezvousVariable.IP_ADDRESS,
            RendezvousVariable.DEVICE_PORT,
            RendezvousVariable.PROTOCOL,
        ]
        assert info[0][0][1] == "192.0.2.10"
        assert info[1] == [
            (RendezvousVariable.DNS, "rv.example.com"),
            (RendezvousVariable.OWNER_PORT, 443),
        ]

    def test_legacy_names(self):
        info = parse_rendezvous_info("- deviceport: 1\n  ip_address: x\n  delaysec: 5\n")
        assert [variable for variable, _ in info[0]] == [
            RendezvousVariable.DEVICE_PORT,
            RendezvousVariable.IP_ADDRESS,
            RendezvousVariable.DELAY_SEC,
        ]

    def test_all_variables_have_document_names(self):
        for variable in RendezvousVariable:
            assert RendezvousVariable.from_document_name(variable.document_name) is variable

    def test_unknown_variable(self):
        with pytest.raises(UnknownRendezvousVariable) as exc_info:
            parse_rendezvous_info("- foo: 1\n")
        assert exc_info.value.name == "foo"

    def test_names_are_case_sensitive(self):
        with pytest.raises(UnknownRendezvousVariable):
            parse_rendezvous_info("- Device-Port: 8080\n")

    def test_empty_list(self):
        assert parse_rendezvous_info("[]") == []

    def test_empty_entry(self):
        assert parse_rendezvous_info("- {}\n") == [[]]

    def test_top_level_must_be_list(self):
        with pytest.raises(RendezvousFormatError):
            parse_rendezvous_info("device-port: 8080\n")

    def test_empty_document(self):
        with pytest.raises(RendezvousFormatError):
            parse_rendezvous_info("")

    def test_entry_must_be_map(self):
        with pytest.raises(RendezvousFormatError):
            parse_rendezvous_info("- device-port\n")

    def test_key_must_be_text(self):
        with pytest.raises(RendezvousFormatError):
            parse_rendezvous_info("- 3: 8080\n")

    def test_malformed_yaml(self):
        with pytest.raises(RendezvousFormatError):
            parse_rendezvous_info("- [unclosed\n")

    def test_timestamp_value_unsupported(self):
        with pytest.raises(UnsupportedValueType):
            parse_rendezvous_info("- delay-sec: 2024-01-01\n")

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "rv.yml"
        path.write_text("- owner-only: true\n", encoding="utf-8")
        assert load_rendezvous_info(path) == [[(RendezvousVariable.OWNER_ONLY, True)]]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ArtifactLoadError):
            load_rendezvous_info(tmp_path / "missing.yml")


class TestValueConversion:
    """Test conversion of YAML values to protocol values."""

    @pytest.mark.parametrize("value", [None, True, False, 0, 8080, -1, 1.5, "http"])
    def test_scalars_unchanged(self, value):
        assert to_protocol_value(value) == value
        assert type(to_protocol_value(value)) is type(value)

    def test_integer_ranges(self):
        assert to_protocol_value(2 ** 64 - 1) == 2 ** 64 - 1
        assert to_protocol_value(-(2 ** 63)) == -(2 ** 63)
        assert isinstance(to_protocol_value(2 ** 64), float)
        assert isinstance(to_protocol_value(-(2 ** 63) - 1), float)

    def test_integer_beyond_double_range(self):
        info = parse_rendezvous_info("- delay-sec: " + "9" * 400 + "\n")
        assert info == [[(RendezvousVariable.DELAY_SEC, math.inf)]]

        assert to_protocol_value(-(10 ** 400)) == -math.inf

    def test_nested(self):
        value = {"hosts": ["a", {"port": 1}], "enabled": None}
        assert to_protocol_value(value) == value
        assert list(to_protocol_value(value)) == ["hosts", "enabled"]

    def test_unsupported(self):
        with pytest.raises(UnsupportedValueType) as exc_info:
            to_protocol_value(b"bytes")
        assert exc_info.value.value == b"bytes"


class TestWireFormat:
    """Test the CBOR representation of rendezvous info."""

    def test_values_are_embedded_cbor(self):
        info = [[(RendezvousVariable.DEVICE_PORT, 8080)]]
        assert rendezvous_to_cbor(info) == [[[3, cbor2.dumps(8080)]]]

    def test_decode(self):
        info = parse_rendezvous_info("- dns: rv.example.com\n  device-port: 8082\n")
        assert rendezvous_from_cbor(rendezvous_to_cbor(info)) == info

    def test_decode_immutable_containers(self):
        """Arrays and maps may be decoded as tuples and read-only mappings."""
        wire = (((3, cbor2.dumps([8080, {"a": 1}])),),)
        assert rendezvous_from_cbor(wire) == [
            [(RendezvousVariable.DEVICE_PORT, [8080, {"a": 1}])]
        ]

    def test_decode_unknown_code(self):
        with pytest.raises(ArtifactDecodeError):
            rendezvous_from_cbor([[[99, cbor2.dumps(1)]]])

    def test_decode_raw_value(self):
        with pytest.raises(ArtifactDecodeError):
            rendezvous_from_cbor([[[3, 8080]]])

    def test_format_entry(self):
        entry = [(RendezvousVariable.IP_ADDRESS, "192.0.2.10"), (RendezvousVariable.DEVICE_PORT, 8082)]
        assert format_rendezvous_entry(entry) == "ip-address: '192.0.2.10', device-port: 8082"
