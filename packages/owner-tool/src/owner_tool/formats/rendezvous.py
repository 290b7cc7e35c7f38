# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Rendezvous information.

Operators describe how a device finds its owner in a YAML document: a list of
entries, each a map of rendezvous variable to value, for example::

    - ip-address: 192.0.2.10
      device-port: 8082
      owner-port: 8082
      protocol: http

On the wire every entry is a list of [variable, cbor(value)] pairs.
"""

import logging
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any, List, Tuple, Union

import yaml

from ..constants import RendezvousVariable
from ..errors import (
    ArtifactDecodeError,
    ArtifactLoadError,
    RendezvousFormatError,
    UnknownRendezvousVariable,
    UnsupportedValueType,
)
from .codec import decode, encode, expect_array, expect_type

logger = logging.getLogger(__name__)

RendezvousInstruction = Tuple[RendezvousVariable, Any]
RendezvousEntry = List[RendezvousInstruction]
RendezvousInfo = List[RendezvousEntry]

_UINT64_MAX = 2 ** 64 - 1
_INT64_MIN = -(2 ** 63)


def to_protocol_value(value: Any) -> Any:
    """
    Convert a parsed YAML value into a CBOR-encodable protocol value.

    Handles null, booleans, integers (unsigned 64-bit, then signed 64-bit,
    otherwise float, infinite beyond the double range), floats, text, lists
    and maps. Map key order is kept.

    Raises:
        UnsupportedValueType: For anything else (timestamps, binary, sets)

    Example:
        >>> to_protocol_value({"port": 8080, "hosts": ["a", None]})
        {'port': 8080, 'hosts': ['a', None]}
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if 0 <= value <= _UINT64_MAX or _INT64_MIN <= value < 0:
            return value
        try:
            return float(value)
        except OverflowError:
            # Beyond the double range, as a YAML float would read it
            return math.inf if value > 0 else -math.inf
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return [to_protocol_value(item) for item in value]
    if isinstance(value, dict):
        return {
            to_protocol_value(key): to_protocol_value(item)
            for key, item in value.items()
        }
    raise UnsupportedValueType(value)


def _parse_entry(raw_entry: Any) -> RendezvousEntry:
    if not isinstance(raw_entry, dict):
        raise RendezvousFormatError(
            f"Invalid entry type: expected a map, got {type(raw_entry).__name__}"
        )

    entry: RendezvousEntry = []
    for key, value in raw_entry.items():
        if not isinstance(key, str):
            raise RendezvousFormatError(f"Invalid key type: {key!r}")
        variable = RendezvousVariable.from_document_name(key)
        if variable is None:
            raise UnknownRendezvousVariable(key)
        entry.append((variable, to_protocol_value(value)))
    return entry


def parse_rendezvous_info(text: Union[str, bytes]) -> RendezvousInfo:
    """
    Parse a rendezvous YAML document.

    Raises:
        RendezvousFormatError: Malformed YAML or wrong document shape
        UnknownRendezvousVariable: A key is not a rendezvous variable
        UnsupportedValueType: A value cannot be represented
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RendezvousFormatError(f"Error parsing rendezvous info: {e}") from e

    if not isinstance(document, list):
        raise RendezvousFormatError("Invalid yaml top type: expected a list of entries")

    return [_parse_entry(raw_entry) for raw_entry in document]


def load_rendezvous_info(path: Union[str, Path]) -> RendezvousInfo:
    """Load and parse a rendezvous document from disk."""
    try:
        with open(path, "rb") as f:
            contents = f.read()
    except OSError as e:
        raise ArtifactLoadError(f"Error loading rendezvous info at {path}: {e}") from e

    info = parse_rendezvous_info(contents)
    logger.info(f"Loaded {len(info)} rendezvous entries from {path}")
    return info


def rendezvous_to_cbor(info: RendezvousInfo) -> list:
    return [
        [[int(variable), encode(value)] for variable, value in entry]
        for entry in info
    ]


def _thaw(value: Any) -> Any:
    # Decoded arrays and maps may be tuples and read-only mappings
    if isinstance(value, (list, tuple)):
        return [_thaw(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    return value


def rendezvous_from_cbor(value: Any) -> RendezvousInfo:
    expect_type(value, list, "rendezvous info")
    info: RendezvousInfo = []
    for raw_entry in value:
        expect_type(raw_entry, list, "rendezvous entry")
        entry: RendezvousEntry = []
        for raw_instruction in raw_entry:
            variable, encoded = expect_array(raw_instruction, 2, "rendezvous instruction")
            expect_type(variable, int, "rendezvous variable")
            expect_type(encoded, bytes, "rendezvous value")
            try:
                variable = RendezvousVariable(variable)
            except ValueError as e:
                raise ArtifactDecodeError(f"Unknown rendezvous variable code {variable}") from e
            entry.append((variable, _thaw(decode(encoded, "rendezvous value"))))
        info.append(entry)
    return info


def format_rendezvous_entry(entry: RendezvousEntry) -> str:
    """One-line human readable rendering of an entry."""
    return ", ".join(f"{variable.document_name}: {value!r}" for variable, value in entry)
