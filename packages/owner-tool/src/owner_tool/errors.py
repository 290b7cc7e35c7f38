# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Exceptions raised by the owner tool.

Every error derives from OwnerToolError (a ValueError) so callers can catch
one type and print its message to the operator.
"""


class OwnerToolError(ValueError):
    """Base class for all owner tool failures."""


# Input errors

class InputError(OwnerToolError):
    """An input file is missing, unreadable or of the wrong kind."""


class ArtifactLoadError(InputError):
    """A certificate, key or artifact file could not be loaded."""


class OutputExistsError(InputError):
    """Refusing to overwrite an existing output artifact."""

    def __init__(self, kind: str, path):
        self.kind = kind
        self.path = path
        super().__init__(f"{kind} file {path} already exists")


class ArtifactWriteError(OwnerToolError):
    """An output artifact could not be written."""


class ConfigurationError(OwnerToolError):
    """Tool settings are invalid."""


# Format errors

class FormatError(OwnerToolError):
    """Malformed document or binary artifact."""


class RendezvousFormatError(FormatError):
    """Rendezvous document does not have the expected shape."""


class UnknownRendezvousVariable(FormatError):
    """Rendezvous document uses a key outside the variable table."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown rendezvous variable '{name}'")


class UnsupportedValueType(FormatError):
    """A rendezvous value has no protocol representation."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unsupported rendezvous value type: {type(value).__name__}")


class ArtifactDecodeError(FormatError):
    """Binary artifact could not be decoded."""


class EntryParseError(FormatError):
    """An ownership voucher entry could not be decoded."""

    def __init__(self, index: int, reason: str = ""):
        self.index = index
        message = f"Error parsing entry {index}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


# Cryptographic errors

class CryptoError(OwnerToolError):
    """A cryptographic operation failed."""


class KeyGenerationError(CryptoError):
    """Device key material could not be generated."""


class CertificateBuildError(CryptoError):
    """Device certificate could not be built or signed."""


class SigningError(CryptoError):
    """Signature creation failed."""


class HMACError(CryptoError):
    """HMAC computation failed."""


class UnsupportedKeyError(CryptoError):
    """Key algorithm or curve is not usable for FDO artifacts."""


# Chain errors

class ExtensionError(OwnerToolError):
    """Ownership voucher could not be extended."""


class OwnerKeyMismatch(ExtensionError):
    """Supplied private key does not belong to the current owner."""


class ChainVerificationError(OwnerToolError):
    """Ownership chain is broken at a given entry."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Entry {index} failed verification: {reason}")
