"""
Errors — the failure kinds surfaced by certificate issuance.

Every error is terminal for the in-flight call: nothing is retried,
cached, or recovered locally. Each carries an ErrorCode so callers can
classify failures the same way across the codec, the formatter registry
and the algorithm provider.

Signer failures are NOT represented here — they propagate unchanged.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """Failure classification for certificate issuance errors."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input data is malformed or in an unrecognized representation."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A required registration (formatter, curve, algorithm) is missing."""


class CertIssuerError(Exception):
    """Base class for all errors raised by cert_issuer."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR


class UnsupportedEncodingFormatError(CertIssuerError, ValueError):
    """Textual input matches no known encoding, or the output format is unknown."""

    code = ErrorCode.VALIDATION_ERROR


class SignatureConversionUnsupportedError(CertIssuerError):
    """No registered signature formatter accepts the algorithm."""

    code = ErrorCode.CONFIGURATION_ERROR

    def __init__(self, algorithm_name: str | None) -> None:
        super().__init__(
            f"No signature formatter registered for algorithm {algorithm_name!r}"
        )
        self.algorithm_name = algorithm_name


class MalformedSignatureError(CertIssuerError, ValueError):
    """Signature bytes do not fit the point size declared for the curve."""

    code = ErrorCode.VALIDATION_ERROR


class UnsupportedAlgorithmError(CertIssuerError, ValueError):
    """The algorithm descriptor cannot be mapped to an X.509 AlgorithmIdentifier."""

    code = ErrorCode.CONFIGURATION_ERROR
