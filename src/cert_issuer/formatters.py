"""
Signature formatter registry — ordered trial list of SignatureFormatters.

Conversion tries formatters from the most recently registered to the
least recently registered; the first non-None answer wins. When every
formatter declines the registry returns None and the CALLER decides how
to fail — the registry never guesses a default.

A registry can be built explicitly and injected into the generator. One
process-wide default exists for callers that rely on ambient registration;
it holds the pass-through formatter (registered first) and the ECDSA
formatter (registered last, so tried first).

Registration is setup-time only: it must not interleave with in-flight
conversions.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from cert_issuer.adapters.signature_formatters import DefaultSignatureFormatter, EcSignatureFormatter
from cert_issuer.curves import CurvePointSizes, default_curve_point_sizes
from cert_issuer.domain.models import SigningAlgorithm
from cert_issuer.domain.ports import SignatureFormatter

log = structlog.get_logger()


class SignatureFormatterRegistry:
    """Ordered collection of signature formatters; later registrations win."""

    def __init__(self, formatters: Iterable[SignatureFormatter] = ()) -> None:
        self._formatters: list[SignatureFormatter] = list(formatters)

    @classmethod
    def with_defaults(cls, point_sizes: CurvePointSizes | None = None) -> SignatureFormatterRegistry:
        """Registry holding the pass-through and ECDSA formatters."""
        return cls([DefaultSignatureFormatter(), EcSignatureFormatter(point_sizes)])

    def register(self, formatter: SignatureFormatter) -> None:
        self._formatters.append(formatter)
        log.debug("signature_formatter.registered", formatter=type(formatter).__name__)

    @property
    def formatters(self) -> tuple[SignatureFormatter, ...]:
        """Formatters in trial order (most recently registered first)."""
        return tuple(reversed(self._formatters))

    def convert_to_structured(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        """Raw platform signature → X.509 signatureValue bytes, or None if unsupported."""
        for formatter in self.formatters:
            converted = formatter.to_structured(algorithm, signature)
            if converted is not None:
                return converted
        log.warning("signature_formatter.none_applicable", algorithm=algorithm.name, direction="to_structured")
        return None

    def convert_to_raw(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        """X.509 signatureValue bytes → raw platform signature, or None if unsupported."""
        for formatter in self.formatters:
            converted = formatter.to_raw(algorithm, signature)
            if converted is not None:
                return converted
        log.warning("signature_formatter.none_applicable", algorithm=algorithm.name, direction="to_raw")
        return None

    def __len__(self) -> int:
        return len(self._formatters)


default_registry = SignatureFormatterRegistry.with_defaults(default_curve_point_sizes)


def register_signature_formatter(formatter: SignatureFormatter) -> None:
    """Register a formatter on the process-wide default registry."""
    default_registry.register(formatter)


def register_curve_point_size(curve: str, width: int) -> None:
    """Register a curve's coordinate width on the process-wide default table."""
    default_curve_point_sizes.register(curve, width)
