"""
Signature formatters — raw platform signatures ⇄ X.509 signatureValue bytes.

Adapter layer — implements the SignatureFormatter port using:
  - asn1crypto: ECDSA-Sig-Value (algos.DSASignature) serialization

ECDSA conversion:
  raw R ‖ S (2 × point size, big-endian, zero-padded)
    → strip leading zeros of each half (minimal unsigned magnitude)
    → asn1crypto INTEGER encoding (adds the sign byte when the top bit is set)
    → DER SEQUENCE { r INTEGER, s INTEGER }

RSA and EdDSA signatures have the same bytes in both forms, so their
formatter passes them through untouched.
"""

from __future__ import annotations

import structlog
from asn1crypto import algos

from cert_issuer.curves import CurvePointSizes, default_curve_point_sizes
from cert_issuer.domain.errors import MalformedSignatureError
from cert_issuer.domain.models import AlgorithmName, SigningAlgorithm

log = structlog.get_logger()


def _remove_padding(data: bytes) -> bytes:
    """Strip leading zero bytes; an all-zero input becomes empty."""
    return data.lstrip(b"\x00")


def _add_padding(point_size: int, data: bytes) -> bytes:
    """Left-pad a magnitude with zero bytes to exactly `point_size` bytes."""
    if len(data) > point_size:
        raise MalformedSignatureError(
            f"Signature integer of {len(data)} bytes exceeds the curve point size of {point_size}"
        )
    return data.rjust(point_size, b"\x00")


class EcSignatureFormatter:
    """
    Fixed point-size transcoder for ECDSA signatures.

    Implements the SignatureFormatter port. The point size comes from the
    injected CurvePointSizes table (process default when omitted) keyed by
    the algorithm's named curve.
    """

    def __init__(self, point_sizes: CurvePointSizes | None = None) -> None:
        self._point_sizes = point_sizes if point_sizes is not None else default_curve_point_sizes

    def to_structured(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        """Convert a raw R ‖ S signature to DER, or None for non-ECDSA algorithms."""
        if algorithm.name != AlgorithmName.ECDSA:
            return None

        point_size = self._point_sizes.get(algorithm.named_curve)
        if len(signature) != 2 * point_size:
            raise MalformedSignatureError(
                f"Raw ECDSA signature must be {2 * point_size} bytes for curve "
                f"{algorithm.named_curve!r}, got {len(signature)}"
            )

        r = _remove_padding(signature[:point_size])
        s = _remove_padding(signature[point_size:])
        ec_signature = algos.DSASignature(
            {
                "r": int.from_bytes(r, "big"),
                "s": int.from_bytes(s, "big"),
            }
        )
        log.debug("signature.to_structured", curve=algorithm.named_curve, point_size=point_size)
        return ec_signature.dump()

    def to_raw(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        """Convert a DER ECDSA-Sig-Value to raw R ‖ S, or None for non-ECDSA algorithms."""
        if algorithm.name != AlgorithmName.ECDSA:
            return None

        point_size = self._point_sizes.get(algorithm.named_curve)
        try:
            ec_signature = algos.DSASignature.load(signature, strict=True)
            r = ec_signature["r"].contents
            s = ec_signature["s"].contents
        except ValueError as e:
            raise MalformedSignatureError(f"Cannot parse ECDSA signature: {e}") from e
        if ec_signature["r"].native < 0 or ec_signature["s"].native < 0:
            raise MalformedSignatureError("ECDSA signature integers must not be negative")

        log.debug("signature.to_raw", curve=algorithm.named_curve, point_size=point_size)
        return _add_padding(point_size, _remove_padding(r)) + _add_padding(point_size, _remove_padding(s))


class DefaultSignatureFormatter:
    """
    Pass-through formatter for families whose raw and X.509 forms coincide.

    Implements the SignatureFormatter port for RSASSA-PKCS1-v1_5, RSA-PSS,
    Ed25519 and Ed448; declines everything else.
    """

    FAMILIES = frozenset(
        {
            AlgorithmName.RSASSA_PKCS1_V1_5,
            AlgorithmName.RSA_PSS,
            AlgorithmName.ED25519,
            AlgorithmName.ED448,
        }
    )

    def to_structured(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        if algorithm.name not in self.FAMILIES:
            return None
        return bytes(signature)

    def to_raw(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        if algorithm.name not in self.FAMILIES:
            return None
        return bytes(signature)
