"""
Acceptance test fixtures — real generator wired with the default adapters.

Every acceptance test issues certificates with real keys through the full
stack (cryptography signer, asn1crypto codec, formatter registry) and
checks the result with an independent X.509 parser.
"""

from __future__ import annotations

import pytest

from cert_issuer.adapters.signer import CryptographySigner
from cert_issuer.curves import KNOWN_CURVE_POINT_SIZES, CurvePointSizes
from cert_issuer.formatters import SignatureFormatterRegistry
from cert_issuer.generator import CertificateGenerator


@pytest.fixture()
def registry() -> SignatureFormatterRegistry:
    return SignatureFormatterRegistry.with_defaults(CurvePointSizes(KNOWN_CURVE_POINT_SIZES))


@pytest.fixture()
def generator(registry: SignatureFormatterRegistry) -> CertificateGenerator:
    return CertificateGenerator(signer=CryptographySigner(), registry=registry)
