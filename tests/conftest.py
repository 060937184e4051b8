"""
Shared test fixtures and helpers for the cert-issuer test suite.

Provides real cryptography key pairs (EC P-256/P-384/P-521, RSA, Ed25519)
and a fixed validity window. Keys are generated once per session — key
generation is test setup only, never library behavior.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from cert_issuer.domain.models import KeyPair

NOT_BEFORE = datetime(2024, 1, 1, tzinfo=UTC)
NOT_AFTER = datetime(2034, 1, 1, tzinfo=UTC)


def make_key_pair(private_key: object) -> KeyPair:
    """Wrap a cryptography private key into a KeyPair."""
    return KeyPair(public_key=private_key.public_key(), private_key=private_key)  # type: ignore[attr-defined]


@pytest.fixture(scope="session")
def p256_keys() -> KeyPair:
    return make_key_pair(ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture(scope="session")
def p384_keys() -> KeyPair:
    return make_key_pair(ec.generate_private_key(ec.SECP384R1()))


@pytest.fixture(scope="session")
def p521_keys() -> KeyPair:
    return make_key_pair(ec.generate_private_key(ec.SECP521R1()))


@pytest.fixture(scope="session")
def rsa_keys() -> KeyPair:
    return make_key_pair(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def ed25519_keys() -> KeyPair:
    return make_key_pair(ed25519.Ed25519PrivateKey.generate())
