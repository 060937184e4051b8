"""
Unit tests for the cryptography-backed Signer adapter.

Uses real keys from the session fixtures; no mocking of cryptography.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from cert_issuer.adapters.signer import CryptographySigner, load_private_key
from cert_issuer.domain.errors import UnsupportedAlgorithmError
from cert_issuer.domain.models import AlgorithmName, HashName, KeyPair, SigningAlgorithm
from cert_issuer.domain.ports import Signer

ECDSA_SHA256 = SigningAlgorithm(name=AlgorithmName.ECDSA, hash=HashName.SHA256)
RSA_SHA256 = SigningAlgorithm(name=AlgorithmName.RSASSA_PKCS1_V1_5, hash=HashName.SHA256)


@pytest.fixture
def signer() -> CryptographySigner:
    return CryptographySigner()


# ─────────────────────── Key metadata ───────────────────────


class TestKeyAlgorithm:
    """Verify the metadata each key type carries."""

    def test_satisfies_port(self, signer: CryptographySigner) -> None:
        assert isinstance(signer, Signer)

    def test_ec_key_carries_curve(self, signer: CryptographySigner, p256_keys: KeyPair, p521_keys: KeyPair) -> None:
        assert signer.key_algorithm(p256_keys.private_key) == SigningAlgorithm(
            name=AlgorithmName.ECDSA, named_curve="P-256"
        )
        assert signer.key_algorithm(p521_keys.public_key).named_curve == "P-521"

    def test_secp256k1_maps_to_k256(self, signer: CryptographySigner) -> None:
        key = ec.generate_private_key(ec.SECP256K1())
        assert signer.key_algorithm(key).named_curve == "K-256"

    def test_eddsa_keys_carry_their_name(self, signer: CryptographySigner, ed25519_keys: KeyPair) -> None:
        assert signer.key_algorithm(ed25519_keys.public_key) == SigningAlgorithm(name=AlgorithmName.ED25519)
        assert signer.key_algorithm(ed448.Ed448PrivateKey.generate()).name == AlgorithmName.ED448

    def test_rsa_key_carries_nothing(self, signer: CryptographySigner, rsa_keys: KeyPair) -> None:
        assert signer.key_algorithm(rsa_keys.private_key) == SigningAlgorithm()


# ─────────────────────── Key export / import ───────────────────────


class TestKeyExport:
    """Verify SubjectPublicKeyInfo export and import."""

    @pytest.mark.asyncio
    async def test_export_public_key_is_spki_der(self, signer: CryptographySigner, p256_keys: KeyPair) -> None:
        expected = p256_keys.public_key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        assert await signer.export_public_key(p256_keys.public_key) == expected

    @pytest.mark.asyncio
    async def test_export_accepts_private_key(self, signer: CryptographySigner, rsa_keys: KeyPair) -> None:
        assert await signer.export_public_key(rsa_keys.private_key) == await signer.export_public_key(
            rsa_keys.public_key
        )

    @pytest.mark.asyncio
    async def test_import_round_trips(self, signer: CryptographySigner, ed25519_keys: KeyPair) -> None:
        spki = await signer.export_public_key(ed25519_keys.public_key)
        imported = await signer.import_public_key(spki)
        assert await signer.export_public_key(imported) == spki


# ─────────────────────── Sign / verify ───────────────────────


class TestSignVerify:
    """Verify the raw signature form and verification for each family."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("fixture", "size"), [("p256_keys", 32), ("p384_keys", 48), ("p521_keys", 66)])
    async def test_ecdsa_signature_is_raw_fixed_width(
        self,
        signer: CryptographySigner,
        request: pytest.FixtureRequest,
        fixture: str,
        size: int,
    ) -> None:
        """
        GIVEN an EC key on a given curve
        WHEN data is signed with ECDSA
        THEN the signature is R ‖ S of 2 × coordinate size bytes and
             verifies with cryptography once re-encoded as DER.
        """
        keys: KeyPair = request.getfixturevalue(fixture)
        signature = await signer.sign(ECDSA_SHA256, keys.private_key, b"payload")

        assert len(signature) == 2 * size
        der = encode_dss_signature(
            int.from_bytes(signature[:size], "big"),
            int.from_bytes(signature[size:], "big"),
        )
        keys.public_key.verify(der, b"payload", ec.ECDSA(hashes.SHA256()))
        assert await signer.verify(ECDSA_SHA256, keys.public_key, signature, b"payload")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "algorithm",
        [
            RSA_SHA256,
            SigningAlgorithm(name=AlgorithmName.RSASSA_PKCS1_V1_5, hash=HashName.SHA512),
            SigningAlgorithm(name=AlgorithmName.RSA_PSS, hash=HashName.SHA256),
            SigningAlgorithm(name=AlgorithmName.RSA_PSS, hash=HashName.SHA384, salt_length=0),
        ],
    )
    async def test_rsa_round_trip(
        self, signer: CryptographySigner, rsa_keys: KeyPair, algorithm: SigningAlgorithm
    ) -> None:
        signature = await signer.sign(algorithm, rsa_keys.private_key, b"payload")

        assert len(signature) == 256
        assert await signer.verify(algorithm, rsa_keys.public_key, signature, b"payload")

    @pytest.mark.asyncio
    async def test_ed25519_round_trip(self, signer: CryptographySigner, ed25519_keys: KeyPair) -> None:
        algorithm = SigningAlgorithm(name=AlgorithmName.ED25519)
        signature = await signer.sign(algorithm, ed25519_keys.private_key, b"payload")

        assert len(signature) == 64
        assert await signer.verify(algorithm, ed25519_keys.public_key, signature, b"payload")

    @pytest.mark.asyncio
    async def test_tampered_data_does_not_verify(self, signer: CryptographySigner, p256_keys: KeyPair) -> None:
        signature = await signer.sign(ECDSA_SHA256, p256_keys.private_key, b"payload")
        assert not await signer.verify(ECDSA_SHA256, p256_keys.public_key, signature, b"tampered")

    @pytest.mark.asyncio
    async def test_wrong_key_does_not_verify(self, signer: CryptographySigner, p256_keys: KeyPair) -> None:
        signature = await signer.sign(ECDSA_SHA256, p256_keys.private_key, b"payload")
        other = ec.generate_private_key(ec.SECP256R1())
        assert not await signer.verify(ECDSA_SHA256, other.public_key(), signature, b"payload")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "algorithm",
        [SigningAlgorithm(), SigningAlgorithm(name=AlgorithmName.ECDSA)],
    )
    async def test_unsupported_algorithm_raises(
        self, signer: CryptographySigner, p256_keys: KeyPair, algorithm: SigningAlgorithm
    ) -> None:
        with pytest.raises(UnsupportedAlgorithmError):
            await signer.sign(algorithm, p256_keys.private_key, b"payload")


# ─────────────────────── Key loading ───────────────────────


class TestLoadPrivateKey:
    """Verify PEM private keys load from disk."""

    def test_unencrypted(self, tmp_path: Path, p256_keys: KeyPair) -> None:
        path = tmp_path / "key.pem"
        path.write_bytes(
            p256_keys.private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            )
        )
        key = load_private_key(path)
        assert key.private_numbers() == p256_keys.private_key.private_numbers()

    def test_encrypted(self, tmp_path: Path, ed25519_keys: KeyPair) -> None:
        path = tmp_path / "key.pem"
        path.write_bytes(
            ed25519_keys.private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.BestAvailableEncryption(b"s3cret"),
            )
        )
        key = load_private_key(path, "s3cret")
        raw = serialization.Encoding.Raw, serialization.PublicFormat.Raw
        assert key.public_key().public_bytes(*raw) == ed25519_keys.public_key.public_bytes(*raw)

    def test_wrong_password_propagates(self, tmp_path: Path, ed25519_keys: KeyPair) -> None:
        path = tmp_path / "key.pem"
        path.write_bytes(
            ed25519_keys.private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.BestAvailableEncryption(b"s3cret"),
            )
        )
        with pytest.raises(ValueError):
            load_private_key(path, "wrong")
