"""
Signer adapter — asymmetric signing, verification and key export.

Adapter layer — implements the Signer port using:
  - cryptography (PyCA): EC, RSA and EdDSA private/public key operations

Signatures follow the platform (WebCrypto) convention: ECDSA signatures
are returned RAW, as fixed-width R ‖ S sized from the key's field order,
not as DER. Converting them to the X.509 form is the job of the
signature formatter registry.

cryptography's key operations are synchronous and CPU-bound; they run in
a worker thread so the async boundary of the port is a real one.
Exceptions raised by cryptography (wrong key type, unsupported padding,
…) propagate unchanged.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from cert_issuer.domain.errors import UnsupportedAlgorithmError
from cert_issuer.domain.models import AlgorithmName, HashName, SigningAlgorithm

log = structlog.get_logger()

_PRIVATE_KEY_TYPES = (
    ec.EllipticCurvePrivateKey,
    rsa.RSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
)

# cryptography curve names → WebCrypto named curves
_CURVE_NAMES: dict[str, str] = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
    "secp256k1": "K-256",
}

_HASHES: dict[HashName, type[hashes.HashAlgorithm]] = {
    HashName.SHA1: hashes.SHA1,
    HashName.SHA224: hashes.SHA224,
    HashName.SHA256: hashes.SHA256,
    HashName.SHA384: hashes.SHA384,
    HashName.SHA512: hashes.SHA512,
}


def _hash_for(algorithm: SigningAlgorithm) -> hashes.HashAlgorithm:
    if algorithm.hash is None or algorithm.hash not in _HASHES:
        raise UnsupportedAlgorithmError(
            f"Algorithm {algorithm.name} needs a supported hash, got {algorithm.hash!r}"
        )
    return _HASHES[HashName(algorithm.hash)]()


def _coordinate_size(key: ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey) -> int:
    return (key.curve.key_size + 7) // 8


def load_private_key(path: Path, password: str | None = None) -> Any:
    """Load a PEM-encoded private key from disk."""
    return serialization.load_pem_private_key(
        path.read_bytes(),
        password=password.encode("utf-8") if password else None,
    )


class CryptographySigner:
    """
    Sign, verify and export keys with the cryptography library.

    Implements the Signer port for ECDSA, RSASSA-PKCS1-v1_5, RSA-PSS,
    Ed25519 and Ed448.
    """

    # ─────────────────────── Key metadata ───────────────────────

    def key_algorithm(self, key: Any) -> SigningAlgorithm:
        """
        Algorithm metadata carried by the key.

        EC keys know their curve and EdDSA keys their algorithm. RSA keys
        carry nothing: PKCS#1 v1.5 vs PSS and the hash are the caller's choice.
        """
        if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
            return SigningAlgorithm(
                name=AlgorithmName.ECDSA,
                named_curve=_CURVE_NAMES.get(key.curve.name, key.curve.name),
            )
        if isinstance(key, (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey)):
            return SigningAlgorithm(name=AlgorithmName.ED25519)
        if isinstance(key, (ed448.Ed448PrivateKey, ed448.Ed448PublicKey)):
            return SigningAlgorithm(name=AlgorithmName.ED448)
        return SigningAlgorithm()

    async def export_public_key(self, key: Any) -> bytes:
        """Export the SubjectPublicKeyInfo DER of a public (or private) key."""
        return await asyncio.to_thread(self._do_export, key)

    def _do_export(self, key: Any) -> bytes:
        public_key = key.public_key() if isinstance(key, _PRIVATE_KEY_TYPES) else key
        return public_key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    async def import_public_key(self, spki: bytes) -> Any:
        return serialization.load_der_public_key(spki)

    # ─────────────────────── Signing ───────────────────────

    async def sign(self, algorithm: SigningAlgorithm, private_key: Any, data: bytes) -> bytes:
        """Sign `data` and return the raw signature form."""
        signature = await asyncio.to_thread(self._do_sign, algorithm, private_key, data)
        log.debug("signer.signed", algorithm=algorithm.name, signature_length=len(signature))
        return signature

    def _do_sign(self, algorithm: SigningAlgorithm, private_key: Any, data: bytes) -> bytes:
        match algorithm.name:
            case AlgorithmName.ECDSA:
                der_signature = private_key.sign(data, ec.ECDSA(_hash_for(algorithm)))
                r, s = decode_dss_signature(der_signature)
                size = _coordinate_size(private_key)
                return r.to_bytes(size, "big") + s.to_bytes(size, "big")
            case AlgorithmName.RSASSA_PKCS1_V1_5:
                return private_key.sign(data, padding.PKCS1v15(), _hash_for(algorithm))
            case AlgorithmName.RSA_PSS:
                return private_key.sign(data, self._pss_padding(algorithm), _hash_for(algorithm))
            case AlgorithmName.ED25519 | AlgorithmName.ED448:
                return private_key.sign(data)
        raise UnsupportedAlgorithmError(f"Cannot sign with algorithm {algorithm.name!r}")

    # ─────────────────────── Verification ───────────────────────

    async def verify(
        self,
        algorithm: SigningAlgorithm,
        public_key: Any,
        signature: bytes,
        data: bytes,
    ) -> bool:
        """Verify a raw-form signature; False when it does not match."""
        try:
            await asyncio.to_thread(self._do_verify, algorithm, public_key, signature, data)
        except InvalidSignature:
            log.info("signer.verify_failed", algorithm=algorithm.name)
            return False
        return True

    def _do_verify(self, algorithm: SigningAlgorithm, public_key: Any, signature: bytes, data: bytes) -> None:
        match algorithm.name:
            case AlgorithmName.ECDSA:
                half = len(signature) // 2
                der_signature = encode_dss_signature(
                    int.from_bytes(signature[:half], "big"),
                    int.from_bytes(signature[half:], "big"),
                )
                public_key.verify(der_signature, data, ec.ECDSA(_hash_for(algorithm)))
            case AlgorithmName.RSASSA_PKCS1_V1_5:
                public_key.verify(signature, data, padding.PKCS1v15(), _hash_for(algorithm))
            case AlgorithmName.RSA_PSS:
                public_key.verify(signature, data, self._pss_padding(algorithm), _hash_for(algorithm))
            case AlgorithmName.ED25519 | AlgorithmName.ED448:
                public_key.verify(signature, data)
            case _:
                raise UnsupportedAlgorithmError(f"Cannot verify with algorithm {algorithm.name!r}")

    @staticmethod
    def _pss_padding(algorithm: SigningAlgorithm) -> padding.PSS:
        hash_algorithm = _hash_for(algorithm)
        salt_length = (
            algorithm.salt_length if algorithm.salt_length is not None else hash_algorithm.digest_size
        )
        return padding.PSS(mgf=padding.MGF1(hash_algorithm), salt_length=salt_length)
