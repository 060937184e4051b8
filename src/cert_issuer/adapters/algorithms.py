"""
Algorithm provider adapter — SigningAlgorithm ⇄ X.509 AlgorithmIdentifier.

Adapter layer — implements the AlgorithmProvider port using:
  - asn1crypto: algos.SignedDigestAlgorithm / algos.RSASSAPSSParams

Supported identifiers:
  ECDSA              ecdsa-with-SHA1/224/256/384/512      (no parameters)
  RSASSA-PKCS1-v1_5  sha1/224/256/384/512WithRSAEncryption (NULL parameters)
  RSA-PSS            id-RSASSA-PSS + RSASSA-PSS-params     (MGF1 with the same hash)
  Ed25519 / Ed448    id-Ed25519 / id-Ed448                 (no parameters)

The same SignedDigestAlgorithm instance is assigned to both the TBS
`signature` field and the outer `signatureAlgorithm` field by the
generator, which keeps the two byte-identical.
"""

from __future__ import annotations

from asn1crypto import algos, core

from cert_issuer.domain.errors import UnsupportedAlgorithmError
from cert_issuer.domain.models import AlgorithmName, HashName, SigningAlgorithm

# ─────────────────────── OID tables ───────────────────────

_HASHED_ALGORITHM_OIDS: dict[tuple[AlgorithmName, HashName], str] = {
    (AlgorithmName.ECDSA, HashName.SHA1): "1.2.840.10045.4.1",
    (AlgorithmName.ECDSA, HashName.SHA224): "1.2.840.10045.4.3.1",
    (AlgorithmName.ECDSA, HashName.SHA256): "1.2.840.10045.4.3.2",
    (AlgorithmName.ECDSA, HashName.SHA384): "1.2.840.10045.4.3.3",
    (AlgorithmName.ECDSA, HashName.SHA512): "1.2.840.10045.4.3.4",
    (AlgorithmName.RSASSA_PKCS1_V1_5, HashName.SHA1): "1.2.840.113549.1.1.5",
    (AlgorithmName.RSASSA_PKCS1_V1_5, HashName.SHA224): "1.2.840.113549.1.1.14",
    (AlgorithmName.RSASSA_PKCS1_V1_5, HashName.SHA256): "1.2.840.113549.1.1.11",
    (AlgorithmName.RSASSA_PKCS1_V1_5, HashName.SHA384): "1.2.840.113549.1.1.12",
    (AlgorithmName.RSASSA_PKCS1_V1_5, HashName.SHA512): "1.2.840.113549.1.1.13",
}
_HASHED_ALGORITHMS_BY_OID = {oid: pair for pair, oid in _HASHED_ALGORITHM_OIDS.items()}

_RSA_PSS_OID = "1.2.840.113549.1.1.10"

_EDDSA_OIDS: dict[AlgorithmName, str] = {
    AlgorithmName.ED25519: "1.3.101.112",
    AlgorithmName.ED448: "1.3.101.113",
}
_EDDSA_BY_OID = {oid: name for name, oid in _EDDSA_OIDS.items()}

# asn1crypto DigestAlgorithmId names and digest sizes (default PSS salt length)
_DIGEST_NAMES: dict[HashName, str] = {
    HashName.SHA1: "sha1",
    HashName.SHA224: "sha224",
    HashName.SHA256: "sha256",
    HashName.SHA384: "sha384",
    HashName.SHA512: "sha512",
}
_HASHES_BY_DIGEST_NAME = {digest: name for name, digest in _DIGEST_NAMES.items()}
_DIGEST_SIZES: dict[HashName, int] = {
    HashName.SHA1: 20,
    HashName.SHA224: 28,
    HashName.SHA256: 32,
    HashName.SHA384: 48,
    HashName.SHA512: 64,
}


def _require_hash(algorithm: SigningAlgorithm) -> HashName:
    if algorithm.hash is None:
        raise UnsupportedAlgorithmError(f"Algorithm {algorithm.name} requires a hash")
    try:
        return HashName(algorithm.hash)
    except ValueError:
        raise UnsupportedAlgorithmError(f"Unsupported hash {algorithm.hash!r}") from None


def _pss_parameters(hash_name: HashName, salt_length: int) -> algos.RSASSAPSSParams:
    digest = _DIGEST_NAMES[hash_name]
    return algos.RSASSAPSSParams(
        {
            "hash_algorithm": {"algorithm": digest},
            "mask_gen_algorithm": {
                "algorithm": "mgf1",
                "parameters": {"algorithm": digest},
            },
            "salt_length": salt_length,
        }
    )


# ─────────────────────── Public Provider Class ───────────────────────


class AsnAlgorithmProvider:
    """
    Map signing algorithm descriptors to asn1crypto AlgorithmIdentifiers.

    Implements the AlgorithmProvider port. Unknown or incomplete
    descriptors raise UnsupportedAlgorithmError.
    """

    def to_structured_algorithm(self, algorithm: SigningAlgorithm) -> algos.SignedDigestAlgorithm:
        match algorithm.name:
            case AlgorithmName.ECDSA:
                oid = _HASHED_ALGORITHM_OIDS.get((AlgorithmName.ECDSA, _require_hash(algorithm)))
                if oid is not None:
                    return algos.SignedDigestAlgorithm({"algorithm": oid})
            case AlgorithmName.RSASSA_PKCS1_V1_5:
                key = (AlgorithmName.RSASSA_PKCS1_V1_5, _require_hash(algorithm))
                oid = _HASHED_ALGORITHM_OIDS.get(key)
                if oid is not None:
                    return algos.SignedDigestAlgorithm({"algorithm": oid, "parameters": core.Null()})
            case AlgorithmName.RSA_PSS:
                hash_name = _require_hash(algorithm)
                salt_length = (
                    algorithm.salt_length
                    if algorithm.salt_length is not None
                    else _DIGEST_SIZES[hash_name]
                )
                return algos.SignedDigestAlgorithm(
                    {
                        "algorithm": "rsassa_pss",
                        "parameters": _pss_parameters(hash_name, salt_length),
                    }
                )
            case AlgorithmName.ED25519 | AlgorithmName.ED448:
                return algos.SignedDigestAlgorithm({"algorithm": _EDDSA_OIDS[algorithm.name]})
        raise UnsupportedAlgorithmError(
            f"Cannot build an AlgorithmIdentifier for {algorithm.name!r} with hash {algorithm.hash!r}"
        )

    def to_signing_algorithm(self, identifier: algos.SignedDigestAlgorithm) -> SigningAlgorithm:
        """
        Recover the descriptor from an AlgorithmIdentifier.

        The curve is not part of an ECDSA identifier; callers fill it from
        the verifying key's metadata.
        """
        oid = identifier["algorithm"].dotted
        if oid in _HASHED_ALGORITHMS_BY_OID:
            name, hash_name = _HASHED_ALGORITHMS_BY_OID[oid]
            return SigningAlgorithm(name=name, hash=hash_name)
        if oid in _EDDSA_BY_OID:
            return SigningAlgorithm(name=_EDDSA_BY_OID[oid])
        if oid == _RSA_PSS_OID:
            params = identifier["parameters"]
            digest = params["hash_algorithm"]["algorithm"].native
            if digest not in _HASHES_BY_DIGEST_NAME:
                raise UnsupportedAlgorithmError(f"Unsupported RSA-PSS hash {digest!r}")
            return SigningAlgorithm(
                name=AlgorithmName.RSA_PSS,
                hash=_HASHES_BY_DIGEST_NAME[digest],
                salt_length=params["salt_length"].native,
            )
        raise UnsupportedAlgorithmError(f"Unsupported signature algorithm OID {oid}")
