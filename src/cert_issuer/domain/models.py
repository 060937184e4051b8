"""
Domain models — immutable value objects for certificate issuance.

These are pure value objects with no behavior beyond small derivations.
They describe WHAT a caller asks for (algorithm descriptors, creation
parameters, key pairs) independently of the ASN.1 codec and the signer
that eventually fulfil the request.

All models are frozen dataclasses (immutable) following functional principles.
Key objects are opaque: only the Signer adapter knows how to use them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from cert_issuer.extensions import Extension


class EncodingFormat(StrEnum):
    """Textual representations supported by the multi-format codec."""

    HEX = "hex"
    BASE64 = "base64"
    BASE64URL = "base64url"
    PEM = "pem"


class AlgorithmName(StrEnum):
    """Signature algorithm families, named as in WebCrypto."""

    ECDSA = "ECDSA"
    RSASSA_PKCS1_V1_5 = "RSASSA-PKCS1-v1_5"
    RSA_PSS = "RSA-PSS"
    ED25519 = "Ed25519"
    ED448 = "Ed448"


class HashName(StrEnum):
    """Digest algorithms usable with the hashed signature families."""

    SHA1 = "SHA-1"
    SHA224 = "SHA-224"
    SHA256 = "SHA-256"
    SHA384 = "SHA-384"
    SHA512 = "SHA-512"


JsonName: TypeAlias = list[dict[str, list[str]]]
CertificateName: TypeAlias = str | JsonName


@dataclass(frozen=True, slots=True)
class SigningAlgorithm:
    """
    Signature algorithm descriptor.

    Every field is optional so that a caller-supplied descriptor can be
    completed from the signing key's own metadata (see merged_with).
    `named_curve` only applies to ECDSA, `salt_length` only to RSA-PSS.
    """

    name: AlgorithmName | None = None
    hash: HashName | None = None
    named_curve: str | None = None
    salt_length: int | None = None

    def merged_with(self, other: SigningAlgorithm) -> SigningAlgorithm:
        """
        Fill the unset fields of this descriptor from `other`.

        Fields already set here win; `other` only fills gaps.

        >>> SigningAlgorithm(AlgorithmName.ECDSA, HashName.SHA256).merged_with(
        ...     SigningAlgorithm(AlgorithmName.ECDSA, named_curve="P-256")
        ... ).named_curve
        'P-256'
        """
        gaps = {
            f.name: getattr(other, f.name)
            for f in fields(self)
            if getattr(self, f.name) is None and getattr(other, f.name) is not None
        }
        return replace(self, **gaps) if gaps else self


@dataclass(frozen=True, slots=True)
class PemObject:
    """One PEM block: the boundary tag and the decoded body bytes."""

    tag: str
    body: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class KeyPair:
    """A public/private key pair in the signer's native key representation."""

    public_key: Any
    private_key: Any = field(repr=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class _CertificateParamsBase:
    serial_number: str
    not_before: datetime
    not_after: datetime
    signing_algorithm: SigningAlgorithm
    extensions: tuple[Extension, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateCreateParams(_CertificateParamsBase):
    """
    Parameters for a certificate signed by an arbitrary issuer key.

    `serial_number` is a hexadecimal string. The validity window is taken
    as given: not_before < not_after is left to the caller and verifiers.
    """

    public_key: Any
    signing_key: Any = field(repr=False)
    subject: CertificateName | None = None
    issuer: CertificateName | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SelfSignedCertificateParams(_CertificateParamsBase):
    """Parameters for a self-signed certificate: one key pair, one name."""

    keys: KeyPair
    name: CertificateName | None = None


_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_hex_serial_number(value: str) -> bool:
    """True when the value is a non-empty string made only of hexadecimal digits."""
    return bool(value) and all(c in _HEX_DIGITS for c in value)
