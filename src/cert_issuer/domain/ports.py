"""
Ports — Protocol-based interfaces for the collaborators of the generator.

These define WHAT certificate issuance needs (contracts) without specifying
HOW it's done (implementation). Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy
the contract simply by implementing the methods — no inheritance.

Issuance flow:
  1. Signer.export_public_key  → SubjectPublicKeyInfo DER
  2. NameParser.to_bytes       → Name DER (subject / issuer)
  3. AlgorithmProvider         → AlgorithmIdentifier for the TBS + outer fields
  4. Signer.sign               → raw signature over the TBS bytes
  5. SignatureFormatter        → raw signature → X.509 signatureValue bytes
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from asn1crypto import algos

from cert_issuer.domain.models import CertificateName, SigningAlgorithm


@runtime_checkable
class Signer(Protocol):
    """
    Port: the platform's asymmetric-key capability.

    `sign` returns the RAW signature form (for ECDSA: fixed-width R ‖ S),
    which the formatter registry converts to the X.509 form. Both `sign`
    and `export_public_key` are async boundaries; their failures must be
    propagated unchanged by callers.
    """

    async def export_public_key(self, key: Any) -> bytes: ...

    async def import_public_key(self, spki: bytes) -> Any: ...

    async def sign(self, algorithm: SigningAlgorithm, private_key: Any, data: bytes) -> bytes: ...

    async def verify(
        self,
        algorithm: SigningAlgorithm,
        public_key: Any,
        signature: bytes,
        data: bytes,
    ) -> bool: ...

    def key_algorithm(self, key: Any) -> SigningAlgorithm:
        """Algorithm metadata carried by the key itself (e.g. the EC curve)."""
        ...


@runtime_checkable
class SignatureFormatter(Protocol):
    """
    Port: transcoder between raw and structured signature forms.

    Both operations return None when the formatter does not handle the
    algorithm's family, letting the registry try the next formatter.
    """

    def to_structured(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None: ...

    def to_raw(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None: ...


@runtime_checkable
class AlgorithmProvider(Protocol):
    """Port: map algorithm descriptors to and from X.509 AlgorithmIdentifiers."""

    def to_structured_algorithm(self, algorithm: SigningAlgorithm) -> algos.SignedDigestAlgorithm: ...

    def to_signing_algorithm(self, identifier: algos.SignedDigestAlgorithm) -> SigningAlgorithm: ...


@runtime_checkable
class NameParser(Protocol):
    """Port: turn a string or JSON distinguished name into Name DER bytes."""

    def to_bytes(self, name: CertificateName) -> bytes: ...
