"""
Certificate artifact — immutable DER bytes with a multi-format surface.

Accessors re-parse the stored bytes on demand, split the same way the
rest of the codebase splits ASN.1 work:
  - asn1crypto: structural fields (TBS bytes, AlgorithmIdentifiers,
    signatureValue, serial number, SPKI, extensions)
  - cryptography (PyCA): metadata (RFC 4514 names, validity datetimes)

`verify` checks the certificate's own signature with a public key. It is
NOT chain validation: no trust anchors, no revocation, no validity check.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

import structlog
from asn1crypto import core
from asn1crypto import x509 as asn1_x509
from cryptography import x509

from cert_issuer.adapters.algorithms import AsnAlgorithmProvider
from cert_issuer.adapters.signer import CryptographySigner
from cert_issuer.domain.errors import SignatureConversionUnsupportedError
from cert_issuer.domain.ports import AlgorithmProvider, Signer
from cert_issuer.encoding import EncodedBlob
from cert_issuer.extensions import Extension
from cert_issuer.formatters import SignatureFormatterRegistry, default_registry

log = structlog.get_logger()


def _serial_hex(value: int) -> str:
    """Serial INTEGER → lowercase hex with an even digit count, no sign byte."""
    digits = format(value, "x")
    return digits.zfill(len(digits) + len(digits) % 2)


@dataclass(frozen=True, slots=True)
class Certificate(EncodedBlob):
    """
    Signed X.509 certificate.

    Build from encoded input with Certificate.from_encoded(bytes | str)
    or from an asn1crypto structure with Certificate.from_asn1(...).
    """

    pem_tag: ClassVar[str] = "CERTIFICATE"

    @classmethod
    def from_asn1(cls, certificate: asn1_x509.Certificate) -> Certificate:
        return cls(certificate.dump())

    def _asn1(self) -> asn1_x509.Certificate:
        return asn1_x509.Certificate.load(self.data)

    def _x509(self) -> x509.Certificate:
        return x509.load_der_x509_certificate(self.data)

    # ─────────────────────── Structural fields ───────────────────────

    @property
    def tbs_certificate(self) -> bytes:
        """DER of the TBSCertificate — the bytes the signature covers."""
        return self._asn1()["tbs_certificate"].dump()

    @property
    def signature_algorithm(self) -> bytes:
        """DER of the outer signatureAlgorithm field."""
        return self._asn1()["signature_algorithm"].dump()

    @property
    def tbs_signature_algorithm(self) -> bytes:
        """DER of the TBSCertificate.signature field; equals signature_algorithm."""
        return self._asn1()["tbs_certificate"]["signature"].dump()

    @property
    def signature_value(self) -> bytes:
        """Structured (X.509 form) signature bytes."""
        return self._asn1()["signature_value"].native

    @property
    def serial_number(self) -> str:
        """Serial number as even-length lowercase hex, as passed to the generator."""
        return _serial_hex(self._asn1()["tbs_certificate"]["serial_number"].native)

    @property
    def public_key_info(self) -> bytes:
        """DER of the subject's SubjectPublicKeyInfo."""
        return self._asn1()["tbs_certificate"]["subject_public_key_info"].dump()

    @property
    def extensions(self) -> tuple[Extension, ...]:
        extensions = self._asn1()["tbs_certificate"]["extensions"]
        if isinstance(extensions, core.Void):
            return ()
        return tuple(Extension(extension.dump()) for extension in extensions)

    @property
    def is_self_issued(self) -> bool:
        tbs = self._asn1()["tbs_certificate"]
        return tbs["subject"].dump() == tbs["issuer"].dump()

    # ─────────────────────── Metadata ───────────────────────

    @property
    def subject(self) -> str:
        return self._x509().subject.rfc4514_string()

    @property
    def issuer(self) -> str:
        return self._x509().issuer.rfc4514_string()

    @property
    def not_before(self) -> datetime:
        return self._x509().not_valid_before_utc

    @property
    def not_after(self) -> datetime:
        return self._x509().not_valid_after_utc

    # ─────────────────────── Signature check ───────────────────────

    async def verify(
        self,
        public_key: Any = None,
        *,
        signer: Signer | None = None,
        algorithm_provider: AlgorithmProvider | None = None,
        registry: SignatureFormatterRegistry | None = None,
    ) -> bool:
        """
        Verify the signature over the TBS bytes.

        `public_key` defaults to the certificate's own subject key, which
        checks a self-signed certificate. The structured signature is
        converted back to the raw form through the formatter registry
        before the signer sees it.
        """
        signer = signer if signer is not None else CryptographySigner()
        algorithm_provider = algorithm_provider if algorithm_provider is not None else AsnAlgorithmProvider()
        registry = registry if registry is not None else default_registry

        certificate = self._asn1()
        tbs = certificate["tbs_certificate"]
        if public_key is None:
            public_key = await signer.import_public_key(tbs["subject_public_key_info"].dump())

        algorithm = algorithm_provider.to_signing_algorithm(certificate["signature_algorithm"]).merged_with(
            signer.key_algorithm(public_key)
        )
        raw_signature = registry.convert_to_raw(algorithm, certificate["signature_value"].native)
        if raw_signature is None:
            raise SignatureConversionUnsupportedError(algorithm.name)

        verified = await signer.verify(algorithm, public_key, raw_signature, tbs.dump())
        log.info("certificate.verified", serial=_serial_hex(tbs["serial_number"].native), valid=verified)
        return verified
