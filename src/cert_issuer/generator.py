"""
Generator — assembles, signs and serializes X.509 certificates.

Issuance is one strictly sequential flow per call:

  export_public_key(public_key)            ← async, Signer port
    → assemble TBSCertificate (asn1crypto)
      → resolve signing algorithm + AlgorithmIdentifier
        → DER serialize the TBS bytes
          → sign(tbs)                       ← async, Signer port (raw signature)
            → registry.convert_to_structured(raw)
              → assemble + serialize Certificate

Collaborators are injected (hexagonal ports); the generator keeps no
per-call state, so concurrent create() calls are independent. The shared
registries must be fully populated before concurrent generation begins.

Signer failures propagate unchanged and are never retried: some signers
are stateful, and retry semantics belong to them.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from asn1crypto import keys as asn1_keys
from asn1crypto import x509 as asn1_x509

from cert_issuer.adapters.algorithms import AsnAlgorithmProvider
from cert_issuer.adapters.names import X509NameParser
from cert_issuer.adapters.signer import CryptographySigner
from cert_issuer.certificate import Certificate
from cert_issuer.domain.errors import SignatureConversionUnsupportedError
from cert_issuer.domain.models import (
    CertificateCreateParams,
    CertificateName,
    SelfSignedCertificateParams,
    is_hex_serial_number,
)
from cert_issuer.domain.ports import AlgorithmProvider, NameParser, Signer
from cert_issuer.formatters import SignatureFormatterRegistry, default_registry

log = structlog.get_logger()

# DER of an empty RDNSequence, used when no subject / issuer is given
_EMPTY_NAME = b"\x30\x00"


# ─────────────────────── TBS field helpers ───────────────────────


def _decode_serial_number(serial_number: str) -> int:
    """Hex serial → non-negative integer (encoded canonically by asn1crypto)."""
    if not is_hex_serial_number(serial_number):
        raise ValueError(f"Serial number must be a hexadecimal string, got {serial_number!r}")
    return int(serial_number, 16)


def _to_time(value: datetime) -> asn1_x509.Time:
    """
    RFC 5280 time: UTCTime for 1950–2049, GeneralizedTime otherwise.

    Naive datetimes are taken as UTC; sub-second precision is dropped.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC).replace(microsecond=0)
    if 1950 <= value.year < 2050:
        return asn1_x509.Time(name="utc_time", value=value)
    return asn1_x509.Time(name="general_time", value=value)


# ─────────────────────── Public Generator Class ───────────────────────


class CertificateGenerator:
    """
    Build and sign X.509 v3 certificates.

    Defaults: CryptographySigner, AsnAlgorithmProvider, X509NameParser
    and the process-wide signature formatter registry.
    """

    def __init__(
        self,
        signer: Signer | None = None,
        algorithm_provider: AlgorithmProvider | None = None,
        name_parser: NameParser | None = None,
        registry: SignatureFormatterRegistry | None = None,
    ) -> None:
        self._signer = signer if signer is not None else CryptographySigner()
        self._algorithm_provider = algorithm_provider if algorithm_provider is not None else AsnAlgorithmProvider()
        self._name_parser = name_parser if name_parser is not None else X509NameParser()
        self._registry = registry if registry is not None else default_registry

    async def create_self_signed(self, params: SelfSignedCertificateParams) -> Certificate:
        """Create a certificate whose subject and issuer are `params.name`, signed by its own key."""
        return await self.create(
            CertificateCreateParams(
                serial_number=params.serial_number,
                subject=params.name,
                issuer=params.name,
                not_before=params.not_before,
                not_after=params.not_after,
                public_key=params.keys.public_key,
                signing_key=params.keys.private_key,
                signing_algorithm=params.signing_algorithm,
                extensions=params.extensions,
            )
        )

    async def create(self, params: CertificateCreateParams) -> Certificate:
        """
        Create a certificate for `params.public_key` signed by `params.signing_key`.

        Raises:
          UnsupportedAlgorithmError — no AlgorithmIdentifier for the algorithm
          SignatureConversionUnsupportedError — no formatter accepts the algorithm
          whatever the signer raises — unchanged
        """
        spki = await self._signer.export_public_key(params.public_key)

        tbs = asn1_x509.TbsCertificate(
            {
                "version": "v3",
                "serial_number": _decode_serial_number(params.serial_number),
                "issuer": self._parse_name(params.issuer),
                "validity": asn1_x509.Validity(
                    {
                        "not_before": _to_time(params.not_before),
                        "not_after": _to_time(params.not_after),
                    }
                ),
                "subject": self._parse_name(params.subject),
                "subject_public_key_info": asn1_keys.PublicKeyInfo.load(spki),
            }
        )
        if params.extensions:
            tbs["extensions"] = asn1_x509.Extensions(
                [asn1_x509.Extension.load(extension.raw_data) for extension in params.extensions]
            )

        # Key metadata (e.g. the EC curve) fills what the caller left unset
        algorithm = params.signing_algorithm.merged_with(self._signer.key_algorithm(params.signing_key))
        signature_algorithm = self._algorithm_provider.to_structured_algorithm(algorithm)
        tbs["signature"] = signature_algorithm

        tbs_bytes = tbs.dump()
        log.info(
            "certificate.signing",
            serial=params.serial_number,
            algorithm=algorithm.name,
            hash=algorithm.hash,
            curve=algorithm.named_curve,
            tbs_length=len(tbs_bytes),
        )
        raw_signature = await self._signer.sign(algorithm, params.signing_key, tbs_bytes)

        signature_value = self._registry.convert_to_structured(algorithm, raw_signature)
        if signature_value is None:
            raise SignatureConversionUnsupportedError(algorithm.name)

        certificate = Certificate.from_asn1(
            asn1_x509.Certificate(
                {
                    "tbs_certificate": tbs,
                    "signature_algorithm": signature_algorithm,
                    "signature_value": signature_value,
                }
            )
        )
        log.info(
            "certificate.created",
            serial=params.serial_number,
            algorithm=algorithm.name,
            extensions=len(params.extensions),
            size=len(certificate.data),
        )
        return certificate

    def _parse_name(self, name: CertificateName | None) -> asn1_x509.Name:
        if not name:
            return asn1_x509.Name.load(_EMPTY_NAME)
        return asn1_x509.Name.load(self._name_parser.to_bytes(name))
