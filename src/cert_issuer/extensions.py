"""
Extension value object — one X.509 extension kept as its DER bytes.

The generator re-parses `raw_data` into asn1crypto's x509.Extension when
it assembles the TBS certificate, so any extension — known to asn1crypto
or not — travels through issuance byte-for-byte.

  Extension ::= SEQUENCE {
      extnID      OBJECT IDENTIFIER,
      critical    BOOLEAN DEFAULT FALSE,
      extnValue   OCTET STRING
  }
"""

from __future__ import annotations

from dataclasses import dataclass, field

from asn1crypto import core
from cryptography import x509


class _ExtensionSchema(core.Sequence):  # type: ignore[misc]
    """Opaque-value ASN.1 Extension: extnValue stays a plain OCTET STRING."""

    _fields = [
        ("extn_id", core.ObjectIdentifier),
        ("critical", core.Boolean, {"default": False}),
        ("extn_value", core.OctetString),
    ]


@dataclass(frozen=True, slots=True)
class Extension:
    """DER-encoded X.509 extension."""

    raw_data: bytes = field(repr=False)

    @classmethod
    def build(cls, oid: str, value: bytes, critical: bool = False) -> Extension:
        """Encode an extension from its dotted OID and the DER of its extnValue."""
        schema = _ExtensionSchema(
            {
                "extn_id": oid,
                "critical": critical,
                "extn_value": value,
            }
        )
        return cls(schema.dump())

    @classmethod
    def from_cryptography(cls, extension: x509.ExtensionType, critical: bool = False) -> Extension:
        """Encode a cryptography extension value, e.g. x509.BasicConstraints(...)."""
        return cls.build(extension.oid.dotted_string, extension.public_bytes(), critical)

    @property
    def oid(self) -> str:
        return _ExtensionSchema.load(self.raw_data)["extn_id"].dotted

    @property
    def critical(self) -> bool:
        return bool(_ExtensionSchema.load(self.raw_data)["critical"].native)

    @property
    def value(self) -> bytes:
        """DER bytes of the extnValue content."""
        return _ExtensionSchema.load(self.raw_data)["extn_value"].native
