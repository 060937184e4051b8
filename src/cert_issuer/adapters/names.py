"""
Name parser adapter — distinguished names to DER bytes.

Adapter layer — implements the NameParser port using:
  - cryptography (PyCA): x509.Name construction and DER encoding

Accepted inputs:
  - RFC 4514 string:  "CN=Test,O=Example,C=US"
  - JSON name:        [{"C": ["US"]}, {"O": ["Example"]}, {"CN": ["Test"]}]
    (RDNs in DER order; keys are short names or dotted OIDs; a dict
    holding several attributes becomes a multi-valued RDN)

Invalid names raise ValueError from cryptography and are not wrapped.
"""

from __future__ import annotations

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from cert_issuer.domain.models import CertificateName

_SHORT_NAMES: dict[str, ObjectIdentifier] = {
    "CN": NameOID.COMMON_NAME,
    "C": NameOID.COUNTRY_NAME,
    "L": NameOID.LOCALITY_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "STREET": NameOID.STREET_ADDRESS,
    "DC": NameOID.DOMAIN_COMPONENT,
    "UID": NameOID.USER_ID,
    "E": NameOID.EMAIL_ADDRESS,
    "SERIALNUMBER": NameOID.SERIAL_NUMBER,
    "T": NameOID.TITLE,
    "GN": NameOID.GIVEN_NAME,
    "SN": NameOID.SURNAME,
}


def _attribute_oid(key: str) -> ObjectIdentifier:
    """Resolve a JSON name key (short name or dotted OID) to an OID."""
    oid = _SHORT_NAMES.get(key.upper())
    if oid is not None:
        return oid
    if key and all(part.isdigit() for part in key.split(".")):
        return ObjectIdentifier(key)
    raise ValueError(f"Unknown name attribute {key!r}")


def _from_json(name: list[dict[str, list[str]]]) -> x509.Name:
    rdns = [
        x509.RelativeDistinguishedName(
            [
                x509.NameAttribute(_attribute_oid(key), value)
                for key, values in rdn.items()
                for value in values
            ]
        )
        for rdn in name
    ]
    return x509.Name(rdns)


class X509NameParser:
    """
    Convert string or JSON distinguished names to Name DER bytes.

    Implements the NameParser port.
    """

    def parse(self, name: CertificateName) -> x509.Name:
        if isinstance(name, str):
            return x509.Name.from_rfc4514_string(name)
        return _from_json(name)

    def to_bytes(self, name: CertificateName) -> bytes:
        return self.parse(name).public_bytes()
