"""
Multi-format codec — raw bytes ⇄ hex / base64 / base64url / PEM.

Decoding classifies textual input in a strict priority order:

  PEM → hex → base64 (standard alphabet) → base64url (URL-safe alphabet)

The first matching classifier's decoder wins, so text that is valid hex
AND valid base64 (e.g. "AAAA") is always decoded as hex. Callers that know
the representation pass it explicitly and skip classification entirely.

PEM framing is delegated to asn1crypto.pem; tags are not validated against
a fixed set, but must be PEM-legal (uppercase letters, digits, spaces).
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar, Self

from asn1crypto import pem as asn1_pem

from cert_issuer.domain.errors import UnsupportedEncodingFormatError
from cert_issuer.domain.models import EncodingFormat, PemObject

_ACCEPTED = "PEM, HEX, Base64, Base64Url"

_PEM_TAG_RE = re.compile(r"[A-Z0-9 ]+")
_PEM_RE = re.compile(
    r"-----BEGIN ([A-Z0-9 ]+)-----\s.*?-----END \1-----",
    re.DOTALL,
)
_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})+")
_BASE64_RE = re.compile(
    r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{3}=|[A-Za-z0-9+/]{2}==)?"
)
_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]+")


# ─────────────────────── Classifiers ───────────────────────


def is_pem(text: str) -> bool:
    """True when the text holds at least one BEGIN/END delimited block."""
    return _PEM_RE.search(text) is not None


def is_hex(text: str) -> bool:
    return _HEX_RE.fullmatch(text.strip()) is not None


def is_base64(text: str) -> bool:
    return _BASE64_RE.fullmatch(text.strip()) is not None


def is_base64url(text: str) -> bool:
    return _BASE64URL_RE.fullmatch(text.strip()) is not None


_CLASSIFIERS: tuple[tuple[EncodingFormat, Callable[[str], bool]], ...] = (
    (EncodingFormat.PEM, is_pem),
    (EncodingFormat.HEX, is_hex),
    (EncodingFormat.BASE64, is_base64),
    (EncodingFormat.BASE64URL, is_base64url),
)


def detect_format(text: str) -> EncodingFormat:
    """
    Classify textual input by the fixed priority order.

    Raises UnsupportedEncodingFormatError when no classifier matches.
    """
    for fmt, matches in _CLASSIFIERS:
        if matches(text):
            return fmt
    raise UnsupportedEncodingFormatError(
        f"Unsupported format of encoded data. Must be one of {_ACCEPTED}"
    )


def _coerce_format(fmt: EncodingFormat | str) -> EncodingFormat:
    try:
        return EncodingFormat(fmt)
    except ValueError:
        raise UnsupportedEncodingFormatError(
            f"Unsupported format {fmt!r}. Must be one of "
            + ", ".join(f.value for f in EncodingFormat)
        ) from None


# ─────────────────────── PEM ───────────────────────


def pem_encode(body: bytes, tag: str) -> str:
    """Wrap `body` in a PEM block labelled `tag` (base64 lines of 64 chars)."""
    if _PEM_TAG_RE.fullmatch(tag) is None:
        raise ValueError(f"Invalid PEM tag {tag!r}: use uppercase letters, digits and spaces")
    return asn1_pem.armor(tag, body).decode("ascii")


def pem_decode(text: str) -> list[PemObject]:
    """
    Decode every PEM block in `text`, in order.

    Surrounding whitespace, blank lines and indentation are tolerated.
    """
    normalized = "\n".join(line.strip() for line in text.strip().splitlines())
    try:
        return [
            PemObject(tag=tag, body=body)
            for tag, _headers, body in asn1_pem.unarmor(normalized.encode("ascii"), multiple=True)
        ]
    except ValueError as e:
        raise UnsupportedEncodingFormatError(f"Malformed PEM data: {e}") from e


# ─────────────────────── Decoders ───────────────────────


def _from_pem(text: str) -> bytes:
    return pem_decode(text)[0].body


def _from_hex(text: str) -> bytes:
    return bytes.fromhex(text.strip())


def _from_base64(text: str) -> bytes:
    return base64.b64decode(text.strip(), validate=True)


def _from_base64url(text: str) -> bytes:
    stripped = text.strip()
    padded = stripped + "=" * (-len(stripped) % 4)
    return base64.urlsafe_b64decode(padded)


_DECODERS: dict[EncodingFormat, Callable[[str], bytes]] = {
    EncodingFormat.PEM: _from_pem,
    EncodingFormat.HEX: _from_hex,
    EncodingFormat.BASE64: _from_base64,
    EncodingFormat.BASE64URL: _from_base64url,
}


def decode(value: bytes | str, fmt: EncodingFormat | str | None = None) -> bytes:
    """
    Convert encoded input to raw bytes.

    Raw bytes are returned unchanged. Text is decoded with `fmt` when
    given, otherwise with the decoder of the first matching classifier.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    resolved = detect_format(value) if fmt is None else _coerce_format(fmt)
    try:
        return _DECODERS[resolved](value)
    except (binascii.Error, ValueError) as e:
        if isinstance(e, UnsupportedEncodingFormatError):
            raise
        raise UnsupportedEncodingFormatError(f"Input is not valid {resolved.value}: {e}") from e


# ─────────────────────── Encoders ───────────────────────


def encode(data: bytes, fmt: EncodingFormat | str = EncodingFormat.PEM, tag: str = "DATA") -> str:
    """Render raw bytes in the requested textual format (PEM by default)."""
    match _coerce_format(fmt):
        case EncodingFormat.PEM:
            return pem_encode(data, tag)
        case EncodingFormat.HEX:
            return data.hex()
        case EncodingFormat.BASE64:
            return base64.b64encode(data).decode("ascii")
        case EncodingFormat.BASE64URL:
            return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")
    raise TypeError("unreachable")  # pragma: no cover


# ─────────────────────── Encoded blob ───────────────────────


@dataclass(frozen=True, slots=True)
class EncodedBlob:
    """
    Immutable binary artifact with a multi-format textual surface.

    `data` is always the raw bytes; textual forms are derived on demand
    and never stored. `source_format` records how the blob arrived and
    does not take part in equality.
    """

    data: bytes = field(repr=False)
    source_format: EncodingFormat | None = field(default=None, compare=False)

    pem_tag: ClassVar[str] = "DATA"

    @classmethod
    def from_encoded(cls, value: bytes | str, fmt: EncodingFormat | str | None = None) -> Self:
        """Build from raw bytes or from any supported textual representation."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        resolved = detect_format(value) if fmt is None else _coerce_format(fmt)
        return cls(decode(value, resolved), resolved)

    def to_bytes(self) -> bytes:
        return self.data

    def to_string(self, fmt: EncodingFormat | str = EncodingFormat.PEM) -> str:
        return encode(self.data, fmt, tag=self.pem_tag)

    def __str__(self) -> str:
        return self.to_string()
