"""
Unit tests for the signature formatter registry.

Uses in-test fake formatters to observe trial order, first-answer-wins
behavior and the all-decline case.
"""

from __future__ import annotations

import pytest

import cert_issuer.formatters as formatters_module
from cert_issuer.adapters.signature_formatters import DefaultSignatureFormatter, EcSignatureFormatter
from cert_issuer.curves import CurvePointSizes
from cert_issuer.domain.models import AlgorithmName, HashName, SigningAlgorithm
from cert_issuer.formatters import (
    SignatureFormatterRegistry,
    default_registry,
    register_curve_point_size,
    register_signature_formatter,
)

ECDSA = SigningAlgorithm(name=AlgorithmName.ECDSA, hash=HashName.SHA256, named_curve="P-256")


class FakeFormatter:
    """Answers with a fixed tag for one algorithm name, declines the rest."""

    def __init__(self, tag: bytes, accepts: AlgorithmName | None = None) -> None:
        self.tag = tag
        self.accepts = accepts
        self.calls: list[str] = []

    def to_structured(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        self.calls.append("to_structured")
        if self.accepts is None or algorithm.name == self.accepts:
            return self.tag + signature
        return None

    def to_raw(self, algorithm: SigningAlgorithm, signature: bytes) -> bytes | None:
        self.calls.append("to_raw")
        if self.accepts is None or algorithm.name == self.accepts:
            return self.tag + signature
        return None


class TestRegistryOrder:
    """Verify that the most recently registered formatter is tried first."""

    def test_later_registration_wins(self) -> None:
        """
        GIVEN formatters A then B, both accepting the algorithm
        WHEN a signature is converted
        THEN B's answer is returned and A is never consulted.
        """
        first = FakeFormatter(b"A:")
        second = FakeFormatter(b"B:")
        registry = SignatureFormatterRegistry([first, second])

        assert registry.convert_to_structured(ECDSA, b"sig") == b"B:sig"
        assert registry.convert_to_raw(ECDSA, b"sig") == b"B:sig"
        assert first.calls == []

    def test_falls_back_to_earlier_formatter(self) -> None:
        """
        GIVEN a later formatter that declines the algorithm
        WHEN a signature is converted
        THEN the earlier formatter's answer is returned.
        """
        first = FakeFormatter(b"A:")
        second = FakeFormatter(b"B:", accepts=AlgorithmName.ED25519)
        registry = SignatureFormatterRegistry([first, second])

        assert registry.convert_to_structured(ECDSA, b"sig") == b"A:sig"
        assert second.calls == ["to_structured"]

    def test_all_decline_returns_none(self) -> None:
        registry = SignatureFormatterRegistry([FakeFormatter(b"A:", accepts=AlgorithmName.ED448)])

        assert registry.convert_to_structured(ECDSA, b"sig") is None
        assert registry.convert_to_raw(ECDSA, b"sig") is None

    def test_empty_registry_returns_none(self) -> None:
        registry = SignatureFormatterRegistry()
        assert len(registry) == 0
        assert registry.convert_to_structured(ECDSA, b"sig") is None

    def test_register_appends(self) -> None:
        registry = SignatureFormatterRegistry()
        fake = FakeFormatter(b"X:")
        registry.register(fake)

        assert len(registry) == 1
        assert registry.formatters == (fake,)


class TestDefaultRegistry:
    """Verify the registry built with the default formatters."""

    def test_ec_formatter_is_tried_first(self) -> None:
        registry = SignatureFormatterRegistry.with_defaults()
        ec_formatter, default_formatter = registry.formatters

        assert isinstance(ec_formatter, EcSignatureFormatter)
        assert isinstance(default_formatter, DefaultSignatureFormatter)

    def test_converts_ecdsa_and_passes_rsa_through(self) -> None:
        raw = (1).to_bytes(32, "big") + (2).to_bytes(32, "big")
        rsa = SigningAlgorithm(name=AlgorithmName.RSASSA_PKCS1_V1_5, hash=HashName.SHA256)

        assert default_registry.convert_to_structured(ECDSA, raw) == b"\x30\x06\x02\x01\x01\x02\x01\x02"
        assert default_registry.convert_to_structured(rsa, b"rsa-sig") == b"rsa-sig"

    def test_unknown_family_returns_none(self) -> None:
        assert default_registry.convert_to_structured(SigningAlgorithm(), b"sig") is None

    def test_injected_point_sizes_are_used(self) -> None:
        registry = SignatureFormatterRegistry.with_defaults(CurvePointSizes({"X-1": 4}))
        algorithm = SigningAlgorithm(name=AlgorithmName.ECDSA, hash=HashName.SHA256, named_curve="X-1")

        raw = b"\x00\x00\x00\x05\x00\x00\x00\x06"
        structured = registry.convert_to_structured(algorithm, raw)
        assert structured == b"\x30\x06\x02\x01\x05\x02\x01\x06"
        assert registry.convert_to_raw(algorithm, structured) == raw


class TestProcessWideRegistration:
    """Verify the module-level registration helpers target the process defaults."""

    def test_register_signature_formatter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        registry = SignatureFormatterRegistry()
        monkeypatch.setattr(formatters_module, "default_registry", registry)
        fake = FakeFormatter(b"F:")

        register_signature_formatter(fake)

        assert registry.formatters == (fake,)

    def test_register_curve_point_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        table = CurvePointSizes()
        monkeypatch.setattr(formatters_module, "default_curve_point_sizes", table)

        register_curve_point_size("brainpoolP512r1", 64)

        assert table.get("brainpoolP512r1") == 64
