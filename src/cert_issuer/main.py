"""
Application entry point — wires dependencies and issues a self-signed certificate.

Composition root: creates concrete adapters, injects them into the
generator, and runs one issuance.

This is the ONLY place where the process-level configuration (curve
point sizes, formatter registry) is built from settings. Everything else
depends on Protocol interfaces.

Responsibilities:
  1. Configure structlog for structured logging (to stderr)
  2. Load and validate configuration from environment
  3. Create the point-size table, formatter registry, signer and generator
  4. Load the private key and derive its signing algorithm
  5. Issue the certificate and write it in the configured format
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from cert_issuer import __version__
from cert_issuer.adapters.signer import CryptographySigner, load_private_key
from cert_issuer.certificate import Certificate
from cert_issuer.config import AppSettings
from cert_issuer.curves import CurvePointSizes
from cert_issuer.domain.models import (
    AlgorithmName,
    HashName,
    KeyPair,
    SelfSignedCertificateParams,
    SigningAlgorithm,
)
from cert_issuer.formatters import SignatureFormatterRegistry
from cert_issuer.generator import CertificateGenerator


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured, human-readable logging.

    Logs go to stderr so stdout carries only the issued certificate.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def signing_algorithm_for(signer: CryptographySigner, key: Any, hash_name: HashName) -> SigningAlgorithm:
    """
    Pick the signature algorithm for a key loaded from disk.

    EC → ECDSA, Ed25519/Ed448 → themselves, RSA (no metadata) → PKCS#1 v1.5.
    """
    metadata = signer.key_algorithm(key)
    match metadata.name:
        case None:
            return SigningAlgorithm(name=AlgorithmName.RSASSA_PKCS1_V1_5, hash=hash_name)
        case AlgorithmName.ECDSA:
            return SigningAlgorithm(name=AlgorithmName.ECDSA, hash=hash_name)
        case _:
            return SigningAlgorithm(name=metadata.name)


def create_generator(settings: AppSettings, signer: CryptographySigner) -> CertificateGenerator:
    """Instantiate the generator with a registry built from the curve settings."""
    point_sizes = CurvePointSizes.from_settings(settings.curves)
    registry = SignatureFormatterRegistry.with_defaults(point_sizes)
    return CertificateGenerator(signer=signer, registry=registry)


async def issue_certificate(settings: AppSettings) -> Certificate:
    """Issue the self-signed certificate described by `settings.issue`."""
    signer = CryptographySigner()
    generator = create_generator(settings, signer)
    issue = settings.issue

    password = issue.key_password.get_secret_value() if issue.key_password else None
    private_key = load_private_key(issue.key_path, password)
    now = datetime.now(UTC)

    return await generator.create_self_signed(
        SelfSignedCertificateParams(
            serial_number=issue.serial_number,
            name=issue.subject,
            not_before=now,
            not_after=now + timedelta(days=issue.validity_days),
            keys=KeyPair(public_key=private_key.public_key(), private_key=private_key),
            signing_algorithm=signing_algorithm_for(signer, private_key, issue.hash),
        )
    )


def main() -> None:
    """Load settings, issue the certificate and write it out."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        key_path=str(settings.issue.key_path),
        output_format=settings.issue.output_format.value,
    )

    try:
        certificate = asyncio.run(issue_certificate(settings))
    except Exception as e:
        log.error("app.fatal_error", error=str(e), error_type=type(e).__name__)
        sys.exit(1)

    output = certificate.to_string(settings.issue.output_format)
    if not output.endswith("\n"):
        output += "\n"

    if settings.issue.output_path is not None:
        settings.issue.output_path.write_text(output, encoding="ascii")
        log.info("app.certificate_written", path=str(settings.issue.output_path))
    else:
        sys.stdout.write(output)


if __name__ == "__main__":
    main()
