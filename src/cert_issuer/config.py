"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app)
  - Fall back to .env file
  - Validate types and constraints at startup

All configuration errors are caught at startup, not at issuance time.

Architecture: Only AppSettings is a BaseSettings instance. Sub-settings are plain
BaseModel classes populated by AppSettings via env_nested_delimiter="__", so the env
var ISSUE__KEY_PATH maps to issue.key_path, CURVES__DEFAULT_POINT_SIZE maps to
curves.default_point_size, etc.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cert_issuer.curves import DEFAULT_POINT_SIZE, KNOWN_CURVE_POINT_SIZES
from cert_issuer.domain.models import EncodingFormat, HashName, is_hex_serial_number

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class CurveSettings(BaseModel):
    """
    Coordinate byte widths per named curve for ECDSA signature transcoding.

    Curves missing from `point_sizes` use `default_point_size`.
    Example: CURVES__POINT_SIZES='{"P-256": 32, "brainpoolP512r1": 64}'
    """

    point_sizes: dict[str, int] = Field(
        default_factory=lambda: dict(KNOWN_CURVE_POINT_SIZES),
        description="Curve name → coordinate width in bytes",
    )
    default_point_size: int = Field(
        default=DEFAULT_POINT_SIZE,
        ge=1,
        description="Width used for curves without a registered size",
    )

    @field_validator("point_sizes")
    @classmethod
    def validate_point_sizes(cls, value: dict[str, int]) -> dict[str, int]:
        """Reject non-positive widths."""
        invalid = {curve: width for curve, width in value.items() if width < 1}
        if invalid:
            raise ValueError(f"Point sizes must be positive integers, got {invalid}")
        return value


class IssueSettings(BaseModel):
    """Self-signed certificate issued by the command-line entry point."""

    key_path: Path = Field(description="PEM private key used for the certificate and its signature")
    key_password: SecretStr | None = Field(default=None, description="Password of the private key")
    subject: str = Field(default="CN=cert-issuer", description="RFC 4514 subject (= issuer)")
    serial_number: str = Field(default="01", description="Hexadecimal serial number")
    validity_days: int = Field(default=365, ge=1, description="Validity period starting now")
    hash: HashName = Field(default=HashName.SHA256, description="Digest for ECDSA / RSA signatures")
    output_format: EncodingFormat = Field(default=EncodingFormat.PEM)
    output_path: Path | None = Field(default=None, description="Write here instead of stdout")

    @field_validator("serial_number")
    @classmethod
    def validate_serial_number(cls, value: str) -> str:
        """Reject serial numbers that aren't hexadecimal."""
        stripped = value.strip()
        if not is_hex_serial_number(stripped):
            raise ValueError(f"Serial number must be hexadecimal, got {value!r}")
        return stripped


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values

    env_nested_delimiter="__" maps ISSUE__KEY_PATH → issue.key_path, etc.
    All sub-settings classes are plain BaseModel so they inherit this mapping.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    issue: IssueSettings
    curves: CurveSettings = Field(default_factory=lambda: CurveSettings())

    log_level: str = Field(default="INFO")
