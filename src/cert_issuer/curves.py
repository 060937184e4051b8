"""
Curve point-size table — coordinate byte width per named elliptic curve.

The EC signature formatter needs the width of one coordinate to split a
raw R ‖ S signature and to re-pad the DER integers on the way back.
Unregistered curves fall back to the default width (32 bytes).

Concurrency: populate the table before issuing certificates. Reads during
transcoding take no lock, so registration must not interleave with
in-flight generation calls.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from cert_issuer.config import CurveSettings

log = structlog.get_logger()

DEFAULT_POINT_SIZE = 32

KNOWN_CURVE_POINT_SIZES: Mapping[str, int] = {
    "P-256": 32,
    "P-384": 48,
    "P-521": 66,
    "K-256": 32,
}


class CurvePointSizes:
    """Mutable-before-use mapping from curve name to coordinate byte width."""

    def __init__(
        self,
        sizes: Mapping[str, int] | None = None,
        default: int = DEFAULT_POINT_SIZE,
    ) -> None:
        _check_width(default)
        self._default = default
        self._sizes: dict[str, int] = {}
        for curve, width in (sizes or {}).items():
            _check_width(width)
            self._sizes[curve] = width

    @classmethod
    def from_settings(cls, settings: CurveSettings) -> CurvePointSizes:
        return cls(settings.point_sizes, default=settings.default_point_size)

    @property
    def default(self) -> int:
        return self._default

    def register(self, curve: str, width: int) -> None:
        """Register (or replace) the coordinate width for `curve`."""
        _check_width(width)
        self._sizes[curve] = width
        log.debug("curve.registered", curve=curve, point_size=width)

    def get(self, curve: str | None) -> int:
        """Width for `curve`, or the default width when unknown or None."""
        if curve is None:
            return self._default
        return self._sizes.get(curve, self._default)

    def __contains__(self, curve: object) -> bool:
        return curve in self._sizes

    def __repr__(self) -> str:
        return f"CurvePointSizes({self._sizes!r}, default={self._default})"


def _check_width(width: int) -> None:
    if isinstance(width, bool) or not isinstance(width, int) or width < 1:
        raise ValueError(f"Point size must be a positive integer, got {width!r}")


default_curve_point_sizes = CurvePointSizes(KNOWN_CURVE_POINT_SIZES)
