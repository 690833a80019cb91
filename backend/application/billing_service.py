"""Billing rules: hourly rate by tier, charged on actual elapsed time."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from domain.device import DeviceType
from domain.errors import ConfigurationError, InvalidRequestError
from domain.price_table import PriceTable
from domain.session import GameType

MS_PER_HOUR = Decimal(3_600_000)
MS_PER_MINUTE = Decimal(60_000)
CENT = Decimal("0.01")


def compute_cost(
    device_type: DeviceType,
    game_type: GameType,
    elapsed_ms: int,
    price_table: PriceTable,
) -> Decimal:
    """Cost of ``elapsed_ms`` on the ``(device_type, game_type)`` tier.

    The product is kept at full precision and rounded half-up to cents only
    here, at the final billing point.

    Raises:
        ConfigurationError: If the price table has no rate for the tier.
        InvalidRequestError: If ``elapsed_ms`` is negative.
    """
    if elapsed_ms < 0:
        raise InvalidRequestError("Elapsed time cannot be negative")
    rate = price_table.rate_for(device_type, game_type)
    if rate is None:
        raise ConfigurationError(
            f"No hourly rate configured for {DeviceType(device_type).value}/{GameType(game_type).value}"
        )
    raw_cost = rate * Decimal(elapsed_ms) / MS_PER_HOUR
    return raw_cost.quantize(CENT, rounding=ROUND_HALF_UP)


def billed_minutes(elapsed_ms: int) -> int:
    """Elapsed time in whole minutes, half-up (30 s rounds to 1 min)."""
    minutes = Decimal(max(0, elapsed_ms)) / MS_PER_MINUTE
    return int(minutes.quantize(Decimal(1), rounding=ROUND_HALF_UP))
