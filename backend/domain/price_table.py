"""Hourly price table keyed by device type and player-count mode."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from .device import DeviceType
from .errors import InvalidRequestError
from .session import GameType

# stored as a fixed-scale NUMERIC column
RATE_PLACES = 4


@dataclass(frozen=True)
class PriceTable:
    """Immutable mapping (device type, game type) -> rate per hour.

    Updating prices replaces the whole table; sessions already running pick
    up the new rate when they are billed at end.
    """

    rates: Dict[DeviceType, Dict[GameType, Decimal]] = field(default_factory=dict)

    def rate_for(self, device_type: DeviceType, game_type: GameType) -> Optional[Decimal]:
        return self.rates.get(DeviceType(device_type), {}).get(GameType(game_type))

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            device_type.value: {game_type.value: float(rate) for game_type, rate in tiers.items()}
            for device_type, tiers in self.rates.items()
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "PriceTable":
        """Build a table from ``{"PS4": {"single": 20, ...}, ...}``.

        Keys are matched case-insensitively so ``ps4`` and ``PS4`` both work.
        """
        rates: Dict[DeviceType, Dict[GameType, Decimal]] = {}
        for raw_type, tiers in (data or {}).items():
            try:
                device_type = DeviceType(str(raw_type).upper())
            except ValueError as exc:
                raise InvalidRequestError(f"Unknown device type {raw_type!r}") from exc
            parsed: Dict[GameType, Decimal] = {}
            for raw_game, raw_rate in (tiers or {}).items():
                try:
                    game_type = GameType(str(raw_game).lower())
                except ValueError as exc:
                    raise InvalidRequestError(f"Unknown game type {raw_game!r}") from exc
                parsed[game_type] = _parse_rate(raw_rate, device_type, game_type)
            rates[device_type] = parsed
        return cls(rates=rates)


def _parse_rate(raw_rate: Any, device_type: DeviceType, game_type: GameType) -> Decimal:
    try:
        rate = Decimal(str(raw_rate))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidRequestError(
            f"Rate for {device_type.value}/{game_type.value} is not a number"
        ) from exc
    if not rate.is_finite() or rate < 0:
        raise InvalidRequestError(
            f"Rate for {device_type.value}/{game_type.value} must be a non-negative number"
        )
    if rate.as_tuple().exponent < -RATE_PLACES:
        raise InvalidRequestError(
            f"Rate for {device_type.value}/{game_type.value} allows at most {RATE_PLACES} decimal places"
        )
    return rate
