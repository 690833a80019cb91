from __future__ import annotations

from typing import Dict

from fastapi import APIRouter

from interfaces import deps

router = APIRouter(prefix="/prices", tags=["prices"])


@router.get("")
def get_prices() -> Dict[str, Dict[str, float]]:
    return deps.engine.price_table.to_dict()


@router.put("")
def update_prices(payload: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
    """Replace the price table, e.g. ``{"PS4": {"single": 20, "double": 25, "quad": 35}}``."""
    table = deps.engine.update_prices(payload)
    return table.to_dict()
