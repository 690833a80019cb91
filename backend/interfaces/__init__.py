from .device_router import router as device_router
from .price_router import router as price_router
from .report_router import router as report_router
from .debug_router import router as debug_router

__all__ = [
    "device_router",
    "price_router",
    "report_router",
    "debug_router",
]
