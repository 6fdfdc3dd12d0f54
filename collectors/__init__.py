from collectors.base import BaseCollector, CollectorError
from collectors.ecb import ECBCollector

__all__ = [
    "BaseCollector",
    "CollectorError",
    "ECBCollector",
]
