"""
Recreation.gov Availability API Module
"""
from .client import RecGovAPIClient, parse_availability
from .endpoints import Endpoints, month_start

__all__ = [
    "RecGovAPIClient",
    "parse_availability",
    "Endpoints",
    "month_start",
]
