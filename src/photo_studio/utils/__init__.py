"""Utility modules for the photo studio backend."""

from .image import ImageProcessor
from .date_utils import parse_datetime, period_range, previous_period, utcnow

__all__ = [
    'ImageProcessor',
    'parse_datetime',
    'period_range',
    'previous_period',
    'utcnow',
]
