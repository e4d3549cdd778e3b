"""
Adapters layer - Data access implementations.
"""

from .json_repository import JsonScheduleRepository

__all__ = ["JsonScheduleRepository"]
