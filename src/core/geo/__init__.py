# src/core/geo/__init__.py
"""
Геодезические расчёты.
Только расстояние по прямой: маршруты по дорожной сети не строятся.
"""

from src.core.geo.distance import EARTH_RADIUS_KM, calculate_distance

__all__ = [
    "EARTH_RADIUS_KM",
    "calculate_distance",
]
