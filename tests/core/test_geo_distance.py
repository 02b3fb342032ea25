# tests/core/test_geo_distance.py
"""
Тесты расчёта расстояния по формуле Haversine.
"""

import pytest

from src.core.geo import EARTH_RADIUS_KM, calculate_distance


class TestCalculateDistance:
    """Тесты для calculate_distance."""

    def test_same_point_is_zero(self) -> None:
        assert calculate_distance(-23.5505, -46.6333, -23.5505, -46.6333) == 0.0

    def test_symmetric(self) -> None:
        """Расстояние не зависит от порядка точек."""
        a = (-23.5505, -46.6333)  # São Paulo
        b = (-22.9068, -43.1729)  # Rio de Janeiro

        assert calculate_distance(*a, *b) == pytest.approx(calculate_distance(*b, *a))

    def test_known_distance(self) -> None:
        """São Paulo -> Rio de Janeiro около 361 км."""
        distance = calculate_distance(-23.5505, -46.6333, -22.9068, -43.1729)

        assert distance == pytest.approx(361, abs=3)

    def test_one_degree_of_latitude(self) -> None:
        distance = calculate_distance(0.0, 0.0, 1.0, 0.0)

        assert distance == pytest.approx(111.19, abs=0.01)

    def test_antipodal_points(self) -> None:
        """Противоположные точки: половина окружности, без ошибки домена."""
        distance = calculate_distance(0.0, 0.0, 0.0, 180.0)

        assert distance == pytest.approx(3.141592653589793 * EARTH_RADIUS_KM)
