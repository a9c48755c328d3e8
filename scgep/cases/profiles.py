"""
Representative-day load and renewable shapes (4 seasons x 24 hours).

Seasons are ordered spring, summer, fall, winter. Wind shapes carry seeded
noise so that repeated calls return identical profiles.
"""

from typing import List

import numpy as np

HOURS = np.arange(24, dtype=float)


def _bump(center: float, width: float) -> np.ndarray:
    return np.exp(-(((HOURS - center) / width) ** 2))


def _as_lists(profiles: np.ndarray) -> List[List[float]]:
    return [[float(v) for v in row] for row in profiles]


def default_load_profile() -> List[List[float]]:
    """Normalized load shape; the seasonal maximum is close to 1.0 (peak load)."""
    spring = 0.7 + 0.3 * _bump(18, 4)
    summer = 0.75 + 0.25 * _bump(16, 3.5)
    fall = 0.65 + 0.35 * _bump(17, 4)
    winter = 0.7 + 0.15 * _bump(7, 2) + 0.30 * _bump(18, 3)
    profiles = np.vstack([spring, summer, fall, winter])
    return _as_lists(np.clip(profiles, 0.0, 1.0))


def solar_profile() -> List[List[float]]:
    """Daylight sine from 6:00 to 20:00, slightly stronger in later seasons."""
    daylight = (HOURS >= 6) & (HOURS <= 20)
    shape = np.where(daylight, np.sin((HOURS - 6) / 14 * np.pi), 0.0)
    shape = np.clip(shape, 0.0, 1.0)
    profiles = np.vstack([shape * (0.85 + season * 0.05) for season in range(4)])
    return _as_lists(profiles)


def wind_profile(seed: int = 42) -> List[List[float]]:
    """Onshore wind: higher at night and in winter, weaker in summer."""
    rng = np.random.default_rng(seed)
    night = np.where((HOURS < 6) | (HOURS > 20), 0.15, 0.0)
    season_factor = [1.0, 0.8, 1.0, 1.2]
    profiles = np.vstack([
        np.minimum(1.0, (0.35 + night + rng.uniform(0, 0.1, size=24)) * season_factor[season])
        for season in range(4)
    ])
    return _as_lists(profiles)


def offshore_wind_profile(seed: int = 43) -> List[List[float]]:
    """Offshore wind: stronger and steadier than onshore."""
    rng = np.random.default_rng(seed)
    season_factor = [1.0, 0.85, 1.0, 1.15]
    profiles = np.vstack([
        np.minimum(1.0, (0.45 + rng.uniform(0, 0.08, size=24)) * season_factor[season])
        for season in range(4)
    ])
    return _as_lists(profiles)


def flat_profile(value: float) -> List[List[float]]:
    return [[float(value)] * 24 for _ in range(4)]
