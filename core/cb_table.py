"""
Cb reduction-factor table for NEN 2057 (obstruction angle α × overhang angle β).

Values are code-mandated and transcribed as published; do not derive or smooth them.
"""

import bisect
import math
from dataclasses import dataclass
from typing import Optional, Tuple

ALPHAS: Tuple[int, ...] = (20, 21, 22, 23, 24, 25, 26, 27, 28, 29, 30, 31, 32)


@dataclass(frozen=True)
class BetaBand:
    """Row of the table: β in [start, end), one factor per entry of ALPHAS."""

    start: Optional[float]  # None: open towards -inf
    end: float
    values: Tuple[float, ...]


BETA_BANDS: Tuple[BetaBand, ...] = (
    BetaBand(None, 0, (0.80, 0.79, 0.79, 0.78, 0.77, 0.77, 0.76, 0.75, 0.75, 0.74, 0.73, 0.73, 0.72)),
    BetaBand(0, 5, (0.80, 0.79, 0.79, 0.78, 0.77, 0.77, 0.76, 0.75, 0.75, 0.74, 0.73, 0.73, 0.72)),
    BetaBand(5, 10, (0.80, 0.79, 0.78, 0.78, 0.77, 0.76, 0.76, 0.75, 0.74, 0.74, 0.73, 0.72, 0.72)),
    BetaBand(10, 15, (0.79, 0.79, 0.78, 0.77, 0.77, 0.76, 0.76, 0.75, 0.75, 0.74, 0.73, 0.72, 0.71)),
    BetaBand(15, 20, (0.79, 0.78, 0.77, 0.77, 0.76, 0.75, 0.75, 0.74, 0.73, 0.72, 0.72, 0.71, 0.70)),
    BetaBand(20, 25, (0.77, 0.76, 0.76, 0.75, 0.74, 0.73, 0.73, 0.72, 0.71, 0.70, 0.70, 0.69, 0.68)),
    BetaBand(25, 30, (0.76, 0.75, 0.74, 0.73, 0.72, 0.72, 0.71, 0.70, 0.69, 0.68, 0.68, 0.67, 0.66)),
    BetaBand(30, 35, (0.74, 0.73, 0.72, 0.71, 0.70, 0.69, 0.69, 0.68, 0.67, 0.66, 0.65, 0.64, 0.63)),
    BetaBand(35, 40, (0.72, 0.70, 0.70, 0.68, 0.68, 0.67, 0.66, 0.65, 0.64, 0.63, 0.62, 0.61, 0.60)),
    BetaBand(40, 45, (0.69, 0.68, 0.66, 0.65, 0.64, 0.63, 0.62, 0.61, 0.60, 0.59, 0.58, 0.57, 0.55)),
    BetaBand(45, 50, (0.65, 0.64, 0.63, 0.61, 0.60, 0.59, 0.58, 0.56, 0.55, 0.54, 0.53, 0.52, 0.50)),
    BetaBand(50, 55, (0.60, 0.59, 0.58, 0.56, 0.55, 0.54, 0.52, 0.51, 0.50, 0.49, 0.48, 0.47, 0.45)),
    BetaBand(55, 60, (0.53, 0.52, 0.50, 0.49, 0.47, 0.46, 0.44, 0.43, 0.41, 0.40, 0.38, 0.36, 0.34)),
    BetaBand(60, 65, (0.45, 0.43, 0.42, 0.40, 0.39, 0.37, 0.36, 0.34, 0.33, 0.31, 0.29, 0.28, 0.26)),
    BetaBand(65, 70, (0.34, 0.32, 0.30, 0.28, 0.26, 0.24, 0.23, 0.21, 0.19, 0.17, 0.00, 0.00, 0.00)),
    BetaBand(70, 75, (0.23, 0.21, 0.19, 0.17, 0.15, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00)),
    BetaBand(75, 90, (0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00)),
)


class CbTable:
    """Static lookup: Cb(α, β) with linear interpolation over α and banded β."""

    alphas = ALPHAS
    bands = BETA_BANDS

    @classmethod
    def find_band(cls, beta_deg: float) -> BetaBand:
        """
        Band whose [start, end) contains β. Below 0° falls in the first band,
        75° and above (including > 90°) in the last one.
        """
        for band in cls.bands[:-1]:
            if band.start is None:
                if beta_deg < band.end:
                    return band
            elif band.start <= beta_deg < band.end:
                return band
        return cls.bands[-1]

    @classmethod
    def lookup(cls, alpha_deg: float, beta_deg: float) -> Optional[float]:
        """
        Reduction factor for a window.

        Args:
            alpha_deg: Obstruction angle α in degrees (clamped to [20, 32])
            beta_deg: Overhang angle β in degrees

        Returns:
            Cb in [0, 1], or None when either angle is not a number
        """
        if alpha_deg is None or beta_deg is None:
            return None
        if math.isnan(alpha_deg) or math.isnan(beta_deg):
            return None

        band = cls.find_band(beta_deg)
        alpha = max(cls.alphas[0], min(cls.alphas[-1], alpha_deg))

        i = bisect.bisect_left(cls.alphas, alpha)
        if cls.alphas[i] == alpha:
            return band.values[i]

        a1, a2 = cls.alphas[i - 1], cls.alphas[i]
        t = (alpha - a1) / float(a2 - a1)
        return band.values[i - 1] * (1.0 - t) + band.values[i] * t
