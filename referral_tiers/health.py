"""
Office health scoring.

Combines referral frequency, recency, momentum and tier into a single
0-100 score with a trend arrow and a level, plus the legacy relationship
strength label shown in the office directory.
"""

from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
import pandas as pd

from .config import TierConfig, DEFAULT_CONFIG
from .records import OfficeReferralProfile, Tier

Trend = Literal["up", "down", "stable"]


@dataclass(frozen=True)
class HealthScore:
    """Health score result for one office."""

    score: int
    trend: Trend
    level: str


class OfficeHealthScorer:
    """
    Score office relationship health from L12, R3, MSLR and tier.

    Components:
    - Referral Frequency (0-40): Based on L12
    - Engagement Recency (0-30): Based on MSLR
    - Recent Momentum (0-20): R3 against a quarter of L12
    - Tier Bonus (0-10): VIP > Warm > Dormant > Cold
    """

    def __init__(self, config: Optional[TierConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.health = self.config.health

    def _frequency_points(self, l12: int) -> int:
        for min_l12, points in self.health.frequency_thresholds:
            if l12 >= min_l12:
                return points
        return 0

    def _recency_points(self, mslr: int) -> int:
        for max_mslr, points in self.health.recency_thresholds:
            if mslr <= max_mslr:
                return points
        return 0

    def _momentum(self, l12: int, r3: int) -> tuple[int, Trend]:
        h = self.health
        expected = l12 / 4
        if r3 > expected * h.momentum_surge_ratio:
            return h.momentum_points["surge"], "up"
        if r3 >= expected:
            return h.momentum_points["steady"], "stable"
        if r3 >= expected * h.momentum_slip_ratio:
            return h.momentum_points["slipping"], "down"
        if r3 > 0:
            return h.momentum_points["trickle"], "down"
        if l12 > 0:
            return 0, "down"
        return 0, "stable"

    def score(
        self,
        profile: OfficeReferralProfile,
        tier: "Tier | str | None" = None,
    ) -> HealthScore:
        """
        Calculate the health score for one office.

        Args:
            profile: Office referral profile
            tier: Assigned tier, if any

        Returns:
            HealthScore with score, trend and level
        """
        l12, r3, mslr = profile.l12 or 0, profile.r3 or 0, profile.mslr or 0

        momentum, trend = self._momentum(l12, r3)
        tier_label = Tier.from_label(tier).value if tier is not None else None
        total = (
            self._frequency_points(l12)
            + self._recency_points(mslr)
            + momentum
            + self.health.tier_points.get(tier_label, 0)
        )
        total = min(self.health.max_score, max(0, total))
        return HealthScore(score=total, trend=trend, level=self.health.get_level(total))

    def score_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add health_score, health_trend and health_level columns.

        Uses the ``tier`` column when present.
        """
        h = self.health
        result = df.copy()
        l12 = result["l12"].fillna(0)
        r3 = result["r3"].fillna(0)
        mslr = result["mslr"].fillna(0)

        frequency = np.select(
            [l12 >= t for t, _ in h.frequency_thresholds],
            [p for _, p in h.frequency_thresholds],
            default=0,
        )
        recency = np.select(
            [mslr <= t for t, _ in h.recency_thresholds],
            [p for _, p in h.recency_thresholds],
            default=0,
        )

        expected = l12 / 4
        momentum_conditions = [
            r3 > expected * h.momentum_surge_ratio,
            r3 >= expected,
            r3 >= expected * h.momentum_slip_ratio,
            r3 > 0,
            l12 > 0,
        ]
        momentum = np.select(
            momentum_conditions,
            [
                h.momentum_points["surge"],
                h.momentum_points["steady"],
                h.momentum_points["slipping"],
                h.momentum_points["trickle"],
                0,
            ],
            default=0,
        )
        trend = np.select(
            momentum_conditions,
            ["up", "stable", "down", "down", "down"],
            default="stable",
        )

        if "tier" in result:
            bonus = result["tier"].astype(str).map(h.tier_points).fillna(0).to_numpy()
        else:
            bonus = 0

        score = np.clip(frequency + recency + momentum + bonus, 0, h.max_score).astype(int)
        result["health_score"] = score
        result["health_trend"] = trend
        result["health_level"] = [h.get_level(s) for s in score]
        return result


def relationship_strength(
    profile: OfficeReferralProfile,
    config: Optional[TierConfig] = None,
) -> str:
    """
    Legacy relationship strength label.

    - Strong: r3 >= 5 and mslr <= 2
    - Moderate: r3 >= 2 and mslr <= 3
    - Sporadic: any referral and mslr <= 6
    - Cold: everything else
    """
    c = config or DEFAULT_CONFIG
    if profile.r3 >= c.strong_min_r3 and profile.mslr <= c.strong_max_mslr:
        return "Strong"
    if profile.r3 >= c.moderate_min_r3 and profile.mslr <= c.moderate_max_mslr:
        return "Moderate"
    if profile.total_referrals > 0 and profile.mslr <= c.sporadic_max_mslr:
        return "Sporadic"
    return "Cold"
