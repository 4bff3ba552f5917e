"""Percentile-based tier strategy (AI campaign targeting)."""

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..config import TierConfig, DEFAULT_CONFIG
from ..errors import InvalidArgument
from ..records import OfficeReferralProfile, Tier
from .base import BaseTierStrategy


def vip_threshold(cohort_l12_values: Sequence[int], vip_share: float = 0.20) -> int:
    """
    L12 cutoff for the top ``vip_share`` of a cohort.

    The cohort is sorted descending and the value at
    ``ceil(n * vip_share) - 1`` is returned, so ties at the cutoff qualify.

    Raises:
        InvalidArgument: If the cohort is empty
    """
    values = sorted((int(v or 0) for v in cohort_l12_values), reverse=True)
    if not values:
        raise InvalidArgument("Cannot compute a VIP threshold for an empty cohort")
    index = max(math.ceil(len(values) * vip_share) - 1, 0)
    return values[index]


def classify_tier_percentile(
    profile: OfficeReferralProfile,
    cohort_l12_values: Sequence[int],
    config: Optional[TierConfig] = None,
) -> Tier:
    """
    Classify one office relative to its cohort's L12 distribution.

    Rules (first match wins):
    - Dormant: l12 == 0
    - VIP: l12 >= top-20% cutoff and the cutoff is positive
    - Warm: l12 >= 4 or r3 >= 1
    - Cold: everything else

    Raises:
        InvalidArgument: If the cohort is empty
    """
    c = config or DEFAULT_CONFIG
    threshold = vip_threshold(cohort_l12_values, c.vip_share)
    return _tier_for(profile.l12 or 0, profile.r3 or 0, threshold, c)


def _tier_for(l12: int, r3: int, threshold: int, c: TierConfig) -> Tier:
    if l12 == 0:
        return Tier.DORMANT
    if l12 >= threshold and threshold > 0:
        return Tier.VIP
    if l12 >= c.warm_min_l12 or r3 >= c.warm_min_r3:
        return Tier.WARM
    return Tier.COLD


class PercentileTierStrategy(BaseTierStrategy):
    """
    Cohort-relative tiers: the top 20% of offices by L12 are VIP.

    ``context`` for ``classify`` is the cohort's L12 values; a single
    office cannot be classified without it.
    """

    name = "percentile"

    @property
    def required_columns(self) -> list[str]:
        return ["l12", "r3"]

    def classify(
        self,
        profile: OfficeReferralProfile,
        context: Optional[Sequence[int]] = None,
    ) -> Tier:
        if context is None:
            raise InvalidArgument(
                "PercentileTierStrategy needs the cohort's L12 values as context"
            )
        return classify_tier_percentile(profile, context, self.config)

    def classify_frame(self, df: pd.DataFrame) -> pd.Series:
        """Vectorized percentile tiers, the frame is the cohort."""
        self.validate(df)
        c = self.config
        l12 = df["l12"].fillna(0)
        r3 = df["r3"].fillna(0)
        threshold = vip_threshold(l12.tolist(), c.vip_share)

        conditions = [
            l12 == 0,
            (l12 >= threshold) & (threshold > 0),
            (l12 >= c.warm_min_l12) | (r3 >= c.warm_min_r3),
        ]
        choices = [Tier.DORMANT.value, Tier.VIP.value, Tier.WARM.value]

        return pd.Series(
            np.select(conditions, choices, default=Tier.COLD.value),
            index=df.index,
            dtype=object,
        )
