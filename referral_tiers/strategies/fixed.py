"""Fixed-threshold tier strategy (gift and letter campaigns)."""

from typing import Optional

import numpy as np
import pandas as pd

from ..config import TierConfig, DEFAULT_CONFIG
from ..records import OfficeReferralProfile, Tier
from .base import BaseTierStrategy


def classify_tier_fixed(
    profile: OfficeReferralProfile,
    config: Optional[TierConfig] = None,
) -> Tier:
    """
    Classify one office against fixed engagement thresholds.

    Rules (first match wins):
    - VIP: l12 >= 12 and r3 >= 3 and mslr <= 4
    - Warm: l12 >= 6 and r3 >= 2
    - Dormant: r3 == 0 and l12 > 0
    - Cold: everything else, including offices with no referrals at all
    """
    c = config or DEFAULT_CONFIG
    l12, r3, mslr = profile.l12 or 0, profile.r3 or 0, profile.mslr or 0

    if l12 >= c.fixed_vip_min_l12 and r3 >= c.fixed_vip_min_r3 and mslr <= c.fixed_vip_max_mslr:
        return Tier.VIP
    if l12 >= c.fixed_warm_min_l12 and r3 >= c.fixed_warm_min_r3:
        return Tier.WARM
    if r3 == 0 and l12 > 0:
        return Tier.DORMANT
    return Tier.COLD


class FixedThresholdTierStrategy(BaseTierStrategy):
    """
    Stateless per-office tiers from fixed L12 / R3 / MSLR thresholds.

    No cohort is needed, so ``context`` is ignored.
    """

    name = "fixed"

    @property
    def required_columns(self) -> list[str]:
        return ["l12", "r3", "mslr"]

    def classify(
        self,
        profile: OfficeReferralProfile,
        context: Optional[object] = None,
    ) -> Tier:
        return classify_tier_fixed(profile, self.config)

    def classify_frame(self, df: pd.DataFrame) -> pd.Series:
        """Vectorized fixed-threshold tiers."""
        self.validate(df)
        c = self.config
        l12 = df["l12"].fillna(0)
        r3 = df["r3"].fillna(0)
        mslr = df["mslr"].fillna(0)

        conditions = [
            (l12 >= c.fixed_vip_min_l12) & (r3 >= c.fixed_vip_min_r3) & (mslr <= c.fixed_vip_max_mslr),
            (l12 >= c.fixed_warm_min_l12) & (r3 >= c.fixed_warm_min_r3),
            (r3 == 0) & (l12 > 0),
        ]
        choices = [Tier.VIP.value, Tier.WARM.value, Tier.DORMANT.value]

        return pd.Series(
            np.select(conditions, choices, default=Tier.COLD.value),
            index=df.index,
            dtype=object,
        )
