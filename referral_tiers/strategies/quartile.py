"""Quartile-based network tier strategy (office directory)."""

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..errors import InvalidArgument
from ..records import OfficeReferralProfile, Tier
from .base import BaseTierStrategy


class QuartileTierStrategy(BaseTierStrategy):
    """
    Rank active offices against each other and split them into quartiles.

    - Dormant: no referral for 6+ months (mslr >= 6)
    - Active offices sorted by total referrals (desc), then mslr (asc)
    - VIP: top 25% of active offices
    - Warm: next 25%
    - Cold: bottom 50%

    ``context`` for ``classify`` is the cohort of profiles the office is
    ranked within; it must contain the office itself.
    """

    name = "quartile"

    @property
    def required_columns(self) -> list[str]:
        return ["office_id", "mslr", "total_referrals"]

    def classify(
        self,
        profile: OfficeReferralProfile,
        context: Optional[Sequence[OfficeReferralProfile]] = None,
    ) -> Tier:
        if not context:
            raise InvalidArgument("QuartileTierStrategy needs a non-empty cohort as context")
        df = pd.DataFrame(
            [
                {"office_id": p.office_id, "mslr": p.mslr, "total_referrals": p.total_referrals}
                for p in context
            ]
        )
        ranked = self.rank_frame(df)
        match = ranked[ranked["office_id"] == profile.office_id]
        if match.empty:
            raise InvalidArgument(f"Office {profile.office_id!r} is not part of the cohort")
        return Tier(match["tier"].iloc[0])

    def rank_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add ``tier`` and ``percentile`` columns.

        Percentile is round((n - rank) / n * 100) among active offices and
        None for dormant ones. Row order of ``df`` is preserved.
        """
        self.validate(df)
        c = self.config
        result = df.copy()
        mslr = result["mslr"].fillna(0)
        active = mslr < c.dormant_min_mslr

        ranked = (
            result.loc[active]
            .assign(_total=result["total_referrals"].fillna(0), _mslr=mslr)
            .sort_values(["_total", "_mslr"], ascending=[False, True], kind="mergesort")
        )
        n = len(ranked)
        rank = pd.Series(np.arange(n), index=ranked.index)

        vip_cut = math.ceil(n * c.quartile_vip_share)
        warm_cut = math.ceil(n * c.quartile_warm_share)

        tiers = pd.Series(Tier.DORMANT.value, index=result.index, dtype=object)
        tiers.loc[rank.index] = np.select(
            [rank < vip_cut, rank < warm_cut],
            [Tier.VIP.value, Tier.WARM.value],
            default=Tier.COLD.value,
        )

        ranks = {}
        if n:
            # Half-up rounding, 12.5 -> 13
            values = np.floor((n - rank) / n * 100 + 0.5).astype(int)
            ranks = dict(zip(rank.index, values.tolist()))

        result["tier"] = tiers
        # object dtype keeps None for dormant offices
        result["percentile"] = pd.Series(
            [ranks.get(i) for i in result.index], index=result.index, dtype=object
        )
        return result

    def classify_frame(self, df: pd.DataFrame) -> pd.Series:
        """Vectorized quartile tiers, the frame is the cohort."""
        return self.rank_frame(df)["tier"]
