"""
Main TierClassifier class - orchestrates aggregation, tiering and health.

Usage:
    from referral_tiers import TierClassifier, TierConfig

    # With default config and percentile tiers
    classifier = TierClassifier()
    result = classifier.classify(records_df, now=date(2025, 9, 15), offices=offices_df)

    # Fixed thresholds for a gift campaign
    classifier = TierClassifier(strategy="fixed")
    result = classifier.classify(records_df, now)

    # Access results
    print(result.df[["office_id", "name", "tier", "health_score"]])
    print(result.filter("VIP", query="main st"))
    print(result.summary())
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional

import numpy as np
import pandas as pd

from .aggregator import ReferralAggregator
from .config import TierConfig, DEFAULT_CONFIG
from .health import OfficeHealthScorer
from .records import OfficeReferralProfile, Tier, TieredOffice, TIER_ORDER
from .schemas import TIERED_SCHEMA
from .selector import ALL_TIERS, filter_frame
from .strategies import BaseTierStrategy, get_strategy


@dataclass
class ClassificationResult:
    """
    Container for classification results.

    Attributes:
        df: One row per office with profile, tier and health columns
        strategy: Name of the tier strategy used
        anchor_month: YYYY-MM the windows were anchored to
    """

    df: pd.DataFrame
    strategy: str
    anchor_month: str

    def filter(self, tier_filter=ALL_TIERS, query: str = "") -> pd.DataFrame:
        """
        Offices matching a tier filter and name/address search.

        Args:
            tier_filter: "all", a tier label, or several labels
            query: Case-insensitive substring of name or address

        Returns:
            Filtered DataFrame in original order
        """
        return filter_frame(self.df, tier_filter, query)

    def tier_counts(self) -> dict[str, int]:
        """Number of offices per tier, in tier order."""
        counts = self.df["tier"].value_counts()
        return {tier.value: int(counts.get(tier.value, 0)) for tier in TIER_ORDER}

    def summary(self) -> pd.DataFrame:
        """
        Summary statistics by tier.

        Returns:
            DataFrame with counts and average metrics per tier
        """
        summary = (
            self.df.groupby("tier")
            .agg(
                count=("office_id", "count"),
                avg_l12=("l12", "mean"),
                avg_r3=("r3", "mean"),
                avg_health=("health_score", "mean"),
            )
            .round(1)
        )
        order = [t.value for t in TIER_ORDER if t.value in summary.index]
        return summary.loc[order]

    def to_tiered_offices(self) -> list[TieredOffice]:
        """Rows as TieredOffice objects for selector consumers."""
        offices = []
        for row in self.df.to_dict("records"):
            offices.append(
                TieredOffice(
                    profile=OfficeReferralProfile.from_mapping(row),
                    tier=Tier(row["tier"]),
                    name=row.get("name") or "",
                    address=row.get("address") or "",
                )
            )
        return offices


class TierClassifier:
    """
    Referral tiering engine.

    Pipeline:
    - Aggregate monthly records into L12 / R3 / MSLR profiles
    - Assign tiers with the selected strategy (percentile, fixed, quartile)
    - Add health score columns
    - Join office name and address when an offices frame is given
    """

    def __init__(
        self,
        config: Optional[TierConfig] = None,
        strategy: "str | BaseTierStrategy" = "percentile",
        on_invalid: Literal["raise", "skip"] = "raise",
    ):
        """
        Initialize classifier with configuration.

        Args:
            config: TierConfig instance. Uses DEFAULT_CONFIG if None.
            strategy: Strategy name or instance
            on_invalid: How the aggregator treats malformed year_month values
        """
        self.config = config or DEFAULT_CONFIG
        if isinstance(strategy, BaseTierStrategy):
            self.strategy = strategy
        else:
            self.strategy = get_strategy(strategy, self.config)
        self.aggregator = ReferralAggregator(self.config, on_invalid=on_invalid)
        self.health_scorer = OfficeHealthScorer(self.config)

    def classify(
        self,
        records: pd.DataFrame,
        now: date | datetime | pd.Timestamp,
        offices: Optional[pd.DataFrame] = None,
    ) -> ClassificationResult:
        """
        Classify all offices found in the records (and the offices frame).

        Args:
            records: Monthly records (office_id, year_month, referral_count)
            now: Reference date for the rolling windows
            offices: Optional directory with office_id, name, address

        Returns:
            ClassificationResult with one row per office

        Raises:
            InvalidArgument: If a cohort strategy gets no offices
        """
        office_ids = None
        if offices is not None:
            if "office_id" not in offices.columns:
                raise ValueError("Missing required columns: {'office_id'}")
            office_ids = offices["office_id"].astype(str).tolist()

        profiles = self.aggregator.aggregate_frame(records, now, office_ids=office_ids)
        result = profiles.copy()
        result["tier"] = self.strategy.classify_frame(result)
        result = self.health_scorer.score_frame(result)

        if offices is not None:
            directory = offices.assign(office_id=offices["office_id"].astype(str))
            columns = ["office_id"] + [c for c in ("name", "address") if c in directory]
            result = result.merge(
                directory[columns].drop_duplicates("office_id"),
                on="office_id",
                how="left",
            )
        for column in ("name", "address"):
            if column not in result:
                result[column] = ""
            result[column] = result[column].fillna("")

        TIERED_SCHEMA.validate(result)
        return ClassificationResult(
            df=result,
            strategy=self.strategy.name,
            anchor_month=f"{now.year:04d}-{now.month:02d}",
        )


def generate_sample_records(
    n_offices: int = 50,
    now: Optional[date] = None,
    months: int = 18,
    seed: int = 42,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Generate realistic sample records and an office directory.

    Distributions:
    - ~15% heavy referrers (3-6 a month)
    - ~35% regular referrers (0-2 a month)
    - ~30% occasional referrers (mostly zero months)
    - ~20% lapsed offices (no referrals in the last 6+ months)

    Returns:
        (records_df, offices_df)
    """
    rng = np.random.default_rng(seed)
    now = now or date(2025, 9, 15)
    anchor = now.year * 12 + now.month - 1

    profiles = rng.choice(
        ["heavy", "regular", "occasional", "lapsed"],
        size=n_offices,
        p=[0.15, 0.35, 0.30, 0.20],
    )

    rows = []
    for i, kind in enumerate(profiles):
        office_id = f"OFFICE_{i:04d}"
        for offset in range(months):
            index = anchor - offset
            year_month = f"{index // 12:04d}-{index % 12 + 1:02d}"
            if kind == "heavy":
                count = rng.integers(3, 7)
            elif kind == "regular":
                count = rng.integers(0, 3)
            elif kind == "occasional":
                count = rng.choice([0, 0, 0, 1, 2])
            else:
                count = 0 if offset < 6 else rng.integers(0, 3)
            rows.append(
                {"office_id": office_id, "year_month": year_month, "referral_count": int(count)}
            )

    streets = ["Main St", "Oak Ave", "Peachtree Rd", "Elm St", "Lake Dr"]
    offices = pd.DataFrame(
        {
            "office_id": [f"OFFICE_{i:04d}" for i in range(n_offices)],
            "name": [f"Dental Office {i}" for i in range(n_offices)],
            "address": [f"{100 + i} {streets[i % len(streets)]}" for i in range(n_offices)],
        }
    )
    return pd.DataFrame(rows), offices
