"""
Referral aggregation: monthly records -> rolling office profiles.

Both windows are anchored to the calendar month of ``now`` and include it:
L12 covers offsets 0-11, R3 covers offsets 0-2, so R3 never exceeds L12.
Months after the anchor are ignored.

Usage:
    from referral_tiers.aggregator import aggregate, ReferralAggregator

    profile = aggregate(records_for_one_office, now=date(2025, 9, 15))

    profiles_df = ReferralAggregator().aggregate_frame(records_df, now)
"""

import re
import warnings
from datetime import date, datetime
from typing import Iterable, Literal, Optional

import numpy as np
import pandas as pd

from .config import TierConfig, DEFAULT_CONFIG
from .errors import InvalidArgument, ParseError
from .records import MonthlyReferralRecord, OfficeReferralProfile
from .schemas import MONTHLY_RECORDS_SCHEMA, PROFILE_SCHEMA

YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])\Z")

PROFILE_COLUMNS = [
    "office_id",
    "l12",
    "r3",
    "mslr",
    "total_referrals",
    "last_active_month",
]


def parse_year_month(value: str) -> tuple[int, int]:
    """
    Parse a ``YYYY-MM`` string.

    Raises:
        ParseError: If the value is not a valid calendar month
    """
    match = YEAR_MONTH_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ParseError(f"Invalid year_month {value!r}, expected YYYY-MM")
    return int(match.group(1)), int(match.group(2))


def anchor_index(now: date | datetime | pd.Timestamp) -> int:
    """Absolute month number (year * 12 + month - 1) of the anchor date."""
    return now.year * 12 + now.month - 1


def month_offset(year_month: str, now: date | datetime | pd.Timestamp) -> int:
    """Calendar months between ``year_month`` and the month of ``now``."""
    year, month = parse_year_month(year_month)
    return anchor_index(now) - (year * 12 + month - 1)


def aggregate(
    records: Iterable[MonthlyReferralRecord],
    now: date | datetime | pd.Timestamp,
    config: Optional[TierConfig] = None,
) -> OfficeReferralProfile:
    """
    Reduce one office's monthly records to an OfficeReferralProfile.

    Args:
        records: Records for a single office (may be empty)
        now: Reference date, only its calendar month is used
        config: TierConfig for window lengths (DEFAULT_CONFIG if None)

    Returns:
        OfficeReferralProfile for the office

    Raises:
        ParseError: If any year_month is malformed
        InvalidArgument: On negative counts or mixed office ids
    """
    config = config or DEFAULT_CONFIG
    records = list(records)

    office_ids = {r.office_id for r in records}
    if len(office_ids) > 1:
        raise InvalidArgument(
            f"aggregate expects records for one office, got {sorted(office_ids)}"
        )
    office_id = office_ids.pop() if office_ids else ""

    l12 = r3 = total = 0
    last_offset = None
    last_month = None

    for record in records:
        offset = month_offset(record.year_month, now)
        if record.referral_count < 0:
            raise InvalidArgument(
                f"Negative referral_count {record.referral_count} for office "
                f"{record.office_id} in {record.year_month}"
            )
        if offset < 0:
            continue

        total += record.referral_count
        if offset < config.long_window_months:
            l12 += record.referral_count
        if offset < config.recent_window_months:
            r3 += record.referral_count
        if record.referral_count > 0 and (last_offset is None or offset < last_offset):
            last_offset = offset
            last_month = record.year_month

    return OfficeReferralProfile(
        office_id=office_id,
        l12=l12,
        r3=r3,
        mslr=last_offset if last_offset is not None else config.no_referral_mslr,
        total_referrals=total,
        last_active_month=last_month,
    )


class ReferralAggregator:
    """
    Vectorized aggregation of a monthly records DataFrame.

    Produces one profile row per office with columns:
    office_id, l12, r3, mslr, total_referrals, last_active_month
    """

    REQUIRED_COLUMNS = ["office_id", "year_month", "referral_count"]

    def __init__(
        self,
        config: Optional[TierConfig] = None,
        on_invalid: Literal["raise", "skip"] = "raise",
    ):
        """
        Initialize aggregator.

        Args:
            config: TierConfig instance. Uses DEFAULT_CONFIG if None.
            on_invalid: "raise" to fail on malformed year_month values,
                "skip" to drop those rows with a warning
        """
        if on_invalid not in ("raise", "skip"):
            raise InvalidArgument(f"on_invalid must be 'raise' or 'skip', got {on_invalid!r}")
        self.config = config or DEFAULT_CONFIG
        self.on_invalid = on_invalid

    def validate_input(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Validate columns, types and referral counts.

        Raises:
            ValueError: If required columns are missing
            SchemaError: If a referral_count is missing or fractional
            InvalidArgument: If any referral_count is negative
        """
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        validated = MONTHLY_RECORDS_SCHEMA.validate(df)
        negative = validated[validated["referral_count"] < 0]
        if not negative.empty:
            raise InvalidArgument(
                f"Negative referral_count for {len(negative)} record(s), "
                f"offices: {sorted(negative['office_id'].unique())}"
            )
        return validated.astype({"referral_count": int})

    def _month_offsets(self, df: pd.DataFrame, now) -> pd.DataFrame:
        """Attach a month offset column, handling malformed and blank months."""
        parts = df["year_month"].astype("string").str.extract(YEAR_MONTH_PATTERN.pattern)
        valid = parts.notna().all(axis=1)

        if not valid.all():
            bad = df.loc[~valid, "year_month"]
            if self.on_invalid == "raise":
                shown = sorted({month if isinstance(month, str) else "<missing>" for month in bad})
                raise ParseError(f"Invalid year_month values (expected YYYY-MM): {shown}")
            warnings.warn(
                f"Skipped {len(bad)} record(s) with invalid year_month",
                UserWarning,
                stacklevel=3,
            )

        result = df.loc[valid].copy()
        parts = parts.loc[valid].astype(int)
        result["offset"] = anchor_index(now) - (parts[0] * 12 + parts[1] - 1)
        return result

    def aggregate_frame(
        self,
        df: pd.DataFrame,
        now: date | datetime | pd.Timestamp,
        office_ids: Optional[Iterable[str]] = None,
    ) -> pd.DataFrame:
        """
        Aggregate all offices in a records DataFrame.

        Args:
            df: Records with office_id, year_month, referral_count
            now: Reference date (anchor month)
            office_ids: Offices to include even if they have no records

        Returns:
            Profile DataFrame, one row per office, sorted as first seen
        """
        records = self._month_offsets(self.validate_input(df), now)
        records = records[records["offset"] >= 0].reset_index(drop=True)

        counts = records["referral_count"]
        offsets = records["offset"]
        records = records.assign(
            l12=np.where(offsets < self.config.long_window_months, counts, 0),
            r3=np.where(offsets < self.config.recent_window_months, counts, 0),
            active_offset=offsets.where(counts > 0),
        )

        grouped = records.groupby("office_id", sort=False)
        profiles = grouped.agg(
            l12=("l12", "sum"),
            r3=("r3", "sum"),
            total_referrals=("referral_count", "sum"),
            mslr=("active_offset", "min"),
        )

        active = records.dropna(subset=["active_offset"])
        if active.empty:
            last_active = pd.Series(dtype=object)
        else:
            last_active = active.loc[
                active.groupby("office_id")["active_offset"].idxmin(), ["office_id", "year_month"]
            ].set_index("office_id")["year_month"]
        profiles["last_active_month"] = last_active.reindex(profiles.index)

        if office_ids is not None:
            wanted = [str(o) for o in office_ids]
            extra = [o for o in dict.fromkeys(wanted) if o not in profiles.index]
            profiles = profiles.reindex(list(profiles.index) + extra)

        profiles[["l12", "r3", "total_referrals"]] = (
            profiles[["l12", "r3", "total_referrals"]].fillna(0)
        )
        profiles["mslr"] = profiles["mslr"].fillna(self.config.no_referral_mslr)
        profiles = profiles.astype(
            {"l12": int, "r3": int, "total_referrals": int, "mslr": int}
        )
        # object dtype keeps None for offices that never referred
        profiles["last_active_month"] = pd.Series(
            [month if isinstance(month, str) else None for month in profiles["last_active_month"]],
            index=profiles.index,
            dtype=object,
        )

        profiles.index.name = "office_id"
        profiles = profiles.reset_index()
        return PROFILE_SCHEMA.validate(profiles[PROFILE_COLUMNS])

    def to_profiles(self, df: pd.DataFrame) -> list[OfficeReferralProfile]:
        """Convert a profile DataFrame to OfficeReferralProfile objects."""
        return [OfficeReferralProfile.from_mapping(row) for row in df.to_dict("records")]
