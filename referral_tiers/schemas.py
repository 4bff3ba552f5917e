"""
Data schema definitions for referral tiering.

Uses Pandera for runtime validation of record and profile DataFrames so
pipeline errors surface before aggregation and classification.
"""

from pandera import Column, Check, DataFrameSchema

from .records import Tier

TIER_LABELS = [tier.value for tier in Tier]


# Schema for raw monthly referral records
MONTHLY_RECORDS_SCHEMA = DataFrameSchema(
    {
        "office_id": Column(
            str,
            nullable=False,
            description="Referring office identifier"
        ),
        "year_month": Column(
            str,
            nullable=True,
            description="Calendar month as YYYY-MM (blank or malformed handled by the aggregator)"
        ),
        "referral_count": Column(
            float,
            nullable=False,
            checks=Check(lambda s: s % 1 == 0, error="referral_count must be a whole number"),
            description="Referrals received in the month (sign checked by the aggregator)"
        ),
    },
    strict=False,  # Allow extra columns (e.g. user_id from the data store)
    coerce=True,
    description="Schema for monthly referral records"
)


# Schema for aggregated office profiles
PROFILE_SCHEMA = DataFrameSchema(
    {
        "office_id": Column(str, nullable=False, unique=True),
        "l12": Column(int, nullable=False, checks=Check.greater_than_or_equal_to(0)),
        "r3": Column(int, nullable=False, checks=Check.greater_than_or_equal_to(0)),
        "mslr": Column(int, nullable=False, checks=Check.greater_than_or_equal_to(0)),
        "total_referrals": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            required=False,
        ),
    },
    checks=Check(lambda df: df["r3"] <= df["l12"], error="r3 must not exceed l12"),
    strict=False,
    coerce=True,
    description="Schema for per-office referral profiles"
)


# Schema for classification output
TIERED_SCHEMA = DataFrameSchema(
    {
        "office_id": Column(str, nullable=False),
        "tier": Column(str, nullable=False, checks=Check.isin(TIER_LABELS)),
    },
    strict=False,
    description="Schema for tiered office output"
)
