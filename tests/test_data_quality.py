"""
Data quality and schema validation tests.
"""

import pandas as pd
import pandera as pa
import pytest

from referral_tiers.schemas import MONTHLY_RECORDS_SCHEMA, PROFILE_SCHEMA, TIERED_SCHEMA

# Coercion failures surface as SchemaErrors on some pandera releases
SCHEMA_ERRORS = (pa.errors.SchemaError, pa.errors.SchemaErrors)


class TestRecordSchema:
    """Validation of raw monthly records."""

    def test_valid_records_pass(self, records_df):
        validated = MONTHLY_RECORDS_SCHEMA.validate(records_df)
        assert len(validated) == len(records_df)

    def test_counts_coerced_to_numbers(self):
        df = pd.DataFrame({
            "office_id": ["A"], "year_month": ["2025-09"], "referral_count": ["3"],
        })
        validated = MONTHLY_RECORDS_SCHEMA.validate(df)
        assert validated["referral_count"].iloc[0] == 3

    def test_extra_columns_allowed(self, records_df):
        df = records_df.assign(user_id="u1")
        assert "user_id" in MONTHLY_RECORDS_SCHEMA.validate(df).columns

    def test_null_office_rejected(self):
        df = pd.DataFrame({
            "office_id": [None], "year_month": ["2025-09"], "referral_count": [1],
        })
        with pytest.raises(SCHEMA_ERRORS):
            MONTHLY_RECORDS_SCHEMA.validate(df)

    def test_null_count_rejected(self):
        df = pd.DataFrame({
            "office_id": ["A"], "year_month": ["2025-09"], "referral_count": [None],
        })
        with pytest.raises(SCHEMA_ERRORS):
            MONTHLY_RECORDS_SCHEMA.validate(df)

    def test_fractional_count_rejected(self):
        df = pd.DataFrame({
            "office_id": ["A"], "year_month": ["2025-09"], "referral_count": [2.7],
        })
        with pytest.raises(SCHEMA_ERRORS):
            MONTHLY_RECORDS_SCHEMA.validate(df)

    def test_blank_month_left_to_aggregator(self):
        """Blank months pass the schema so raise/skip handling applies."""
        df = pd.DataFrame({
            "office_id": ["A", "A"], "year_month": ["2025-09", None], "referral_count": [1, 2],
        })
        assert len(MONTHLY_RECORDS_SCHEMA.validate(df)) == 2


class TestProfileSchema:
    """Validation of aggregated profiles."""

    def test_negative_counts_rejected(self):
        df = pd.DataFrame({"office_id": ["A"], "l12": [-1], "r3": [-2], "mslr": [0]})
        with pytest.raises(SCHEMA_ERRORS):
            PROFILE_SCHEMA.validate(df)

    def test_r3_above_l12_rejected(self):
        df = pd.DataFrame({"office_id": ["A"], "l12": [2], "r3": [5], "mslr": [0]})
        with pytest.raises(SCHEMA_ERRORS):
            PROFILE_SCHEMA.validate(df)

    def test_duplicate_office_rejected(self):
        df = pd.DataFrame({"office_id": ["A", "A"], "l12": [2, 2], "r3": [1, 1], "mslr": [0, 0]})
        with pytest.raises(SCHEMA_ERRORS):
            PROFILE_SCHEMA.validate(df)


class TestTieredSchema:
    """Validation of classification output."""

    def test_known_tiers_pass(self):
        df = pd.DataFrame({"office_id": ["A", "B"], "tier": ["VIP", "Dormant"]})
        assert len(TIERED_SCHEMA.validate(df)) == 2

    def test_unknown_tier_rejected(self):
        df = pd.DataFrame({"office_id": ["A"], "tier": ["Gold"]})
        with pytest.raises(SCHEMA_ERRORS):
            TIERED_SCHEMA.validate(df)
