"""
Integration tests for TierClassifier.
"""

import pandas as pd
import pytest

from referral_tiers import TierClassifier, TierConfig
from referral_tiers.errors import InvalidArgument
from referral_tiers.records import OfficeReferralProfile, Tier, TieredOffice
from referral_tiers.strategies import FixedThresholdTierStrategy


class TestTierClassifier:
    """Integration tests for the main classifier class."""

    def test_result_has_all_columns(self, classifier, sample_data, now):
        records, offices = sample_data
        result = classifier.classify(records, now, offices)

        for column in [
            "office_id", "name", "address", "l12", "r3", "mslr",
            "total_referrals", "last_active_month", "tier",
            "health_score", "health_trend", "health_level",
        ]:
            assert column in result.df.columns

    def test_every_office_gets_a_known_tier(self, classifier, sample_data, now):
        records, offices = sample_data
        result = classifier.classify(records, now, offices)

        assert len(result.df) == len(offices)
        assert set(result.df["tier"]) <= {t.value for t in Tier}
        assert sum(result.tier_counts().values()) == len(offices)

    def test_r3_never_exceeds_l12(self, classifier, sample_data, now):
        records, offices = sample_data
        result = classifier.classify(records, now, offices)

        assert (result.df["r3"] <= result.df["l12"]).all()

    def test_percentile_tiers(self, classifier, records_df, offices_df, now):
        result = classifier.classify(records_df, now, offices_df)
        tiers = result.df.set_index("office_id")["tier"].to_dict()

        assert tiers == {
            "BUSY": "VIP",
            "LAPSING": "Cold",
            "TRICKLE": "Warm",
            "SILENT": "Dormant",
            "NEW": "Dormant",
        }
        assert result.strategy == "percentile"
        assert result.anchor_month == "2025-09"

    def test_fixed_tiers(self, records_df, offices_df, now):
        result = TierClassifier(strategy="fixed").classify(records_df, now, offices_df)
        tiers = result.df.set_index("office_id")["tier"].to_dict()

        assert tiers == {
            "BUSY": "VIP",
            "LAPSING": "Dormant",
            "TRICKLE": "Cold",
            "SILENT": "Cold",
            "NEW": "Cold",
        }

    def test_quartile_tiers(self, records_df, offices_df, now):
        result = TierClassifier(strategy="quartile").classify(records_df, now, offices_df)
        tiers = result.df.set_index("office_id")["tier"].to_dict()

        assert tiers == {
            "BUSY": "VIP",
            "LAPSING": "Warm",
            "TRICKLE": "Cold",
            "SILENT": "Dormant",
            "NEW": "Dormant",
        }

    def test_strategy_instance_accepted(self, default_config, records_df, now):
        classifier = TierClassifier(strategy=FixedThresholdTierStrategy(default_config))
        assert classifier.classify(records_df, now).strategy == "fixed"

    def test_unknown_strategy_rejected(self):
        with pytest.raises(InvalidArgument):
            TierClassifier(strategy="blended")

    def test_directory_details_merged(self, classifier, records_df, offices_df, now):
        result = classifier.classify(records_df, now, offices_df)
        busy = result.df[result.df["office_id"] == "BUSY"].iloc[0]

        assert busy["name"] == "Buckhead Family Dental"
        assert busy["health_score"] == 100

    def test_without_directory(self, classifier, records_df, now):
        result = classifier.classify(records_df, now)

        assert len(result.df) == 4
        assert (result.df["name"] == "").all()

    def test_filter(self, classifier, records_df, offices_df, now):
        result = classifier.classify(records_df, now, offices_df)

        assert result.filter("Dormant")["office_id"].tolist() == ["SILENT", "NEW"]
        assert result.filter("all", "main st")["office_id"].tolist() == ["LAPSING", "NEW"]
        assert result.filter("Dormant", "main")["office_id"].tolist() == ["NEW"]

    def test_summary(self, classifier, records_df, offices_df, now):
        summary = classifier.classify(records_df, now, offices_df).summary()

        assert isinstance(summary, pd.DataFrame)
        assert list(summary.index) == ["VIP", "Warm", "Cold", "Dormant"]
        assert summary.loc["Dormant", "count"] == 2
        assert "avg_health" in summary.columns

    def test_to_tiered_offices(self, classifier, records_df, offices_df, now):
        offices = classifier.classify(records_df, now, offices_df).to_tiered_offices()

        assert len(offices) == 5
        assert all(isinstance(o, TieredOffice) for o in offices)
        assert offices[0].tier == Tier.VIP
        assert offices[0].l12 == 15

    def test_to_tiered_offices_without_activity(self, classifier, records_df, offices_df, now):
        offices = classifier.classify(records_df, now, offices_df).to_tiered_offices()
        by_id = {o.office_id: o for o in offices}

        assert by_id["BUSY"].profile.last_active_month == "2025-09"
        assert by_id["SILENT"].profile.last_active_month is None
        assert by_id["NEW"].profile.last_active_month is None

    def test_profile_from_row_with_nan_month(self):
        profile = OfficeReferralProfile.from_mapping(
            {"office_id": "X", "l12": 0, "r3": 0, "mslr": 999, "last_active_month": float("nan")}
        )

        assert profile.last_active_month is None

    def test_custom_config(self, records_df, offices_df, now):
        config = TierConfig(warm_min_l12=3)
        result = TierClassifier(config).classify(records_df, now, offices_df)
        tiers = result.df.set_index("office_id")["tier"]

        assert tiers["LAPSING"] == "Warm"

    def test_empty_cohort_rejected_for_percentile(self, classifier, now):
        empty = pd.DataFrame(columns=["office_id", "year_month", "referral_count"])

        with pytest.raises(InvalidArgument, match="empty cohort"):
            classifier.classify(empty, now)

    def test_missing_office_id_in_directory(self, classifier, records_df, now):
        with pytest.raises(ValueError, match="office_id"):
            classifier.classify(records_df, now, pd.DataFrame({"name": ["x"]}))
