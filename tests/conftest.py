"""
Pytest fixtures for referral tier tests.
"""

from datetime import date

import pandas as pd
import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from referral_tiers.config import TierConfig
from referral_tiers.classifier import TierClassifier, generate_sample_records
from referral_tiers.records import MonthlyReferralRecord, OfficeReferralProfile, Tier, TieredOffice


@pytest.fixture
def default_config():
    """Default tier configuration."""
    return TierConfig()


@pytest.fixture
def now():
    """Anchor date used across tests (anchor month 2025-09)."""
    return date(2025, 9, 15)


@pytest.fixture
def classifier(default_config):
    """TierClassifier with default config and percentile tiers."""
    return TierClassifier(default_config)


@pytest.fixture
def sample_data(now):
    """50 sample offices with 18 months of records and a directory."""
    return generate_sample_records(n_offices=50, now=now, seed=42)


@pytest.fixture
def office_records():
    """One office with in-window, out-of-window and future months."""
    return [
        MonthlyReferralRecord("OFF_A", "2025-10", 7),  # future: ignored
        MonthlyReferralRecord("OFF_A", "2025-09", 2),  # offset 0
        MonthlyReferralRecord("OFF_A", "2025-08", 1),  # offset 1
        MonthlyReferralRecord("OFF_A", "2025-07", 0),  # offset 2
        MonthlyReferralRecord("OFF_A", "2025-06", 3),  # offset 3
        MonthlyReferralRecord("OFF_A", "2024-10", 4),  # offset 11: last L12 month
        MonthlyReferralRecord("OFF_A", "2024-09", 5),  # offset 12: outside L12
    ]


@pytest.fixture
def records_df():
    """Small records frame covering active, lapsing and silent offices."""
    return pd.DataFrame([
        # Busy office: referrals every month
        {"office_id": "BUSY", "year_month": "2025-09", "referral_count": 4},
        {"office_id": "BUSY", "year_month": "2025-08", "referral_count": 3},
        {"office_id": "BUSY", "year_month": "2025-07", "referral_count": 3},
        {"office_id": "BUSY", "year_month": "2025-03", "referral_count": 5},
        # Lapsing office: nothing in the last 3 months
        {"office_id": "LAPSING", "year_month": "2025-05", "referral_count": 2},
        {"office_id": "LAPSING", "year_month": "2025-01", "referral_count": 1},
        # Trickle office: one recent referral
        {"office_id": "TRICKLE", "year_month": "2025-08", "referral_count": 1},
        # Silent office: rows but no referrals
        {"office_id": "SILENT", "year_month": "2025-09", "referral_count": 0},
        {"office_id": "SILENT", "year_month": "2025-08", "referral_count": 0},
    ])


@pytest.fixture
def offices_df():
    """Directory for records_df plus one office with no records."""
    return pd.DataFrame([
        {"office_id": "BUSY", "name": "Buckhead Family Dental", "address": "100 Peachtree Rd"},
        {"office_id": "LAPSING", "name": "Smile Studio", "address": "12 Main St"},
        {"office_id": "TRICKLE", "name": "Oak Orthodontics", "address": "5 Oak Ave"},
        {"office_id": "SILENT", "name": "Lakeside Dentistry", "address": "9 Lake Dr"},
        {"office_id": "NEW", "name": "New Main Street Dental", "address": "200 Main St"},
    ])


@pytest.fixture
def tiered_offices():
    """Tiered offices in a fixed order for selector tests."""
    def office(office_id, tier, name, address, l12=0, r3=0, mslr=0):
        return TieredOffice(
            profile=OfficeReferralProfile(office_id, l12=l12, r3=r3, mslr=mslr),
            tier=tier,
            name=name,
            address=address,
        )

    return [
        office("1", Tier.VIP, "Buckhead Family Dental", "100 Peachtree Rd", 20, 6, 0),
        office("2", Tier.WARM, "Smile Studio", "12 Main St", 8, 2, 1),
        office("3", Tier.VIP, "Main Street Smiles", "40 Elm St", 18, 5, 0),
        office("4", Tier.COLD, "Oak Orthodontics", "5 Oak Ave", 2, 0, 5),
        office("5", Tier.DORMANT, "Lakeside Dentistry", "9 Lake Dr", 0, 0, 999),
        office("6", Tier.VIP, "Peachtree Pediatric", "77 MAIN st", 15, 4, 1),
    ]
