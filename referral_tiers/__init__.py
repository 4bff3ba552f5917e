"""
Referral Tier Package

Rule-based relationship tiers for referring dental offices.
"""

from .aggregator import aggregate, ReferralAggregator
from .classifier import TierClassifier, ClassificationResult, generate_sample_records
from .config import TierConfig, HealthConfig
from .errors import ReferralTierError, ParseError, InvalidArgument
from .health import OfficeHealthScorer, HealthScore, relationship_strength
from .records import MonthlyReferralRecord, OfficeReferralProfile, TieredOffice, Tier
from .selector import filter_by_tier_and_query
from .strategies import (
    PercentileTierStrategy,
    FixedThresholdTierStrategy,
    QuartileTierStrategy,
    classify_tier_percentile,
    classify_tier_fixed,
    get_strategy,
)

__all__ = [
    "aggregate",
    "ReferralAggregator",
    "TierClassifier",
    "ClassificationResult",
    "generate_sample_records",
    "TierConfig",
    "HealthConfig",
    "ReferralTierError",
    "ParseError",
    "InvalidArgument",
    "OfficeHealthScorer",
    "HealthScore",
    "relationship_strength",
    "MonthlyReferralRecord",
    "OfficeReferralProfile",
    "TieredOffice",
    "Tier",
    "filter_by_tier_and_query",
    "PercentileTierStrategy",
    "FixedThresholdTierStrategy",
    "QuartileTierStrategy",
    "classify_tier_percentile",
    "classify_tier_fixed",
    "get_strategy",
]
__version__ = "1.0.0"
