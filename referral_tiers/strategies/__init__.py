"""Tier classification strategies."""

from typing import Optional

from ..config import TierConfig, DEFAULT_CONFIG
from ..errors import InvalidArgument
from .base import BaseTierStrategy
from .fixed import FixedThresholdTierStrategy, classify_tier_fixed
from .percentile import PercentileTierStrategy, classify_tier_percentile, vip_threshold
from .quartile import QuartileTierStrategy

STRATEGIES = {
    PercentileTierStrategy.name: PercentileTierStrategy,
    FixedThresholdTierStrategy.name: FixedThresholdTierStrategy,
    QuartileTierStrategy.name: QuartileTierStrategy,
}


def get_strategy(name: str, config: Optional[TierConfig] = None) -> BaseTierStrategy:
    """
    Build a strategy by name ("percentile", "fixed" or "quartile").

    Raises:
        InvalidArgument: If the name is unknown
    """
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise InvalidArgument(
            f"Unknown tier strategy {name!r}, expected one of {sorted(STRATEGIES)}"
        ) from None
    return strategy_cls(config or DEFAULT_CONFIG)


__all__ = [
    "BaseTierStrategy",
    "PercentileTierStrategy",
    "FixedThresholdTierStrategy",
    "QuartileTierStrategy",
    "STRATEGIES",
    "classify_tier_percentile",
    "classify_tier_fixed",
    "get_strategy",
    "vip_threshold",
]
