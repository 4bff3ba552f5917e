"""
Tiering configuration for referral scoring.

All window lengths, tier thresholds and health score points are defined
here for easy tuning. Defaults reproduce the thresholds used by the
campaign creation flows:
- Percentile tiers: top 20% of the cohort by L12 are VIP
- Fixed tiers: VIP needs 12+ referrals a year, 3+ recently, active within 4 months
- Network tiers: quartiles of active offices, dormant after 6 quiet months
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Tuple

import yaml


@dataclass
class HealthConfig:
    """
    Points for the office health score.

    Total max score: 100 points
    - Referral frequency (L12): 0-40
    - Engagement recency (MSLR): 0-30
    - Recent momentum (R3 vs L12/4): 0-20
    - Tier bonus: 0-10
    """

    # === Referral Frequency (0-40 points) ===
    # (min L12, points), first match wins
    frequency_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (12, 40),
        (6, 30),
        (3, 20),
        (1, 10),
    ])

    # === Engagement Recency (0-30 points) ===
    # (max MSLR, points), first match wins
    recency_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (0, 30),
        (1, 25),
        (3, 15),
        (6, 5),
    ])

    # === Recent Momentum (0-20 points) ===
    # R3 compared to a quarter of L12
    momentum_surge_ratio: float = 1.5
    momentum_slip_ratio: float = 0.5
    momentum_points: Dict[str, int] = field(default_factory=lambda: {
        "surge": 20,     # R3 > 1.5x expected
        "steady": 15,    # R3 >= expected
        "slipping": 10,  # R3 >= 0.5x expected
        "trickle": 5,    # R3 > 0
    })

    # === Tier Bonus (0-10 points) ===
    tier_points: Dict[str, int] = field(default_factory=lambda: {
        "VIP": 10,
        "Warm": 7,
        "Dormant": 3,
        "Cold": 0,
    })

    # === Health Level Categorization ===
    # (min score, level), first match wins
    levels: List[Tuple[int, str]] = field(default_factory=lambda: [
        (80, "excellent"),
        (60, "good"),
        (40, "fair"),
    ])
    level_default: str = "poor"
    max_score: int = 100

    def __post_init__(self):
        # YAML yields lists, pairs are kept as tuples
        self.frequency_thresholds = [tuple(p) for p in self.frequency_thresholds]
        self.recency_thresholds = [tuple(p) for p in self.recency_thresholds]
        self.levels = [tuple(p) for p in self.levels]

    def get_level(self, score: int) -> str:
        """Map numeric score to health level."""
        for min_score, level in self.levels:
            if score >= min_score:
                return level
        return self.level_default


@dataclass
class TierConfig:
    """
    Configuration for aggregation windows and all tier strategies.

    Load from YAML:
        config = TierConfig.from_yaml("configs/tiers.yaml")

    Create programmatically:
        config = TierConfig(vip_share=0.10, fixed_vip_min_l12=20)
    """

    # === Aggregation Windows (calendar months, anchor month included) ===
    long_window_months: int = 12
    recent_window_months: int = 3
    # MSLR for offices that never referred (treated as dormant)
    no_referral_mslr: int = 999

    # === Percentile Strategy ===
    # Top share of the cohort by L12 that qualifies as VIP
    vip_share: float = 0.20
    warm_min_l12: int = 4
    warm_min_r3: int = 1

    # === Fixed Threshold Strategy ===
    fixed_vip_min_l12: int = 12
    fixed_vip_min_r3: int = 3
    fixed_vip_max_mslr: int = 4
    fixed_warm_min_l12: int = 6
    fixed_warm_min_r3: int = 2

    # === Quartile (Network) Strategy ===
    quartile_vip_share: float = 0.25
    quartile_warm_share: float = 0.50
    dormant_min_mslr: int = 6

    # === Relationship Strength ===
    strong_min_r3: int = 5
    strong_max_mslr: int = 2
    moderate_min_r3: int = 2
    moderate_max_mslr: int = 3
    sporadic_max_mslr: int = 6

    health: HealthConfig = field(default_factory=HealthConfig)

    # === Metadata ===
    version: str = "1.0.0"

    def __post_init__(self):
        if isinstance(self.health, dict):
            self.health = HealthConfig(**self.health)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "TierConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (tuples become lists)."""
        return _listify(asdict(self))


def _listify(value):
    if isinstance(value, dict):
        return {k: _listify(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_listify(v) for v in value]
    return value


# Default configuration instance
DEFAULT_CONFIG = TierConfig()
