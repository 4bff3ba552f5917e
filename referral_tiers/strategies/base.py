"""Base class for tier classification strategies."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import pandas as pd

from ..records import OfficeReferralProfile, Tier

if TYPE_CHECKING:
    from ..config import TierConfig


class BaseTierStrategy(ABC):
    """
    Abstract base class for tier strategies.

    Each strategy maps an OfficeReferralProfile to a Tier, either on its
    own (fixed thresholds) or relative to a cohort passed as ``context``.
    ``classify_frame`` applies the strategy to a whole profile DataFrame
    using vectorized pandas operations, treating the frame as the cohort.
    """

    name: str = "base"

    def __init__(self, config: "TierConfig"):
        """
        Initialize strategy with configuration.

        Args:
            config: TierConfig instance with thresholds
        """
        self.config = config

    @abstractmethod
    def classify(
        self,
        profile: OfficeReferralProfile,
        context: Optional[object] = None,
    ) -> Tier:
        """Assign a tier to a single profile."""
        pass

    @abstractmethod
    def classify_frame(self, df: pd.DataFrame) -> pd.Series:
        """
        Assign tiers to all rows.

        Args:
            df: Profile DataFrame with required columns

        Returns:
            Series of tier labels aligned to ``df.index``
        """
        pass

    @property
    @abstractmethod
    def required_columns(self) -> list[str]:
        """List of profile columns required by this strategy."""
        pass

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required columns exist."""
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} requires columns: {missing}"
            )
