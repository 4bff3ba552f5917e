"""
Run logging for the tiering CLI.

Writes one JSON log per run (success or error).
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import pandas as pd

if TYPE_CHECKING:
    from .classifier import ClassificationResult


class RunLogger:
    """Structured JSON logging for tiering runs."""

    def __init__(self, logs_dir: Path | str):
        """
        Initialize logger.

        Args:
            logs_dir: Directory to write log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_run_id() -> str:
        """Generate unique run ID: run_YYYYMMDD_XXXX"""
        date_str = datetime.now().strftime("%Y%m%d")
        return f"run_{date_str}_{uuid.uuid4().hex[:4]}"

    def _write(self, run_id: str, entry: dict) -> Path:
        log_path = self.logs_dir / f"{run_id}.json"
        with open(log_path, "w") as f:
            json.dump(entry, f, indent=2, default=str)
        return log_path

    def log_run(
        self,
        result: "ClassificationResult",
        selected: int,
        filters: Optional[dict] = None,
        run_id: Optional[str] = None,
    ) -> Path:
        """
        Log a successful run.

        Args:
            result: ClassificationResult from the classifier
            selected: Number of offices left after filtering
            filters: Tier filter and query used
            run_id: Run ID (generated if None)

        Returns:
            Path to log file
        """
        run_id = run_id or self.generate_run_id()
        entry = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "strategy": result.strategy,
            "anchor_month": result.anchor_month,
            "offices": len(result.df),
            "tier_counts": result.tier_counts(),
            "filters": filters or {},
            "selected": selected,
            "status": "OK",
        }
        return self._write(run_id, entry)

    def log_failure(
        self,
        strategy: str,
        error: str,
        run_id: Optional[str] = None,
    ) -> Path:
        """
        Log a failed run.

        Args:
            strategy: Strategy name requested
            error: Error message
            run_id: Run ID (generated if None)

        Returns:
            Path to log file
        """
        run_id = run_id or self.generate_run_id()
        entry = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "strategy": strategy,
            "status": "ERROR",
            "error": error,
        }
        return self._write(run_id, entry)

    def get_all_logs(self) -> list[dict]:
        """
        Load all run logs.

        Returns:
            List of log dictionaries, sorted by file name
        """
        logs = []
        for log_file in sorted(self.logs_dir.glob("run_*.json")):
            with open(log_file) as f:
                logs.append(json.load(f))
        return logs

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all runs as DataFrame.

        Returns:
            DataFrame with one row per run, newest first
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            entry = {
                "run_id": log["run_id"],
                "timestamp": log["timestamp"],
                "strategy": log.get("strategy"),
                "status": log["status"],
                "offices": log.get("offices"),
                "selected": log.get("selected"),
            }
            for tier, count in log.get("tier_counts", {}).items():
                entry[tier] = count
            summary.append(entry)

        df = pd.DataFrame(summary)
        return df.sort_values("timestamp", ascending=False)
