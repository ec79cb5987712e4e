# ♥♥─── DailyTask ────────────────────────────────────────────────────────────────
"""Client-side progress model and REST client for the daily task tracker."""

__version__ = "0.1.0"
