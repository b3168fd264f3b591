"""Statistics helpers."""
from .stats import StatsSummary, describe, summarize_diagnostics
