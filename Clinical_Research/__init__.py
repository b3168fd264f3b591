"""Tuned thresholds and reference values."""
from .risk_thresholds import RISK_THRESHOLDS, RiskBands, SamplingConfig, SessionThresholds
