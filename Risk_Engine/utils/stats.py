"""Descriptive statistics over per-frame diagnostic series."""

import numpy as np
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

from ..core.frame_risk import FrameRiskRecord, diagnostics_to_dict


@dataclass(frozen=True)
class StatsSummary:
    mean: float
    std: float
    min: float
    max: float
    median: float
    count: int

    def to_dict(self) -> Dict[str, float]:
        return {k: round(v, 4) if isinstance(v, float) else v for k, v in asdict(self).items()}


def describe(values: Iterable[float]) -> Optional[StatsSummary]:
    """Summary of a series, or None when it is empty. std is the sample std."""
    data = np.asarray(list(values), dtype=float)
    if data.size == 0:
        return None
    std = float(np.std(data, ddof=1)) if data.size > 1 else 0.0
    return StatsSummary(float(np.mean(data)), std, float(np.min(data)), float(np.max(data)),
                        float(np.median(data)), int(data.size))


def diagnostic_series(frames: Iterable[FrameRiskRecord]) -> Dict[str, List[float]]:
    """Per-field value lists in frame order; frames missing a field are skipped for it."""
    series: Dict[str, List[float]] = {}
    for frame in frames:
        for name, value in diagnostics_to_dict(frame.diagnostics).items():
            series.setdefault(name, []).append(value)
    return series


def summarize_diagnostics(frames: Iterable[FrameRiskRecord]) -> Dict[str, StatsSummary]:
    return {name: describe(values) for name, values in diagnostic_series(frames).items()}
