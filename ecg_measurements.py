#!/usr/bin/env python
"""
ECG Interval Measurements Module
Converts fiducial indices into heart rate, PR, QRS and QT measurements.

Measurements follow a partial-result policy: whatever the fiducials support
is reported, everything else is None. Missing data never raises.

Normal ranges for the adult assessment follow the AHA/ACCF/HRS 2009
recommendations (see ecg_constants.py).
"""

import math

import numpy as np
from typing import Dict, Optional, Union
from dataclasses import dataclass, asdict
from enum import Enum

from ecg_detection import FiducialSet
from ecg_validation import ECGValidator

# Import validated constants
from ecg_constants import (
    PR_INTERVAL_NORMAL_MS,
    QRS_DURATION_NORMAL_MS,
    QT_INTERVAL_NORMAL_MS,
    QTC_INTERVAL_NORMAL_MS,
    HEART_RATE_NORMAL_BPM,
)


class MeasurementType(Enum):
    """Types of ECG measurements."""
    HEART_RATE = "Heart Rate"
    PR_INTERVAL = "PR Interval"
    QRS_DURATION = "QRS Duration"
    QT_INTERVAL = "QT Interval"
    QTC_INTERVAL = "QTc Interval"


NORMAL_RANGES = {
    MeasurementType.HEART_RATE: HEART_RATE_NORMAL_BPM,  # (60, 100) bpm
    MeasurementType.PR_INTERVAL: PR_INTERVAL_NORMAL_MS,  # (120, 200) ms
    MeasurementType.QRS_DURATION: QRS_DURATION_NORMAL_MS,  # (80, 120) ms
    MeasurementType.QT_INTERVAL: QT_INTERVAL_NORMAL_MS,  # (350, 450) ms, rate-dependent
    MeasurementType.QTC_INTERVAL: QTC_INTERVAL_NORMAL_MS,  # (350, 450) ms, corrected
}


@dataclass(frozen=True)
class IntervalMetrics:
    """
    Interval measurements averaged over every beat in the window.

    Attributes:
        heart_rate_bpm: Mean heart rate from R-R intervals
        pr_ms: Mean P-to-Q time, rounded to the millisecond
        qrs_ms: Mean Q-to-S time, rounded to the millisecond
        qt_ms: Mean Q-to-T time, rounded to the millisecond
    """
    heart_rate_bpm: Optional[float] = None
    pr_ms: Optional[int] = None
    qrs_ms: Optional[int] = None
    qt_ms: Optional[int] = None

    @property
    def rr_ms(self) -> Optional[float]:
        """Mean R-R interval implied by the heart rate."""
        if self.heart_rate_bpm is None:
            return None
        return 60000.0 / self.heart_rate_bpm

    @property
    def qtc_ms(self) -> Optional[int]:
        """QT corrected with Bazett's formula, QTc = QT / sqrt(RR in s)."""
        if self.qt_ms is None or self.heart_rate_bpm is None:
            return None
        return int(round(self.qt_ms / math.sqrt(self.rr_ms / 1000.0)))

    @property
    def is_complete(self) -> bool:
        return None not in (self.heart_rate_bpm, self.pr_ms, self.qrs_ms, self.qt_ms)

    def as_dict(self) -> Dict[str, Optional[float]]:
        values = asdict(self)
        values['qtc_ms'] = self.qtc_ms
        return values


class ECGIntervalMeasurer:
    """Interval measurements from a FiducialSet at a fixed sample rate."""

    def __init__(self, sample_rate: Union[int, float]):
        self.sample_rate = ECGValidator().validate_sample_rate(sample_rate)

    def measure(self, fiducials: FiducialSet) -> IntervalMetrics:
        """Compute all four metrics; each is None when unsupported."""
        return IntervalMetrics(
            heart_rate_bpm=self.heart_rate(fiducials.r),
            pr_ms=self.paired_duration_ms(fiducials.p, fiducials.q),
            qrs_ms=self.paired_duration_ms(fiducials.q, fiducials.s),
            qt_ms=self.paired_duration_ms(fiducials.q, fiducials.t),
        )

    def heart_rate(self, r_peaks: np.ndarray) -> Optional[float]:
        """
        Mean heart rate in bpm: 60 * fs / mean(R-R in samples).

        Needs at least two R-peaks.
        """
        r_peaks = np.asarray(r_peaks, dtype=float)
        if len(r_peaks) < 2:
            return None

        mean_rr = float(np.mean(np.diff(r_peaks)))
        if mean_rr <= 0:
            return None

        return 60.0 * self.sample_rate / mean_rr

    def paired_duration_ms(self, start: np.ndarray, end: np.ndarray) -> Optional[int]:
        """
        Mean (end[i] - start[i]) in ms, pairing by position.

        Pairs run up to the shorter sequence; no outlier rejection is done.
        """
        start = np.asarray(start, dtype=float)
        end = np.asarray(end, dtype=float)
        n_pairs = min(len(start), len(end))
        if n_pairs == 0:
            return None

        durations = (end[:n_pairs] - start[:n_pairs]) * 1000.0 / self.sample_rate
        return int(round(float(np.mean(durations))))


def measure(fiducials: FiducialSet, sample_rate: Union[int, float]) -> IntervalMetrics:
    """Quick interval measurement."""
    return ECGIntervalMeasurer(sample_rate).measure(fiducials)


def assess_metrics(metrics: IntervalMetrics) -> Dict[MeasurementType, Optional[bool]]:
    """
    Check each available metric against the adult normal range.

    Returns:
        Mapping of measurement type to True (normal), False (outside the
        range) or None (not measured)
    """
    values = {
        MeasurementType.HEART_RATE: metrics.heart_rate_bpm,
        MeasurementType.PR_INTERVAL: metrics.pr_ms,
        MeasurementType.QRS_DURATION: metrics.qrs_ms,
        MeasurementType.QT_INTERVAL: metrics.qt_ms,
        MeasurementType.QTC_INTERVAL: metrics.qtc_ms,
    }

    assessment = {}
    for measurement_type, value in values.items():
        if value is None:
            assessment[measurement_type] = None
        else:
            low, high = NORMAL_RANGES[measurement_type]
            assessment[measurement_type] = low <= value <= high
    return assessment
