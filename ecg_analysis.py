#!/usr/bin/env python
"""
ECG Analysis Module
One-call analysis (detect + measure) and the text summary shown on screen
and in exported captions.
"""

import numpy as np
from typing import Optional, Sequence, Tuple, Union

from ecg_detection import DetectionParameters, ECGWaveDetector, FiducialSet
from ecg_measurements import ECGIntervalMeasurer, IntervalMetrics


def analyze(ecg_signal: Union[Sequence[float], np.ndarray],
            sample_rate: Union[int, float],
            parameters: Optional[DetectionParameters] = None) -> Tuple[FiducialSet, IntervalMetrics]:
    """
    Detect fiducials and measure intervals for one analysis window.

    Args:
        ecg_signal: Single-lead trace in mV
        sample_rate: Sampling rate in Hz
        parameters: Detector parameters (default: canonical set)

    Returns:
        Tuple of (fiducials, metrics)

    Example:
        >>> fiducials, metrics = analyze(trace, 360)
        >>> print(format_metrics_summary(metrics))
    """
    detector = ECGWaveDetector(sample_rate, parameters)
    fiducials = detector.detect(ecg_signal)
    metrics = ECGIntervalMeasurer(detector.sample_rate).measure(fiducials)
    return fiducials, metrics


def format_metrics_summary(metrics: IntervalMetrics, separator: str = " | ") -> str:
    """Format metrics as 'HR 72 bpm | PR 122 ms | ...', '--' when absent."""
    def _fmt(label, value, unit):
        if value is None:
            return f"{label} --"
        return f"{label} {value:.0f} {unit}"

    parts = [
        _fmt("HR", metrics.heart_rate_bpm, "bpm"),
        _fmt("PR", metrics.pr_ms, "ms"),
        _fmt("QRS", metrics.qrs_ms, "ms"),
        _fmt("QT", metrics.qt_ms, "ms"),
        _fmt("QTc", metrics.qtc_ms, "ms"),
    ]
    return separator.join(parts)
