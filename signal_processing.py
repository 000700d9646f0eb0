#!/usr/bin/env python
"""
ECG Signal Processing Module
Numeric building blocks shared by the fiducial detector: baseline removal,
derivative-energy envelope, moving averages, adaptive threshold and
windowed extremum search.
"""

import math

import numpy as np
from scipy.ndimage import uniform_filter1d
from typing import Optional, Tuple

from ecg_constants import (
    ENVELOPE_WINDOW_MS,
    ENVELOPE_MIN_WINDOW_SAMPLES,
    THRESHOLD_WINDOW_S,
    THRESHOLD_FACTOR,
    THRESHOLD_FLOOR_MV,
)


class ECGSignalProcessor:
    """Stateless ECG signal helpers bound to a sample rate."""

    def __init__(self, sample_rate: float):
        """
        Initialize ECG signal processor.

        Args:
            sample_rate: Sampling rate in Hz
        """
        self.sample_rate = sample_rate

    def remove_baseline(self, ecg_signal: np.ndarray) -> np.ndarray:
        """
        DC-centre the trace by subtracting its arithmetic mean.

        Only the constant offset is removed; slow wander is left to the
        adaptive threshold downstream.
        """
        ecg_signal = np.asarray(ecg_signal, dtype=float)
        if ecg_signal.size == 0:
            return ecg_signal.copy()
        return ecg_signal - np.mean(ecg_signal)

    def envelope_window(self, window_ms: float = ENVELOPE_WINDOW_MS,
                        min_samples: int = ENVELOPE_MIN_WINDOW_SAMPLES) -> int:
        """Envelope smoothing width in samples, max(3, fs / 40) by default."""
        return max(min_samples, int(self.sample_rate * window_ms / 1000.0))

    def derivative_envelope(self, ecg_signal: np.ndarray,
                            window: Optional[int] = None) -> np.ndarray:
        """
        Smoothed absolute first difference of the trace.

        The difference is index-aligned with the input (the first sample is
        repeated), so envelope[i] describes the slope arriving at sample i.
        The fast QRS slope dominates the slower P and T waves.

        Args:
            ecg_signal: DC-centred trace
            window: Moving-average width in samples (default: envelope_window())

        Returns:
            Envelope array, same length as the input
        """
        ecg_signal = np.asarray(ecg_signal, dtype=float)
        if ecg_signal.size == 0:
            return ecg_signal.copy()

        if window is None:
            window = self.envelope_window()

        slope = np.abs(np.diff(ecg_signal, prepend=ecg_signal[0]))
        return moving_average(slope, window)

    def adaptive_threshold(self, envelope: np.ndarray,
                           window_s: float = THRESHOLD_WINDOW_S,
                           factor: float = THRESHOLD_FACTOR,
                           floor: float = THRESHOLD_FLOOR_MV) -> np.ndarray:
        """
        Trailing-mean threshold over ~0.5 s of envelope, scaled by `factor`.

        Near the start of the trace the mean covers only the samples seen so
        far. The result never drops below `floor`.
        """
        window = max(1, int(self.sample_rate * window_s))
        threshold = factor * trailing_average(envelope, window)
        return np.maximum(threshold, floor)

    def ms_to_window(self, window_ms: Tuple[float, float]) -> Tuple[int, int]:
        """
        Convert a (start_ms, end_ms) window relative to a reference sample
        into inclusive sample offsets lying inside the time window.
        """
        start_ms, end_ms = window_ms
        start = math.ceil(start_ms * self.sample_rate / 1000.0)
        end = math.floor(end_ms * self.sample_rate / 1000.0)
        return start, end


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """Centred moving average; edges reuse the nearest sample."""
    values = np.asarray(values, dtype=float)
    if values.size == 0 or window <= 1:
        return values.copy()
    return uniform_filter1d(values, size=window, mode='nearest')


def trailing_average(values: np.ndarray, window: int) -> np.ndarray:
    """
    Mean of values[max(0, i - window + 1):i + 1] for every i.

    Computed from a cumulative sum in one pass.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return values.copy()

    window = max(1, int(window))
    csum = np.concatenate(([0.0], np.cumsum(values)))
    idx = np.arange(values.size)
    start = np.maximum(0, idx - window + 1)
    return (csum[idx + 1] - csum[start]) / (idx + 1 - start)


def local_maxima(values: np.ndarray) -> np.ndarray:
    """Indices i with both neighbours present and values[i] >= both of them."""
    values = np.asarray(values, dtype=float)
    if values.size < 3:
        return np.array([], dtype=int)

    centre = values[1:-1]
    is_peak = (centre >= values[:-2]) & (centre >= values[2:])
    return np.flatnonzero(is_peak) + 1


def windowed_extremum(ecg_signal: np.ndarray, reference: int,
                      offsets: Tuple[int, int], mode: str = 'max',
                      limit: Optional[int] = None) -> Optional[int]:
    """
    Index of the minimum or maximum of the signal inside a window around a
    reference sample.

    Args:
        ecg_signal: Trace to search
        reference: Reference sample index (R-peak)
        offsets: Inclusive (start, end) sample offsets relative to reference
        mode: 'min' or 'max'
        limit: Optional exclusive upper bound on the absolute index

    Returns:
        Absolute index of the extremum (earliest on ties), or None when the
        window clamped to the trace is empty
    """
    lo = max(0, reference + offsets[0])
    hi = min(len(ecg_signal) - 1, reference + offsets[1])
    if limit is not None:
        hi = min(hi, limit - 1)
    if hi < lo:
        return None

    segment = ecg_signal[lo:hi + 1]
    if mode == 'min':
        return lo + int(np.argmin(segment))
    elif mode == 'max':
        return lo + int(np.argmax(segment))
    else:
        raise ValueError(f"Unknown extremum mode: {mode}")


# Convenience function
def quick_envelope(ecg_signal: np.ndarray, sample_rate: float) -> np.ndarray:
    """DC-centre a trace and return its derivative envelope."""
    processor = ECGSignalProcessor(sample_rate)
    return processor.derivative_envelope(processor.remove_baseline(ecg_signal))
