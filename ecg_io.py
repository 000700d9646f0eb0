#!/usr/bin/env python
"""
ECG Frame I/O Module
Streamed sample packets ("frames") and their conversion to the millivolt
trace consumed by the analyzer.

Frames store samples as signed 16-bit integers in mV x 1000, i.e.
1.000 mV -> 1000 and -0.350 mV -> -350.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass, replace
from enum import IntFlag

from ecg_constants import SAMPLE_COUNTS_PER_MV, SAMPLE_INT16_MIN, SAMPLE_INT16_MAX
from ecg_validation import ECGValidationError


class FrameFlags(IntFlag):
    """Common flag bits for ECGFrame.flags."""
    NONE = 0
    DEMO = 1 << 0  # Frame produced by demo generator
    FILTERED = 1 << 1  # Samples have been filtered
    SATURATED = 1 << 2  # Hardware saturation detected
    ARTIFACT = 1 << 3  # Significant motion/noise


@dataclass(frozen=True, eq=False)
class ECGFrame:
    """
    A single chunk of ECG samples at a uniform sample rate.

    Attributes:
        seq: Monotonic sequence number for ordering/diagnostics
        sample_rate: Sampling rate in Hz for this frame
        samples: int16 samples in mV x 1000
        heart_rate: Optional heart rate reported with the frame (bpm)
        sqi: Optional signal quality index (0-100)
        flags: FrameFlags bits
    """
    seq: int
    sample_rate: int
    samples: np.ndarray
    heart_rate: Optional[int] = None
    sqi: Optional[int] = None
    flags: FrameFlags = FrameFlags.NONE

    def __post_init__(self):
        object.__setattr__(self, 'samples', np.asarray(self.samples, dtype=np.int16).reshape(-1))

    @property
    def n_samples(self) -> int:
        return len(self.samples)

    def to_mv(self) -> np.ndarray:
        """Samples as float millivolts."""
        return self.samples.astype(float) / SAMPLE_COUNTS_PER_MV

    def copy_with_samples_mv(self, mv: Sequence[float]) -> 'ECGFrame':
        """Copy of this frame with new samples given in mV."""
        return replace(self, samples=mv_to_counts(mv))

    def concat(self, other: 'ECGFrame') -> 'ECGFrame':
        """
        Append another frame's samples and return a new merged frame.

        The merged frame takes the sequence number of `other`.
        """
        if self.sample_rate != other.sample_rate:
            raise ECGValidationError(
                f"Sampling rates differ: {self.sample_rate} vs {other.sample_rate}"
            )
        return replace(self, seq=other.seq,
                       samples=np.concatenate((self.samples, other.samples)))

    @classmethod
    def from_mv(cls, seq: int, sample_rate: int, mv: Sequence[float],
                heart_rate: Optional[int] = None, sqi: Optional[int] = None,
                flags: FrameFlags = FrameFlags.NONE) -> 'ECGFrame':
        """Build a frame from samples in mV."""
        return cls(seq, sample_rate, mv_to_counts(mv), heart_rate, sqi, flags)


def mv_to_counts(mv: Sequence[float]) -> np.ndarray:
    """Convert mV floats to int16 counts (mV x 1000), clamped to the int16 range."""
    counts = np.trunc(np.asarray(mv, dtype=float) * SAMPLE_COUNTS_PER_MV)
    return np.clip(counts, SAMPLE_INT16_MIN, SAMPLE_INT16_MAX).astype(np.int16)


def frames_to_trace(frames: List[ECGFrame],
                    window_seconds: Optional[float] = None) -> Tuple[np.ndarray, Optional[int]]:
    """
    Join frames into one mV trace for analysis.

    Args:
        frames: Frames in arrival order, all at the same sample rate
        window_seconds: Keep only the trailing window (default: everything)

    Returns:
        Tuple of (trace_mv, sample_rate); sample_rate is None for no frames
    """
    if not frames:
        return np.array([], dtype=float), None

    sample_rate = frames[0].sample_rate
    for frame in frames[1:]:
        if frame.sample_rate != sample_rate:
            raise ECGValidationError(
                f"Sampling rates differ: {sample_rate} vs {frame.sample_rate} (frame {frame.seq})"
            )

    trace = np.concatenate([frame.to_mv() for frame in frames])

    if window_seconds is not None:
        keep = int(window_seconds * sample_rate)
        trace = trace[max(0, len(trace) - keep):]

    return trace, sample_rate
