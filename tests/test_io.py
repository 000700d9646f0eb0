#!/usr/bin/env python
"""
Frame tests: int16 sample encoding, frame merging and assembly of the
analysis window.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ecg_io import ECGFrame, FrameFlags, frames_to_trace, mv_to_counts
from ecg_validation import ECGValidationError


def test_from_mv_encodes_microvolt_counts():
    frame = ECGFrame.from_mv(0, 360, [1.0, -0.35, 0.0])

    assert frame.samples.dtype == np.int16
    assert frame.samples.tolist() == [1000, -350, 0]
    assert frame.n_samples == 3


def test_counts_are_clamped_to_int16():
    assert mv_to_counts([40.0, -40.0]).tolist() == [32767, -32768]


def test_to_mv_round_trips_at_microvolt_resolution():
    frame = ECGFrame(1, 250, [1000, -350, 5])
    assert np.allclose(frame.to_mv(), [1.0, -0.35, 0.005])


def test_copy_with_samples_mv_keeps_metadata():
    frame = ECGFrame.from_mv(7, 360, [0.1], heart_rate=70, sqi=95, flags=FrameFlags.DEMO)
    copy = frame.copy_with_samples_mv([0.2, 0.3])

    assert copy.samples.tolist() == [200, 300]
    assert (copy.seq, copy.sample_rate, copy.heart_rate, copy.sqi) == (7, 360, 70, 95)
    assert copy.flags & FrameFlags.DEMO
    assert frame.samples.tolist() == [100]


def test_concat_appends_and_takes_later_sequence():
    first = ECGFrame(3, 360, [1, 2])
    second = ECGFrame(4, 360, [3])

    merged = first.concat(second)

    assert merged.seq == 4
    assert merged.samples.tolist() == [1, 2, 3]


def test_concat_rejects_different_sample_rates():
    with pytest.raises(ECGValidationError):
        ECGFrame(0, 360, [1]).concat(ECGFrame(1, 250, [2]))


def test_frames_to_trace_joins_in_order():
    frames = [ECGFrame(0, 360, [1000, 2000]), ECGFrame(1, 360, [-500])]

    trace, sample_rate = frames_to_trace(frames)

    assert sample_rate == 360
    assert np.allclose(trace, [1.0, 2.0, -0.5])


def test_frames_to_trace_keeps_trailing_window():
    frames = [ECGFrame(seq, 10, np.full(10, seq)) for seq in range(5)]

    trace, _ = frames_to_trace(frames, window_seconds=2.0)

    assert len(trace) == 20
    assert np.allclose(trace[:10], 0.003)
    assert np.allclose(trace[10:], 0.004)


def test_frames_to_trace_window_longer_than_data():
    trace, _ = frames_to_trace([ECGFrame(0, 10, [1, 2, 3])], window_seconds=60.0)
    assert len(trace) == 3


def test_frames_to_trace_empty():
    trace, sample_rate = frames_to_trace([])

    assert len(trace) == 0
    assert sample_rate is None


def test_frames_to_trace_rejects_mixed_rates():
    with pytest.raises(ECGValidationError):
        frames_to_trace([ECGFrame(0, 360, [1]), ECGFrame(1, 500, [1])])
