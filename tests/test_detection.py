#!/usr/bin/env python
"""
Fiducial detector tests on reference pulse trains and the demo waveform.
"""

import numpy as np
import pytest
import sys
import os
from dataclasses import replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from examples.generate_ecg_data import DemoECGGenerator, gaussian_pulse_train, regular_beat_times
from ecg_detection import DetectionParameters, ECGWaveDetector, FiducialSet, FIDUCIAL_NAMES, detect
from ecg_measurements import measure
from ecg_validation import ECGValidationError, ECGValidator, ECGWarning

FS = 360

# The demo P wave is steep enough to cross the canonical 1.5x threshold on
# a clean trace; morphology checks use a stricter factor.
DEMO_PARAMETERS = DetectionParameters(threshold_factor=5.0)


def _assert_sorted_and_in_bounds(fiducials, n_samples):
    for name in FIDUCIAL_NAMES:
        indices = getattr(fiducials, name)
        assert np.all(np.diff(indices) >= 0), f"{name} not sorted: {indices}"
        assert np.all((indices >= 0) & (indices < n_samples)), f"{name} out of bounds"


def _assert_refractory(fiducials, sample_rate, refractory_s=0.22):
    assert np.all(np.diff(fiducials.r) >= refractory_s * sample_rate)


@pytest.fixture
def demo_trace():
    generator = DemoECGGenerator(FS, seed=1)
    return generator.generate(duration=10.0, heart_rate=72, hr_variability=0.0, noise_level=0.0,
                              baseline_wander=0.0, mains=0.0)


def test_five_pulses_at_80_bpm():
    beat_times = [1.0, 1.75, 2.5, 3.25, 4.0]
    trace = gaussian_pulse_train(FS, 10.0, beat_times, amplitude=1.0, width_ms=10.0)
    assert len(trace) == 3600

    fiducials = detect(trace, FS)

    assert fiducials.beat_count == 5
    # The envelope peaks on the steepest slope, about one sigma before the apex
    expected = np.round(np.array(beat_times) * FS).astype(int)
    assert np.all(np.abs(fiducials.r - expected) <= 5)
    assert 78.0 <= measure(fiducials, FS).heart_rate_bpm <= 82.0


@pytest.mark.parametrize("heart_rate", [50, 60, 72, 80, 100, 120, 150])
def test_pulse_train_beat_count(heart_rate):
    beat_times = regular_beat_times(heart_rate, 10.0)
    trace = gaussian_pulse_train(FS, 10.0, beat_times)

    fiducials = detect(trace, FS)

    assert abs(fiducials.beat_count - len(beat_times)) <= 1
    _assert_refractory(fiducials, FS)
    _assert_sorted_and_in_bounds(fiducials, len(trace))


@pytest.mark.parametrize("sample_rate", [1, 7, 50, 250, 360, 500, 1000])
def test_all_zero_trace_has_no_fiducials(sample_rate):
    for n_samples in (2 * sample_rate, 3 * sample_rate + 1):
        fiducials = detect(np.zeros(n_samples), sample_rate)
        assert fiducials.is_empty


def test_constant_offset_trace_has_no_fiducials():
    assert detect(np.full(4 * FS, 2.5), FS).is_empty


@pytest.mark.parametrize("n_samples", [0, 1, 3, FS, 2 * FS - 1])
def test_short_trace_is_empty_without_error(n_samples, demo_trace):
    trace, _ = demo_trace
    assert detect(trace[:n_samples], FS).is_empty


def test_detect_is_idempotent_and_leaves_input_untouched(demo_trace):
    trace, _ = demo_trace
    trace.setflags(write=False)
    original = trace.copy()

    first = detect(trace, FS)
    second = detect(trace, FS)

    assert first == second
    assert np.array_equal(trace, original)


def test_detector_instance_has_no_hidden_state(demo_trace):
    trace, _ = demo_trace
    detector = ECGWaveDetector(FS)

    before = detector.detect(trace)
    detector.detect(np.zeros(5 * FS))
    after = detector.detect(trace)

    assert before == after


def test_demo_waveform_r_peaks(demo_trace):
    trace, metadata = demo_trace
    true_r = metadata['r_peaks']

    fiducials = detect(trace, FS, DEMO_PARAMETERS)

    assert abs(fiducials.beat_count - len(true_r)) <= 1
    for r_peak in fiducials.r:
        assert np.min(np.abs(true_r - r_peak)) <= 3
    _assert_refractory(fiducials, FS)
    _assert_sorted_and_in_bounds(fiducials, len(trace))


def test_demo_waveform_wave_positions(demo_trace):
    trace, _ = demo_trace
    fiducials = detect(trace, FS, DEMO_PARAMETERS)
    n = min(len(fiducials.r), len(fiducials.q), len(fiducials.s), len(fiducials.p), len(fiducials.t))
    assert n >= 10

    r, q, s, p, t = (getattr(fiducials, name)[:n] for name in FIDUCIAL_NAMES)
    assert np.all(p < q)
    assert np.all(q < r)
    assert np.all(r < s)
    assert np.all(s < t)

    # Q and S sit in the troughs around R
    assert np.all(trace[q] < trace[r])
    assert np.all(trace[s] < 0)


def test_canonical_threshold_locks_onto_demo_p_waves(demo_trace):
    # At the default factor the steep demo P wave
    # crosses the threshold first and the refractory period drops the R wave
    trace, metadata = demo_trace
    true_r = metadata['r_peaks']

    fiducials = detect(trace, FS)

    assert fiducials.beat_count > 0
    distances = [np.min(np.abs(true_r - r_peak)) for r_peak in fiducials.r]
    assert 40 <= np.median(distances) <= 100
    _assert_refractory(fiducials, FS)


def test_noisy_demo_waveform_keeps_refractory_and_order():
    generator = DemoECGGenerator(FS, seed=7)
    trace, metadata = generator.generate(duration=10.0, heart_rate=75)

    fiducials = detect(trace, FS, DEMO_PARAMETERS)

    assert abs(fiducials.beat_count - len(metadata['r_peaks'])) <= 1
    _assert_refractory(fiducials, FS)
    _assert_sorted_and_in_bounds(fiducials, len(trace))


def test_random_noise_respects_refractory_and_order():
    rng = np.random.default_rng(3)
    trace = rng.normal(0.0, 0.5, 10 * FS)

    fiducials = detect(trace, FS)

    _assert_refractory(fiducials, FS)
    _assert_sorted_and_in_bounds(fiducials, len(trace))


def test_fast_rhythm_keeps_t_waves_sorted():
    # 200 bpm: the T window (180-500 ms) outlasts the R-R interval
    beat_times = regular_beat_times(200, 10.0)
    trace = gaussian_pulse_train(FS, 10.0, beat_times)

    fiducials = detect(trace, FS)

    assert abs(fiducials.beat_count - len(beat_times)) <= 1
    _assert_sorted_and_in_bounds(fiducials, len(trace))
    assert np.all(fiducials.t[:-1] < fiducials.r[1:len(fiducials.t)])


def test_boundary_beats_may_lack_points():
    # First beat 60 ms into the trace: its P window lies before the first
    # sample. Last beat 90 ms before the end: its T window lies past it.
    beat_times = [0.06, 0.81, 1.56, 2.31]
    trace = gaussian_pulse_train(FS, 2.4, beat_times)

    fiducials = detect(trace, FS)

    assert fiducials.beat_count == 4
    assert len(fiducials.p) == 3
    assert len(fiducials.q) == 4
    assert len(fiducials.t) == 3


def test_refractory_discards_later_taller_peak():
    trace = np.zeros(4 * FS)
    trace[FS] = 0.5
    trace[FS + 30] = 2.0  # 83 ms later, inside the refractory period
    trace[3 * FS] = 1.0

    fiducials = detect(trace, FS)

    assert fiducials.beat_count == 2
    assert abs(fiducials.r[0] - FS) <= 5
    assert abs(fiducials.r[1] - 3 * FS) <= 5


def test_detection_parameters_override():
    beat_times = regular_beat_times(80, 10.0)
    trace = gaussian_pulse_train(FS, 10.0, beat_times)

    # Refractory longer than the R-R interval keeps every other beat
    parameters = replace(DetectionParameters(), refractory_s=1.0)
    fiducials = detect(trace, FS, parameters)

    assert abs(fiducials.beat_count - (len(beat_times) + 1) // 2) <= 1


def test_invalid_sample_rate_raises():
    for sample_rate in (0, -360, float('nan')):
        with pytest.raises(ECGValidationError):
            detect(np.zeros(10), sample_rate)
    with pytest.raises(ValueError):
        ECGWaveDetector(0)


def test_non_finite_samples_warn_and_return_empty(demo_trace):
    trace, _ = demo_trace
    trace = trace.copy()
    trace[100] = np.nan

    with pytest.warns(ECGWarning):
        fiducials = detect(trace, FS)
    assert fiducials.is_empty


def test_two_dimensional_trace_warns_and_returns_empty():
    with pytest.warns(ECGWarning):
        fiducials = detect(np.zeros((2, 5 * FS)), FS)
    assert fiducials.is_empty


def test_strict_validator_raises_on_bad_trace():
    detector = ECGWaveDetector(FS, validator=ECGValidator(strict_mode=True))
    with pytest.raises(ECGValidationError):
        detector.detect([0.0, float('inf')] * FS)


def test_accepts_plain_lists():
    beat_times = regular_beat_times(80, 5.0)
    trace = gaussian_pulse_train(FS, 5.0, beat_times).tolist()

    fiducials = detect(trace, FS)
    assert fiducials.beat_count == len(beat_times)


def test_fiducial_set_helpers():
    fiducials = FiducialSet(r=[10, 20], q=[5], s=[], p=[1, 2], t=[30])

    assert fiducials.beat_count == 2
    assert not fiducials.is_empty
    assert fiducials.r.dtype.kind == 'i'
    assert fiducials.as_dict() == {'r': [10, 20], 'q': [5], 's': [], 'p': [1, 2], 't': [30]}
    assert fiducials == FiducialSet(r=[10, 20], q=[5], p=[1, 2], t=[30])
    assert fiducials != FiducialSet(r=[10, 21], q=[5], p=[1, 2], t=[30])

    assert FiducialSet.empty().is_empty
    assert FiducialSet.empty().beat_count == 0
