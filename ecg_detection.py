#!/usr/bin/env python
"""
ECG Wave Detection Module
R-peak detection and approximate P, Q, S, T localization on a single lead.

The detector is a pure function of (trace, sample_rate): no state survives
between calls, so one ECGWaveDetector may be shared across threads.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field

from ecg_constants import (
    ENVELOPE_WINDOW_MS,
    ENVELOPE_MIN_WINDOW_SAMPLES,
    THRESHOLD_WINDOW_S,
    THRESHOLD_FACTOR,
    THRESHOLD_FLOOR_MV,
    QRS_REFRACTORY_S,
    MIN_ANALYSIS_DURATION_S,
    Q_SEARCH_WINDOW_MS,
    S_SEARCH_WINDOW_MS,
    P_SEARCH_WINDOW_MS,
    T_SEARCH_WINDOW_MS,
)
from ecg_validation import ECGValidator
from signal_processing import ECGSignalProcessor, local_maxima, windowed_extremum


FIDUCIAL_NAMES = ('r', 'q', 's', 'p', 't')


def _as_index_array(values) -> np.ndarray:
    return np.asarray(values, dtype=int).reshape(-1)


@dataclass(frozen=True, eq=False)
class FiducialSet:
    """
    Fiducial sample indices for one analysis window.

    Each array holds one entry per beat that has that point, in trace order.
    Q/S/P/T arrays may be shorter than R when a search window fell outside
    the trace.
    """
    r: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    q: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    s: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    p: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    t: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))

    def __post_init__(self):
        for name in FIDUCIAL_NAMES:
            object.__setattr__(self, name, _as_index_array(getattr(self, name)))

    @classmethod
    def empty(cls) -> 'FiducialSet':
        return cls()

    @property
    def beat_count(self) -> int:
        return len(self.r)

    @property
    def is_empty(self) -> bool:
        return all(len(getattr(self, name)) == 0 for name in FIDUCIAL_NAMES)

    def as_dict(self) -> Dict[str, List[int]]:
        """Plain lists, for serialisation and plotting layers."""
        return {name: getattr(self, name).tolist() for name in FIDUCIAL_NAMES}

    def __eq__(self, other):
        if not isinstance(other, FiducialSet):
            return NotImplemented
        return all(np.array_equal(getattr(self, name), getattr(other, name))
                   for name in FIDUCIAL_NAMES)

    __hash__ = None


@dataclass(frozen=True)
class DetectionParameters:
    """Tunable detector parameters; defaults are the canonical set."""
    envelope_window_ms: float = ENVELOPE_WINDOW_MS
    min_envelope_window: int = ENVELOPE_MIN_WINDOW_SAMPLES
    threshold_window_s: float = THRESHOLD_WINDOW_S
    threshold_factor: float = THRESHOLD_FACTOR
    threshold_floor: float = THRESHOLD_FLOOR_MV
    refractory_s: float = QRS_REFRACTORY_S
    min_duration_s: float = MIN_ANALYSIS_DURATION_S

    # (start_ms, end_ms) relative to the R-peak
    q_window_ms: Tuple[float, float] = Q_SEARCH_WINDOW_MS
    s_window_ms: Tuple[float, float] = S_SEARCH_WINDOW_MS
    p_window_ms: Tuple[float, float] = P_SEARCH_WINDOW_MS
    t_window_ms: Tuple[float, float] = T_SEARCH_WINDOW_MS


class ECGWaveDetector:
    """Derivative-envelope R-peak detector with windowed P/Q/S/T search."""

    def __init__(self, sample_rate: Union[int, float],
                 parameters: Optional[DetectionParameters] = None,
                 validator: Optional[ECGValidator] = None):
        self.validator = validator or ECGValidator(strict_mode=False)
        self.sample_rate = self.validator.validate_sample_rate(sample_rate)
        self.parameters = parameters or DetectionParameters()
        self.processor = ECGSignalProcessor(self.sample_rate)

    def detect(self, ecg_signal: Union[Sequence[float], np.ndarray]) -> FiducialSet:
        """
        Detect R-peaks and P/Q/S/T points for the whole trace.

        Traces shorter than the minimum analysis duration, and traces the
        validator rejects, give an empty FiducialSet.
        """
        trace = self.validator.validate_trace(ecg_signal)
        if trace is None:
            return FiducialSet.empty()

        if len(trace) < self.parameters.min_duration_s * self.sample_rate:
            return FiducialSet.empty()

        centred = self.processor.remove_baseline(trace)
        r_peaks = self.detect_r_peaks(centred)
        return self._locate_waves(centred, r_peaks)

    def detect_r_peaks(self, centred: np.ndarray) -> np.ndarray:
        """
        R-peak indices on a DC-centred trace.

        A sample is a candidate when the envelope exceeds the adaptive
        threshold and is a local maximum. Candidates are taken in index
        order; one closer than the refractory distance to the last accepted
        peak is dropped, even if it is taller.
        """
        params = self.parameters
        window = self.processor.envelope_window(params.envelope_window_ms,
                                                params.min_envelope_window)
        envelope = self.processor.derivative_envelope(centred, window)
        threshold = self.processor.adaptive_threshold(envelope,
                                                      window_s=params.threshold_window_s,
                                                      factor=params.threshold_factor,
                                                      floor=params.threshold_floor)

        candidates = local_maxima(envelope)
        candidates = candidates[envelope[candidates] > threshold[candidates]]

        refractory = params.refractory_s * self.sample_rate
        accepted = []
        for idx in candidates:
            if not accepted or idx - accepted[-1] >= refractory:
                accepted.append(int(idx))

        return np.array(accepted, dtype=int)

    def _locate_waves(self, centred: np.ndarray, r_peaks: np.ndarray) -> FiducialSet:
        """
        Search Q/S minima and P/T maxima around every R-peak.

        The T search stops before the next R-peak, which keeps every
        fiducial array sorted at rates where the T window outlasts the
        refractory period.
        """
        params = self.parameters
        searches = {
            'q': (self.processor.ms_to_window(params.q_window_ms), 'min'),
            's': (self.processor.ms_to_window(params.s_window_ms), 'min'),
            'p': (self.processor.ms_to_window(params.p_window_ms), 'max'),
            't': (self.processor.ms_to_window(params.t_window_ms), 'max'),
        }

        points = {name: [] for name in searches}
        for beat, r_peak in enumerate(r_peaks):
            next_r = int(r_peaks[beat + 1]) if beat + 1 < len(r_peaks) else None
            for name, (offsets, mode) in searches.items():
                limit = next_r if name == 't' else None
                idx = windowed_extremum(centred, int(r_peak), offsets, mode, limit)
                if idx is not None:
                    points[name].append(idx)

        return FiducialSet(r=r_peaks, **points)


def detect(ecg_signal: Union[Sequence[float], np.ndarray],
           sample_rate: Union[int, float],
           parameters: Optional[DetectionParameters] = None) -> FiducialSet:
    """Quick fiducial detection."""
    detector = ECGWaveDetector(sample_rate, parameters)
    return detector.detect(ecg_signal)


if __name__ == "__main__":
    from examples.generate_ecg_data import DemoECGGenerator

    gen = DemoECGGenerator(seed=0)
    trace, metadata = gen.generate(duration=10, hr_variability=0.0)

    fiducials = detect(trace, metadata['sample_rate'], DetectionParameters(threshold_factor=5.0))

    print(f"Detected {fiducials.beat_count} R-peaks")
    for name, indices in fiducials.as_dict().items():
        print(f"  {name.upper()}: {indices[:5]}{' ...' if len(indices) > 5 else ''}")
