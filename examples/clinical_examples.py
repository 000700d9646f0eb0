#!/usr/bin/env python
"""
Clinical ECG Examples
Walkthrough of the analysis pipeline on demo data: streamed frames ->
analysis window -> fiducials and intervals -> annotated plot.
"""

import os
import sys

import numpy as np
import matplotlib.pyplot as plt

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from examples.generate_ecg_data import DemoECGGenerator, gaussian_pulse_train, regular_beat_times
from ecg_analysis import analyze, format_metrics_summary
from ecg_detection import DetectionParameters
from ecg_io import ECGFrame, FrameFlags, frames_to_trace
from ecg_measurements import assess_metrics
from clinical_plot import AnnotatedECGPlotter


class ClinicalECGExamples:
    """Runnable examples for the single-lead analyzer."""

    def __init__(self, sample_rate: int = 360):
        self.sample_rate = sample_rate
        self.generator = DemoECGGenerator(sample_rate, seed=42)
        self.plotter = AnnotatedECGPlotter()

    def example_1_pulse_train(self):
        """Reference pulses at 80 bpm."""
        print("Example 1: Gaussian pulse train (80 bpm)")
        trace = gaussian_pulse_train(self.sample_rate, 10.0, regular_beat_times(80, 10.0))
        fiducials, metrics = analyze(trace, self.sample_rate)
        print(f"  R-peaks: {fiducials.beat_count}")
        print(f"  {format_metrics_summary(metrics)}")
        return fiducials, metrics

    def example_2_streamed_frames(self, window_seconds: float = 10.0):
        """Demo signal chopped into 180 ms frames, as a live source delivers it."""
        print("\nExample 2: streamed demo frames")
        trace, _ = self.generator.generate(duration=15.0)

        frame_len = int(0.18 * self.sample_rate)
        frames = [
            ECGFrame.from_mv(seq, self.sample_rate, trace[start:start + frame_len], flags=FrameFlags.DEMO)
            for seq, start in enumerate(range(0, len(trace), frame_len))
        ]

        window, sample_rate = frames_to_trace(frames, window_seconds)
        # Steep demo P waves need a higher threshold factor than the default
        parameters = DetectionParameters(threshold_factor=5.0)
        fiducials, metrics = analyze(window, sample_rate, parameters)

        print(f"  {len(frames)} frames -> {len(window)} samples")
        print(f"  {format_metrics_summary(metrics)}")
        for measurement_type, normal in assess_metrics(metrics).items():
            status = "n/a" if normal is None else ("NORMAL" if normal else "ABNORMAL")
            print(f"  {measurement_type.value:<14} {status}")

        fig = self.plotter.plot(window, sample_rate, fiducials, metrics,
                                lead_name="Lead II", title="Demo ECG (last 10 s)")
        return fig

    def example_3_too_short(self):
        """One second of data: nothing to report, no error."""
        print("\nExample 3: trace shorter than two seconds")
        trace, _ = self.generator.generate(duration=1.0)
        fiducials, metrics = analyze(trace, self.sample_rate)
        print(f"  empty fiducials: {fiducials.is_empty}")
        print(f"  {format_metrics_summary(metrics)}")

    def run_all_examples(self):
        self.example_1_pulse_train()
        fig = self.example_2_streamed_frames()
        self.example_3_too_short()
        return fig


if __name__ == "__main__":
    np.set_printoptions(precision=3)
    examples = ClinicalECGExamples()
    examples.run_all_examples()
    plt.show()
