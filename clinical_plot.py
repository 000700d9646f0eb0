#!/usr/bin/env python
"""
Clinical ECG Plotting Module
Single-lead ECG on clinical paper with fiducial tick marks and an interval
caption. Fiducials and metrics are always passed in by the caller.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.ticker import MultipleLocator, FuncFormatter
from typing import Dict, Optional, Sequence, Tuple, Union

from ecg_constants import (
    PAPER_SPEED_STANDARD_MM_PER_S,
    AMPLITUDE_SCALE_STANDARD_MM_PER_MV,
    MAJOR_GRID_TIME_S,
    MINOR_GRID_TIME_S,
    MAJOR_GRID_VOLTAGE_MV,
    MINOR_GRID_VOLTAGE_MV,
    CLINICAL_MAJOR_GRID_COLOR,
    CLINICAL_MINOR_GRID_COLOR,
    CLINICAL_SIGNAL_COLOR,
    CLINICAL_BACKGROUND_COLOR,
    RESEARCH_MAJOR_GRID_COLOR,
    RESEARCH_MINOR_GRID_COLOR,
    RESEARCH_SIGNAL_COLOR,
    RESEARCH_BACKGROUND_COLOR,
    FIDUCIAL_COLORS,
)
from ecg_analysis import format_metrics_summary
from ecg_detection import FIDUCIAL_NAMES, DetectionParameters, FiducialSet
from ecg_measurements import IntervalMetrics


class AnnotatedECGPlotter:
    """Clinical single-lead ECG plotting with fiducial annotations."""

    def __init__(self,
                 paper_speed: float = PAPER_SPEED_STANDARD_MM_PER_S,
                 amplitude_scale: float = AMPLITUDE_SCALE_STANDARD_MM_PER_MV,
                 style: str = 'clinical'):
        """
        Initialize clinical ECG plotter.

        Args:
            paper_speed: Paper speed in mm/s (default: 25.0)
            amplitude_scale: Amplitude scale in mm/mV (default: 10.0)
            style: Plot style ('clinical', 'research')
        """
        self.paper_speed = paper_speed
        self.amplitude_scale = amplitude_scale
        self.style = style

        # Style configurations
        self.styles = {
            'clinical': {
                'major_grid_color': CLINICAL_MAJOR_GRID_COLOR,
                'minor_grid_color': CLINICAL_MINOR_GRID_COLOR,
                'signal_color': CLINICAL_SIGNAL_COLOR,
                'background_color': CLINICAL_BACKGROUND_COLOR,
                'text_color': '#000000',
                'grid_alpha': 1.0
            },
            'research': {
                'major_grid_color': RESEARCH_MAJOR_GRID_COLOR,
                'minor_grid_color': RESEARCH_MINOR_GRID_COLOR,
                'signal_color': RESEARCH_SIGNAL_COLOR,
                'background_color': RESEARCH_BACKGROUND_COLOR,
                'text_color': '#333333',
                'grid_alpha': 0.6
            },
        }

        self.current_style = self.styles.get(style, self.styles['clinical'])

    def plot(self,
             ecg_signal: Union[Sequence[float], np.ndarray],
             sample_rate: float,
             fiducials: FiducialSet,
             metrics: Optional[IntervalMetrics] = None,
             lead_name: str = "ECG",
             title: Optional[str] = None,
             show_grid: bool = True,
             ax: Optional[plt.Axes] = None) -> plt.Figure:
        """
        Plot a single lead with fiducial markers.

        Args:
            ecg_signal: Trace in mV (samples,)
            sample_rate: Sampling rate in Hz
            fiducials: Indices to mark on the trace
            metrics: Interval metrics for the caption (omitted when None)
            lead_name: Y-axis label
            title: Plot title
            show_grid: Draw the 1 mm / 5 mm paper grid
            ax: Axes to draw on (a new figure is created when None)

        Returns:
            matplotlib Figure object
        """
        signal = np.asarray(ecg_signal, dtype=float)

        # Convert to display scale relative to the standard 10 mm/mV
        scaled_signal = signal * (self.amplitude_scale / AMPLITUDE_SCALE_STANDARD_MM_PER_MV)

        if ax is None:
            fig, ax = plt.subplots(figsize=self._figure_size(len(signal) / sample_rate))
        else:
            fig = ax.figure
        fig.patch.set_facecolor(self.current_style['background_color'])

        time_axis = np.arange(len(signal)) / sample_rate
        ax.plot(time_axis, scaled_signal, color=self.current_style['signal_color'], linewidth=0.8)

        self._add_fiducial_marks(ax, scaled_signal, sample_rate, fiducials)

        if show_grid and len(signal):
            self._setup_clinical_grid(ax, time_axis[-1], (np.min(scaled_signal), np.max(scaled_signal)))

        if metrics is not None:
            ax.text(0.01, 0.98, format_metrics_summary(metrics),
                    transform=ax.transAxes, va='top', ha='left', fontsize=9,
                    color=self.current_style['text_color'],
                    bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))

        if title:
            ax.set_title(title, fontsize=12, fontweight='bold',
                         color=self.current_style['text_color'])

        ax.set_ylabel(f'{lead_name} (mV)', fontsize=10, color=self.current_style['text_color'])
        ax.set_xlabel('Time (s)', fontsize=8, color=self.current_style['text_color'])
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.text(0.99, 0.02, f"{self.paper_speed:g} mm/s   {self.amplitude_scale:g} mm/mV",
                transform=ax.transAxes, va='bottom', ha='right', fontsize=7,
                color=self.current_style['text_color'], alpha=0.7)

        return fig

    def _figure_size(self, duration: float) -> Tuple[float, float]:
        """Paper-proportional figure size, capped for long traces."""
        width_mm = max(duration, 1.0) * self.paper_speed
        width_in = min(max(width_mm / 25.4, 6.0), 24.0)
        return width_in, 4.0

    def _add_fiducial_marks(self, ax: plt.Axes, signal: np.ndarray,
                            sample_rate: float, fiducials: FiducialSet):
        """One marker series per non-empty fiducial array."""
        for name in FIDUCIAL_NAMES:
            indices = getattr(fiducials, name)
            indices = indices[(indices >= 0) & (indices < len(signal))]
            if len(indices) == 0:
                continue
            ax.plot(indices / sample_rate, signal[indices],
                    linestyle='none', marker='v' if name == 'r' else 'o',
                    markersize=5, color=FIDUCIAL_COLORS[name],
                    label=name.upper(), gid=f'fiducial-{name}')

    def _setup_clinical_grid(self,
                             ax: plt.Axes,
                             duration: float,
                             amplitude_range: Tuple[float, float]):
        """Set up clinical ECG grid on axes."""
        low = np.floor(min(amplitude_range[0], -MAJOR_GRID_VOLTAGE_MV) / MAJOR_GRID_VOLTAGE_MV)
        high = np.ceil(max(amplitude_range[1], MAJOR_GRID_VOLTAGE_MV) / MAJOR_GRID_VOLTAGE_MV)

        ax.set_xlim(0, duration)
        ax.set_ylim(low * MAJOR_GRID_VOLTAGE_MV, high * MAJOR_GRID_VOLTAGE_MV)

        ax.xaxis.set_major_locator(MultipleLocator(MAJOR_GRID_TIME_S))
        ax.xaxis.set_minor_locator(MultipleLocator(MINOR_GRID_TIME_S))
        ax.yaxis.set_major_locator(MultipleLocator(MAJOR_GRID_VOLTAGE_MV))
        ax.yaxis.set_minor_locator(MultipleLocator(MINOR_GRID_VOLTAGE_MV))

        ax.grid(True, which='major',
                color=self.current_style['major_grid_color'],
                linewidth=0.8, alpha=self.current_style['grid_alpha'])
        ax.grid(True, which='minor',
                color=self.current_style['minor_grid_color'],
                linewidth=0.3, alpha=self.current_style['grid_alpha'])

        # Label whole seconds only
        ax.xaxis.set_major_formatter(FuncFormatter(
            lambda x, p: f'{x:.0f}' if abs(x - round(x)) < 1e-9 else ''))

    def save_png(self, fig: plt.Figure, filepath: str, dpi: int = 200) -> Dict:
        """Save a figure as PNG."""
        fig.savefig(filepath, dpi=dpi, facecolor=fig.get_facecolor())
        return {'filepath': filepath, 'dpi': dpi}


# Convenience function for quick access
def plot_annotated_trace(ecg_signal: Union[Sequence[float], np.ndarray],
                         sample_rate: float,
                         fiducials: FiducialSet,
                         metrics: Optional[IntervalMetrics] = None,
                         ax: Optional[plt.Axes] = None,
                         **kwargs) -> plt.Figure:
    """Quick function for an annotated single-lead plot."""
    plotter = AnnotatedECGPlotter()
    return plotter.plot(ecg_signal, sample_rate, fiducials, metrics, ax=ax, **kwargs)


if __name__ == "__main__":
    from examples.generate_ecg_data import DemoECGGenerator
    from ecg_analysis import analyze

    generator = DemoECGGenerator(seed=0)
    trace, metadata = generator.generate(duration=10)
    fiducials, metrics = analyze(trace, metadata['sample_rate'], DetectionParameters(threshold_factor=5.0))

    plot_annotated_trace(trace, metadata['sample_rate'], fiducials, metrics,
                         title="Demo ECG - annotated")
    plt.show()
