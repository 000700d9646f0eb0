#!/usr/bin/env python
"""
ECG Analysis Constants

All numerical constants used by the fiducial detector and interval measurer,
with the physiological reasoning behind each choice. This file eliminates
"magic numbers" and is the single place to tune the detector.

All constants are in standard units:
- Time: milliseconds (ms) or seconds (s)
- Frequency / sample rate: Hertz (Hz)
- Amplitude: millivolts (mV)
"""

# ==============================================================================
# R-PEAK DETECTION PARAMETERS (derivative-envelope / adaptive threshold)
# ==============================================================================

# Envelope smoothing window (~25 ms)
# Wide enough to merge the up- and down-slope of a narrow QRS into a single
# hump, narrow enough to keep neighbouring beats apart at 200+ bpm.
ENVELOPE_WINDOW_MS = 25.0
ENVELOPE_MIN_WINDOW_SAMPLES = 3

# Adaptive threshold: trailing mean of the envelope over ~0.5 s, scaled.
# Tracks slow amplitude drift without global statistics.
THRESHOLD_WINDOW_S = 0.5
THRESHOLD_FACTOR = 1.5

# Absolute threshold floor in mV/sample
# Matches the 1 uV resolution of the streamed frame format (mV x 1000 ints);
# anything below it is floating-point residue, not signal.
THRESHOLD_FLOOR_MV = 1e-6

# Minimum separation between R-peaks (physiological refractory period)
# 220 ms ~ 270 bpm upper bound, also suppresses double detection on wide QRS
QRS_REFRACTORY_S = 0.22

# Minimum trace length for analysis
# Fewer than two seconds cannot hold two beats at resting heart rates.
MIN_ANALYSIS_DURATION_S = 2.0

# ==============================================================================
# FIDUCIAL SEARCH WINDOWS (relative to R-peak, negative = before R)
# ==============================================================================

# Q point: minimum of the trace 60-10 ms before R
Q_SEARCH_WINDOW_MS = (-60.0, -10.0)

# S point: minimum of the trace 10-60 ms after R
S_SEARCH_WINDOW_MS = (10.0, 60.0)

# P wave: maximum of the trace 220-90 ms before R
# Covers PR intervals of 120-200 ms minus the Q-R offset
P_SEARCH_WINDOW_MS = (-220.0, -90.0)

# T wave: maximum of the trace 180-500 ms after R
# QT 350-450 ms places the T peak well inside this window at 50-120 bpm
T_SEARCH_WINDOW_MS = (180.0, 500.0)

# ==============================================================================
# CLINICAL NORMAL RANGES (Adult Values)
# ==============================================================================
# Reference: AHA/ACCF/HRS Recommendations for the Standardization and
#            Interpretation of the Electrocardiogram.
#            J Am Coll Cardiol. 2009;53(11):976-981.

# PR Interval: atrial depolarization to ventricular depolarization
# Short PR (<120ms): pre-excitation, Long PR (>200ms): first-degree AV block
PR_INTERVAL_NORMAL_MS = (120, 200)

# QRS Duration: ventricular depolarization
# Wide QRS (>120ms): bundle branch block or ventricular origin
QRS_DURATION_NORMAL_MS = (80, 120)

# QT Interval (rate-dependent, use QTc for rate correction)
QT_INTERVAL_NORMAL_MS = (350, 450)

# QTc Interval: rate-corrected QT using Bazett's formula, QTc = QT / sqrt(RR)
QTC_INTERVAL_NORMAL_MS = (350, 450)

# Heart Rate: Bradycardia <60 bpm, Tachycardia >100 bpm
HEART_RATE_NORMAL_BPM = (60, 100)

# ==============================================================================
# SAMPLE FORMAT
# ==============================================================================

# Streamed frames carry samples as signed 16-bit integers in mV x 1000
SAMPLE_COUNTS_PER_MV = 1000
SAMPLE_INT16_MIN = -32768
SAMPLE_INT16_MAX = 32767

# Sample rate of the demo generator
DEMO_SAMPLE_RATE_HZ = 360

# ==============================================================================
# CLINICAL DISPLAY STANDARDS
# ==============================================================================

# Standard Paper Speed (25 mm/s) and Amplitude Scale (10 mm/mV)
PAPER_SPEED_STANDARD_MM_PER_S = 25.0
AMPLITUDE_SCALE_STANDARD_MM_PER_MV = 10.0

# ECG Grid Spacing
# Major grid: 5mm (0.2s at 25mm/s, 0.5mV at 10mm/mV)
# Minor grid: 1mm (0.04s at 25mm/s, 0.1mV at 10mm/mV)
MAJOR_GRID_TIME_S = 0.2
MINOR_GRID_TIME_S = 0.04
MAJOR_GRID_VOLTAGE_MV = 0.5
MINOR_GRID_VOLTAGE_MV = 0.1

# Clinical Style Colors (Traditional ECG Paper)
CLINICAL_MAJOR_GRID_COLOR = '#E0BFC0'
CLINICAL_MINOR_GRID_COLOR = '#F3D9DA'
CLINICAL_SIGNAL_COLOR = '#000000'
CLINICAL_BACKGROUND_COLOR = '#FFFFFF'

# Research Style Colors (Colorblind-friendly)
RESEARCH_MAJOR_GRID_COLOR = '#424242'
RESEARCH_MINOR_GRID_COLOR = '#BDBDBD'
RESEARCH_SIGNAL_COLOR = '#1976D2'
RESEARCH_BACKGROUND_COLOR = '#FFFFFF'

# Fiducial marker colors
FIDUCIAL_COLORS = {
    'r': '#D32F2F',
    'q': '#1976D2',
    's': '#388E3C',
    'p': '#F57C00',
    't': '#7B1FA2',
}

# ==============================================================================
# USAGE NOTES
# ==============================================================================
"""
To use these constants in your code:

    from ecg_constants import QRS_REFRACTORY_S, PR_INTERVAL_NORMAL_MS

    # Convert to samples
    refractory_samples = QRS_REFRACTORY_S * sample_rate

    # Check if PR interval is normal
    is_normal = PR_INTERVAL_NORMAL_MS[0] <= pr_ms <= PR_INTERVAL_NORMAL_MS[1]
"""
