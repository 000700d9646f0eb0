#!/usr/bin/env python
"""
ECG Signal Validation Module
Validates single-lead traces and sample rates before analysis.
"""

import numpy as np
import warnings
from typing import Optional, Sequence, Union, Dict


class ECGValidationError(ValueError):
    """Custom exception for ECG validation errors."""
    pass


class ECGWarning(UserWarning):
    """Custom warning for ECG validation issues."""
    pass


class ECGValidator:
    """Single-lead ECG trace validation."""

    NORMAL_AMPLITUDE_RANGE = (-10.0, 10.0)  # mV

    def __init__(self, strict_mode: bool = False):
        """Initialize validator."""
        self.strict_mode = strict_mode
        self.validation_results = {}

    def validate_sample_rate(self, sample_rate: Union[int, float]) -> float:
        """
        Check the sample rate invariant.

        A non-positive rate is a contract violation rather than missing data,
        so it always raises regardless of strict mode.
        """
        try:
            rate = float(sample_rate)
        except (TypeError, ValueError):
            raise ECGValidationError(f"Sample rate must be a number, got {sample_rate!r}")

        if not np.isfinite(rate) or rate <= 0:
            raise ECGValidationError(f"Sample rate must be positive, got {sample_rate}")

        return rate

    def validate_trace(self, trace: Union[Sequence[float], np.ndarray]) -> Optional[np.ndarray]:
        """
        Convert a trace to a 1-D float array.

        Returns None when the trace cannot be analysed (wrong shape,
        non-numeric or non-finite samples). In non-strict mode the reason is
        reported as an ECGWarning; in strict mode it raises.
        """
        results = {
            'data_format': False,
            'finite_samples': False,
            'amplitude_range': False,
        }
        self.validation_results = results

        try:
            data = np.asarray(trace, dtype=float)
        except (TypeError, ValueError) as e:
            self._handle_validation_issue(f"ECG trace is not numeric: {e}")
            return None

        if data.ndim != 1:
            self._handle_validation_issue(
                f"ECG trace must be a 1D array (samples,), got {data.ndim}D"
            )
            return None
        results['data_format'] = True

        if data.size and not np.all(np.isfinite(data)):
            n_bad = int(np.sum(~np.isfinite(data)))
            self._handle_validation_issue(f"ECG trace contains {n_bad} non-finite samples")
            return None
        results['finite_samples'] = True

        results['amplitude_range'] = self._validate_amplitude_range(data)
        return data

    def _validate_amplitude_range(self, data: np.ndarray) -> bool:
        """Flag traces that are unlikely to be in millivolts."""
        if data.size == 0:
            return True

        min_val, max_val = np.min(data), np.max(data)
        if min_val < self.NORMAL_AMPLITUDE_RANGE[0] or max_val > self.NORMAL_AMPLITUDE_RANGE[1]:
            # Out-of-range amplitude does not prevent analysis
            warnings.warn(
                f"ECG amplitude range [{min_val:.2f}, {max_val:.2f}] mV is outside "
                f"{self.NORMAL_AMPLITUDE_RANGE} mV. Check the units (counts vs mV).",
                ECGWarning
            )
            return False

        return True

    def _handle_validation_issue(self, message: str):
        """Handle validation issues based on strict mode setting."""
        if self.strict_mode:
            raise ECGValidationError(message)
        else:
            warnings.warn(message, ECGWarning)

    def get_validation_report(self) -> str:
        """Get a formatted validation report."""
        if not self.validation_results:
            return "No validation performed yet."

        report = "ECG Validation Report\n" + "=" * 30 + "\n"

        for check, result in self.validation_results.items():
            status = "PASS" if result else "FAIL"
            report += f"{check.replace('_', ' ').title():.<20} {status}\n"

        return report


# Convenience functions for quick validation
def quick_validate(trace: Union[Sequence[float], np.ndarray], sample_rate: Union[int, float]) -> bool:
    """Quick trace validation with default settings."""
    validator = ECGValidator(strict_mode=False)
    validator.validate_sample_rate(sample_rate)
    return validator.validate_trace(trace) is not None


def strict_validate(trace: Union[Sequence[float], np.ndarray],
                    sample_rate: Union[int, float]) -> Dict[str, bool]:
    """Strict trace validation that raises exceptions on failures."""
    validator = ECGValidator(strict_mode=True)
    validator.validate_sample_rate(sample_rate)
    validator.validate_trace(trace)
    return validator.validation_results
