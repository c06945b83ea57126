"""Noise level estimation from sampled ADC readings."""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

log = logging.getLogger(__name__)

MIN_SAMPLES = 5
MIN_STEPS = 10

_PARAMETERS = {
    "mean": "mean",
    "minVal": "min_val",
    "maxVal": "max_val",
    "RMS": "rms",
    "median": "median",
    "minValMean": "min_val_mean",
    "maxValMean": "max_val_mean",
    "peak": "peak",
    "peakToPeak": "peak_to_peak",
    "peakVoltage": "peak_voltage",
    "db": "db",
}


@dataclass
class NoiseStats:
    """Statistics of one batch of samples."""

    mean: float = 0.0
    min_val: float = 0.0
    max_val: float = 0.0
    rms: float = 0.0
    peak: float = 0.0
    median: float = 0.0
    min_val_mean: float = 0.0
    max_val_mean: float = 0.0
    peak_to_peak: float = 0.0
    peak_voltage: float = 0.0
    db: float = 0.0

    def get(self, parameter: str) -> float:
        """Return a statistic by its parameter name; unknown names give 0."""
        attr = _PARAMETERS.get(parameter)
        return getattr(self, attr) if attr else 0.0


def analyze_samples(
    samples: Sequence[float],
    ref_voltage: float = 0.02,
    vcc: float = 3.3,
    adc_range: float = 4095.0,
) -> Optional[NoiseStats]:
    """Compute noise statistics; returns None with fewer than five samples."""
    if len(samples) < MIN_SAMPLES:
        return None
    if ref_voltage <= 0:
        raise ValueError("reference voltage must be positive")

    mean = statistics.fmean(samples)
    deltas = [s - mean for s in samples]
    rms = math.sqrt(sum(d * d for d in deltas) / len(deltas))
    min_val_mean = min(deltas)
    max_val_mean = max(deltas)
    peak_to_peak = max_val_mean - min_val_mean
    peak_voltage = peak_to_peak * vcc / adc_range
    db = 0.0 if peak_voltage < ref_voltage else 20.0 * math.log10(peak_voltage / ref_voltage)

    return NoiseStats(
        mean=mean,
        min_val=float(min(samples)),
        max_val=float(max(samples)),
        rms=rms,
        peak=max(0.0, max_val_mean),
        median=statistics.median(deltas),
        min_val_mean=min_val_mean,
        max_val_mean=max_val_mean,
        peak_to_peak=peak_to_peak,
        peak_voltage=peak_voltage,
        db=db,
    )


class NoiseAdc:
    """Collects ADC samples over an interval and reports a noise statistic.

    *reader* is called with the pin number and returns a raw ADC reading.
    *interval* is the reporting interval in milliseconds.
    """

    def __init__(
        self,
        reader: Callable[[int], int],
        pin: int,
        steps: int,
        interval: int = 1000,
        ref_voltage: float = 0.02,
        parameter: str = "",
        adc_range: float = 4095.0,
        max_samples: int = 200,
        vcc: float = 3.3,
    ) -> None:
        self.reader = reader
        self.pin = pin
        self.max_samples = max_samples
        self.steps = max(MIN_STEPS, min(steps, max_samples))
        self.period = interval // self.steps
        self.ref_voltage = ref_voltage or 0.01
        self.parameter = parameter
        self.adc_range = adc_range
        self.vcc = vcc
        self.samples: list[float] = []
        self.stats = NoiseStats()
        self.value: float = 0.0
        self._last_ms = 0

    def add_sample(self, sample: float) -> bool:
        """Store a sample if there is room; return whether it was stored."""
        if len(self.samples) >= self.max_samples:
            return False
        self.samples.append(sample)
        return True

    def poll(self, now_ms: int) -> bool:
        """Take a reading if the sampling period has elapsed."""
        if now_ms > self._last_ms + self.period and len(self.samples) < self.max_samples:
            self._last_ms = now_ms
            self.samples.append(self.reader(self.pin))
            return True
        return False

    def analyze(self, parameter: str) -> float:
        """Analyse the collected samples, clear them, and return *parameter*."""
        stats = analyze_samples(self.samples, self.ref_voltage, self.vcc, self.adc_range)
        if stats is None:
            log.debug("not enough samples to analyse")
            return 0.0
        self.stats = stats
        self.samples.clear()
        return stats.get(parameter)

    def do_by_interval(self) -> Optional[float]:
        """Publish the configured statistic; None when it comes out as zero."""
        result = self.analyze(self.parameter)
        if not result:
            return None
        self.value = result
        return result

    def calibrate(self) -> float:
        """Take the current peak voltage as the quiet reference level."""
        self.ref_voltage = self.analyze("peakVoltage") or 0.01
        log.info("calibration reference voltage %s", self.ref_voltage)
        return self.ref_voltage

    def execute(self, command: str, params: Sequence) -> Optional[float]:
        """Return a stored statistic for the ``parameter`` command."""
        if command == "parameter" and len(params) == 1 and isinstance(params[0], str):
            output = self.stats.get(params[0])
            if output:
                return output
        return None