import math
import statistics

import pytest

from iotmods.noise import NoiseAdc, NoiseStats, analyze_samples

SQUARE = [0, 10, 0, 10, 0, 10]


def test_too_few_samples():
    assert analyze_samples([1, 2, 3, 4]) is None


def test_constant_signal_is_silent():
    stats = analyze_samples([500] * 8)
    assert stats.mean == 500
    assert stats.rms == 0
    assert stats.peak_to_peak == 0
    assert stats.db == 0


def test_square_wave_statistics():
    stats = analyze_samples(SQUARE, ref_voltage=1.0, vcc=1.0, adc_range=1.0)
    assert stats.mean == statistics.fmean(SQUARE)
    assert stats.min_val == min(SQUARE)
    assert stats.max_val == max(SQUARE)
    assert stats.peak_to_peak == max(SQUARE) - min(SQUARE)
    assert stats.rms == pytest.approx(statistics.pstdev(SQUARE))
    assert stats.median == 0
    assert stats.peak == stats.max_val_mean
    assert stats.db == pytest.approx(20.0)


def test_peak_voltage_scales_with_adc_range():
    stats = analyze_samples(SQUARE, vcc=3.3, adc_range=4095.0)
    assert stats.peak_voltage == pytest.approx(stats.peak_to_peak * 3.3 / 4095.0)


def test_db_zero_below_reference():
    stats = analyze_samples(SQUARE, ref_voltage=100.0, vcc=1.0, adc_range=1.0)
    assert stats.db == 0


def test_non_positive_reference_rejected():
    with pytest.raises(ValueError):
        analyze_samples(SQUARE, ref_voltage=0)


def test_stats_get_by_name():
    stats = NoiseStats(rms=2.5, peak_to_peak=7.0)
    assert stats.get("RMS") == 2.5
    assert stats.get("peakToPeak") == 7.0
    assert stats.get("unknown") == 0.0


def test_steps_are_clamped():
    assert NoiseAdc(lambda pin: 0, 1, 3, max_samples=100).steps == 10
    assert NoiseAdc(lambda pin: 0, 1, 500, max_samples=100).steps == 100


def test_zero_reference_replaced():
    adc = NoiseAdc(lambda pin: 0, 1, 20, ref_voltage=0)
    assert adc.ref_voltage == 0.01


def test_poll_respects_period():
    readings = []

    def reader(pin):
        readings.append(pin)
        return 42

    adc = NoiseAdc(reader, 34, 10, interval=1000)
    assert adc.poll(adc.period + 1) is True
    assert adc.poll(adc.period + 2) is False
    assert adc.samples == [42]
    assert readings == [34]


def test_add_sample_stops_at_capacity():
    adc = NoiseAdc(lambda pin: 0, 1, 10, max_samples=10)
    stored = [adc.add_sample(i) for i in range(12)]
    assert stored.count(True) == 10
    assert len(adc.samples) == 10


def test_analyze_clears_samples_and_returns_value():
    adc = NoiseAdc(lambda pin: 0, 1, 10, parameter="peakToPeak")
    for s in SQUARE:
        adc.add_sample(s)
    assert adc.do_by_interval() == max(SQUARE) - min(SQUARE)
    assert adc.samples == []
    assert adc.value == max(SQUARE) - min(SQUARE)


def test_analyze_keeps_samples_when_too_few():
    adc = NoiseAdc(lambda pin: 0, 1, 10, parameter="mean")
    adc.add_sample(5)
    assert adc.do_by_interval() is None
    assert adc.samples == [5]


def test_execute_returns_stored_statistic():
    adc = NoiseAdc(lambda pin: 0, 1, 10)
    for s in SQUARE:
        adc.add_sample(s)
    adc.analyze("mean")
    assert adc.execute("parameter", ["maxVal"]) == max(SQUARE)
    assert adc.execute("parameter", ["median"]) is None
    assert adc.execute("parameter", [1.0]) is None
    assert adc.execute("other", ["maxVal"]) is None


def test_calibrate_sets_reference_to_peak_voltage():
    adc = NoiseAdc(lambda pin: 0, 1, 10, vcc=1.0, adc_range=1.0)
    for s in SQUARE:
        adc.add_sample(s)
    ref = adc.calibrate()
    assert ref == max(SQUARE) - min(SQUARE)
    assert adc.ref_voltage == ref
    for s in SQUARE:
        adc.add_sample(s)
    assert math.isclose(adc.analyze("db"), 0.0, abs_tol=1e-9)