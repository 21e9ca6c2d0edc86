"""
Unit tests for the learning-rate, smoothing and temperature schedules.
"""

import math
from types import SimpleNamespace

import numpy as np
import pytest

from wavescape.engine.schedules import (
    MIN_CYCLE_STEPS,
    MIN_LR_FRACTION,
    ScheduleKind,
    cycle_steps_from_seconds,
    cyclic_progress,
    evaluate_schedules,
    generate_schedule_data,
    learning_rate,
    progress,
    smoothing_factor,
    temperature,
)


@pytest.mark.unit
class TestScheduleKind:
    """Test schedule name parsing."""

    def test_parse_values(self):
        assert ScheduleKind.parse("constant") is ScheduleKind.CONSTANT
        assert ScheduleKind.parse("cosine-restarts") is ScheduleKind.COSINE_RESTARTS
        assert ScheduleKind.parse("Cosine_Restarts") is ScheduleKind.COSINE_RESTARTS
        assert ScheduleKind.parse(ScheduleKind.LINEAR) is ScheduleKind.LINEAR

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown schedule kind"):
            ScheduleKind.parse("triangle")


@pytest.mark.unit
class TestProgress:
    """Test progress measures."""

    def test_progress_clamped(self):
        assert progress(0, 100) == 0.0
        assert progress(50, 100) == 0.5
        assert progress(500, 100) == 1.0

    def test_progress_without_horizon(self):
        assert progress(10, 0) == 1.0

    def test_cyclic_progress_wraps(self):
        assert cyclic_progress(0, 10) == 0.0
        assert cyclic_progress(5, 10) == 0.5
        assert cyclic_progress(10, 10) == 0.0
        assert cyclic_progress(13, 10) == pytest.approx(0.3)

    def test_cycle_steps_from_seconds(self):
        assert cycle_steps_from_seconds(6.0) == 360
        assert cycle_steps_from_seconds(0.01) == MIN_CYCLE_STEPS
        assert cycle_steps_from_seconds(1.0, frame_rate=30) == 30


@pytest.mark.unit
class TestLearningRate:
    """Test the learning-rate schedules."""

    def setup_method(self):
        self.base = 0.08
        self.cycle = 100
        self.horizon = 400

    def lr(self, kind, step):
        return learning_rate(kind, self.base, step, self.cycle, self.horizon)

    def test_constant(self):
        for step in (0, 17, 399, 5000):
            assert self.lr("constant", step) == self.base

    def test_linear_endpoints(self):
        assert self.lr("linear", 0) == pytest.approx(self.base)
        assert self.lr("linear", 200) == pytest.approx(self.base / 2)
        assert self.lr("linear", 400) == pytest.approx(0.0)
        assert self.lr("linear", 1000) == pytest.approx(0.0)

    def test_cosine_endpoints(self):
        assert self.lr("cosine", 0) == pytest.approx(self.base)
        assert self.lr("cosine", 200) == pytest.approx(self.base / 2)
        assert self.lr("cosine", 400) == pytest.approx(0.0, abs=1e-12)

    def test_cosine_restarts_restores_base_each_cycle(self):
        """Test that the rate jumps back to the base value at each cycle boundary."""
        for k in range(5):
            assert self.lr("cosine-restarts", k * self.cycle) == pytest.approx(self.base)
        assert self.lr("cosine-restarts", 50) == pytest.approx(self.base / 2)
        assert self.lr("cosine-restarts", 99) < self.lr("cosine-restarts", 98)

    def test_cosine_restarts_ignores_horizon(self):
        late = learning_rate("cosine-restarts", self.base, 10_000, self.cycle, self.horizon)
        assert late == pytest.approx(self.base)

    def test_step_schedule_halves(self):
        assert self.lr("step", 0) == pytest.approx(self.base)
        assert self.lr("step", 100) == pytest.approx(self.base * 0.5)
        assert self.lr("step", 399) == pytest.approx(self.base * 0.125)
        assert self.lr("step", 400) == pytest.approx(self.base * 0.0625)

    def test_exponential_decays_to_floor(self):
        assert self.lr("exponential", 0) == pytest.approx(self.base)
        assert self.lr("exponential", 400) == pytest.approx(self.base * MIN_LR_FRACTION)

    def test_warmup_cosine_shape(self):
        first = self.lr("warmup-cosine", 0)
        assert 0 < first < self.base
        assert self.lr("warmup-cosine", 39) <= self.base
        assert self.lr("warmup-cosine", 40) == pytest.approx(self.base)
        assert self.lr("warmup-cosine", 400) == pytest.approx(self.base * MIN_LR_FRACTION)

    def test_one_cycle_shape(self):
        start = self.lr("one-cycle", 0)
        peak = self.lr("one-cycle", 160)
        end = self.lr("one-cycle", 400)
        assert start == pytest.approx(self.base * MIN_LR_FRACTION)
        assert peak == pytest.approx(self.base)
        assert end == pytest.approx(self.base * MIN_LR_FRACTION)

    @pytest.mark.parametrize("kind", [k.value for k in ScheduleKind])
    def test_never_negative_or_above_base(self, kind):
        for step in range(0, 801, 7):
            value = self.lr(kind, step)
            assert 0.0 <= value <= self.base + 1e-12

    def test_generate_schedule_data(self):
        steps, lrs = generate_schedule_data("cosine", self.base, self.cycle, self.horizon, n_points=50)
        assert steps.shape == lrs.shape == (50,)
        assert steps[0] == 0 and steps[-1] == self.horizon
        assert np.all(np.diff(lrs) <= 1e-12)


@pytest.mark.unit
class TestAnnealing:
    """Test smoothing and temperature annealing."""

    def test_smoothing_endpoints(self):
        assert smoothing_factor(0.8, 0.0) == pytest.approx(0.8)
        assert smoothing_factor(0.8, 1.0) == pytest.approx(0.0, abs=1e-12)

    def test_smoothing_monotone(self):
        values = [smoothing_factor(1.0, p) for p in np.linspace(0, 1, 50)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_smoothing_amount_clipped(self):
        assert smoothing_factor(3.0, 0.0) == 1.0
        assert smoothing_factor(-1.0, 0.0) == 0.0

    def test_temperature_anneals_linearly(self):
        assert temperature(0.4, 0.0) == pytest.approx(0.4)
        assert temperature(0.4, 0.5) == pytest.approx(0.2)
        assert temperature(0.4, 1.0) == 0.0

    def test_temperature_without_anneal(self):
        assert temperature(0.4, 0.9, anneal=False) == 0.4

    def test_negative_temperature_clamped(self):
        assert temperature(-1.0, 0.2) == 0.0

    def test_evaluate_schedules(self):
        settings = SimpleNamespace(
            schedule_kind="linear", learning_rate=0.1, cycle_steps=10, horizon_steps=100,
            smoothing=0.6, temperature=0.2, anneal_temperature=True,
        )
        values = evaluate_schedules(50, settings)
        assert values.progress == 0.5
        assert values.learning_rate == pytest.approx(0.05)
        assert values.smoothing == pytest.approx(0.3)
        assert values.temperature == pytest.approx(0.1)

    def test_evaluate_schedules_past_horizon(self):
        settings = SimpleNamespace(
            schedule_kind="cosine-restarts", learning_rate=0.1, cycle_steps=10, horizon_steps=100,
            smoothing=1.0, temperature=0.5, anneal_temperature=True,
        )
        values = evaluate_schedules(1000, settings)
        assert values.progress == 1.0
        assert values.smoothing == pytest.approx(0.0, abs=1e-12)
        assert values.temperature == 0.0
        assert math.isclose(values.learning_rate, 0.1)
