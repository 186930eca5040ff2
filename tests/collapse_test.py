from unittest.case import TestCase
import numpy as np
from tremor.collapse import (
    CollapseState,
    CollapseStates,
    collapse_risk,
    collapse_threshold,
    collapse_triggered,
    update_collapse,
)
from tremor.utils import CollapseLatchViolation, MaterialTypes


class CollapseRiskTest(TestCase):
    maxDiff = None

    def test_weak_wood_building(self):
        """M8 on a stiffness 4, 3% damped wood frame saturates the risk"""
        risk = collapse_risk(8, 4, 0.03, "wood")
        self.assertEqual(risk, 1.0)
        self.assertAlmostEqual(collapse_threshold(risk), 4.0)
        self.assertFalse(collapse_triggered(risk, 4.0))
        self.assertTrue(collapse_triggered(risk, 4.01))

    def test_stiff_concrete_building_stays_up(self):
        risk = collapse_risk(4.5, 9, 0.08, "concrete")
        self.assertLess(risk, 0.5)
        for t in np.linspace(0, 1000, 101):
            self.assertFalse(collapse_triggered(risk, t))

    def test_small_magnitudes_carry_no_risk(self):
        risk = collapse_risk(3.5, 2, 0.02, "wood")
        self.assertEqual(risk, 0.0)
        self.assertEqual(collapse_threshold(risk), np.inf)

    def test_risk_is_monotone_in_magnitude(self):
        magnitudes = np.linspace(3, 10, 71)
        for material in MaterialTypes.list():
            for stiffness in (1, 5, 9.5):
                for damping in (0.01, 0.05, 0.1):
                    risks = [collapse_risk(m, stiffness, damping, material) for m in magnitudes]
                    self.assertTrue(np.all(np.diff(risks) >= 0), (material, stiffness, damping))
                    self.assertTrue(all(0 <= r <= 1 for r in risks))

    def test_threshold_shrinks_with_risk(self):
        self.assertAlmostEqual(collapse_threshold(0.6), 10.0)
        self.assertAlmostEqual(collapse_threshold(0.8), 7.0)
        self.assertFalse(collapse_triggered(0.5, 1000))


class CollapseStateTest(TestCase):
    maxDiff = None

    def test_latch(self):
        """once collapsed the onset time never moves"""
        state = CollapseState()
        self.assertEqual(state.state, CollapseStates.STANDING)
        state.observe(False, 1.0)
        self.assertFalse(state.has_collapsed)
        state.observe(True, 5.0)
        state.observe(False, 6.0)
        state.observe(True, 7.0)
        self.assertTrue(state.has_collapsed)
        self.assertEqual(state.collapse_time, 5.0)
        self.assertEqual(state.state, CollapseStates.COLLAPSED)
        self.assertEqual(state.time_since_collapse(8.0), 3.0)

    def test_update_collapse(self):
        state = CollapseState()
        args = dict(magnitude=8, stiffness=4, damping_ratio=0.03, material="wood")
        for t in (0.0, 2.0, 4.0):
            update_collapse(state, elapsed_time=t, **args)
            self.assertFalse(state.has_collapsed)
        update_collapse(state, elapsed_time=4.5, **args)
        update_collapse(state, elapsed_time=6.0, **args)
        self.assertEqual(state.collapse_time, 4.5)

    def test_inconsistent_states(self):
        with self.assertRaises(CollapseLatchViolation):
            CollapseState(has_collapsed=True)
        with self.assertRaises(CollapseLatchViolation):
            CollapseState(collapse_time=3.0)

    def test_check_follows(self):
        collapsed = CollapseState(has_collapsed=True, collapse_time=5.0)
        collapsed.check_follows(CollapseState())
        collapsed.check_follows(collapsed.copy())
        with self.assertRaises(CollapseLatchViolation):
            CollapseState().check_follows(collapsed)
        with self.assertRaises(CollapseLatchViolation):
            CollapseState(has_collapsed=True, collapse_time=6.0).check_follows(collapsed)

    def test_reset(self):
        state = CollapseState(has_collapsed=True, collapse_time=5.0)
        copy = state.copy()
        state.reset()
        self.assertEqual(state, CollapseState())
        self.assertTrue(copy.has_collapsed)
