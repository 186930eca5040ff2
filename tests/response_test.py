from unittest.case import TestCase
import numpy as np
from tremor.response import (
    max_displacement,
    structural_response_factor,
    natural_period,
    inter_story_drift,
    response_metrics,
)
from tremor.utils import MaterialTypes


class ResponseTest(TestCase):
    maxDiff = None

    def test_default_building(self):
        """50m concrete building, M5.5, stiffness 5, 5% damping"""
        m = response_metrics(
            height=50,
            floors=6,
            magnitude=5.5,
            stiffness=5,
            damping_ratio=0.05,
            material=MaterialTypes.CONCRETE,
        )
        self.assertAlmostEqual(m.max_displacement, 4.4)
        self.assertAlmostEqual(m.inter_story_drift, 8.8)
        self.assertAlmostEqual(m.structural_response_factor, 3.96)
        self.assertAlmostEqual(m.natural_period, 0.6)

    def test_material_factors(self):
        args = dict(height=10, magnitude=6, stiffness=5, damping_ratio=0.05)
        concrete = max_displacement(material="concrete", **args)
        steel = max_displacement(material="steel", **args)
        wood = max_displacement(material="wood", **args)
        self.assertAlmostEqual(concrete / steel, 0.8)
        self.assertAlmostEqual(wood / steel, 1.5)

    def test_unknown_material_behaves_like_wood(self):
        self.assertEqual(
            structural_response_factor(6, 5, 0.05, "adobe"),
            structural_response_factor(6, 5, 0.05, "wood"),
        )

    def test_monotonicity(self):
        """displacement grows with magnitude and height, shrinks with stiffness and damping"""
        base = max_displacement(50, 6, 5, 0.05, "steel")
        self.assertGreater(max_displacement(50, 7, 5, 0.05, "steel"), base)
        self.assertGreater(max_displacement(60, 6, 5, 0.05, "steel"), base)
        self.assertLess(max_displacement(50, 6, 6, 0.05, "steel"), base)
        self.assertLess(max_displacement(50, 6, 5, 0.06, "steel"), base)

    def test_zero_stiffness_does_not_raise(self):
        self.assertTrue(np.isinf(max_displacement(50, 6, 0, 0.05, "steel")))
        self.assertTrue(np.isinf(structural_response_factor(6, 5, 0, "steel")))

    def test_natural_period(self):
        self.assertAlmostEqual(natural_period(1), 0.1)
        self.assertAlmostEqual(natural_period(40), 4.0)

    def test_collapse_amplification(self):
        """drift grows by 1 + dt/2 after collapse and is capped at 20%"""
        self.assertAlmostEqual(inter_story_drift(0.5, 50), 1.0)
        self.assertAlmostEqual(inter_story_drift(0.5, 50, time_since_collapse=0), 1.0)
        self.assertAlmostEqual(inter_story_drift(0.5, 50, time_since_collapse=2), 2.0)
        self.assertEqual(inter_story_drift(0.5, 50, time_since_collapse=100), 20.0)
        self.assertEqual(inter_story_drift(20, 50, time_since_collapse=0), 20.0)
