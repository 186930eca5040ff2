from unittest.case import TestCase
from tremor.damage import (
    ComponentState,
    assess_component_damage,
    collapse_component_damage,
    damage_status,
    damage_color,
)
from tremor.utils import DamageStatus, COMPONENTS


class DamageBandsTest(TestCase):
    def test_band_boundaries(self):
        """lower bounds are inclusive"""
        cases = [
            (0, DamageStatus.UNDAMAGED),
            (9.999, DamageStatus.UNDAMAGED),
            (10, DamageStatus.MINOR),
            (24.999, DamageStatus.MINOR),
            (25, DamageStatus.MODERATE),
            (49.99, DamageStatus.MODERATE),
            (50, DamageStatus.SEVERE),
            (74.99, DamageStatus.SEVERE),
            (75, DamageStatus.CRITICAL),
            (100, DamageStatus.CRITICAL),
        ]
        for value, status in cases:
            self.assertEqual(damage_status(value), status, value)

    def test_colors(self):
        self.assertEqual(damage_color(5), "green")
        self.assertEqual(damage_color(80), "red")
        self.assertEqual(ComponentState.from_value(30).color, "yellow")


class AssessComponentDamageTest(TestCase):
    maxDiff = None

    def test_low_damage_concrete(self):
        """
        M4, response factor 0.9, stiffness 8, 10% damping
        base 36 * stiffness 0.6 * damping 0.5 = 10.8
        """
        damage = assess_component_damage(
            magnitude=4,
            structural_response_factor=0.9,
            stiffness=8,
            damping_ratio=0.1,
            material="concrete",
        )
        expected = {
            "columns": (10.368, "Minor"),
            "beams": (9.72, "Undamaged"),
            "slabs": (6.48, "Undamaged"),
            "foundation": (4.536, "Undamaged"),
            "facades": (14.04, "Minor"),
            "interior_walls": (11.664, "Minor"),
            "utilities": (12.096, "Minor"),
        }
        for name, (value, status) in expected.items():
            state = getattr(damage, name)
            self.assertAlmostEqual(state.value, value, msg=name)
            self.assertEqual(state.status, status, name)

    def test_values_are_clipped(self):
        damage = assess_component_damage(
            magnitude=9,
            structural_response_factor=20,
            stiffness=1,
            damping_ratio=0.01,
            material="wood",
        )
        for name in COMPONENTS:
            self.assertEqual(getattr(damage, name).value, 100.0)
            self.assertEqual(getattr(damage, name).status, "Critical")

    def test_categories(self):
        damage = assess_component_damage(
            magnitude=5,
            structural_response_factor=1,
            stiffness=5,
            damping_ratio=0.05,
            material="steel",
        )
        self.assertEqual(list(damage.structural), ["columns", "beams", "slabs", "foundation"])
        self.assertEqual(list(damage.non_structural), ["facades", "interior_walls", "utilities"])
        df = damage.to_frame()
        self.assertEqual(len(df), 7)
        self.assertEqual(df.loc["utilities", "category"], "nonstructural")

    def test_from_dict(self):
        damage = collapse_component_damage(1.0)
        self.assertEqual(type(damage).from_dict(damage.to_dict), damage)


class CollapseProgressionTest(TestCase):
    def test_onset(self):
        damage = collapse_component_damage(0.0)
        self.assertEqual(damage.columns.value, 80.0)
        self.assertEqual(damage.foundation.value, 60.0)
        self.assertEqual(damage.utilities.value, 100.0)
        for name in COMPONENTS:
            self.assertEqual(damage.status_of(name), "Critical")

    def test_midway(self):
        damage = collapse_component_damage(1.5)
        self.assertAlmostEqual(damage.columns.value, 90.0)
        self.assertAlmostEqual(damage.foundation.value, 80.0)
        self.assertAlmostEqual(damage.facades.value, 95.0)

    def test_complete_after_ramp(self):
        for dt in (3.0, 10.0):
            damage = collapse_component_damage(dt)
            for name in COMPONENTS:
                self.assertEqual(getattr(damage, name).value, 100.0)
