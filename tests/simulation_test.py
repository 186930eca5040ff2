from unittest.case import TestCase
import itertools
import numpy as np
from tremor import Simulation, compute_response
from tremor.building import BuildingParameters, StructuralComponents
from tremor.collapse import CollapseState
from tremor.deformation import AnalysisResult, ElementState
from tremor.hazard import SeismicParameters
from tremor.materials import MaterialParameters
from tremor.utils import COMPONENTS, MaterialTypes


class SimulationTest(TestCase):
    maxDiff = None

    @classmethod
    def setUpClass(cls):
        cls.weak_wood = BuildingParameters(
            height=12, floors=4, stiffness=4, damping_ratio=0.03, material="wood"
        )
        cls.strong_quake = SeismicParameters(magnitude=8.0, duration=30)
        cls.times = np.linspace(0, 20, 201)

    def test_compute_response_is_pure_before_collapse(self):
        building, seismic = BuildingParameters(), SeismicParameters()
        a, state_a = compute_response(building, seismic, 3.0)
        b, state_b = compute_response(building, seismic, 3.0)
        self.assertEqual(a, b)
        self.assertEqual(state_a, state_b)
        self.assertAlmostEqual(a.inter_story_drift, 8.8)

    def test_collapse_latch_over_a_run(self):
        """t > 4s brings the weak wood frame down, it never gets back up"""
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        results = sim.run(self.times)
        flags = [r.has_collapsed for r in results]
        first = flags.index(True)
        self.assertTrue(all(flags[first:]))
        self.assertFalse(any(flags[:first]))
        self.assertAlmostEqual(results[first].elapsed_time, 4.1)
        onsets = {r.collapse.collapse_time for r in results[first:]}
        self.assertEqual(len(onsets), 1)
        self.assertAlmostEqual(sim.collapse.collapse_time, 4.1)

    def test_collapsed_result(self):
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        sim.run(self.times[:42])
        result = sim.tick(10.0)
        self.assertTrue(result.has_collapsed)
        self.assertEqual(result.report.damage_level, "Complete Collapse")
        self.assertEqual(
            result.report.safety_status, "BUILDING COLLAPSE - EVACUATION REQUIRED"
        )
        self.assertEqual(len(result.report.recommended_actions), 5)
        self.assertEqual(result.metrics.inter_story_drift, 20.0)
        for name in COMPONENTS:
            self.assertEqual(getattr(result.component_damage, name).value, 100.0)
            self.assertEqual(getattr(result.component_damage, name).status, "Critical")

    def test_restart_replays_identically(self):
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        first = [r.to_dict for r in sim.run(self.times)]
        sim.restart()
        self.assertFalse(sim.collapse.has_collapsed)
        second = [r.to_dict for r in sim.run(self.times)]
        other = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        third = [r.to_dict for r in other.run(self.times)]
        self.assertEqual(first, second)
        self.assertEqual(first, third)

    def test_update_starts_a_new_run(self):
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        sim.run(self.times)
        sim.update(seismic=SeismicParameters(magnitude=3.5))
        self.assertEqual(sim.collapse, CollapseState())
        self.assertEqual(sim.collapse_risk, 0.0)
        result = sim.tick(15.0)
        self.assertFalse(result.has_collapsed)

    def test_collapse_is_read_only(self):
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        sim.tick(5.0)
        snapshot = sim.collapse
        snapshot.reset()
        self.assertTrue(sim.collapse.has_collapsed)

    def test_stiff_concrete_never_collapses(self):
        building = BuildingParameters(stiffness=9, damping_ratio=0.08)
        sim = Simulation(building=building, seismic=SeismicParameters(magnitude=4.5))
        self.assertLess(sim.collapse_risk, 0.5)
        self.assertFalse(any(r.has_collapsed for r in sim.run(np.linspace(0, 600, 61))))

    def test_outputs_are_finite_over_the_input_ranges(self):
        grid = itertools.product(
            MaterialTypes.list(),
            (1, 5.5, 10),
            (0.01, 0.05, 0.1),
            (4, 6.5, 9),
            (3, 50, 300),
        )
        for material, stiffness, damping, magnitude, height in grid:
            building = BuildingParameters(
                height=height,
                floors=max(1, int(height // 3)),
                stiffness=stiffness,
                damping_ratio=damping,
                material=material,
            )
            sim = Simulation(building=building, seismic=SeismicParameters(magnitude=magnitude))
            for t in (0.0, 10.0, 25.0):
                result = sim.tick(t)
                values = list(result.metrics.to_dict.values())
                self.assertTrue(np.all(np.isfinite(values)), (building, magnitude, t))
                self.assertTrue(np.all(np.asarray(values) >= 0))
                self.assertTrue(0 <= result.intensity <= 1)

    def test_snapshot_mode(self):
        sim = Simulation(intensity_mode="snapshot", selected_snapshot=3)
        self.assertEqual(sim.tick(15.0).intensity, 1.0)

    def test_results_frame(self):
        sim = Simulation(building=self.weak_wood, seismic=self.strong_quake)
        df = sim.results_frame(self.times[:11])
        self.assertEqual(len(df), 11)
        self.assertIn("columns", df.columns)
        self.assertIn("utilities", df.columns)
        self.assertFalse(df["collapse"].any())

    def test_summary(self):
        result = Simulation().tick(75.0)
        self.assertEqual(result.summary["t"], "01:15")

    def test_deform_uses_run_materials_and_components(self):
        """snapshot peak, stiff concrete (x0.5) and pinned columns (x1.5)"""
        building = BuildingParameters(
            components=StructuralComponents(columns={"connection": "pinned"})
        )
        sim = Simulation(
            building=building,
            materials=MaterialParameters(concrete={"elastic_modulus": 50.0}),
            intensity_mode="snapshot",
            selected_snapshot=3,
        )
        column = ElementState(type="column", id=1)
        results = {("column", 1): AnalysisResult(displacement=1.0, rotation=0.0)}
        (moved,) = sim.deform([column], results, 2.0, 15.0)
        self.assertTrue(np.allclose(moved.position, [0.0, 1.5, 0.0]))
        sim.update(materials=MaterialParameters())
        (moved,) = sim.deform([column], results, 2.0, 15.0)
        self.assertTrue(np.allclose(moved.position, [0.0, 3.0, 0.0]))
