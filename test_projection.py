import unittest
import numpy as np

from config import config
from projection import project_orthographic, project_many, ViewState


class TestProjectOrthographic(unittest.TestCase):

    def test_zero_tilt_drops_z(self):
        np.testing.assert_array_almost_equal(project_orthographic([1.0, 2.0, 3.0], 0.0), [1.0, 2.0])

    def test_quarter_tilt_shows_z(self):
        np.testing.assert_array_almost_equal(project_orthographic([1.0, 2.0, 3.0], 90.0), [1.0, -3.0])

    def test_x_is_unchanged_by_tilt(self):
        for tilt in (0.0, 20.0, 135.0, 300.0):
            self.assertEqual(project_orthographic([0.7, -1.2, 0.4], tilt)[0], 0.7)

    def test_project_many_matches_single(self):
        points = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [-0.3, 0.5, -2.0]])
        projected = project_many(points, 33.0)
        self.assertEqual(projected.shape, (3, 2))
        for point, xy in zip(points, projected):
            np.testing.assert_array_almost_equal(xy, project_orthographic(point, 33.0))


class TestViewState(unittest.TestCase):

    def test_defaults(self):
        view = ViewState()
        self.assertEqual(view.tilt_deg, config.View.DEFAULT_TILT_DEG)
        self.assertEqual(view.zoom_px_per_au, config.View.DEFAULT_ZOOM_PX_PER_AU)

    def test_zoom_is_clamped(self):
        self.assertEqual(ViewState(zoom_px_per_au=1.0).zoom_px_per_au, config.View.MIN_ZOOM_PX_PER_AU)
        self.assertEqual(ViewState().zoomed(100.0).zoom_px_per_au, config.View.MAX_ZOOM_PX_PER_AU)

    def test_tilt_is_wrapped(self):
        self.assertAlmostEqual(ViewState(tilt_deg=370.0).tilt_deg, 10.0)
        self.assertAlmostEqual(ViewState().with_tilt(-20.0).tilt_deg, 340.0)

    def test_world_to_screen(self):
        view = ViewState(tilt_deg=0.0, zoom_px_per_au=150.0)
        self.assertEqual(view.world_to_screen([0.0, 0.0, 0.0], (1000, 700)), (500.0, 350.0))
        sx, sy = view.world_to_screen([1.0, 0.0, 0.0], (1000, 700))
        self.assertAlmostEqual(sx, 650.0)
        self.assertAlmostEqual(sy, 350.0)

    def test_pan_offsets_screen_position(self):
        view = ViewState(tilt_deg=0.0, zoom_px_per_au=100.0).panned(10.0, -5.0)
        sx, sy = view.world_to_screen([0.0, 1.0, 0.0], (200, 200))
        self.assertAlmostEqual(sx, 110.0)
        self.assertAlmostEqual(sy, 195.0)

    def test_many_to_screen_matches_single(self):
        view = ViewState(tilt_deg=45.0, zoom_px_per_au=200.0, offset_px=(3.0, 4.0))
        points = np.array([[1.0, 0.5, 0.2], [-0.5, 0.1, 0.9]])
        screen = view.many_to_screen(points, (800, 600))
        for point, xy in zip(points, screen):
            np.testing.assert_array_almost_equal(xy, view.world_to_screen(point, (800, 600)))


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
