#!/usr/bin/env python3
"""Test suite for rotation matrices"""

import unittest
import numpy as np

from pyeph.core.constants import BDS_GEO_INCLINATION, OMGE_BDS
from pyeph.orbit.rotation import rot_x, rot_z, rot_z_rate


class TestRotations(unittest.TestCase):
    """Test frame rotation matrices"""

    def test_identity(self):
        np.testing.assert_allclose(rot_x(0.0), np.eye(3), atol=1e-15)
        np.testing.assert_allclose(rot_z(0.0), np.eye(3), atol=1e-15)

    def test_orthonormal(self):
        for theta in (0.3, -1.2, 2.9):
            for R in (rot_x(theta), rot_z(theta)):
                np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-14)
                self.assertAlmostEqual(np.linalg.det(R), 1.0, places=14)

    def test_frame_rotation_sense(self):
        # Rotating the frame by +90 deg about Z moves the X axis to -Y
        p = rot_z(np.pi / 2) @ np.array([1.0, 0.0, 0.0])
        np.testing.assert_allclose(p, [0.0, -1.0, 0.0], atol=1e-15)

        p = rot_x(np.pi / 2) @ np.array([0.0, 1.0, 0.0])
        np.testing.assert_allclose(p, [0.0, 0.0, -1.0], atol=1e-15)

    def test_rot_z_rate(self):
        theta = 0.8
        rate = OMGE_BDS
        h = 1e-6
        numeric = (rot_z(theta + h) - rot_z(theta - h)) / (2 * h) * rate
        np.testing.assert_allclose(rot_z_rate(theta, rate), numeric, atol=1e-12)

    def test_geo_composition(self):
        """Rz(wt) Rx(-5 deg) matches the closed form GEO rotation"""
        xg, yg, zg = 3.0e7, -2.5e7, 1.2e6
        angle = OMGE_BDS * 1800.0

        p = rot_z(angle) @ rot_x(BDS_GEO_INCLINATION) @ np.array([xg, yg, zg])

        sin5 = np.sin(np.deg2rad(-5))
        cos5 = np.cos(np.deg2rad(-5))
        sino = np.sin(angle)
        coso = np.cos(angle)
        expected = [
            xg * coso + yg * sino * cos5 + zg * sino * sin5,
            -xg * sino + yg * coso * cos5 + zg * coso * sin5,
            -yg * sin5 + zg * cos5,
        ]
        np.testing.assert_allclose(p, expected, rtol=1e-12, atol=1e-6)


if __name__ == '__main__':
    unittest.main()
