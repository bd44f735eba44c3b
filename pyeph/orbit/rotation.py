# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Frame rotation matrices

Coordinate (passive) rotations: ``rot_z(theta) @ p`` expresses ``p`` in a
frame rotated by ``theta`` about Z.
"""

import math

import numpy as np
from numba import njit

__all__ = ["rot_x", "rot_z", "rot_z_rate"]


@njit(cache=True, fastmath=True)
def rot_x(theta):
    """Rotation about the X axis"""
    c = math.cos(theta)
    s = math.sin(theta)
    R = np.zeros((3, 3))
    R[0, 0] = 1.0
    R[1, 1] = c
    R[1, 2] = s
    R[2, 1] = -s
    R[2, 2] = c
    return R


@njit(cache=True, fastmath=True)
def rot_z(theta):
    """Rotation about the Z axis"""
    c = math.cos(theta)
    s = math.sin(theta)
    R = np.zeros((3, 3))
    R[0, 0] = c
    R[0, 1] = s
    R[1, 0] = -s
    R[1, 1] = c
    R[2, 2] = 1.0
    return R


@njit(cache=True, fastmath=True)
def rot_z_rate(theta, theta_dot):
    """
    Time derivative of ``rot_z(theta)`` for an angle changing at ``theta_dot``.

    Parameters
    ----------
    theta : float
        Rotation angle (rad)
    theta_dot : float
        Angle rate (rad/s)

    Returns
    -------
    np.ndarray
        3x3 matrix d/dt Rz(theta)
    """
    c = math.cos(theta)
    s = math.sin(theta)
    R = np.zeros((3, 3))
    R[0, 0] = -s * theta_dot
    R[0, 1] = c * theta_dot
    R[1, 0] = -c * theta_dot
    R[1, 1] = -s * theta_dot
    return R
