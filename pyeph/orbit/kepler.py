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

"""Kepler equation solver and in-plane orbit state"""

import math
from dataclasses import dataclass

import numpy as np
from numba import njit

from ..core.constants import KEPLER_MAX_ITER, KEPLER_TOLERANCE

__all__ = ["TWO_PI", "wrap_to_2pi", "solve_kepler", "true_anomaly",
           "OrbitPlaneState", "orbit_plane_state"]

# Constants for angle wrapping
TWO_PI = 2 * np.pi


@njit(cache=True, fastmath=True)
def wrap_to_2pi(angle):
    """
    Wrap an angle to [0, 2π).

    Parameters
    ----------
    angle : float
        Angle in radians

    Returns
    -------
    float
        Equivalent angle in [0, 2π)
    """
    a = np.mod(angle, TWO_PI)
    # Rounding can land exactly on 2π for tiny negative angles
    if a >= TWO_PI:
        a -= TWO_PI
    return a


@njit(cache=True)
def solve_kepler(M, e, tol=KEPLER_TOLERANCE, max_iter=KEPLER_MAX_ITER):
    """
    Solve Kepler's equation M = E - e sin(E) for the eccentric anomaly.

    Newton iteration seeded at E0 = M + e sin(M); stops when the
    correction drops to ``tol`` or after ``max_iter`` steps.

    Parameters
    ----------
    M : float
        Mean anomaly (rad)
    e : float
        Eccentricity, 0 <= e < 1
    tol : float
        Convergence threshold on the Newton correction (rad)
    max_iter : int
        Iteration cap

    Returns
    -------
    E : float
        Eccentric anomaly (rad)
    n_iter : int
        Number of Newton steps taken
    converged : bool
        False if the cap was reached before the correction fell below ``tol``
    """
    E = M + e * math.sin(M)
    n_iter = 0
    converged = False
    while n_iter < max_iter:
        F = M - (E - e * math.sin(E))
        G = 1.0 - e * math.cos(E)
        dE = F / G
        E += dE
        n_iter += 1
        if abs(dE) <= tol:
            converged = True
            break
    return E, n_iter, converged


@njit(cache=True, fastmath=True)
def true_anomaly(E, e):
    """True anomaly from eccentric anomaly"""
    return math.atan2(math.sqrt(1.0 - e * e) * math.sin(E), math.cos(E) - e)


@dataclass
class OrbitPlaneState:
    """Corrected in-plane quantities and their time derivatives.

    Everything the frame transforms need: both the standard Earth-fixed
    rotation and the BeiDou GEO construction start from this state.

    Attributes
    ----------
    elapsed : float
        Time since toe (s)
    mean_anomaly, ecc_anomaly, true_anomaly : float
        Anomalies at the time of interest (rad)
    iterations : int
        Kepler solver iterations
    converged : bool
        Kepler solver convergence flag
    A : float
        Semi-major axis at the time of interest (m)
    u, r, inc : float
        Corrected argument of latitude (rad), radius (m), inclination (rad)
    u_dot, r_dot, inc_dot : float
        Their time derivatives
    xip, yip : float
        In-plane position (m)
    xip_dot, yip_dot : float
        In-plane velocity (m/s)
    """
    elapsed: float
    mean_anomaly: float
    ecc_anomaly: float
    true_anomaly: float
    iterations: int
    converged: bool
    A: float
    u: float
    r: float
    inc: float
    u_dot: float
    r_dot: float
    inc_dot: float
    xip: float
    yip: float
    xip_dot: float
    yip_dot: float


def orbit_plane_state(eph, elapsed: float, gm: float,
                      tol: float = KEPLER_TOLERANCE,
                      max_iter: int = KEPLER_MAX_ITER) -> OrbitPlaneState:
    """
    Perturbed Kepler propagation up to the in-plane position.

    Shared by every constellation variant: mean motion, Kepler solution,
    true anomaly, second-harmonic corrections and the analytic rate of
    each corrected quantity.

    Parameters
    ----------
    eph : OrbitEph
        Loaded ephemeris record
    elapsed : float
        Time since toe (s)
    gm : float
        Gravitational constant of the constellation (m^3/s^2)
    tol, max_iter
        Kepler solver settings

    Returns
    -------
    OrbitPlaneState
    """
    e = eph.e
    A = eph.A + eph.Adot * elapsed

    # Mean motion uses A0, not A(t)
    n = math.sqrt(gm / (eph.A ** 3)) + eph.deln + 0.5 * eph.dndot * elapsed
    M = wrap_to_2pi(eph.M0 + n * elapsed)

    E, n_iter, converged = solve_kepler(M, e, tol, max_iter)
    sinE = math.sin(E)
    cosE = math.cos(E)
    G = 1.0 - e * cosE
    q = math.sqrt(1.0 - e * e)
    nu = true_anomaly(E, e)

    # Argument of latitude and 2nd harmonic corrections
    phi = nu + eph.omg
    s2 = math.sin(2.0 * phi)
    c2 = math.cos(2.0 * phi)
    du = eph.cuc * c2 + eph.cus * s2
    dr = eph.crc * c2 + eph.crs * s2
    di = eph.cic * c2 + eph.cis * s2

    u = phi + du
    r = A * G + dr
    inc = eph.i0 + eph.idot * elapsed + di

    # Rates; dM/dt picks up the full dndot term of n * tk
    M_dot = n + 0.5 * eph.dndot * elapsed
    E_dot = M_dot / G
    phi_dot = q * E_dot / G
    u_dot = phi_dot * (1.0 + 2.0 * (eph.cus * c2 - eph.cuc * s2))
    r_dot = (eph.Adot * G + A * e * sinE * E_dot
             + 2.0 * phi_dot * (eph.crs * c2 - eph.crc * s2))
    inc_dot = eph.idot + 2.0 * phi_dot * (eph.cis * c2 - eph.cic * s2)

    cosu = math.cos(u)
    sinu = math.sin(u)
    xip = r * cosu
    yip = r * sinu
    xip_dot = r_dot * cosu - r * sinu * u_dot
    yip_dot = r_dot * sinu + r * cosu * u_dot

    return OrbitPlaneState(
        elapsed=elapsed, mean_anomaly=M, ecc_anomaly=E, true_anomaly=nu,
        iterations=n_iter, converged=converged, A=A,
        u=u, r=r, inc=inc, u_dot=u_dot, r_dot=r_dot, inc_dot=inc_dot,
        xip=xip, yip=yip, xip_dot=xip_dot, yip_dot=yip_dot,
    )
