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

"""Constellation specific parts of the broadcast orbit model

The propagation up to the orbital plane is common to GPS, Galileo, BeiDou
and QZSS. What differs per constellation lives here:

- decoding of the broadcast accuracy index
- the validity window rule
- the transform from the orbital plane into the Earth-fixed frame, which
  for BeiDou GEO satellites goes through an inclined inertial frame
"""

import math

import numpy as np

from ..core.constants import (BDS_GEO_INCLINATION, BDS_GEO_PRNS, SYS_BDS,
                              SYS_GAL, sat2prn, sat2sys)
from .rotation import rot_x, rot_z, rot_z_rate

__all__ = ["ura_value", "sisa_value", "accuracy_value", "is_bds_geo",
           "validity_window", "earth_fixed_transform", "bds_geo_transform",
           "frame_transform"]


def ura_value(sva: int) -> float:
    """
    Convert User Range Accuracy (URA) index to accuracy in meters.

    Used for GPS, QZSS and BeiDou.

    Parameters
    ----------
    sva : int
        URA index (0-15)

    Returns
    -------
    float
        URA in meters, 0.0 for index 15 (no accuracy prediction) or out of range
    """
    ura_eph = [
        2.4, 3.4, 4.85, 6.85, 9.65, 13.65, 24.0, 48.0,
        96.0, 192.0, 384.0, 768.0, 1536.0, 3072.0, 6144.0, 0.0
    ]
    return ura_eph[sva] if 0 <= sva <= 15 else 0.0


def sisa_value(sisa: int) -> float:
    """
    Convert Galileo Signal-In-Space Accuracy (SISA) index to meters.

    Index 255 (and anything past 125) is "No Accuracy Prediction Available"
    and decodes to 0.0.
    """
    if sisa < 0:
        return 0.0
    if sisa <= 49:
        return sisa * 0.01
    if sisa <= 74:
        return 0.5 + (sisa - 50) * 0.02
    if sisa <= 99:
        return 1.0 + (sisa - 75) * 0.04
    if sisa <= 125:
        return 2.0 + (sisa - 100) * 0.16
    return 0.0


def accuracy_value(sat: int, index: int) -> float:
    """Decode the broadcast accuracy index of a satellite in meters"""
    if sat2sys(sat) == SYS_GAL:
        return sisa_value(index)
    return ura_value(index)


def is_bds_geo(sat: int) -> bool:
    """True for BeiDou geostationary satellites"""
    return sat2sys(sat) == SYS_BDS and sat2prn(sat) in BDS_GEO_PRNS


def validity_window(toe, transmit_time, fit_seconds: float):
    """
    Validity window of a record.

    The window opens at the later of toe and the transmit time (a record
    cannot be used before it was broadcast) and closes ``fit_seconds``
    after toe.

    Returns
    -------
    begin, end : GNSSTime
    """
    begin = transmit_time if transmit_time > toe else toe
    return begin.copy(), toe + fit_seconds


def _node_rotation(state, omega, omega_dot):
    """Rotate the in-plane state by inclination and node longitude"""
    cosO = math.cos(omega)
    sinO = math.sin(omega)
    cosi = math.cos(state.inc)
    sini = math.sin(state.inc)

    x = state.xip * cosO - state.yip * cosi * sinO
    y = state.xip * sinO + state.yip * cosi * cosO
    z = state.yip * sini

    vx = (state.xip_dot * cosO - state.yip_dot * cosi * sinO
          + state.yip * sini * sinO * state.inc_dot - y * omega_dot)
    vy = (state.xip_dot * sinO + state.yip_dot * cosi * cosO
          - state.yip * sini * cosO * state.inc_dot + x * omega_dot)
    vz = state.yip_dot * sini + state.yip * cosi * state.inc_dot

    return np.array([x, y, z]), np.array([vx, vy, vz])


def earth_fixed_transform(eph, state, const):
    """
    Standard transform: node longitude corrected for Earth rotation.

    Returns
    -------
    pos, vel : np.ndarray
        Earth-fixed position (m) and velocity (m/s)
    omega : float
        Longitude of the ascending node (rad)
    gk : None
        No intermediate frame
    """
    omega_dot = eph.OMGd - const.omega_e
    omega = eph.OMG0 + omega_dot * state.elapsed - const.omega_e * eph.toe.tow
    pos, vel = _node_rotation(state, omega, omega_dot)
    return pos, vel, omega, None


def bds_geo_transform(eph, state, const):
    """
    BeiDou GEO transform.

    The node longitude is not corrected for Earth rotation during tk, which
    gives a position in an inertial frame inclined by -5 degrees (GK). It is
    then rotated into CGCS2000:

        p = Rz(omega_e * tk) Rx(-5 deg) p_GK
        v = dRz/dt Rx p_GK + Rz Rx v_GK

    Returns
    -------
    pos, vel : np.ndarray
        CGCS2000 position (m) and velocity (m/s)
    omega : float
        Longitude of the ascending node in the GK frame (rad)
    gk : np.ndarray
        Position in the GK frame (m)
    """
    omega = eph.OMG0 + eph.OMGd * state.elapsed - const.omega_e * eph.toe.tow
    pos_gk, vel_gk = _node_rotation(state, omega, eph.OMGd)

    angle = const.omega_e * state.elapsed
    rx = rot_x(BDS_GEO_INCLINATION)
    rz = rot_z(angle)
    rzx = rz @ rx

    pos = rzx @ pos_gk
    vel = rzx @ vel_gk + rot_z_rate(angle, const.omega_e) @ rx @ pos_gk
    return pos, vel, omega, pos_gk


def frame_transform(sat: int):
    """Orbit-plane to Earth-fixed transform applicable to a satellite"""
    if is_bds_geo(sat):
        return bds_geo_transform
    return earth_fixed_transform
