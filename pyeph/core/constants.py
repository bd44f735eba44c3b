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

"""GNSS Constants and System Parameters"""

import numpy as np

__all__ = [
    "CLIGHT", "SYS_NONE", "SYS_GPS", "SYS_GLO", "SYS_GAL", "SYS_BDS", "SYS_QZS",
    "SYS_SBS", "SYS_IRN", "SYS_KEPLER", "GPST0", "GST0", "BDT0", "WEEK_SECONDS",
    "GPS_BDS_OFFSET", "OMGE", "MU_GPS", "MU_GAL", "MU_BDS", "OMGE_GPS", "OMGE_GAL",
    "OMGE_BDS", "FRAME_WGS84", "FRAME_GTRF", "FRAME_CGCS2000", "FIT_DURATION_GPS",
    "FIT_DURATION_GAL", "FIT_DURATION_BDS", "FIT_DURATION_QZS", "BDS_GEO_PRNS",
    "BDS_GEO_INCLINATION", "KEPLER_TOLERANCE", "KEPLER_MAX_ITER",
    "MIN_CUTOVER_SPACING", "HEALTHY", "sat2sys", "sat2prn", "prn2sat", "sys2char",
    "char2sys", "sat2id", "id2sat",
]

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# GNSS System IDs
SYS_NONE = 0x00   # invalid satellite
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS

# Systems propagated with the Keplerian broadcast model
SYS_KEPLER = SYS_GPS | SYS_GAL | SYS_BDS | SYS_QZS

# Time System Parameters
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch
GST0 = [1999, 8, 22, 0, 0, 0]  # Galileo time reference epoch
BDT0 = [2006, 1, 1, 0, 0, 0]   # BeiDou time reference epoch

WEEK_SECONDS = 604800.0        # seconds per week
GPS_BDS_OFFSET = 14.0          # GPS-BeiDou time offset (seconds)

# Earth rotation (WGS84)
OMGE = 7.2921151467E-5         # earth angular velocity (rad/s)

# System-specific gravitational constants
MU_GPS = 3.9860050E14          # GPS gravitational constant
MU_GAL = 3.986004418E14        # Galileo gravitational constant
MU_BDS = 3.986004418E14        # BeiDou gravitational constant

# System-specific earth angular velocities
OMGE_GPS = OMGE                # GPS earth angular velocity
OMGE_GAL = 7.2921151467E-5     # Galileo earth angular velocity
OMGE_BDS = 7.292115E-5         # BeiDou earth angular velocity

# Reference frames of the broadcast orbits
FRAME_WGS84 = 'WGS84'
FRAME_GTRF = 'GTRF'
FRAME_CGCS2000 = 'CGCS2000'

# Validity window (hours after toe). Calibrated from observed broadcast
# cadence where the interface documents leave the fit interval undefined.
FIT_DURATION_GPS = 2.0
FIT_DURATION_GAL = 4.0
FIT_DURATION_BDS = 1.0
FIT_DURATION_QZS = 1.0

# BeiDou GEO satellites (PRN)
BDS_GEO_PRNS = tuple(range(1, 6)) + tuple(range(59, 64))

# Inclination of the BeiDou GEO user-defined inertial frame (rad)
BDS_GEO_INCLINATION = np.deg2rad(-5.0)

# Kepler equation iteration
KEPLER_TOLERANCE = 1.0E-11     # eccentric anomaly correction threshold (rad)
KEPLER_MAX_ITER = 20           # iteration cap

# Store maintenance
MIN_CUTOVER_SPACING = 60.0     # minimum spacing of validity starts (s)

# Health
HEALTHY = 0                    # decoded health sentinel


# Satellite system functions
def sat2sys(sat):
    """Get satellite system from satellite number"""
    from .satellite_numbering import sat_to_sys
    return sat_to_sys(sat)


def sat2prn(sat):
    """Get PRN number from satellite number"""
    from .satellite_numbering import sat_to_prn
    return sat_to_prn(sat)


def prn2sat(prn, sys):
    """Get satellite number from PRN and system

    Parameters:
    -----------
    prn : int
        PRN number
    sys : int
        Satellite system (SYS_GPS, SYS_GAL, etc.)

    Returns:
    --------
    int
        Satellite number, 0 if invalid
    """
    from .satellite_numbering import prn_to_sat
    return prn_to_sat(sys, prn)


def sys2char(sys):
    """Convert system ID to character"""
    syschar = {
        SYS_GPS: 'G',
        SYS_GLO: 'R',
        SYS_GAL: 'E',
        SYS_BDS: 'C',
        SYS_QZS: 'J',
        SYS_SBS: 'S',
        SYS_IRN: 'I'
    }
    return syschar.get(sys, ' ')


def char2sys(c):
    """Convert character to system ID"""
    charmap = {
        'G': SYS_GPS,
        'R': SYS_GLO,
        'E': SYS_GAL,
        'C': SYS_BDS,
        'J': SYS_QZS,
        'S': SYS_SBS,
        'I': SYS_IRN
    }
    return charmap.get(c.upper(), 0)


def sat2id(sat):
    """Satellite number to RINEX style identifier, e.g. 'C03'"""
    sys = sat2sys(sat)
    if sys == SYS_NONE:
        return '???'
    return f"{sys2char(sys)}{sat2prn(sat):02d}"


def id2sat(sat_id):
    """RINEX style identifier ('G01', 'E11', 'C03') to satellite number"""
    if len(sat_id) < 2 or not sat_id[1:].strip().isdigit():
        return 0
    return prn2sat(int(sat_id[1:]), char2sys(sat_id[0]))
