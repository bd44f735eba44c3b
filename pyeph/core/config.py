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

"""Configuration of the propagation engine and ephemeris store"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from .constants import (FIT_DURATION_BDS, FIT_DURATION_GAL, FIT_DURATION_GPS,
                        FIT_DURATION_QZS, FRAME_CGCS2000, FRAME_GTRF,
                        FRAME_WGS84, HEALTHY, KEPLER_MAX_ITER,
                        KEPLER_TOLERANCE, MIN_CUTOVER_SPACING, MU_BDS, MU_GAL,
                        MU_GPS, OMGE_BDS, OMGE_GAL, OMGE_GPS, SYS_BDS,
                        SYS_GAL, SYS_GPS, SYS_QZS, char2sys)

__all__ = ["SearchMethod", "ConstellationConfig", "EphemerisConfig",
           "default_constellations", "ephemeris_config"]

logger = logging.getLogger(__name__)


class SearchMethod(Enum):
    """Ephemeris selection policy of the store"""
    USER = "user"        # validity window must contain the query time
    NEAREST = "nearest"  # closest reference time, for offline reprocessing


@dataclass
class ConstellationConfig:
    """Per-constellation constants of the broadcast orbit model"""
    name: str
    time_sys: str                # time scale of toe/toc
    gm: float                    # gravitational constant (m^3/s^2)
    omega_e: float               # earth angular velocity (rad/s)
    frame: str                   # reference frame of computed positions
    fit_duration: float          # validity after toe (hours)
    healthy: int = HEALTHY       # decoded health meaning "usable"

    @property
    def fit_seconds(self) -> float:
        return self.fit_duration * 3600.0


def default_constellations() -> dict[int, ConstellationConfig]:
    """Fresh copy of the built-in constellation table"""
    return {
        SYS_GPS: ConstellationConfig('GPS', 'GPS', MU_GPS, OMGE_GPS, FRAME_WGS84, FIT_DURATION_GPS),
        SYS_GAL: ConstellationConfig('Galileo', 'GAL', MU_GAL, OMGE_GAL, FRAME_GTRF, FIT_DURATION_GAL),
        SYS_BDS: ConstellationConfig('BeiDou', 'BDS', MU_BDS, OMGE_BDS, FRAME_CGCS2000, FIT_DURATION_BDS),
        SYS_QZS: ConstellationConfig('QZSS', 'GPS', MU_GPS, OMGE_GPS, FRAME_WGS84, FIT_DURATION_QZS),
    }


@dataclass
class EphemerisConfig:
    """Engine-wide settings.

    Attributes
    ----------
    constellations : dict
        System ID -> ConstellationConfig
    kepler_tolerance : float
        Stop iterating Kepler's equation once the correction is below this (rad)
    kepler_max_iter : int
        Iteration cap of the Kepler solver
    min_cutover_spacing : float
        Consecutive validity starts closer than this (s) are treated as
        stale duplicates by ``OrbitEphStore.rationalize``
    search_method : SearchMethod
        Default search policy of new stores
    """
    constellations: dict = field(default_factory=default_constellations)
    kepler_tolerance: float = KEPLER_TOLERANCE
    kepler_max_iter: int = KEPLER_MAX_ITER
    min_cutover_spacing: float = MIN_CUTOVER_SPACING
    search_method: SearchMethod = SearchMethod.USER

    def constellation(self, sys: int) -> ConstellationConfig:
        """Constellation settings for a system ID (KeyError if not modelled)"""
        return self.constellations[sys]

    def set_fit_duration(self, sys: int, hours: float):
        """Override the validity window length of one constellation"""
        if hours <= 0:
            raise ValueError(f"Fit duration must be positive: {hours}")
        self.constellations[sys] = replace(self.constellations[sys], fit_duration=float(hours))

    def configure_from_dict(self, config: dict):
        """Configure from dictionary

        Example config:
        {
            'kepler_tolerance': 1e-12,
            'kepler_max_iter': 30,
            'min_cutover_spacing': 120.0,
            'search_method': 'nearest',
            'fit_duration': {'G': 4.0, 'C': 1.0}
        }
        """
        if 'kepler_tolerance' in config:
            self.kepler_tolerance = float(config['kepler_tolerance'])
        if 'kepler_max_iter' in config:
            self.kepler_max_iter = int(config['kepler_max_iter'])
        if 'min_cutover_spacing' in config:
            self.min_cutover_spacing = float(config['min_cutover_spacing'])
        if 'search_method' in config:
            self.search_method = SearchMethod(config['search_method'])
        for key, hours in config.get('fit_duration', {}).items():
            sys = char2sys(key) if isinstance(key, str) else key
            if sys not in self.constellations:
                raise ValueError(f"Unknown constellation in fit_duration: {key}")
            self.set_fit_duration(sys, hours)
        logger.debug(f"Ephemeris configuration updated: {config}")

    def copy(self) -> 'EphemerisConfig':
        return replace(self, constellations=dict(self.constellations))


# Global ephemeris configuration
ephemeris_config = EphemerisConfig()
