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

"""Broadcast orbit record and satellite state computation

One record type covers every constellation using the Keplerian broadcast
model (GPS, Galileo, BeiDou, QZSS). The satellite number selects the
constellation constants from the configuration, and, for BeiDou GEO
satellites, the frame transform.

Example Usage:
    >>> eph = OrbitEph.from_fields(sat=prn2sat(5, SYS_GPS),
    ...                            toe=GNSSTime(2300, 7200.0, 'GPS'),
    ...                            A=5153.6 ** 2, e=0.01, i0=0.96, ...)
    >>> xvt = eph.sv_xvt(GNSSTime(2300, 7500.0, 'GPS'))
    >>> xvt.x, xvt.clkbias
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from ..core.config import ConstellationConfig, EphemerisConfig, ephemeris_config
from ..core.constants import CLIGHT, sat2id, sat2prn, sat2sys
from ..core.errors import (DataNotLoadedError, InvalidEphemerisError,
                           UnsupportedSystemError)
from ..core.time import GNSSTime
from ..logger import LogLevel
from .constellations import frame_transform, is_bds_geo, validity_window
from .kepler import orbit_plane_state

__all__ = ["Xvt", "PropagationTrace", "KeplerDiagnostics", "kepler_diagnostics", "OrbitEph"]

logger = logging.getLogger(__name__)


@dataclass
class Xvt:
    """Satellite state at one instant.

    Attributes
    ----------
    x : np.ndarray
        Position (m)
    v : np.ndarray
        Velocity (m/s)
    clkbias : float
        Clock bias from the clock polynomial (s)
    clkdrift : float
        Clock drift (s/s)
    relcorr : float
        Relativistic clock correction (s), not included in ``clkbias``
    frame : str
        Reference frame of ``x`` and ``v``
    iterations : int
        Kepler solver iterations
    converged : bool
        False when the Kepler solver hit its iteration cap
    """
    x: np.ndarray
    v: np.ndarray
    clkbias: float
    clkdrift: float
    relcorr: float
    frame: str
    iterations: int = 0
    converged: bool = True

    @property
    def clock_correction(self) -> float:
        """Clock bias including the relativistic term (s)"""
        return self.clkbias + self.relcorr


@dataclass
class PropagationTrace:
    """Intermediate quantities of one ``sv_xvt`` evaluation"""
    sat: int
    elapsed: float
    mean_anomaly: float
    ecc_anomaly: float
    true_anomaly: float
    iterations: int
    converged: bool
    radius: float
    arg_latitude: float
    inclination: float
    node_longitude: float
    orbit_plane: np.ndarray
    gk_frame: Optional[np.ndarray] = None


@dataclass
class KeplerDiagnostics:
    """Process-wide Kepler solver counters"""
    solves: int = 0
    nonconverged: int = 0

    def record(self, converged: bool):
        self.solves += 1
        if not converged:
            self.nonconverged += 1

    def reset(self):
        self.solves = 0
        self.nonconverged = 0


kepler_diagnostics = KeplerDiagnostics()


@dataclass(eq=False)
class OrbitEph:
    """Keplerian broadcast ephemeris of one satellite.

    Fields are decoded engineering values (m, rad, s). The validity window
    is computed as soon as ``data_loaded`` is set, either at construction
    or through ``mark_loaded``.

    Attributes
    ----------
    sat : int
        Satellite number
    toe : GNSSTime
        Reference time of the orbital elements; toe, toc and transmit_time
        are converted to the constellation's time scale
    toc : GNSSTime
        Clock reference time (defaults to toe)
    transmit_time : GNSSTime
        Transmission time of the message (defaults to toe)
    A, Adot : float
        Semi-major axis (m) and its rate (m/s)
    deln, dndot : float
        Mean motion correction (rad/s) and its rate (rad/s^2)
    e, i0, idot, omg, OMG0, OMGd, M0 : float
        Eccentricity, inclination and rate, argument of perigee, node
        longitude and rate, mean anomaly
    cuc, cus, crc, crs, cic, cis : float
        Harmonic corrections
    f0, f1, f2 : float
        Clock polynomial
    tgd : dict
        Group delays (s) keyed by frequency combination, e.g. 'L1L2', 'E1E5a'
    health : int
        Decoded health, 0 = healthy
    accuracy : float
        Decoded URA / SISA (m)
    iode, iodc : int
        Issue of data
    """
    sat: int
    toe: GNSSTime
    toc: Optional[GNSSTime] = None
    transmit_time: Optional[GNSSTime] = None
    A: float = 0.0
    Adot: float = 0.0
    deln: float = 0.0
    dndot: float = 0.0
    e: float = 0.0
    i0: float = 0.0
    idot: float = 0.0
    omg: float = 0.0
    OMG0: float = 0.0
    OMGd: float = 0.0
    M0: float = 0.0
    cuc: float = 0.0
    cus: float = 0.0
    crc: float = 0.0
    crs: float = 0.0
    cic: float = 0.0
    cis: float = 0.0
    f0: float = 0.0
    f1: float = 0.0
    f2: float = 0.0
    tgd: dict = field(default_factory=dict)
    health: int = 0
    accuracy: float = 0.0
    iode: int = 0
    iodc: int = 0
    data_loaded: bool = False
    begin_valid: Optional[GNSSTime] = None
    end_valid: Optional[GNSSTime] = None
    config: Optional[EphemerisConfig] = field(default=None, repr=False)

    def __post_init__(self):
        if self.toc is None:
            self.toc = self.toe
        if self.transmit_time is None:
            self.transmit_time = self.toe
        self._align_time_system()
        if self.data_loaded:
            self.adjust_validity()

    def _align_time_system(self):
        # Reference times are kept in the constellation's own time scale
        const = self.ephemeris_config.constellations.get(self.sys)
        time_sys = const.time_sys if const is not None else self.toe.time_sys
        for name in ('toe', 'toc', 'transmit_time'):
            t = getattr(self, name)
            if t.time_sys != time_sys:
                setattr(self, name, t.convert_to(time_sys))

    @classmethod
    def from_fields(cls, sat: int, toe: GNSSTime, **fields) -> 'OrbitEph':
        """Create a fully populated record and compute its validity window"""
        fields['data_loaded'] = True
        return cls(sat=sat, toe=toe, **fields)

    def mark_loaded(self):
        """Flag an incrementally populated record as complete"""
        self.data_loaded = True
        self.adjust_validity()

    # Identity

    @property
    def sys(self) -> int:
        return sat2sys(self.sat)

    @property
    def prn(self) -> int:
        return sat2prn(self.sat)

    @property
    def sat_id(self) -> str:
        return sat2id(self.sat)

    @property
    def is_geo(self) -> bool:
        return is_bds_geo(self.sat)

    @property
    def ephemeris_config(self) -> EphemerisConfig:
        return self.config if self.config is not None else ephemeris_config

    @property
    def constellation(self) -> ConstellationConfig:
        try:
            return self.ephemeris_config.constellation(self.sys)
        except KeyError:
            raise UnsupportedSystemError(
                f"{self.sat_id}: system not modelled by the broadcast orbit") from None

    @property
    def frame(self) -> str:
        return self.constellation.frame

    @property
    def time_sys(self) -> str:
        return self.toe.time_sys

    # Validity and health

    def _require_loaded(self):
        if not self.data_loaded:
            raise DataNotLoadedError(f"{self.sat_id}: ephemeris data not loaded")

    def _record_time(self, t: GNSSTime) -> GNSSTime:
        if t.time_sys != self.toe.time_sys:
            return t.convert_to(self.toe.time_sys)
        return t

    def adjust_validity(self, config: Optional[EphemerisConfig] = None):
        """Compute the validity window from toe, transmit time and fit duration"""
        self._require_loaded()
        if config is not None:
            self.config = config
            self._align_time_system()
        self.begin_valid, self.end_valid = validity_window(
            self.toe, self.transmit_time, self.constellation.fit_seconds)

    def is_valid(self, t: GNSSTime) -> bool:
        """True if begin_valid <= t <= end_valid"""
        self._require_loaded()
        t = self._record_time(t)
        return self.begin_valid <= t <= self.end_valid

    def is_healthy(self) -> bool:
        self._require_loaded()
        return self.health == self.constellation.healthy

    def get_tgd(self, combination: str) -> float:
        """Group delay of a frequency combination (KeyError if not broadcast)"""
        self._require_loaded()
        return self.tgd[combination]

    def check_elements(self):
        """Raise InvalidEphemerisError unless A > 0 and 0 <= e < 1"""
        if not self.A > 0.0:
            raise InvalidEphemerisError(f"{self.sat_id}: semi-major axis must be positive, got {self.A}")
        if not 0.0 <= self.e < 1.0:
            raise InvalidEphemerisError(f"{self.sat_id}: eccentricity out of range, got {self.e}")

    # Clock

    def sv_clock_bias(self, t: GNSSTime) -> float:
        """Clock bias from the clock polynomial, without relativity (s)"""
        self._require_loaded()
        dt = self._record_time(t) - self.toc
        return self.f0 + self.f1 * dt + self.f2 * dt * dt

    def sv_clock_drift(self, t: GNSSTime) -> float:
        """Clock drift (s/s)"""
        self._require_loaded()
        dt = self._record_time(t) - self.toc
        return self.f1 + 2.0 * self.f2 * dt

    def sv_relativity(self, t: GNSSTime) -> float:
        """Relativistic clock correction (s)"""
        return self.sv_xvt(t).relcorr

    # State

    def sv_xvt(self, t: GNSSTime,
               trace: Optional[Callable[[PropagationTrace], None]] = None) -> Xvt:
        """
        Compute satellite position, velocity and clock at time t.

        Parameters
        ----------
        t : GNSSTime
            Time of interest, converted to the record's time system if needed
        trace : callable, optional
            Receives a PropagationTrace with the intermediate quantities

        Returns
        -------
        Xvt
            State in the constellation's reference frame

        Raises
        ------
        DataNotLoadedError
            Record not fully populated
        InvalidEphemerisError
            Semi-major axis or eccentricity out of range
        UnsupportedSystemError
            Satellite system has no broadcast orbit configuration
        """
        self._require_loaded()
        self.check_elements()
        cfg = self.ephemeris_config
        const = self.constellation

        t = self._record_time(t)
        state = orbit_plane_state(self, t - self.toe, const.gm,
                                  cfg.kepler_tolerance, cfg.kepler_max_iter)
        kepler_diagnostics.record(state.converged)
        if not state.converged:
            logger.warning(f"{self.sat_id}: Kepler equation not converged after "
                           f"{state.iterations} iterations at {t}")

        pos, vel, omega, gk = frame_transform(self.sat)(self, state, const)

        dt = t - self.toc
        relcorr = (-2.0 * math.sqrt(const.gm) / CLIGHT ** 2
                   * self.e * math.sqrt(state.A) * math.sin(state.ecc_anomaly))

        if trace is not None or logger.isEnabledFor(LogLevel.TRACE.value):
            info = PropagationTrace(
                sat=self.sat, elapsed=state.elapsed,
                mean_anomaly=state.mean_anomaly, ecc_anomaly=state.ecc_anomaly,
                true_anomaly=state.true_anomaly, iterations=state.iterations,
                converged=state.converged, radius=state.r,
                arg_latitude=state.u, inclination=state.inc,
                node_longitude=omega, orbit_plane=np.array([state.xip, state.yip]),
                gk_frame=gk,
            )
            if trace is not None:
                trace(info)
            logger.trace(f"{self.sat_id} tk={state.elapsed:.3f} M={state.mean_anomaly:.12f} "
                         f"E={state.ecc_anomaly:.12f} iter={state.iterations} "
                         f"r={state.r:.3f} u={state.u:.12f} i={state.inc:.12f} "
                         f"OMG={omega:.12f} gk={gk}")

        return Xvt(
            x=pos, v=vel,
            clkbias=self.f0 + self.f1 * dt + self.f2 * dt * dt,
            clkdrift=self.f1 + 2.0 * self.f2 * dt,
            relcorr=relcorr,
            frame=const.frame,
            iterations=state.iterations,
            converged=state.converged,
        )

    def __str__(self):
        return (f"OrbitEph({self.sat_id}, toe={self.toe}, iode={self.iode}, "
                f"valid=[{self.begin_valid}, {self.end_valid}])")
