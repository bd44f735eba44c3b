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

"""Ephemeris storage, selection, and maintenance"""

import logging
from bisect import bisect_left, bisect_right
from typing import Optional

from ..core.config import EphemerisConfig, SearchMethod, ephemeris_config
from ..core.constants import SYS_KEPLER, sat2id, sat2sys
from ..core.errors import (EphemerisNotFoundError, InvalidEphemerisError,
                           UnsupportedSystemError)
from ..core.time import GNSSTime
from ..orbit.orbit_eph import OrbitEph, Xvt

__all__ = ["OrbitEphStore"]

logger = logging.getLogger(__name__)


class OrbitEphStore:
    """
    Time-indexed collection of broadcast ephemerides.

    Each satellite owns a list of records sorted by reference time (toe),
    searched by bisection. Records returned by lookups are the stored
    objects; they must not be relied upon after the store is modified.

    Parameters
    ----------
    systems : int
        Bitmask of satellite systems accepted by the store (default: all
        systems using the Keplerian broadcast model)
    time_system : str
        Time system of the store bounds and of the search keys
    config : EphemerisConfig, optional
        Engine configuration (default: the global ``ephemeris_config``)

    Attributes
    ----------
    initial_time : GNSSTime or None
        Earliest begin_valid over all records
    final_time : GNSSTime or None
        Latest end_valid over all records

    Examples
    --------
    >>> store = OrbitEphStore()
    >>> store.add_ephemeris(eph)
    >>> xvt = store.sv_xvt(sat, t)
    """

    def __init__(self, systems: int = SYS_KEPLER, time_system: str = 'GPS',
                 config: Optional[EphemerisConfig] = None):
        self.systems = systems
        self.time_system = time_system.upper()
        self.config = config if config is not None else ephemeris_config
        self._search_method = self.config.search_method
        self._timelines: dict[int, list[OrbitEph]] = {}  # sat -> records sorted by toe
        self._keys: dict[int, list[float]] = {}          # sat -> toe in store seconds
        self._nonconvergence = 0
        self.initial_time: Optional[GNSSTime] = None
        self.final_time: Optional[GNSSTime] = None

    # Search method

    @property
    def search_method(self) -> SearchMethod:
        return self._search_method

    @search_method.setter
    def search_method(self, method):
        self._search_method = SearchMethod(method)

    def search_near(self):
        """Select records by closest reference time"""
        self._search_method = SearchMethod.NEAREST

    def search_user(self):
        """Select records whose validity window contains the query time"""
        self._search_method = SearchMethod.USER

    # Helpers

    def _store_time(self, t: GNSSTime) -> GNSSTime:
        if t.time_sys != self.time_system:
            return t.convert_to(self.time_system)
        return t

    def _key(self, t: GNSSTime) -> float:
        return round(self._store_time(t).to_gps_seconds(), 6)

    def accepts(self, sat: int) -> bool:
        """True if the satellite's system is modelled by this store"""
        sys = sat2sys(sat)
        return bool(sys & self.systems) and sys in self.config.constellations

    def _extend_bounds(self, eph: OrbitEph):
        begin = self._store_time(eph.begin_valid)
        end = self._store_time(eph.end_valid)
        if self.initial_time is None or begin < self.initial_time:
            self.initial_time = begin
        if self.final_time is None or end > self.final_time:
            self.final_time = end

    def _recompute_bounds(self):
        self.initial_time = None
        self.final_time = None
        for timeline in self._timelines.values():
            for eph in timeline:
                self._extend_bounds(eph)

    # Insertion

    def add_ephemeris(self, eph: OrbitEph) -> Optional[OrbitEph]:
        """
        Add an ephemeris record to the store.

        A record with the same reference time as a stored one replaces it:
        the later message wins. A record without its own configuration
        adopts the store's one, which then sets its validity window.

        Parameters
        ----------
        eph : OrbitEph
            Fully populated record

        Returns
        -------
        OrbitEph or None
            The stored record, or None if the satellite system is not
            accepted, the record is not loaded, or its elements are invalid
        """
        if not self.accepts(eph.sat):
            logger.warning(f"{sat2id(eph.sat)}: satellite system not handled by this store")
            return None
        if not eph.data_loaded:
            logger.warning(f"{sat2id(eph.sat)}: ephemeris data not loaded, record ignored")
            return None
        try:
            eph.check_elements()
        except InvalidEphemerisError as err:
            logger.warning(f"Invalid ephemeris ignored: {err}")
            return None

        if eph.config is None:
            eph.adjust_validity(self.config)
        else:
            eph.adjust_validity()

        timeline = self._timelines.setdefault(eph.sat, [])
        keys = self._keys.setdefault(eph.sat, [])
        key = self._key(eph.toe)
        idx = bisect_left(keys, key)

        if idx < len(keys) and keys[idx] == key:
            logger.debug(f"{eph.sat_id}: ephemeris at {eph.toe} superseded (iode "
                         f"{timeline[idx].iode} -> {eph.iode})")
            timeline[idx] = eph
            self._recompute_bounds()
        else:
            timeline.insert(idx, eph)
            keys.insert(idx, key)
            self._extend_bounds(eph)

        return eph

    # Lookup

    def find_ephemeris(self, sat: int, t: GNSSTime) -> OrbitEph:
        """
        Find the record applicable at time t under the active search method.

        Raises
        ------
        UnsupportedSystemError
            Satellite system not handled by the store
        EphemerisNotFoundError
            No record satisfies the search method
        """
        if not self.accepts(sat):
            raise UnsupportedSystemError(f"{sat2id(sat)}: satellite system not handled by this store")

        t = self._store_time(t)
        if sat not in self._timelines:
            raise EphemerisNotFoundError(f"No ephemeris for {sat2id(sat)}")

        if self._search_method is SearchMethod.NEAREST:
            eph = self._find_nearest(sat, t)
        else:
            eph = self._find_user(sat, t)

        if eph is None:
            raise EphemerisNotFoundError(
                f"No ephemeris for {sat2id(sat)} at {t} ({self._search_method.value} search)")
        return eph

    def get_ephemeris(self, sat: int, t: GNSSTime) -> Optional[OrbitEph]:
        """Same as ``find_ephemeris`` but returns None when nothing applies"""
        try:
            return self.find_ephemeris(sat, t)
        except (EphemerisNotFoundError, UnsupportedSystemError):
            return None

    def _find_user(self, sat: int, t: GNSSTime) -> Optional[OrbitEph]:
        # begin_valid >= toe, so only records with toe <= t can contain t
        idx = bisect_right(self._keys[sat], self._key(t))
        for eph in reversed(self._timelines[sat][:idx]):
            if eph.is_valid(t):
                return eph
        return None

    def _find_nearest(self, sat: int, t: GNSSTime) -> Optional[OrbitEph]:
        if t < self.initial_time or t > self.final_time:
            return None

        keys = self._keys[sat]
        timeline = self._timelines[sat]
        key = self._key(t)
        idx = bisect_left(keys, key)

        best = None
        min_dt = float('inf')
        for i in (idx - 1, idx):
            if 0 <= i < len(keys):
                dt = abs(keys[i] - key)
                if dt < min_dt:
                    min_dt = dt
                    best = timeline[i]
        return best

    def sv_xvt(self, sat: int, t: GNSSTime) -> Xvt:
        """State of a satellite at time t from the applicable record"""
        xvt = self.find_ephemeris(sat, t).sv_xvt(t)
        if not xvt.converged:
            self._nonconvergence += 1
        return xvt

    def is_healthy(self, sat: int, t: GNSSTime) -> bool:
        """Health of the record applicable at time t"""
        return self.find_ephemeris(sat, t).is_healthy()

    @property
    def nonconvergence_count(self) -> int:
        """Number of ``sv_xvt`` calls whose Kepler solution hit the iteration cap"""
        return self._nonconvergence

    # Maintenance

    def rationalize(self) -> int:
        """
        Remove superseded records.

        A record is dropped when its successor becomes valid less than
        ``min_cutover_spacing`` seconds after it did (including a successor
        that becomes valid first).

        Returns
        -------
        int
            Number of records removed
        """
        spacing = self.config.min_cutover_spacing
        removed = 0

        for sat, timeline in self._timelines.items():
            kept = []
            for eph in timeline:
                while kept and self._supersedes(eph, kept[-1], spacing):
                    old = kept.pop()
                    logger.debug(f"{sat2id(sat)}: {old} superseded by {eph}")
                    removed += 1
                kept.append(eph)
            self._timelines[sat] = kept
            self._keys[sat] = [self._key(eph.toe) for eph in kept]

        if removed:
            self._recompute_bounds()
            logger.info(f"Rationalize removed {removed} superseded ephemerides")
        return removed

    def _supersedes(self, newer: OrbitEph, older: OrbitEph, spacing: float) -> bool:
        # Also true when the newer record opens first, i.e. its window covers the older start
        return (self._store_time(newer.begin_valid)
                - self._store_time(older.begin_valid)) < spacing

    def prune(self, tmin: Optional[GNSSTime] = None, tmax: Optional[GNSSTime] = None) -> int:
        """
        Remove records outside [tmin, tmax].

        Records whose window ends before ``tmin`` or begins after ``tmax``
        are removed; satellites left without records are dropped.

        Returns
        -------
        int
            Number of records removed
        """
        tmin = self._store_time(tmin) if tmin is not None else None
        tmax = self._store_time(tmax) if tmax is not None else None
        removed = 0

        for sat in list(self._timelines.keys()):
            kept = [
                eph for eph in self._timelines[sat]
                if not ((tmin is not None and self._store_time(eph.end_valid) < tmin) or
                        (tmax is not None and self._store_time(eph.begin_valid) > tmax))
            ]
            removed += len(self._timelines[sat]) - len(kept)

            if kept:
                self._timelines[sat] = kept
                self._keys[sat] = [self._key(eph.toe) for eph in kept]
            else:
                del self._timelines[sat]
                del self._keys[sat]

        if removed:
            self._recompute_bounds()
            logger.debug(f"Pruned {removed} ephemerides")
        return removed

    def clear(self):
        """Remove all records and reset the store bounds"""
        self._timelines.clear()
        self._keys.clear()
        self.initial_time = None
        self.final_time = None

    def add_to_list(self, target: list, sat: Optional[int] = None) -> int:
        """
        Append stored records to a list, ordered by reference time.

        Parameters
        ----------
        target : list
            List to extend
        sat : int, optional
            Restrict to one satellite (default: all satellites)

        Returns
        -------
        int
            Number of records appended
        """
        if sat is not None:
            records = list(self._timelines.get(sat, []))
        else:
            pairs = [
                (key, s, eph)
                for s in sorted(self._timelines)
                for key, eph in zip(self._keys[s], self._timelines[s])
            ]
            pairs.sort(key=lambda p: (p[0], p[1]))
            records = [eph for _, _, eph in pairs]

        target.extend(records)
        return len(records)

    # Container protocol

    @property
    def satellites(self) -> list[int]:
        return sorted(self._timelines)

    def size(self) -> int:
        """Total number of stored records"""
        return sum(len(timeline) for timeline in self._timelines.values())

    def __len__(self):
        return self.size()

    def __contains__(self, sat: int) -> bool:
        return sat in self._timelines
