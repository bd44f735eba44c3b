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

"""GNSS Time Systems and Conversions"""

from datetime import datetime, timedelta
from typing import Union

from .constants import BDT0, GPS_BDS_OFFSET, GPST0, GST0, WEEK_SECONDS

__all__ = ["GNSSTime", "TIME_SYSTEMS", "time_diff"]

TIME_SYSTEMS = ('GPS', 'GAL', 'BDS')

# GPS week of each system's week zero, and (GPST - system time) in seconds
_WEEK_OFFSET = {'GPS': 0, 'GAL': 1024, 'BDS': 1356}
_SECOND_OFFSET = {'GPS': 0.0, 'GAL': 0.0, 'BDS': GPS_BDS_OFFSET}


class GNSSTime:
    """GNSS Time representation and conversion with type safety

    This class ensures that time systems are not accidentally mixed.
    Subtracting two times yields elapsed seconds; comparison between
    different time systems raises ValueError. Use ``convert_to`` first.
    """

    __slots__ = ('week', 'tow', 'time_sys')

    def __init__(self, week: int = 0, tow: float = 0.0, time_sys: str = 'GPS'):
        """
        Initialize GNSS time

        Parameters:
        -----------
        week : int
            Week number
        tow : float
            Time of week in seconds
        time_sys : str
            Time system ('GPS', 'GAL', 'BDS')
        """
        self.week = int(week)
        self.tow = float(tow)
        self.time_sys = time_sys.upper()

        if self.time_sys not in TIME_SYSTEMS:
            raise ValueError(f"Invalid time system: {time_sys}. Must be one of {list(TIME_SYSTEMS)}")

        # Normalize TOW to [0, 604800)
        if self.tow >= WEEK_SECONDS or self.tow < 0:
            weeks, self.tow = divmod(self.tow, WEEK_SECONDS)
            self.week += int(weeks)

    @classmethod
    def from_datetime(cls, dt, time_sys='GPS'):
        """Create GNSSTime from datetime object"""
        delta = dt - cls._reference_date(time_sys)
        weeks = delta.days // 7
        tow = (delta.days % 7) * 86400 + delta.seconds + delta.microseconds * 1e-6
        return cls(weeks, tow, time_sys)

    @classmethod
    def from_gps_seconds(cls, gps_seconds, time_sys='GPS'):
        """Create GNSSTime from seconds since the time system epoch"""
        week = int(gps_seconds // WEEK_SECONDS)
        tow = gps_seconds - week * WEEK_SECONDS
        return cls(week, tow, time_sys)

    @staticmethod
    def _reference_date(time_sys):
        ref = {'GPS': GPST0, 'GAL': GST0, 'BDS': BDT0}.get(time_sys.upper())
        if ref is None:
            raise ValueError(f"Unknown time system: {time_sys}")
        return datetime(*ref)

    def to_datetime(self):
        """Convert to datetime object"""
        return self._reference_date(self.time_sys) + timedelta(weeks=self.week, seconds=self.tow)

    def to_gps_seconds(self):
        """Convert to seconds since the time system epoch"""
        return self.week * WEEK_SECONDS + self.tow

    def add_seconds(self, seconds: float) -> 'GNSSTime':
        """Add seconds to time"""
        return GNSSTime(self.week, self.tow + seconds, self.time_sys)

    def __add__(self, seconds: float) -> 'GNSSTime':
        """Add seconds using + operator"""
        if isinstance(seconds, (int, float)):
            return self.add_seconds(seconds)
        return NotImplemented

    def __sub__(self, other: Union['GNSSTime', float]) -> Union[float, 'GNSSTime']:
        """Subtract time (elapsed seconds) or seconds (new time)"""
        if isinstance(other, GNSSTime):
            self._check_system(other)
            return (self.week - other.week) * WEEK_SECONDS + (self.tow - other.tow)
        elif isinstance(other, (int, float)):
            return self.add_seconds(-other)
        return NotImplemented

    def _check_system(self, other):
        if self.time_sys != other.time_sys:
            raise ValueError(f"Cannot mix time systems: {self.time_sys} and {other.time_sys}")

    def _key(self, other):
        if not isinstance(other, GNSSTime):
            return None
        self._check_system(other)
        return (self.week, self.tow), (other.week, other.tow)

    def __lt__(self, other: 'GNSSTime') -> bool:
        keys = self._key(other)
        return NotImplemented if keys is None else keys[0] < keys[1]

    def __le__(self, other: 'GNSSTime') -> bool:
        keys = self._key(other)
        return NotImplemented if keys is None else keys[0] <= keys[1]

    def __gt__(self, other: 'GNSSTime') -> bool:
        keys = self._key(other)
        return NotImplemented if keys is None else keys[0] > keys[1]

    def __ge__(self, other: 'GNSSTime') -> bool:
        keys = self._key(other)
        return NotImplemented if keys is None else keys[0] >= keys[1]

    def __eq__(self, other: 'GNSSTime') -> bool:
        """Equality comparison"""
        if not isinstance(other, GNSSTime):
            return NotImplemented
        return self.time_sys == other.time_sys and self.week == other.week and abs(self.tow - other.tow) < 1e-9

    def __hash__(self):
        return hash((self.time_sys, self.week, round(self.tow, 6)))

    def __str__(self):
        return f"{self.time_sys} Week: {self.week}, TOW: {self.tow:.3f}"

    def __repr__(self):
        return f"GNSSTime({self.week}, {self.tow}, '{self.time_sys}')"

    def convert_to(self, target_sys: str) -> 'GNSSTime':
        """Convert to a different time system

        Parameters:
        -----------
        target_sys : str
            Target time system ('GPS', 'GAL', 'BDS')

        Returns:
        --------
        GNSSTime
            Time in target system
        """
        target_sys = target_sys.upper()
        if target_sys not in TIME_SYSTEMS:
            raise ValueError(f"Conversion to {target_sys} not implemented")
        if self.time_sys == target_sys:
            return self

        # Seconds since the GPS epoch, then back into the target scale
        gps_total = ((self.week + _WEEK_OFFSET[self.time_sys]) * WEEK_SECONDS
                     + self.tow + _SECOND_OFFSET[self.time_sys])
        total = gps_total - _SECOND_OFFSET[target_sys]
        week = int(total // WEEK_SECONDS)
        return GNSSTime(week - _WEEK_OFFSET[target_sys], total - week * WEEK_SECONDS, target_sys)

    def copy(self) -> 'GNSSTime':
        """Create a copy of this time instance"""
        return GNSSTime(self.week, self.tow, self.time_sys)


def time_diff(t1, t2):
    """Compute time difference t1 - t2 in seconds, converting t2 if needed"""
    if t1.time_sys != t2.time_sys:
        t2 = t2.convert_to(t1.time_sys)
    return t1 - t2
