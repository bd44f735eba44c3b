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

"""Satellite numbers used as ephemeris keys.

The store keys its timelines by one integer per satellite, unique across
constellations. Each constellation's PRNs occupy a block of consecutive
numbers; ``sat_to_sys`` recovers the system that selects the orbit model.
"""

from typing import NamedTuple, Optional

# System IDs (duplicated from constants.py to avoid circular import)
SYS_NONE = 0x00
SYS_GPS = 0x01
SYS_GLO = 0x02
SYS_GAL = 0x04
SYS_BDS = 0x08
SYS_QZS = 0x10
SYS_SBS = 0x20
SYS_IRN = 0x40


class PrnBlock(NamedTuple):
    """PRNs first_prn..last_prn of one system, numbered from first_sat"""
    sys: int
    first_prn: int
    last_prn: int
    first_sat: int

    @property
    def last_sat(self) -> int:
        return self.first_sat + self.last_prn - self.first_prn


PRN_BLOCKS = (
    PrnBlock(SYS_GPS, 1, 32, 1),
    PrnBlock(SYS_SBS, 120, 151, 33),
    PrnBlock(SYS_GLO, 1, 24, 65),
    PrnBlock(SYS_GAL, 1, 36, 97),
    PrnBlock(SYS_SBS, 152, 159, 133),
    PrnBlock(SYS_BDS, 1, 63, 141),     # GEO, IGSO and MEO share one block
    PrnBlock(SYS_QZS, 1, 7, 210),
    PrnBlock(SYS_IRN, 1, 14, 230),
)


def _block_of(sat: int) -> Optional[PrnBlock]:
    for block in PRN_BLOCKS:
        if block.first_sat <= sat <= block.last_sat:
            return block
    return None


def sat_to_sys(sat: int) -> int:
    """System ID of a satellite number, SYS_NONE if unassigned"""
    block = _block_of(sat)
    return block.sys if block is not None else SYS_NONE


def sat_to_prn(sat: int) -> int:
    """PRN of a satellite number, 0 if unassigned

    Examples
    --------
    >>> sat_to_prn(143)  # C03
    3
    """
    block = _block_of(sat)
    if block is None:
        return 0
    return block.first_prn + sat - block.first_sat


def prn_to_sat(sys: int, prn: int) -> int:
    """Satellite number of a system PRN, 0 if the PRN is out of range

    Examples
    --------
    >>> prn_to_sat(SYS_GAL, 11)
    107
    """
    for block in PRN_BLOCKS:
        if block.sys == sys and block.first_prn <= prn <= block.last_prn:
            return block.first_sat + prn - block.first_prn
    return 0
