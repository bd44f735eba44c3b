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

"""Core module.

- **Constants**: system IDs, gravitational constants, earth rotation rates,
  reference frames and fit durations of the broadcast orbit models
- **Satellite Numbering**: unified satellite numbers across constellations
- **Time Systems**: ``GNSSTime`` week/time-of-week values for GPS, Galileo
  and BeiDou time
- **Configuration**: ``EphemerisConfig`` and the per-constellation table
- **Errors**: exception hierarchy rooted at ``EphemerisError``

Example Usage:
    >>> from pyeph.core import *
    >>> t = GNSSTime(2300, 345600.0, 'GPS')
    >>> sat = prn2sat(3, SYS_BDS)
    >>> sat2id(sat)
    'C03'
"""

from .constants import *
from .config import *
from .errors import *
from .time import *
