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


"""
Orbit propagation module.

Modules
-------
kepler : module
    Kepler equation solver and the shared in-plane propagation
rotation : module
    Frame rotation matrices
constellations : module
    Accuracy decoding, validity window and frame transform per constellation
orbit_eph : module
    ``OrbitEph`` broadcast record and ``Xvt`` state

Usage Examples
--------------
    >>> from pyeph.orbit import OrbitEph
    >>> eph = OrbitEph.from_fields(sat=1, toe=GNSSTime(2300, 0.0), A=5153.6 ** 2, e=0.01)
    >>> xvt = eph.sv_xvt(GNSSTime(2300, 600.0))
    >>> print(f"Satellite position: {xvt.x} m")
"""

from .constellations import *
from .kepler import *
from .orbit_eph import *
from .rotation import *
