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
PyEph - GNSS Broadcast Ephemeris Library

Orbit records for GPS, Galileo, BeiDou (including GEO satellites) and QZSS
broadcast ephemerides, satellite position, velocity and clock computation,
and a time-indexed ephemeris store.
"""

__version__ = "1.0.0"
__author__ = "PyEph Development Team"
__title__ = "pyeph"
__description__ = "GNSS broadcast ephemeris store and orbit propagation"

from .core import *
from .orbit import *
from .store import *
