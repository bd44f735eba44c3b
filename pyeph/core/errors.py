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

"""Exceptions raised by ephemeris records and stores.

Kepler non-convergence has no exception: propagation continues and it is
reported through ``Xvt.converged``, the ``kepler_diagnostics`` counter
and a WARNING log record.
"""

__all__ = ["EphemerisError", "DataNotLoadedError", "EphemerisNotFoundError",
           "UnsupportedSystemError", "InvalidEphemerisError"]


class EphemerisError(Exception):
    """Base class for all pyeph errors."""


class DataNotLoadedError(EphemerisError):
    """Operation requires a fully populated record."""

    def __init__(self, message="Data not loaded"):
        super().__init__(message)


class EphemerisNotFoundError(EphemerisError, LookupError):
    """No record applicable to the requested satellite and time."""


class UnsupportedSystemError(EphemerisError, ValueError):
    """Satellite system is not modelled by this record type or store."""


class InvalidEphemerisError(EphemerisError, ValueError):
    """Orbital elements outside their physical range."""
