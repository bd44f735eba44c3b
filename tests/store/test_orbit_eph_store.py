#!/usr/bin/env python3
"""Test suite for the ephemeris store"""

import unittest
import numpy as np

from pyeph.core.config import EphemerisConfig, SearchMethod
from pyeph.core.constants import SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS, prn2sat
from pyeph.core.errors import EphemerisNotFoundError, UnsupportedSystemError
from pyeph.core.time import GNSSTime
from pyeph.orbit.orbit_eph import OrbitEph
from pyeph.store.orbit_eph_store import OrbitEphStore

WEEK = 2300
G05 = prn2sat(5, SYS_GPS)
G07 = prn2sat(7, SYS_GPS)


def gpst(tow):
    return GNSSTime(WEEK, tow, 'GPS')


def make_eph(sat=G05, toe=None, iode=0, **fields):
    """Loaded record with typical orbital elements"""
    params = dict(
        A=5153.6 ** 2, e=0.01, i0=0.96, OMG0=1.0, omg=0.5, M0=0.3,
        deln=4.5e-9, OMGd=-8.0e-9, f0=1.0e-4, iode=iode,
    )
    params.update(fields)
    return OrbitEph.from_fields(sat, toe if toe is not None else gpst(7200.0), **params)


def hourly_store(**kwargs):
    """Three GPS records one hour apart (toe 7200, 10800, 14400)"""
    store = OrbitEphStore(**kwargs)
    ephs = [store.add_ephemeris(make_eph(toe=gpst(7200.0 + 3600.0 * k), iode=k + 1))
            for k in range(3)]
    return store, ephs


class TestAddEphemeris(unittest.TestCase):
    """Test insertion and sanity checks"""

    def test_add_returns_stored_record(self):
        store = OrbitEphStore()
        eph = make_eph()
        self.assertIs(store.add_ephemeris(eph), eph)
        self.assertEqual(len(store), 1)
        self.assertIn(G05, store)
        self.assertEqual(store.satellites, [G05])

    def test_reject_unsupported_system(self):
        store = OrbitEphStore()
        glo = OrbitEph(sat=prn2sat(1, SYS_GLO), toe=gpst(7200.0), A=2.55e7)
        glo.data_loaded = True
        self.assertIsNone(store.add_ephemeris(glo))

        gps_only = OrbitEphStore(systems=SYS_GPS)
        gal = make_eph(sat=prn2sat(11, SYS_GAL), toe=GNSSTime(1276, 7200.0, 'GAL'))
        with self.assertLogs('pyeph.store.orbit_eph_store', level='WARNING'):
            self.assertIsNone(gps_only.add_ephemeris(gal))
        self.assertEqual(len(gps_only), 0)

    def test_reject_not_loaded(self):
        store = OrbitEphStore()
        eph = OrbitEph(sat=G05, toe=gpst(7200.0), A=5153.6 ** 2, e=0.01)
        self.assertIsNone(store.add_ephemeris(eph))
        self.assertEqual(len(store), 0)

    def test_reject_invalid_elements(self):
        store = OrbitEphStore()
        self.assertIsNone(store.add_ephemeris(make_eph(e=1.5)))
        self.assertIsNone(store.add_ephemeris(make_eph(A=-1.0)))
        self.assertEqual(len(store), 0)

    def test_same_reference_time_supersedes(self):
        store = OrbitEphStore()
        store.add_ephemeris(make_eph(iode=1))
        newer = store.add_ephemeris(make_eph(iode=2))

        self.assertEqual(len(store), 1)
        self.assertIs(store.find_ephemeris(G05, gpst(7500.0)), newer)

        records = []
        self.assertEqual(store.add_to_list(records, G05), 1)
        self.assertEqual(records[0].iode, 2)

    def test_ordering(self):
        store = OrbitEphStore()
        for tow in (14400.0, 7200.0, 21600.0, 10800.0, 18000.0):
            store.add_ephemeris(make_eph(toe=gpst(tow)))

        records = []
        self.assertEqual(store.add_to_list(records, G05), 5)
        self.assertEqual([eph.toe.tow for eph in records], [7200.0, 10800.0, 14400.0, 18000.0, 21600.0])

    def test_bounds(self):
        store, _ = hourly_store()
        self.assertEqual(store.initial_time, gpst(7200.0))
        self.assertEqual(store.final_time, gpst(21600.0))

    def test_store_config_sets_validity(self):
        config = EphemerisConfig()
        config.set_fit_duration(SYS_GPS, 4.0)
        store = OrbitEphStore(config=config)
        eph = store.add_ephemeris(make_eph())
        self.assertEqual(eph.end_valid, gpst(7200.0 + 14400.0))
        self.assertIs(eph.config, config)

    def test_record_config_kept(self):
        own = EphemerisConfig()
        own.set_fit_duration(SYS_GPS, 3.0)
        store_config = EphemerisConfig()
        store_config.set_fit_duration(SYS_GPS, 4.0)
        store = OrbitEphStore(config=store_config)

        eph = store.add_ephemeris(make_eph(config=own))
        self.assertIs(eph.config, own)
        self.assertEqual(eph.end_valid, gpst(7200.0 + 10800.0))
        self.assertEqual(store.final_time, gpst(7200.0 + 10800.0))

    def test_beidou_record_in_gps_store(self):
        store = OrbitEphStore()
        sat = prn2sat(30, SYS_BDS)
        eph = store.add_ephemeris(make_eph(sat=sat, toe=GNSSTime(944, 7200.0, 'BDS')))

        self.assertEqual(store.initial_time, gpst(7214.0))
        self.assertIs(store.find_ephemeris(sat, gpst(7214.0 + 1800.0)), eph)
        self.assertIs(store.find_ephemeris(sat, GNSSTime(944, 9000.0, 'BDS')), eph)


class TestFindEphemeris(unittest.TestCase):
    """Test USER and NEAREST search"""

    def test_user_search_midpoint(self):
        store, ephs = hourly_store()
        self.assertIs(store.search_method, SearchMethod.USER)
        self.assertIs(store.find_ephemeris(G05, gpst(12600.0)), ephs[1])
        self.assertIs(store.find_ephemeris(G05, gpst(7200.0)), ephs[0])
        self.assertIs(store.find_ephemeris(G05, gpst(21600.0)), ephs[2])

    def test_user_search_past_end(self):
        store, ephs = hourly_store()
        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, ephs[2].end_valid + 1.0)
        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, gpst(7199.0))

    def test_user_search_respects_transmit_time(self):
        store = OrbitEphStore()
        first = store.add_ephemeris(make_eph(toe=gpst(3600.0)))
        second = store.add_ephemeris(make_eph(toe=gpst(7200.0), transmit_time=gpst(7300.0)))
        self.assertIs(store.find_ephemeris(G05, gpst(7250.0)), first)
        self.assertIs(store.find_ephemeris(G05, gpst(7300.0)), second)

    def test_nearest_search(self):
        store, ephs = hourly_store()
        store.search_near()
        self.assertIs(store.search_method, SearchMethod.NEAREST)
        self.assertIs(store.find_ephemeris(G05, gpst(12000.0)), ephs[1])
        # Ties go to the earlier record
        self.assertIs(store.find_ephemeris(G05, gpst(12600.0)), ephs[1])
        self.assertIs(store.find_ephemeris(G05, gpst(20000.0)), ephs[2])

        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, gpst(7199.0))
        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, gpst(21601.0))

    def test_nearest_ignores_window(self):
        store = OrbitEphStore()
        store.add_ephemeris(make_eph(toe=gpst(7200.0)))
        late = store.add_ephemeris(make_eph(toe=gpst(36000.0)))

        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, gpst(25000.0))

        store.search_method = 'nearest'
        self.assertIs(store.find_ephemeris(G05, gpst(25000.0)), late)

        store.search_user()
        self.assertIs(store.search_method, SearchMethod.USER)

    def test_default_search_method_from_config(self):
        store = OrbitEphStore(config=EphemerisConfig(search_method=SearchMethod.NEAREST))
        self.assertIs(store.search_method, SearchMethod.NEAREST)

    def test_unknown_satellite(self):
        store, _ = hourly_store()
        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G07, gpst(12600.0))
        self.assertIsNone(store.get_ephemeris(G07, gpst(12600.0)))

    def test_unsupported_system(self):
        store, _ = hourly_store()
        with self.assertRaises(UnsupportedSystemError):
            store.find_ephemeris(prn2sat(1, SYS_GLO), gpst(12600.0))
        self.assertIsNone(store.get_ephemeris(prn2sat(1, SYS_GLO), gpst(12600.0)))

    def test_sv_xvt(self):
        store, ephs = hourly_store()
        t = gpst(12600.0)
        xvt = store.sv_xvt(G05, t)
        np.testing.assert_allclose(xvt.x, ephs[1].sv_xvt(t).x)
        self.assertTrue(store.is_healthy(G05, t))
        self.assertEqual(store.nonconvergence_count, 0)

    def test_nonconvergence_count(self):
        store, _ = hourly_store(config=EphemerisConfig(kepler_max_iter=1))
        with self.assertLogs('pyeph.orbit.orbit_eph', level='WARNING'):
            xvt = store.sv_xvt(G05, gpst(12600.0))
        self.assertFalse(xvt.converged)
        self.assertEqual(store.nonconvergence_count, 1)


class TestMaintenance(unittest.TestCase):
    """Test rationalize, prune, clear and add_to_list"""

    def test_rationalize_close_cutovers(self):
        store = OrbitEphStore()
        store.add_ephemeris(make_eph(toe=gpst(7200.0), iode=1))
        kept = store.add_ephemeris(make_eph(toe=gpst(7230.0), iode=2))
        store.add_ephemeris(make_eph(toe=gpst(10800.0), iode=3))

        self.assertEqual(store.rationalize(), 1)
        records = []
        store.add_to_list(records, G05)
        self.assertEqual([eph.iode for eph in records], [2, 3])
        self.assertIs(store.find_ephemeris(G05, gpst(7500.0)), kept)
        self.assertEqual(store.initial_time, gpst(7230.0))

    def test_rationalize_late_transmission(self):
        """A record broadcast after its successor opened is superseded"""
        store = OrbitEphStore()
        store.add_ephemeris(make_eph(toe=gpst(7200.0), transmit_time=gpst(11000.0), iode=1))
        store.add_ephemeris(make_eph(toe=gpst(10800.0), iode=2))

        self.assertEqual(store.rationalize(), 1)
        records = []
        store.add_to_list(records)
        self.assertEqual([eph.iode for eph in records], [2])

    def test_rationalize_keeps_regular_timeline(self):
        store, _ = hourly_store()
        self.assertEqual(store.rationalize(), 0)
        self.assertEqual(len(store), 3)

    def test_prune(self):
        store, ephs = hourly_store()
        self.assertEqual(store.prune(tmin=gpst(16000.0)), 1)
        self.assertEqual(store.initial_time, gpst(10800.0))

        self.assertEqual(store.prune(tmax=gpst(12000.0)), 1)
        records = []
        store.add_to_list(records)
        self.assertEqual(records, [ephs[1]])
        self.assertEqual(store.final_time, gpst(18000.0))

    def test_prune_drops_empty_satellite(self):
        store, _ = hourly_store()
        store.add_ephemeris(make_eph(sat=G07, toe=gpst(30000.0)))
        self.assertEqual(store.prune(tmin=gpst(25000.0)), 3)
        self.assertNotIn(G05, store)
        self.assertEqual(store.satellites, [G07])

    def test_clear(self):
        store, _ = hourly_store()
        store.clear()
        self.assertEqual(len(store), 0)
        self.assertIsNone(store.initial_time)
        self.assertIsNone(store.final_time)
        with self.assertRaises(EphemerisNotFoundError):
            store.find_ephemeris(G05, gpst(12600.0))

    def test_add_to_list_all_satellites(self):
        store = OrbitEphStore()
        store.add_ephemeris(make_eph(sat=G07, toe=gpst(10800.0)))
        store.add_ephemeris(make_eph(sat=G05, toe=gpst(14400.0)))
        store.add_ephemeris(make_eph(sat=G05, toe=gpst(7200.0)))

        records = [None]
        self.assertEqual(store.add_to_list(records), 3)
        self.assertIsNone(records[0])
        self.assertEqual([(eph.sat, eph.toe.tow) for eph in records[1:]],
                         [(G05, 7200.0), (G07, 10800.0), (G05, 14400.0)])
        self.assertEqual(store.size(), 3)


if __name__ == '__main__':
    unittest.main()
