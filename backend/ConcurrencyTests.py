#!/usr/bin/env python3
# Overview: Standalone concurrency test runner for the booking critical section.

"""
Scripted concurrency tests for the booking engine.

Many threads race for the same staff member and time against a file-backed
SQLite database; exactly one may win.

Run with:
    python ConcurrencyTests.py
"""
import os
import sys
import tempfile
import threading
import unittest
from datetime import date, datetime

sys.path.insert(0, os.path.dirname(__file__))

from agenda import create_app
from agenda.extensions import db
from agenda.models import Store, Staff, Service, Appointment
from agenda.services import booking_service, working_hours_service
from agenda.validation import SchedulingConflictError


MONDAY = date(2030, 1, 7)
NOW = datetime(2030, 1, 7, 6, 0)


class ConcurrencyTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()

            store = Store(slug="concurrency-store", name="Concurrency Store", timezone="Europe/Lisbon")
            db.session.add(store)
            db.session.commit()
            self.store_slug = store.slug

            staff = Staff(store_id=store.id, name="Concurrent Staff")
            service = Service(store_id=store.id, name="Concurrent Cut", duration_minutes=30)
            db.session.add_all([staff, service])
            db.session.commit()
            self.staff_id = staff.id
            self.service_id = service.id

            working_hours_service.set_day_shifts(
                self.store_slug,
                self.staff_id,
                0,
                [{"is_open": True, "start": "09:00", "end": "18:00"}],
            )

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _race(self, time_labels):
        results = []
        lock = threading.Lock()
        start = threading.Barrier(len(time_labels))

        def worker(index, label):
            with self.app.app_context():
                try:
                    start.wait()
                    booking_service.create_booking(
                        self.store_slug,
                        self.staff_id,
                        self.service_id,
                        MONDAY.isoformat(),
                        label,
                        f"Customer {index}",
                        "912345678",
                        now=NOW,
                    )
                    with lock:
                        results.append("booked")
                except Exception as exc:
                    with lock:
                        results.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(i, label)) for i, label in enumerate(time_labels)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results

    def _confirmed_count(self):
        with self.app.app_context():
            return db.session.query(Appointment).filter_by(status="confirmed").count()

    def test_same_slot_race_has_one_winner(self):
        results = self._race(["10:00"] * 8)

        booked = [r for r in results if r == "booked"]
        unexpected = [r for r in results if r != "booked" and not isinstance(r, SchedulingConflictError)]

        self.assertEqual(len(booked), 1)
        self.assertFalse(unexpected)
        self.assertEqual(self._confirmed_count(), 1)

    def test_overlapping_slots_race_has_one_winner(self):
        # 10:00-10:30 and 10:15-10:45 share a quarter hour
        results = self._race(["10:00", "10:15", "10:00", "10:15"])

        self.assertEqual(sum(1 for r in results if r == "booked"), 1)
        self.assertEqual(self._confirmed_count(), 1)

    def test_disjoint_slots_all_succeed(self):
        # Each loser retries from fresh state; three racers fit the retry budget
        results = self._race(["10:00", "10:30", "11:00"])

        self.assertEqual(results.count("booked"), 3)
        self.assertEqual(self._confirmed_count(), 3)


if __name__ == "__main__":
    unittest.main(verbosity=2)
