"""
Tests for store/frappe_store.py

Runs against the Salon DocTypes of a bench site (bench run-tests); skipped
when no Frappe site is connected.
"""

import importlib.util
import unittest
from datetime import datetime


def _site_connected() -> bool:
	if importlib.util.find_spec("frappe") is None:
		return False
	import frappe
	return getattr(frappe.local, "db", None) is not None


@unittest.skipUnless(_site_connected(), "requires a Frappe site")
class TestFrappeDataStore(unittest.TestCase):
	"""Tests for FrappeDataStore."""

	def setUp(self):
		"""Set up test data before each test."""
		import frappe
		from salon_agenda.salon_agenda.store.frappe_store import FrappeDataStore

		self.frappe = frappe
		self.store = FrappeDataStore(ignore_permissions=True)
		self.procedure = self.store.insert("procedures", {
			"name": "Test Corte Store",
			"category": "Test Cabelo",
			"price": 80,
			"duration_minutes": 60,
		})

	def tearDown(self):
		self.frappe.db.rollback()

	def test_insert_maps_fields(self):
		"""Test that id/name mapping round-trips through the DocType."""
		self.assertTrue(self.procedure["id"])
		self.assertEqual(self.procedure["name"], "Test Corte Store")

		from salon_agenda.salon_agenda.store.base import eq
		rows = self.store.query("procedures", [eq("category", "Test Cabelo")])
		self.assertEqual([r["id"] for r in rows], [self.procedure["id"]])

	def test_blockage_day_of_week_round_trip(self):
		"""Test that weekly blockages come back as ints and ranged ones as None."""
		from salon_agenda.salon_agenda.store.base import any_of, eq, gte, lte

		weekly = self.store.insert("blockages", {"day_of_week": 4, "reason": "Test semanal"})
		ranged = self.store.insert("blockages", {
			"start_time": datetime(2030, 1, 10, 13, 0),
			"end_time": datetime(2030, 1, 10, 15, 0),
			"reason": "Test rango",
		})

		rows = self.store.query("blockages", [
			any_of(
				[lte("start_time", datetime(2030, 1, 10, 23, 59)), gte("end_time", datetime(2030, 1, 10, 0, 0))],
				[eq("day_of_week", 4)],
			)
		])
		by_id = {r["id"]: r for r in rows}

		self.assertEqual(str(by_id[weekly["id"]]["day_of_week"]), "4")
		self.assertIsNone(by_id[ranged["id"]]["day_of_week"])

	def test_validation_error_from_controller(self):
		"""Test that a controller rejection surfaces as the core ValidationError."""
		from salon_agenda.salon_agenda.exceptions import ValidationError

		with self.assertRaises(ValidationError):
			self.store.insert("blockages", {"reason": "sem período"})

	def test_update_missing_raises(self):
		from salon_agenda.salon_agenda.exceptions import DataStoreError

		with self.assertRaises(DataStoreError):
			self.store.update("appointments", "AGD-DOES-NOT-EXIST", {"status": "confirmed"})

	def test_delete_missing_is_noop(self):
		self.store.delete("blockages", "BLQ-DOES-NOT-EXIST")
