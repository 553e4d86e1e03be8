"""
Tests for store/memory.py

Tests filtering, OR groups, ordering, write errors and the change feed of
the in-memory backend.
"""

import unittest
from datetime import datetime

from salon_agenda.salon_agenda.exceptions import DataStoreError
from salon_agenda.salon_agenda.store.base import Filter, any_of, eq, gte, lte, neq
from salon_agenda.salon_agenda.store.memory import MemoryDataStore


class TestMemoryDataStore(unittest.TestCase):
	"""Tests for MemoryDataStore."""

	def setUp(self):
		self.store = MemoryDataStore({
			"procedures": [
				{"id": "P1", "name": "Corte", "category": "Cabelo", "price": 80},
				{"id": "P2", "name": "Escova", "category": "Cabelo", "price": 50},
				{"id": "P3", "name": "Manicure", "category": "Unhas", "price": 40},
				{"id": "P4", "name": "Avaliação", "category": None, "price": 0},
			],
		})

	def test_insert_generates_id(self):
		record = self.store.insert("blockages", {"day_of_week": 1})
		self.assertTrue(record["id"])
		self.assertEqual(self.store.query("blockages")[0]["id"], record["id"])

	def test_filters_are_anded(self):
		rows = self.store.query("procedures", [eq("category", "Cabelo"), lte("price", 60)])
		self.assertEqual([r["id"] for r in rows], ["P2"])

	def test_neq_and_strict_operators(self):
		rows = self.store.query("procedures", [neq("category", "Cabelo"), Filter("price", ">", 0)])
		self.assertEqual([r["id"] for r in rows], ["P3"])

	def test_ordering_comparisons_against_null_never_match(self):
		"""Test that >= / <= against a missing value is false."""
		self.store.insert("blockages", {"day_of_week": 2, "start_time": None})
		rows = self.store.query("blockages", [gte("start_time", datetime(2024, 1, 1))])
		self.assertEqual(rows, [])

	def test_iso_strings_stored_as_datetimes(self):
		"""Test that ISO-8601 date fields are normalised on insert and update."""
		record = self.store.insert("appointments", {
			"start_time": "2024-06-11T10:00:00",
			"end_time": "2024-06-11 11:00:00",
			"status": "confirmed",
		})
		self.assertEqual(record["start_time"], datetime(2024, 6, 11, 10, 0))

		rows = self.store.query("appointments", [gte("start_time", datetime(2024, 6, 11))])
		self.assertEqual([r["id"] for r in rows], [record["id"]])

		self.store.update("appointments", record["id"], {"end_time": "2024-06-11T11:30:00"})
		rows = self.store.query("appointments", [lte("end_time", "2024-06-11T11:30:00")])
		self.assertEqual(rows[0]["end_time"], datetime(2024, 6, 11, 11, 30))

	def test_incomparable_values_raise_store_error(self):
		"""Test that mismatched types in an ordering filter become DataStoreError."""
		with self.assertRaises(DataStoreError):
			self.store.query("procedures", [gte("price", "cheap")])

	def test_any_of(self):
		"""Test OR between AND groups."""
		rows = self.store.query("procedures", [
			any_of(
				[eq("category", "Unhas")],
				[eq("category", "Cabelo"), gte("price", 80)],
			)
		], order_by=[("id", True)])

		self.assertEqual([r["id"] for r in rows], ["P1", "P3"])

	def test_order_by_with_nulls_last(self):
		"""Test multi-key ordering with missing values last."""
		rows = self.store.query("procedures", order_by=[("category", True), ("name", True)])
		self.assertEqual([r["id"] for r in rows], ["P1", "P2", "P3", "P4"])

		rows = self.store.query("procedures", order_by=[("price", False)])
		self.assertEqual([r["id"] for r in rows], ["P1", "P2", "P3", "P4"])

	def test_query_returns_copies(self):
		rows = self.store.query("procedures", [eq("id", "P1")])
		rows[0]["price"] = 1
		self.assertEqual(self.store.query("procedures", [eq("id", "P1")])[0]["price"], 80)

	def test_write_errors(self):
		"""Test duplicate ids, unknown entities and updates of missing records."""
		with self.assertRaises(DataStoreError):
			self.store.insert("procedures", {"id": "P1", "name": "Outro"})
		with self.assertRaises(DataStoreError):
			self.store.query("clients")
		with self.assertRaises(DataStoreError):
			self.store.update("procedures", "P99", {"price": 10})

	def test_update_and_delete(self):
		self.store.update("procedures", "P1", {"price": 90})
		self.assertEqual(self.store.query("procedures", [eq("id", "P1")])[0]["price"], 90)

		self.store.delete("procedures", "P1")
		self.store.delete("procedures", "P1")
		self.assertEqual(self.store.query("procedures", [eq("id", "P1")]), [])

	def test_invalid_operator(self):
		with self.assertRaises(ValueError):
			Filter("price", "LIKE", "%")

	def test_subscribe(self):
		"""Test that listeners fire per entity and a failing listener is logged."""
		calls = []

		def broken():
			raise RuntimeError("listener bug")

		self.store.subscribe("blockages", broken)
		unsubscribe = self.store.subscribe("blockages", lambda: calls.append("blockages"))
		self.store.subscribe("procedures", lambda: calls.append("procedures"))

		with self.assertLogs("salon_agenda", level="ERROR"):
			self.store.insert("blockages", {"day_of_week": 3})

		self.assertEqual(calls, ["blockages"])

		unsubscribe()
		self.store.delete("blockages", "missing")
		self.store.update("procedures", "P2", {"price": 55})

		self.assertEqual(calls, ["blockages", "procedures"])
