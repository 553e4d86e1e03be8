"""
Tests for scheduling/layout.py

Tests greedy column assignment for the day timeline.
"""

import random
import unittest
from datetime import datetime

from salon_agenda.salon_agenda.models import Appointment, AppointmentStatus
from salon_agenda.salon_agenda.scheduling.layout import ColumnPlacement, layout_day


def _appointment(appointment_id, start_hour, start_minute, end_hour, end_minute):
	return Appointment(
		id=appointment_id,
		client_name=f"Cliente {appointment_id}",
		client_phone="5513999999999",
		start=datetime(2024, 6, 11, start_hour, start_minute),
		end=datetime(2024, 6, 11, end_hour, end_minute),
		status=AppointmentStatus.CONFIRMED,
		procedure_id="P1",
	)


class TestLayout(unittest.TestCase):
	"""Tests for layout_day()."""

	def test_empty_day(self):
		self.assertEqual(layout_day([]), {})

	def test_sequential_appointments_share_column(self):
		"""Test that back-to-back appointments stay full width."""
		result = layout_day([
			_appointment("a", 10, 0, 11, 0),
			_appointment("b", 11, 0, 12, 0),
		])

		self.assertEqual(result["a"], ColumnPlacement(column=0, total_columns=1))
		self.assertEqual(result["b"], ColumnPlacement(column=0, total_columns=1))

	def test_overlapping_pair(self):
		"""Test that two overlapping appointments render side by side."""
		result = layout_day([
			_appointment("a", 10, 0, 11, 0),
			_appointment("b", 10, 30, 11, 30),
		])

		self.assertEqual(result["a"], ColumnPlacement(column=0, total_columns=2))
		self.assertEqual(result["b"], ColumnPlacement(column=1, total_columns=2))

	def test_chain_reuses_first_free_column(self):
		"""Test that a later appointment goes back to column 0 once it is free."""
		result = layout_day([
			_appointment("a", 9, 0, 10, 0),
			_appointment("b", 9, 30, 10, 30),
			_appointment("c", 10, 0, 11, 0),
		])

		self.assertEqual(result["a"].column, 0)
		self.assertEqual(result["b"].column, 1)
		self.assertEqual(result["c"].column, 0)
		self.assertEqual({p.total_columns for p in result.values()}, {2})

	def test_total_columns_follows_overlapping_neighbours(self):
		"""Test that total_columns only counts appointments that overlap."""
		result = layout_day([
			_appointment("a", 9, 0, 12, 0),
			_appointment("b", 9, 0, 10, 0),
			_appointment("c", 14, 0, 15, 0),
		])

		self.assertEqual(result["a"].total_columns, 2)
		self.assertEqual(result["b"].total_columns, 2)
		self.assertEqual(result["c"], ColumnPlacement(column=0, total_columns=1))

	def test_deterministic_for_any_input_order(self):
		"""Test that shuffling the input does not change the layout."""
		appointments = [
			_appointment("a", 9, 0, 10, 0),
			_appointment("b", 9, 0, 10, 0),
			_appointment("c", 9, 30, 11, 0),
			_appointment("d", 10, 0, 10, 30),
			_appointment("e", 13, 0, 14, 0),
		]
		expected = layout_day(appointments)

		shuffled = list(appointments)
		random.Random(7).shuffle(shuffled)

		self.assertEqual(layout_day(shuffled), expected)
		self.assertEqual(layout_day(appointments), expected)

	def test_as_dict(self):
		self.assertEqual(ColumnPlacement(column=1, total_columns=3).as_dict(), {"column": 1, "total_columns": 3})
