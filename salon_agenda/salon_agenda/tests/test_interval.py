"""
Tests for scheduling/interval.py

Tests half-open interval overlap, containment and day helpers.
"""

import unittest
from datetime import date, datetime, time

from salon_agenda.salon_agenda.scheduling.interval import (
	at_hour,
	contains,
	day_bounds,
	minute_of_day,
	overlaps,
	weekday_index,
)


class TestOverlaps(unittest.TestCase):
	"""Tests for overlaps()."""

	def setUp(self):
		self.start = datetime(2024, 6, 11, 10, 0)
		self.end = datetime(2024, 6, 11, 11, 0)

	def test_disjoint_intervals(self):
		"""Test that disjoint intervals do not overlap."""
		self.assertFalse(overlaps(
			self.start, self.end,
			datetime(2024, 6, 11, 12, 0), datetime(2024, 6, 11, 13, 0)
		))

	def test_touching_endpoints_do_not_overlap(self):
		"""Test that a.end == b.start is not an overlap, in both directions."""
		self.assertFalse(overlaps(self.start, self.end, self.end, datetime(2024, 6, 11, 12, 0)))
		self.assertFalse(overlaps(self.end, datetime(2024, 6, 11, 12, 0), self.start, self.end))

	def test_partial_overlap(self):
		"""Test intervals sharing part of their range."""
		self.assertTrue(overlaps(
			self.start, self.end,
			datetime(2024, 6, 11, 10, 30), datetime(2024, 6, 11, 11, 30)
		))

	def test_nested_interval(self):
		"""Test an interval fully inside another."""
		self.assertTrue(overlaps(
			self.start, self.end,
			datetime(2024, 6, 11, 10, 15), datetime(2024, 6, 11, 10, 45)
		))

	def test_one_minute_shared(self):
		"""Test that sharing a single minute counts as overlap."""
		self.assertTrue(overlaps(
			self.start, self.end,
			datetime(2024, 6, 11, 10, 59), datetime(2024, 6, 11, 12, 0)
		))

	def test_symmetry(self):
		"""Test that overlaps(a, b) == overlaps(b, a)."""
		other_start = datetime(2024, 6, 11, 9, 30)
		other_end = datetime(2024, 6, 11, 10, 30)
		self.assertEqual(
			overlaps(self.start, self.end, other_start, other_end),
			overlaps(other_start, other_end, self.start, self.end)
		)


class TestDayHelpers(unittest.TestCase):
	"""Tests for contains() and day helpers."""

	def test_contains_exact_bounds(self):
		"""Test that an interval contains itself."""
		start = datetime(2024, 6, 11, 10, 0)
		end = datetime(2024, 6, 11, 18, 0)
		self.assertTrue(contains(start, end, start, end))

	def test_contains_rejects_partial(self):
		"""Test that a shorter outer interval does not contain the inner one."""
		self.assertFalse(contains(
			datetime(2024, 6, 11, 10, 0), datetime(2024, 6, 11, 17, 59),
			datetime(2024, 6, 11, 10, 0), datetime(2024, 6, 11, 18, 0)
		))

	def test_weekday_index_sunday_is_zero(self):
		"""Test the Sunday=0 .. Saturday=6 convention."""
		self.assertEqual(weekday_index(date(2024, 6, 16)), 0)  # domingo
		self.assertEqual(weekday_index(date(2024, 6, 10)), 1)  # lunes
		self.assertEqual(weekday_index(date(2024, 6, 15)), 6)  # sábado

	def test_at_hour(self):
		"""Test building datetimes from hour and minute."""
		self.assertEqual(at_hour(date(2024, 6, 11), 18, 1), datetime(2024, 6, 11, 18, 1))
		self.assertEqual(at_hour(date(2024, 6, 11), 24), datetime(2024, 6, 12, 0, 0))

	def test_day_bounds(self):
		"""Test first and last instant of a day."""
		start, end = day_bounds(date(2024, 6, 11))
		self.assertEqual(start, datetime(2024, 6, 11, 0, 0))
		self.assertEqual(end, datetime.combine(date(2024, 6, 11), time.max))

	def test_minute_of_day(self):
		self.assertEqual(minute_of_day(datetime(2024, 6, 11, 13, 45)), 13 * 60 + 45)
