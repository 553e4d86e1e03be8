"""
Tests for notifications/

Tests message texts, wa.me links, recipient resolution, the log channel
and the channel factory.
"""

import unittest
from datetime import datetime
from urllib.parse import unquote

from salon_agenda.salon_agenda.models import Appointment, AppointmentStatus, Procedure
from salon_agenda.salon_agenda.notifications.base import Notification, NotificationError, NotificationKind
from salon_agenda.salon_agenda.notifications.factory import get_channel
from salon_agenda.salon_agenda.notifications.log import LogChannel
from salon_agenda.salon_agenda.notifications.messages import (
	build_message,
	build_whatsapp_link,
	normalize_phone,
	resolve_recipient,
)

PROCEDURE = Procedure(id="P1", name="Corte", category="Cabelo", price=80, duration_minutes=60)


def _notification(kind, client_phone="+55 (13) 99999-0000"):
	appointment = Appointment(
		id="A1",
		client_name="Ana",
		client_phone=client_phone,
		start=datetime(2024, 6, 11, 14, 30),
		end=datetime(2024, 6, 11, 15, 30),
		status=AppointmentStatus.CONFIRMED,
		procedure_id="P1",
	)
	return Notification(kind=kind, appointment=appointment, procedure=PROCEDURE)


class TestMessages(unittest.TestCase):
	"""Tests for notifications/messages.py."""

	def test_normalize_phone(self):
		self.assertEqual(normalize_phone("+55 (13) 9975-3141"), "551399753141")
		self.assertEqual(normalize_phone(None), "")

	def test_confirmation_message(self):
		"""Test the confirmation text for the client."""
		message = build_message(_notification(NotificationKind.CONFIRMATION))

		self.assertTrue(message.startswith("*AGENDAMENTO CONFIRMADO!*"))
		self.assertIn("Ana", message)
		self.assertIn("*Corte*", message)
		self.assertIn("11/06", message)
		self.assertIn("14:30", message)

	def test_adjustment_message(self):
		message = build_message(_notification(NotificationKind.ADJUSTMENT))
		self.assertTrue(message.startswith("*AJUSTE DE HORARIO*"))

	def test_new_request_message_with_manage_url(self):
		"""Test the owner text with the desk link."""
		message = build_message(
			_notification(NotificationKind.NEW_REQUEST),
			manage_url="https://salao.example/app/salon-appointment/A1"
		)

		self.assertIn("NOVA SOLICITACAO", message)
		self.assertIn("- Cliente: Ana", message)
		self.assertIn("https://salao.example/app/salon-appointment/A1", message)

	def test_whatsapp_link(self):
		"""Test that the link carries the digits-only phone and the encoded text."""
		url = build_whatsapp_link("+55 13 99999-0000", "Olá *Ana*!\nTudo certo")

		self.assertTrue(url.startswith("https://wa.me/5513999990000?text="))
		self.assertEqual(unquote(url.split("?text=", 1)[1]), "Olá *Ana*!\nTudo certo")

	def test_resolve_recipient(self):
		"""Test owner for new requests, client otherwise."""
		self.assertEqual(
			resolve_recipient(_notification(NotificationKind.NEW_REQUEST), "+55 13 98888-7777"),
			"5513988887777"
		)
		self.assertEqual(
			resolve_recipient(_notification(NotificationKind.CONFIRMATION), "+55 13 98888-7777"),
			"5513999990000"
		)


class TestChannels(unittest.TestCase):
	"""Tests for LogChannel and get_channel()."""

	def test_log_channel_logs_link(self):
		channel = LogChannel()

		with self.assertLogs("salon_agenda", level="INFO") as logs:
			result = channel.send(_notification(NotificationKind.CONFIRMATION))

		self.assertEqual(result["recipient"], "5513999990000")
		self.assertTrue(result["url"].startswith("https://wa.me/5513999990000"))
		self.assertIn("A1", logs.output[0])

	def test_log_channel_without_recipient(self):
		"""Test that a missing phone raises NotificationError."""
		with self.assertRaises(NotificationError):
			LogChannel().send(_notification(NotificationKind.NEW_REQUEST))

		with self.assertRaises(NotificationError):
			LogChannel().send(_notification(NotificationKind.CONFIRMATION, client_phone="Manual"))

	def test_factory(self):
		channel = get_channel("log", owner_phone="5513988887777")
		self.assertIsInstance(channel, LogChannel)
		self.assertEqual(channel.owner_phone, "5513988887777")

	def test_factory_unknown_channel(self):
		with self.assertRaises(ValueError):
			get_channel("sms")
