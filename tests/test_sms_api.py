from __future__ import annotations

import unittest
from unittest import mock

import requests

from services.app_config import ApiConfig
from services.calendar_range import CalendarDate, DateRange
from services.message_filters import SENT_SMS_SCHEMA
from services.sms_api import (
    AUTH_REQUIRED,
    CONNECTION_ERROR,
    GENERIC_ERROR,
    TIMEOUT_ERROR,
    SmsApiClient,
    SmsApiError,
)


RANGE = DateRange(start=CalendarDate(1, 1, 2025), end=CalendarDate(8, 1, 2025))


def _response(body, status: int = 200):
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


class SmsApiClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = SmsApiClient(
            ApiConfig(base_url="https://api.example.test/capi/mobile/", token="tok", timeout_s=5.0),
            session=self.session,
        )

    def test_sent_messages_page(self) -> None:
        self.session.get.return_value = _response(
            {
                "success": True,
                "data": {
                    "messages": [
                        {"id": 1, "table_name": "sms_2025_01", "mobile": "98765", "status_code": "delivered"},
                        {"id": 1, "table_name": "sms_2024_12", "mobile": "98766", "status_code": "failed"},
                    ],
                    "pagination": {"current_page": 1, "total_pages": 3, "total_records": 55},
                },
            }
        )
        filters = SENT_SMS_SCHEMA.defaults(RANGE).with_value("delivery_status", "failed")
        page = self.client.get_sent_messages(filters, 1, 20)

        self.assertEqual(page.page_number, 1)
        self.assertTrue(page.has_more)
        self.assertEqual(page.total_records, 55)
        self.assertEqual([r.key for r in page.items], [("sms_2025_01", "1"), ("sms_2024_12", "1")])

        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://api.example.test/capi/mobile/sent-sms/messages")
        self.assertEqual(kwargs["params"]["page"], 1)
        self.assertEqual(kwargs["params"]["per_page"], 20)
        self.assertEqual(kwargs["params"]["delivery_status"], "failed")
        self.assertEqual(kwargs["params"]["start_date"], "2025-01-01")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_explicit_has_more_wins(self) -> None:
        self.session.get.return_value = _response(
            {"success": True, "data": {"messages": [], "pagination": {"current_page": 1, "total_pages": 3, "has_more": False}}}
        )
        page = self.client.get_sent_messages(SENT_SMS_SCHEMA.defaults(RANGE), 1, 20)
        self.assertFalse(page.has_more)

    def test_sent_page_data(self) -> None:
        self.session.get.return_value = _response(
            {
                "success": True,
                "data": {
                    "route_options": [{"value": "all", "label": "All Routes"}, {"value": "otp", "label": "OTP"}],
                    "delivery_options": [{"value": "all", "label": "All Messages"}],
                    "default_start_date": "2025-01-08",
                    "default_end_date": "2025-01-01",
                },
            }
        )
        opts = self.client.get_sent_page_data()
        self.assertEqual([o.value for o in opts.options["route"]], ["all", "otp"])
        self.assertEqual(opts.default_range, RANGE)

    def test_received_page_data_prepends_all(self) -> None:
        self.session.get.return_value = _response(
            {
                "status": True,
                "data": {"filter_options": [{"id": 12, "keyword": "PROMO"}, {"id": 13, "number": "56161"}]},
            }
        )
        opts = self.client.get_received_page_data()
        self.assertEqual(
            [(o.value, o.label) for o in opts.options["filter"]],
            [("all", "All Messages"), ("12", "PROMO"), ("13", "56161")],
        )
        self.assertIsNone(opts.default_range)

    def test_missing_token(self) -> None:
        self.client = SmsApiClient(ApiConfig(token=""), session=self.session)
        with self.assertRaises(SmsApiError) as cm:
            self.client.get_sent_page_data()
        self.assertEqual(cm.exception.message, AUTH_REQUIRED)
        self.assertEqual(cm.exception.status_code, 401)
        self.session.get.assert_not_called()

    def test_network_errors_map_to_messages(self) -> None:
        for exc, expected in (
            (requests.Timeout("slow"), TIMEOUT_ERROR),
            (requests.ConnectionError("refused"), CONNECTION_ERROR),
            (requests.RequestException("odd"), GENERIC_ERROR),
        ):
            with self.subTest(exc=exc):
                self.session.get.side_effect = exc
                with self.assertRaises(SmsApiError) as cm:
                    self.client.get_sent_page_data()
                self.assertEqual(cm.exception.message, expected)

    def test_server_message_is_surfaced(self) -> None:
        self.session.get.return_value = _response({"success": False, "message": "Invalid date range"}, status=422)
        with self.assertRaises(SmsApiError) as cm:
            self.client.get_sent_messages(SENT_SMS_SCHEMA.defaults(RANGE), 1, 20)
        self.assertEqual(cm.exception.message, "Invalid date range")
        self.assertEqual(cm.exception.status_code, 422)

    def test_unsuccessful_body(self) -> None:
        self.session.get.return_value = _response({"success": False})
        with self.assertRaises(SmsApiError) as cm:
            self.client.get_sent_page_data()
        self.assertEqual(cm.exception.message, GENERIC_ERROR)

    def test_bad_json(self) -> None:
        self.session.get.return_value = _response(ValueError("no json"), status=502)
        with self.assertRaises(SmsApiError) as cm:
            self.client.get_sent_page_data()
        self.assertEqual(cm.exception.message, GENERIC_ERROR)
        self.assertEqual(cm.exception.status_code, 502)

    def test_malformed_page(self) -> None:
        self.session.get.return_value = _response({"success": True, "data": {"messages": []}})
        with self.assertRaises(SmsApiError):
            self.client.get_received_messages(SENT_SMS_SCHEMA.defaults(RANGE), 1, 20)

    def test_bad_pagination_values(self) -> None:
        for pagination in (
            {"current_page": "abc", "total_pages": 2},
            {"current_page": 1, "total_pages": "many"},
            {"current_page": 1, "has_more": True, "total_records": [3]},
        ):
            with self.subTest(pagination=pagination):
                self.session.get.return_value = _response(
                    {"success": True, "data": {"messages": [], "pagination": pagination}}
                )
                with self.assertRaises(SmsApiError) as cm:
                    self.client.get_sent_messages(SENT_SMS_SCHEMA.defaults(RANGE), 1, 20)
                self.assertEqual(cm.exception.message, GENERIC_ERROR)

    def test_sent_message_details(self) -> None:
        self.session.get.return_value = _response(
            {
                "success": True,
                "data": {
                    "id": 42,
                    "table_name": "sms_2025_01",
                    "sender": "NEDTEC",
                    "sent_to": "919876543210",
                    "message": "Your OTP is 1234",
                    "delivery_status": "Delivered",
                    "num_parts": 1,
                    "cost_to_you": "",
                },
            }
        )
        details = self.client.get_sent_message_details("sms_2025_01", "42")

        args, _kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://api.example.test/capi/mobile/sent-sms/sms_2025_01/42")
        self.assertEqual(details.key, ("sms_2025_01", "42"))
        self.assertEqual(details.body, "Your OTP is 1234")
        self.assertEqual(
            details.fields,
            (("Sender", "NEDTEC"), ("Sent To", "919876543210"), ("Delivery Status", "Delivered"), ("Parts", "1")),
        )

    def test_sent_message_details_needs_table(self) -> None:
        with self.assertRaises(SmsApiError):
            self.client.get_sent_message_details("", "42")
        self.session.get.assert_not_called()

    def test_received_message_details(self) -> None:
        self.session.get.return_value = _response(
            {
                "success": True,
                "data": {
                    "id": 9,
                    "sender": "98765",
                    "message": "STOP",
                    "received_at": "2025-01-08 10:15:00",
                    "keyword": "STOP",
                    "auto_response": {"sent": True, "message": "You are unsubscribed", "sent_at": None},
                },
            }
        )
        details = self.client.get_received_message_details("9")

        args, _kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://api.example.test/capi/mobile/received-sms/9")
        self.assertEqual(details.key, ("received_sms", "9"))
        self.assertIn(("Received", "2025-01-08 10:15:00"), details.fields)
        self.assertIn(("Auto Response", "You are unsubscribed"), details.fields)

    def test_details_failure_surfaces_server_message(self) -> None:
        self.session.get.return_value = _response({"success": False, "message": "Message not found"}, status=404)
        with self.assertRaises(SmsApiError) as cm:
            self.client.get_received_message_details("404")
        self.assertEqual(cm.exception.message, "Message not found")


class SmsApiClientAsyncTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_received_page(self) -> None:
        session = mock.Mock(spec=requests.Session)
        session.get.return_value = _response(
            {
                "success": True,
                "data": {
                    "messages": [{"id": 9, "sender": "98765", "message": "hello"}],
                    "pagination": {"current_page": 2, "total_pages": 2},
                },
            }
        )
        client = SmsApiClient(ApiConfig(token="tok"), session=session)
        page = await client.fetch_received_page(SENT_SMS_SCHEMA.defaults(RANGE), 2, 20)
        self.assertEqual(page.page_number, 2)
        self.assertFalse(page.has_more)
        self.assertEqual(page.items[0].key, ("received_sms", "9"))


if __name__ == "__main__":
    unittest.main()
