from unittest import mock

import requests
from django.test import SimpleTestCase, override_settings

from mentoring.sms import SmsClient


class SmsClientTests(SimpleTestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.client = SmsClient("https://sms.example.com/send", timeout=5, session=self.session)

    def test_posts_text_and_msisdn(self):
        self.assertTrue(self.client.send("Hi there", "+15550000001"))
        self.session.post.assert_called_once_with(
            "https://sms.example.com/send",
            data={"text": "Hi there", "msisdn": "+15550000001"},
            timeout=5,
        )

    def test_provider_error_is_swallowed(self):
        self.session.post.side_effect = requests.ConnectionError("no route")
        with self.assertLogs("mentoring.sms", level="ERROR"):
            self.assertFalse(self.client.send("Hi there", "+15550000001"))

    def test_http_error_status_is_swallowed(self):
        self.session.post.return_value.raise_for_status.side_effect = requests.HTTPError("502")
        with self.assertLogs("mentoring.sms", level="ERROR"):
            self.assertFalse(self.client.send("Hi there", "+15550000001"))

    def test_missing_url_skips_send(self):
        client = SmsClient("", session=self.session)
        with self.assertLogs("mentoring.sms", level="WARNING"):
            self.assertFalse(client.send("Hi there", "+15550000001"))
        self.session.post.assert_not_called()

    def test_missing_phone_skips_send(self):
        self.assertFalse(self.client.send("Hi there", ""))
        self.session.post.assert_not_called()

    @override_settings(MENTORING={"SMS_PROVIDER_URL": "https://sms.example.com/api", "SMS_TIMEOUT": 3})
    def test_from_settings(self):
        client = SmsClient.from_settings()
        self.assertEqual(client.url, "https://sms.example.com/api")
        self.assertEqual(client.timeout, 3)
