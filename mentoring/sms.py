import logging

import requests

from .conf import get_setting

logger = logging.getLogger(__name__)


class SmsClient:
    """Posts ``{text, msisdn}`` to the configured SMS provider.

    Sending is best-effort: the response body is ignored and errors are
    only logged.
    """

    def __init__(self, url, timeout=10, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls):
        return cls(get_setting('SMS_PROVIDER_URL'), timeout=get_setting('SMS_TIMEOUT'))

    def send(self, text, msisdn):
        if not self.url:
            logger.warning("SMS provider URL is not configured, dropping message to %s", msisdn)
            return False
        if not msisdn:
            logger.info("No phone number to text, skipping")
            return False
        try:
            response = self.session.post(self.url, data={"text": text, "msisdn": msisdn}, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException:
            logger.exception("SMS provider call failed for %s", msisdn)
            return False
        return True
