from unittest import mock

from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase

from mentoring.consumers import NotificationConsumer


class NotificationConsumerTests(SimpleTestCase):
    async def test_forwards_notices_for_user_group(self):
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        communicator.scope["user"] = mock.Mock(is_authenticated=True, id=7)
        connected, _ = await communicator.connect()
        self.assertTrue(connected)

        await get_channel_layer().group_send("user_7", {
            "type": "notify",
            "event": "meeting_request_cancelled",
            "data": {"meeting_id": 3},
        })
        message = await communicator.receive_json_from()
        self.assertEqual(message, {"event": "meeting_request_cancelled", "data": {"meeting_id": 3}})
        await communicator.disconnect()

    async def test_rejects_connection_without_user(self):
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        connected, _ = await communicator.connect()
        self.assertFalse(connected)

    async def test_anonymous_user_cannot_pick_a_group(self):
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/?user_id=7")
        communicator.scope["user"] = AnonymousUser()
        connected, _ = await communicator.connect()
        self.assertFalse(connected)
