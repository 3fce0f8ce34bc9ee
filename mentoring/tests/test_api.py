from datetime import timedelta
from unittest import mock

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from mentoring.models import MeetingRequest, Status
from .factories import make_user, make_mentor, make_meeting


@override_settings(MENTORING={"NOTIFY_ASYNC": False})
class MeetingApiTests(APITestCase):
    def setUp(self):
        self.founder = make_user("fiona", first_name="Fiona", last_name="Founder", phone="+15550000001")
        self.mentor = make_mentor()
        self.outsider = make_user("olga")
        self.meeting = make_meeting(self.founder, self.mentor)

    def action_url(self, name, meeting=None):
        return reverse(f"meeting-{name}", args=[(meeting or self.meeting).id])

    def test_create_with_time_of_day(self):
        self.client.force_authenticate(self.founder)
        resp = self.client.post(reverse("meeting-list"), {
            "mentor": self.mentor.id,
            "duration": 30,
            "purpose": "career advice",
            "suggested_meeting_at": "2024-01-10T00:00:00Z",
            "suggested_meeting_time_of_day": "midday",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["status"], "requested")
        self.assertEqual(resp.data["founder"], self.founder.id)
        self.assertNotIn("suggested_meeting_time_of_day", resp.data)
        meeting = MeetingRequest.objects.get(pk=resp.data["id"])
        self.assertEqual(meeting.suggested_meeting_at.hour, 12)

    def test_create_without_time_is_rejected(self):
        self.client.force_authenticate(self.founder)
        resp = self.client.post(reverse("meeting-list"), {
            "mentor": self.mentor.id, "duration": 30, "purpose": "career advice",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["__all__"][0].code, "missing_suggested_time")

    def test_create_with_bad_duration_is_rejected(self):
        self.client.force_authenticate(self.founder)
        resp = self.client.post(reverse("meeting-list"), {
            "mentor": self.mentor.id, "duration": 45, "purpose": "career advice",
            "suggested_meeting_at": "2024-01-10T09:00:00Z",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("duration", resp.data)

    def test_cannot_request_meeting_with_self(self):
        self.client.force_authenticate(self.mentor.user)
        resp = self.client.post(reverse("meeting-list"), {
            "mentor": self.mentor.id, "duration": 15, "purpose": "x",
            "suggested_meeting_at": "2024-01-10T09:00:00Z",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_only_shows_own_meetings(self):
        self.client.force_authenticate(self.mentor.user)
        resp = self.client.get(reverse("meeting-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([m["id"] for m in resp.data], [self.meeting.id])
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(reverse("meeting-list")).data, [])

    def test_requires_authentication(self):
        resp = self.client.get(reverse("meeting-list"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_mentor_accepts(self):
        self.client.force_authenticate(self.mentor.user)
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.action_url("accept"), {"meeting_at": "2024-01-12T09:00:00Z"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "accepted")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["fiona@example.com"])

    def test_reject_without_comment_is_400(self):
        self.client.force_authenticate(self.mentor.user)
        resp = self.client.post(self.action_url("reject"), {"comments": ""}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["__all__"][0].code, "missing_comment")
        self.meeting.refresh_from_db()
        self.assertEqual(self.meeting.status, Status.REQUESTED)

    def test_founder_cancels_with_comment(self):
        self.client.force_authenticate(self.founder)
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.action_url("cancel"), {"comments": "Solved it"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["user_comments"], "Solved it")
        self.assertEqual(mail.outbox[0].to, ["mentor@example.com"])

    def test_reschedule_to_same_time_is_refused(self):
        self.client.force_authenticate(self.founder)
        resp = self.client.post(self.action_url("reschedule"),
                                {"suggested_meeting_at": "2024-01-10T08:30:00Z"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reschedule_notifies_both(self):
        self.client.force_authenticate(self.founder)
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.action_url("reschedule"),
                                    {"suggested_meeting_at": "2024-01-11T08:30:00Z"}, format="json")
        self.assertEqual(resp.data["status"], "rescheduled")
        self.assertEqual(len(mail.outbox), 2)

    def test_outsider_cannot_act(self):
        self.client.force_authenticate(self.outsider)
        resp = self.client.post(self.action_url("start"))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_transition_is_400(self):
        self.client.force_authenticate(self.founder)
        resp = self.client.post(self.action_url("complete"))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data[0].code, "invalid_transition")

    def test_start_complete_and_rate(self):
        self.meeting.accept(timezone.now() - timedelta(hours=1), self.meeting.actor_for(self.mentor.user))
        self.client.force_authenticate(self.founder)
        self.assertEqual(self.client.post(self.action_url("start")).data["status"], "started")
        self.assertEqual(self.client.post(self.action_url("complete")).data["status"], "completed")
        resp = self.client.post(self.action_url("rate"), {"rating": 5}, format="json")
        self.assertEqual(resp.data["user_rating"], 5)
        again = self.client.post(self.action_url("rate"), {"rating": 1}, format="json")
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        bad = self.client.post(self.action_url("rate"), {"rating": 9}, format="json")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_notify_by_phone_is_throttled(self):
        sms_client = mock.Mock()
        self.client.force_authenticate(self.founder)
        with mock.patch("mentoring.services.SmsClient.from_settings", return_value=sms_client):
            with self.captureOnCommitCallbacks(execute=True):
                first = self.client.post(self.action_url("notify-by-phone"))
                second = self.client.post(self.action_url("notify-by-phone"))
        self.assertEqual(first.data, {"sent": True})
        self.assertEqual(second.data, {"sent": False})
        sms_client.send.assert_called_once()
