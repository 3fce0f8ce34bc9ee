"""Entry points used by the API and jobs.

Each function resolves the acting user to an ``Actor`` once, runs the
transition and hands the resulting notices to the dispatcher. Validation
errors from the model propagate unchanged.
"""
import logging

from django.core.exceptions import ValidationError

from .models import MeetingRequest
from .notifications import NotificationDispatcher
from .sms import SmsClient

logger = logging.getLogger(__name__)


def _dispatch(notices, dispatcher=None):
    (dispatcher or NotificationDispatcher()).dispatch(notices)
    return notices


def request_meeting(founder, mentor, duration, purpose, suggested_meeting_at=None,
                    suggested_meeting_time_of_day=None):
    meeting = MeetingRequest(
        founder=founder,
        mentor=mentor,
        duration=duration,
        purpose=purpose,
        suggested_meeting_at=suggested_meeting_at,
        suggested_meeting_time_of_day=suggested_meeting_time_of_day,
    )
    meeting.save()
    logger.info("Meeting %s requested by user %s with mentor %s", meeting.pk, founder.pk, mentor.pk)
    return meeting


def accept_meeting(meeting, user, meeting_at, dispatcher=None):
    notices = meeting.accept(meeting_at, meeting.actor_for(user))
    logger.info("Meeting %s accepted by user %s", meeting.pk, user.pk)
    return _dispatch(notices, dispatcher)


def reject_meeting(meeting, user, comments, dispatcher=None):
    notices = meeting.reject(comments, meeting.actor_for(user))
    logger.info("Meeting %s rejected by user %s", meeting.pk, user.pk)
    return _dispatch(notices, dispatcher)


def reschedule_meeting(meeting, new_time, dispatcher=None):
    notices = meeting.reschedule(new_time)
    logger.info("Meeting %s rescheduled to %s", meeting.pk, new_time)
    return _dispatch(notices, dispatcher)


def cancel_meeting(meeting, user, comments, dispatcher=None):
    notices = meeting.cancel(comments, meeting.actor_for(user))
    logger.info("Meeting %s cancelled by user %s", meeting.pk, user.pk)
    return _dispatch(notices, dispatcher)


def start_meeting(meeting):
    meeting.start()
    logger.info("Meeting %s started", meeting.pk)


def complete_meeting(meeting):
    meeting.complete()
    logger.info("Meeting %s completed", meeting.pk)


def rate_meeting(meeting, user, rating):
    meeting.rate(meeting.actor_for(user), rating)
    logger.info("Meeting %s rated %s by user %s", meeting.pk, rating, user.pk)


def notify_by_phone(meeting, user, sms_client=None):
    sent = meeting.notify_by_phone(meeting.actor_for(user), sms_client or SmsClient.from_settings())
    if not sent:
        logger.debug("SMS for meeting %s suppressed, one was sent recently", meeting.pk)
    return sent


def expire_stale_meetings(now=None):
    expired = 0
    for meeting in MeetingRequest.objects.expirable(now).select_related('founder', 'mentor__user'):
        try:
            meeting.expire()
        except ValidationError as exc:
            logger.warning("Could not expire meeting %s: %s", meeting.pk, exc.messages)
            continue
        expired += 1
    if expired:
        logger.info("Expired %d stale meeting requests", expired)
    return expired
