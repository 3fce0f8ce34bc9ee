import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Any, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import send_mail
from django.db import models, transaction

from .conf import get_setting

logger = logging.getLogger(__name__)


class NoticeKind(models.TextChoices):
    ACCEPTANCE = 'meeting_request_accepted', 'Meeting request accepted'
    REJECTION = 'meeting_request_rejected', 'Meeting request rejected'
    RESCHEDULE = 'meeting_request_rescheduled', 'Meeting request rescheduled'
    CANCELLATION = 'meeting_request_cancelled', 'Meeting request cancelled'


@dataclass(frozen=True)
class Notice:
    """Intent to tell ``recipient`` about ``kind`` for ``meeting``.

    A ``None`` recipient means both participants.
    """

    kind: NoticeKind
    meeting: Any
    recipient: Optional[Any] = None

    def recipients(self):
        if self.recipient is not None:
            return [self.recipient]
        return list(self.meeting.participants)


SUBJECTS = {
    NoticeKind.ACCEPTANCE: "Your mentoring session has been confirmed",
    NoticeKind.REJECTION: "Your mentoring session request was declined",
    NoticeKind.RESCHEDULE: "A mentoring session has been rescheduled",
    NoticeKind.CANCELLATION: "A mentoring session has been cancelled",
}


def _meeting_link(meeting):
    return f"{getattr(settings, 'FRONTEND_URL', 'http://localhost:5173')}/meetings/{meeting.id}"


def render_message(notice, recipient):
    meeting = notice.meeting
    lines = [f"Hello {recipient.fullname},", ""]
    if notice.kind == NoticeKind.ACCEPTANCE:
        lines.append(f"Your session with {meeting.counterpart(meeting.actor_for(recipient)).fullname} "
                     f"is confirmed for {meeting.meeting_at:%Y-%m-%d %H:%M %Z}.")
    elif notice.kind == NoticeKind.REJECTION:
        lines.append("Your meeting request was declined.")
        comment = meeting.mentor_comments or meeting.user_comments
        if comment:
            lines.append(f"\n\"{comment}\"")
    elif notice.kind == NoticeKind.RESCHEDULE:
        lines.append(f"The session \"{meeting.purpose}\" was moved to "
                     f"{meeting.suggested_meeting_at:%Y-%m-%d %H:%M %Z}.")
    else:
        lines.append(f"The session \"{meeting.purpose}\" was cancelled.")
        comment = meeting.mentor_comments or meeting.user_comments
        if comment:
            lines.append(f"\n\"{comment}\"")
    lines.extend(["", f"Details: {_meeting_link(meeting)}"])
    return "\n".join(lines)


def event_payload(meeting):
    return {
        "meeting_id": meeting.id,
        "status": meeting.status,
        "suggested_meeting_at": meeting.suggested_meeting_at.isoformat() if meeting.suggested_meeting_at else None,
        "meeting_at": meeting.meeting_at.isoformat() if meeting.meeting_at else None,
    }


class NotificationDispatcher:
    """Delivers notices by e-mail and over the user's channels group.

    Delivery is scheduled with ``transaction.on_commit`` so nothing goes out
    for a state change that was rolled back, and every failure stays here.
    """

    _executor = None

    def __init__(self, run_async=None):
        self.run_async = get_setting('NOTIFY_ASYNC') if run_async is None else run_async

    @classmethod
    def executor(cls):
        if cls._executor is None:
            cls._executor = ThreadPoolExecutor(
                max_workers=get_setting('NOTIFY_WORKERS'), thread_name_prefix='notify')
        return cls._executor

    def dispatch(self, notices):
        for notice in notices:
            transaction.on_commit(partial(self._enqueue, notice))

    def _enqueue(self, notice):
        if self.run_async:
            self.executor().submit(self.deliver, notice)
        else:
            self.deliver(notice)

    def deliver(self, notice):
        for recipient in notice.recipients():
            self._send_email(notice, recipient)
            self._push_event(notice, recipient)

    def _send_email(self, notice, recipient):
        if not recipient.email:
            logger.info("Skipping %s e-mail for user %s: no address", notice.kind, recipient.pk)
            return
        try:
            send_mail(
                subject=SUBJECTS[notice.kind],
                message=render_message(notice, recipient),
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient.email],
            )
        except Exception:
            logger.exception("Failed to e-mail %s for meeting %s to user %s",
                             notice.kind, notice.meeting.pk, recipient.pk)

    def _push_event(self, notice, recipient):
        try:
            channel_layer = get_channel_layer()
            if channel_layer is None:
                return
            async_to_sync(channel_layer.group_send)(
                f"user_{recipient.id}",
                {
                    "type": "notify",
                    "event": notice.kind.value,
                    "data": event_payload(notice.meeting),
                },
            )
        except Exception:
            logger.exception("Failed to push %s for meeting %s to user %s",
                             notice.kind, notice.meeting.pk, recipient.pk)
