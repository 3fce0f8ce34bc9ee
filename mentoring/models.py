from datetime import datetime, timedelta

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .notifications import Notice, NoticeKind


class User(AbstractUser):
    phone = models.CharField(max_length=32, blank=True)
    bio = models.TextField(blank=True)

    @property
    def fullname(self):
        return self.get_full_name() or self.username

    def __str__(self):
        return self.username


class MentorProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='mentor_profile')
    name = models.CharField(max_length=200, blank=True)
    title = models.CharField(max_length=200, blank=True)
    bio = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Mentor: {self.user.username} - {self.title or 'Mentor'}"


class Status(models.TextChoices):
    REQUESTED = 'requested', 'Requested'
    REJECTED = 'rejected', 'Rejected'
    RESCHEDULED = 'rescheduled', 'Rescheduled'
    ACCEPTED = 'accepted', 'Accepted'
    STARTED = 'started', 'Started'
    COMPLETED = 'completed', 'Completed'
    EXPIRED = 'expired', 'Expired'
    CANCELLED = 'cancelled', 'Cancelled'


TERMINAL_STATUSES = (Status.COMPLETED, Status.EXPIRED, Status.CANCELLED, Status.REJECTED)
OPEN_STATUSES = tuple(s for s in Status if s not in TERMINAL_STATUSES)
ACTIVE_STATUSES = (Status.REQUESTED, Status.ACCEPTED, Status.RESCHEDULED, Status.STARTED)


class Duration(models.IntegerChoices):
    QUARTER_HOUR = 15, '15 minutes'
    HALF_HOUR = 30, '30 minutes'
    HOUR = 60, '1 hour'


class Rating(models.IntegerChoices):
    NO_USE = 0, 'Meeting was of no use'
    LITTLE_USE = 1, 'Meeting was of little use'
    SOME_USE = 2, 'Some use'
    USEFUL = 3, 'Useful'
    REALLY_USEFUL = 4, 'Really useful'
    INCREDIBLE = 5, 'Absolutely incredible, eye-opening'


class TimeOfDay(models.TextChoices):
    MORNING = 'morning', 'Morning'
    MIDDAY = 'midday', 'Midday'
    AFTERNOON = 'afternoon', 'Afternoon'
    EVENING = 'evening', 'Evening'


TIME_OF_DAY_CLOCK = {
    TimeOfDay.MORNING: (9, 0),
    TimeOfDay.MIDDAY: (12, 0),
    TimeOfDay.AFTERNOON: (15, 0),
    TimeOfDay.EVENING: (18, 0),
}


class Actor(models.TextChoices):
    FOUNDER = 'founder', 'Founder'
    MENTOR = 'mentor', 'Mentor'


# Field-level choice violations are reported under these codes instead of
# Django's generic "invalid_choice".
CHOICE_ERROR_CODES = {
    'status': 'invalid_status',
    'duration': 'invalid_duration',
    'mentor_rating': 'invalid_rating',
    'user_rating': 'invalid_rating',
}

STARTS_SOON_WINDOW = timedelta(minutes=15)
SMS_COOLDOWN = timedelta(minutes=30)
FEEDBACK_GRACE = timedelta(days=7)

SMS_TEMPLATE = "{name} is ready and waiting for today's mentoring session"


class MeetingRequestQuerySet(models.QuerySet):
    def requested(self):
        return self.filter(status=Status.REQUESTED)

    def rescheduled(self):
        return self.filter(status=Status.RESCHEDULED)

    def involving(self, user):
        return self.filter(models.Q(founder=user) | models.Q(mentor__user=user))

    def active_between(self, founder, mentor):
        return self.filter(founder=founder, mentor=mentor, status__in=ACTIVE_STATUSES)

    def exists_active_between(self, founder, mentor):
        return self.active_between(founder, mentor).exists()

    def _feedback_due(self):
        threshold = timezone.now() - FEEDBACK_GRACE
        return self.filter(status=Status.COMPLETED, meeting_at__lt=threshold)

    def users_pending_feedback(self):
        return self._feedback_due().filter(user_rating__isnull=True)

    def mentors_pending_feedback(self):
        return self._feedback_due().filter(mentor_rating__isnull=True)

    def expirable(self, now=None):
        now = now or timezone.now()
        return self.filter(
            status__in=(Status.REQUESTED, Status.RESCHEDULED),
            suggested_meeting_at__lt=now,
        )


class MeetingRequest(models.Model):
    """A one-on-one mentoring session requested by a founder.

    Status only changes through the transition methods below. Every save runs
    ``full_clean()``, so an invalid combination of status and fields is
    rejected no matter which code path produced it. Transitions return the
    notices they want delivered; sending them is the caller's job
    (see ``mentoring.services``).
    """

    founder = models.ForeignKey(User, on_delete=models.CASCADE, related_name='meeting_requests')
    mentor = models.ForeignKey(MentorProfile, on_delete=models.CASCADE, related_name='meeting_requests')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REQUESTED)
    duration = models.PositiveSmallIntegerField(choices=Duration.choices)
    purpose = models.TextField()
    suggested_meeting_at = models.DateTimeField(null=True, blank=True)
    meeting_at = models.DateTimeField(null=True, blank=True)
    mentor_comments = models.TextField(blank=True)
    user_comments = models.TextField(blank=True)
    mentor_rating = models.PositiveSmallIntegerField(choices=Rating.choices, null=True, blank=True)
    user_rating = models.PositiveSmallIntegerField(choices=Rating.choices, null=True, blank=True)
    mentor_sms_sent_at = models.DateTimeField(null=True, blank=True)
    user_sms_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MeetingRequestQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __init__(self, *args, **kwargs):
        time_of_day = kwargs.pop('suggested_meeting_time_of_day', None)
        super().__init__(*args, **kwargs)
        self._suggested_clock = None
        self.suggested_meeting_time_of_day = time_of_day

    def __str__(self):
        return f"Meeting {self.pk} {self.founder} <-> {self.mentor.user} ({self.status})"

    # write-only: the selector only rewrites suggested_meeting_at on save
    @property
    def suggested_meeting_time_of_day(self):
        return None

    @suggested_meeting_time_of_day.setter
    def suggested_meeting_time_of_day(self, value):
        try:
            self._suggested_clock = TIME_OF_DAY_CLOCK.get(TimeOfDay(value))
        except ValueError:
            self._suggested_clock = None

    # validation

    def clean_fields(self, exclude=None):
        try:
            super().clean_fields(exclude=exclude)
        except ValidationError as exc:
            for field, errors in exc.error_dict.items():
                for error in errors:
                    if error.code == 'invalid_choice' and field in CHOICE_ERROR_CODES:
                        error.code = CHOICE_ERROR_CODES[field]
            raise

    def clean(self):
        errors = []
        if not self.suggested_meeting_at:
            if self._state.adding:
                if self._suggested_clock is None:
                    errors.append(ValidationError(
                        'A suggested meeting time is required', code='missing_suggested_time'))
                else:
                    errors.append(ValidationError(
                        'A date is required for the suggested meeting time', code='missing_meeting_time'))
            else:
                errors.append(ValidationError(
                    'suggested_meeting_at cannot be blank', code='missing_meeting_time'))
        if self.status == Status.REJECTED and not self._has_comment():
            errors.append(ValidationError(
                'Comments required to reject meeting request', code='missing_comment'))
        if self.status == Status.CANCELLED and not self._has_comment():
            errors.append(ValidationError(
                'Comments required to cancel meeting request', code='missing_comment'))
        if self.status == Status.ACCEPTED and not self.meeting_at:
            errors.append(ValidationError(
                'Meeting cannot be accepted without setting meeting_at', code='missing_confirmed_time'))
        if errors:
            raise ValidationError(errors)

    def _has_comment(self):
        return bool((self.mentor_comments or '').strip() or (self.user_comments or '').strip())

    def save(self, *args, **kwargs):
        update_fields = kwargs.get('update_fields')
        if update_fields is None:
            self.full_clean()
        else:
            self.full_clean(exclude=[f.name for f in self._meta.fields if f.name not in update_fields])
        # a partial save that leaves suggested_meeting_at out keeps the selector pending
        applies_clock = update_fields is None or 'suggested_meeting_at' in update_fields
        if applies_clock and self._suggested_clock and self.suggested_meeting_at is not None:
            hour, minute = self._suggested_clock
            local = timezone.localtime(self.suggested_meeting_at) \
                if timezone.is_aware(self.suggested_meeting_at) else self.suggested_meeting_at
            self.suggested_meeting_at = local.replace(hour=hour, minute=minute, second=0, microsecond=0)
            self._suggested_clock = None
        super().save(*args, **kwargs)

    # roles

    def actor_for(self, user):
        return Actor.FOUNDER if user == self.founder else Actor.MENTOR

    def counterpart(self, actor):
        return self.mentor.user if actor == Actor.FOUNDER else self.founder

    def sender(self, actor):
        return self.founder if actor == Actor.FOUNDER else self.mentor.user

    @property
    def participants(self):
        return self.founder, self.mentor.user

    @property
    def mentor_name(self):
        return self.mentor.name or self.mentor.user.fullname if self.mentor_id else None

    # status predicates

    @property
    def is_requested(self):
        return self.status == Status.REQUESTED

    @property
    def is_rescheduled(self):
        return self.status == Status.RESCHEDULED

    @property
    def is_rejected(self):
        return self.status == Status.REJECTED

    @property
    def is_accepted(self):
        return self.status == Status.ACCEPTED

    @property
    def is_started(self):
        return self.status == Status.STARTED

    @property
    def is_completed(self):
        return self.status == Status.COMPLETED

    @property
    def is_cancelled(self):
        return self.status == Status.CANCELLED

    @property
    def is_expired(self):
        return self.status == Status.EXPIRED

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    # transitions

    def _lock(self, *fields):
        """Reload ``fields`` from the row, holding it until the transaction ends.

        Must run inside ``transaction.atomic()``.
        """
        if self.pk is None:
            return
        row = type(self).objects.select_for_update().only(*fields).get(pk=self.pk)
        for name in fields:
            setattr(self, name, getattr(row, name))

    def _apply(self, allowed_from, update_fields=None, **changes):
        if self.status not in allowed_from:
            raise ValidationError(
                'Meeting cannot move from %(current)s to %(target)s',
                code='invalid_transition',
                params={'current': self.status, 'target': changes.get('status', self.status)},
            )
        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            with transaction.atomic():
                self.save(update_fields=update_fields)
        except ValidationError:
            for name, value in previous.items():
                setattr(self, name, value)
            raise

    def _comment_field(self, actor):
        return 'mentor_comments' if actor == Actor.MENTOR else 'user_comments'

    def start(self):
        self._apply((Status.REQUESTED, Status.RESCHEDULED, Status.ACCEPTED), status=Status.STARTED)
        return []

    def accept(self, meeting_at, actor):
        self._apply((Status.REQUESTED, Status.RESCHEDULED), status=Status.ACCEPTED, meeting_at=meeting_at)
        return [Notice(NoticeKind.ACCEPTANCE, self, self.counterpart(actor))]

    def reject(self, comments, actor):
        self._apply(
            (Status.REQUESTED, Status.RESCHEDULED),
            status=Status.REJECTED,
            **{self._comment_field(actor): comments or ''},
        )
        return [Notice(NoticeKind.REJECTION, self, self.counterpart(actor))]

    def reschedule(self, new_time):
        self._apply(OPEN_STATUSES, status=Status.RESCHEDULED, suggested_meeting_at=new_time)
        return [Notice(NoticeKind.RESCHEDULE, self)]

    def cancel(self, comments, actor):
        self._apply(
            OPEN_STATUSES,
            status=Status.CANCELLED,
            **{self._comment_field(actor): comments or ''},
        )
        return [Notice(NoticeKind.CANCELLATION, self, self.counterpart(actor))]

    def complete(self):
        self._apply((Status.ACCEPTED, Status.STARTED), status=Status.COMPLETED)
        return []

    def expire(self):
        self._apply(OPEN_STATUSES, status=Status.EXPIRED)
        return []

    def rate(self, actor, rating):
        field = 'mentor_rating' if actor == Actor.MENTOR else 'user_rating'
        with transaction.atomic():
            self._lock('status', field)
            if self.gave_feedback(actor):
                raise ValidationError('Feedback has already been given', code='already_rated')
            self._apply((Status.COMPLETED,), update_fields=[field, 'updated_at'], **{field: rating})
        return []

    # derived predicates

    def gave_feedback(self, actor):
        if actor == Actor.MENTOR:
            return self.mentor_rating is not None
        return self.user_rating is not None

    def did_not_give_feedback(self, actor):
        return not self.gave_feedback(actor)

    @property
    def starts_soon(self):
        return self.is_accepted and self.meeting_at < timezone.now() + STARTS_SOON_WINDOW

    def to_be_rescheduled(self, candidate):
        if not isinstance(candidate, datetime):
            candidate = parse_datetime(candidate)
            if candidate is None:
                raise ValueError('Invalid suggested meeting time')
        if timezone.is_naive(candidate):
            candidate = timezone.make_aware(candidate)
        return self.suggested_meeting_at != candidate

    def _sms_field(self, actor):
        return 'mentor_sms_sent_at' if actor == Actor.MENTOR else 'user_sms_sent_at'

    def recent_sms_sent(self, actor):
        sent_at = getattr(self, self._sms_field(actor))
        return sent_at is not None and sent_at > timezone.now() - SMS_COOLDOWN

    def notify_by_phone(self, actor, sms_client):
        """Tell the counterpart by SMS that ``actor`` is waiting.

        At most one SMS per actor every 30 minutes; calls inside the cooldown
        do nothing. The message goes out after the stamp is committed.
        """
        field = self._sms_field(actor)
        with transaction.atomic():
            self._lock(field)
            if self.recent_sms_sent(actor):
                return False
            phone_number = self.counterpart(actor).phone
            text = SMS_TEMPLATE.format(name=self.sender(actor).fullname)
            setattr(self, field, timezone.now())
            self.save(update_fields=[field, 'updated_at'])
            transaction.on_commit(lambda: sms_client.send(text, phone_number))
        return True
