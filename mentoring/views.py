from rest_framework import mixins, viewsets, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response

from . import services
from .models import MeetingRequest
from .permissions import IsParticipant
from .serializers import (
    MeetingRequestSerializer,
    AcceptSerializer,
    CommentSerializer,
    RescheduleSerializer,
    RatingSerializer,
)


class MeetingRequestViewSet(mixins.CreateModelMixin,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            viewsets.GenericViewSet):
    serializer_class = MeetingRequestSerializer
    permission_classes = [permissions.IsAuthenticated, IsParticipant]

    def get_queryset(self):
        return MeetingRequest.objects.involving(self.request.user).select_related('founder', 'mentor__user')

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = services.request_meeting(
            founder=self.request.user,
            mentor=data['mentor'],
            duration=data['duration'],
            purpose=data.get('purpose', ''),
            suggested_meeting_at=data.get('suggested_meeting_at'),
            suggested_meeting_time_of_day=data.get('suggested_meeting_time_of_day'),
        )

    def _respond(self, meeting):
        return Response(MeetingRequestSerializer(meeting, context=self.get_serializer_context()).data,
                        status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        meeting = self.get_object()
        serializer = AcceptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.accept_meeting(meeting, request.user, serializer.validated_data["meeting_at"])
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        meeting = self.get_object()
        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.reject_meeting(meeting, request.user, serializer.validated_data["comments"])
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):
        meeting = self.get_object()
        serializer = RescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_time = serializer.validated_data["suggested_meeting_at"]
        if not meeting.to_be_rescheduled(new_time):
            return Response({"detail": "Meeting is already suggested for that time."},
                            status=status.HTTP_400_BAD_REQUEST)
        services.reschedule_meeting(meeting, new_time)
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        meeting = self.get_object()
        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.cancel_meeting(meeting, request.user, serializer.validated_data["comments"])
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        meeting = self.get_object()
        services.start_meeting(meeting)
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        meeting = self.get_object()
        services.complete_meeting(meeting)
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def rate(self, request, pk=None):
        meeting = self.get_object()
        serializer = RatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.rate_meeting(meeting, request.user, serializer.validated_data["rating"])
        return self._respond(meeting)

    @action(detail=True, methods=["post"])
    def notify_by_phone(self, request, pk=None):
        meeting = self.get_object()
        sent = services.notify_by_phone(meeting, request.user)
        return Response({"sent": sent}, status=status.HTTP_200_OK)
