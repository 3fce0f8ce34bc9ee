from rest_framework import serializers

from .models import MentorProfile, MeetingRequest, Duration, Rating, TimeOfDay


class MeetingRequestSerializer(serializers.ModelSerializer):
    founder_username = serializers.CharField(source='founder.username', read_only=True)
    mentor_name = serializers.CharField(read_only=True)
    mentor = serializers.PrimaryKeyRelatedField(queryset=MentorProfile.objects.select_related('user'))
    duration = serializers.ChoiceField(choices=Duration.choices)
    suggested_meeting_time_of_day = serializers.ChoiceField(
        choices=TimeOfDay.choices, write_only=True, required=False, allow_null=True)
    starts_soon = serializers.BooleanField(read_only=True)

    class Meta:
        model = MeetingRequest
        fields = ('id', 'founder', 'founder_username', 'mentor', 'mentor_name', 'status', 'duration', 'purpose',
                  'suggested_meeting_at', 'suggested_meeting_time_of_day', 'meeting_at',
                  'mentor_comments', 'user_comments', 'mentor_rating', 'user_rating',
                  'starts_soon', 'created_at')
        read_only_fields = ('id', 'founder', 'status', 'meeting_at', 'mentor_comments', 'user_comments',
                            'mentor_rating', 'user_rating', 'created_at')
        extra_kwargs = {'suggested_meeting_at': {'required': False, 'allow_null': True}}

    def validate_mentor(self, value):
        request = self.context.get('request')
        if request and value.user == request.user:
            raise serializers.ValidationError("You cannot request a meeting with yourself.")
        return value


class AcceptSerializer(serializers.Serializer):
    meeting_at = serializers.DateTimeField()


class CommentSerializer(serializers.Serializer):
    comments = serializers.CharField(allow_blank=True, required=False, default='')


class RescheduleSerializer(serializers.Serializer):
    suggested_meeting_at = serializers.DateTimeField()


class RatingSerializer(serializers.Serializer):
    rating = serializers.ChoiceField(choices=Rating.choices)
