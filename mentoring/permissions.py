from rest_framework import permissions


class IsParticipant(permissions.BasePermission):
    message = "Only the founder or the mentor of this meeting can do that."

    def has_object_permission(self, request, view, obj):
        return request.user in obj.participants
