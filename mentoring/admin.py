from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from .models import User, MentorProfile, MeetingRequest

admin.site.register(MentorProfile)


@admin.register(MeetingRequest)
class MeetingRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "founder", "mentor", "status", "duration", "suggested_meeting_at", "meeting_at")
    list_filter = ("status", "duration")
    readonly_fields = ("mentor_sms_sent_at", "user_sms_sent_at", "created_at", "updated_at")


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "phone", "is_staff", "is_superuser")
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Additional", {"fields": ("phone", "bio")}),
    )
