from django.contrib import admin
from unfold.admin import StackedInline, TabularInline

from base.admin import BaseAdminClass
from .models import Interview, InterviewFeedback, InterviewReschedule


class InterviewRescheduleInline(TabularInline):
    model = InterviewReschedule
    extra = 0
    can_delete = False
    fields = ('previous_date', 'previous_time', 'reason', 'rescheduled_by', 'rescheduled_at')
    readonly_fields = fields


class InterviewFeedbackInline(StackedInline):
    model = InterviewFeedback
    extra = 0
    can_delete = False
    readonly_fields = ('submitted_by', 'submitted_at')


@admin.register(Interview)
class InterviewAdmin(BaseAdminClass):
    list_display = ('id', 'application', 'type', 'status', 'scheduled_date', 'scheduled_time', 'is_online')
    list_filter = ('type', 'status', 'is_online', 'scheduled_date')
    search_fields = ('application__user__email', 'application__post__title', 'location')
    list_display_links = ('id', 'application')
    readonly_fields = ('application', 'status', 'scheduled_by', 'created_at', 'updated_at')
    inlines = [InterviewRescheduleInline, InterviewFeedbackInline]
