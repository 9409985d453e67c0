from django.contrib import admin, messages
from unfold.admin import TabularInline

from base.admin import BaseAdminClass
from .models import (
    STATUS_LABELS,
    STATUS_REJECTED,
    STATUS_REVIEWED,
    STATUS_SHORTLISTED,
    Application,
    Evaluation,
    OfferDetails,
    StatusHistory,
)
from .services import ApplicationService


class StatusHistoryInline(TabularInline):
    model = StatusHistory
    extra = 0
    can_delete = False
    fields = ('status', 'changed_at', 'changed_by', 'notes', 'notification_sent', 'notification_error')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class EvaluationInline(TabularInline):
    model = Evaluation
    extra = 0
    fields = ('evaluated_by', 'overall_score', 'recommendation', 'comments', 'evaluated_at')
    readonly_fields = ('evaluated_by', 'evaluated_at')


def _bulk_transition(modeladmin, request, queryset, new_status):
    # trạng thái chỉ được đổi qua ApplicationService để sổ lịch sử luôn đầy đủ
    for application in queryset:
        ApplicationService.update_status(application.id, new_status, notes='Updated from admin', changed_by=request.user)
    modeladmin.message_user(
        request, f'Đã chuyển {queryset.count()} đơn sang {STATUS_LABELS[new_status]}', messages.SUCCESS
    )


@admin.register(Application)
class ApplicationAdmin(BaseAdminClass):
    list_display = ('id', 'user', 'post', 'status', 'applied_at', 'last_activity_at')
    list_filter = ('status', 'applied_at')
    search_fields = ('user__email', 'user__username', 'post__title', 'post__enterprise__company_name')
    readonly_fields = ('status', 'current_interview', 'applied_at', 'last_activity_at', 'created_at', 'modified_at')
    inlines = [StatusHistoryInline, EvaluationInline]
    actions = ['mark_reviewed', 'mark_shortlisted', 'mark_rejected']

    @admin.action(description='Chuyển sang Reviewed')
    def mark_reviewed(self, request, queryset):
        _bulk_transition(self, request, queryset, STATUS_REVIEWED)

    @admin.action(description='Chuyển sang Shortlisted')
    def mark_shortlisted(self, request, queryset):
        _bulk_transition(self, request, queryset, STATUS_SHORTLISTED)

    @admin.action(description='Chuyển sang Rejected')
    def mark_rejected(self, request, queryset):
        _bulk_transition(self, request, queryset, STATUS_REJECTED)


@admin.register(OfferDetails)
class OfferDetailsAdmin(BaseAdminClass):
    list_display = ('application', 'salary', 'currency', 'joining_date', 'offer_sent_at', 'offer_expires_at')
    search_fields = ('application__user__email', 'application__post__title')
