from django.contrib import admin, messages
from django.contrib.admin import SimpleListFilter
from django.utils.html import format_html

from base.admin import BaseAdminClass
from .models import EnterpriseEntity, FieldEntity, PostEntity, JobAlertCriteria


class ActiveStatusFilter(SimpleListFilter):
    title = 'Trạng thái phê duyệt'
    parameter_name = 'is_active'

    def lookups(self, request, model_admin):
        return [
            ('1', 'Đã phê duyệt'),
            ('0', 'Chưa phê duyệt'),
        ]

    def queryset(self, request, queryset):
        if self.value() == '1':
            return queryset.filter(is_active=True)
        if self.value() == '0':
            return queryset.filter(is_active=False)
        return queryset


def is_active_display(obj):
    if obj.is_active:
        return format_html('<span style="color: green; font-weight: bold;">Đã phê duyệt</span>')
    return format_html('<span style="color: red; font-weight: bold;">Chưa phê duyệt</span>')
is_active_display.short_description = 'Trạng thái'


@admin.register(EnterpriseEntity)
class EnterpriseAdmin(BaseAdminClass):
    list_display = ('company_name', 'city', 'email_company', is_active_display)
    list_filter = (ActiveStatusFilter,)
    search_fields = ('company_name', 'email_company')
    list_display_links = ('company_name',)


@admin.register(FieldEntity)
class FieldAdmin(BaseAdminClass):
    list_display = ('name', 'code', 'status')
    search_fields = ('name', 'code')


@admin.register(PostEntity)
class PostAdmin(BaseAdminClass):
    list_display = ('title', 'enterprise', 'city', 'type_working', is_active_display, 'job_alerts_sent')
    list_filter = (ActiveStatusFilter, 'type_working')
    search_fields = ('title', 'enterprise__company_name')
    readonly_fields = ('job_alerts_sent',)
    actions = ['approve_posts']

    def approve_posts(self, request, queryset):
        # save() từng bài để signal gửi job alert được kích hoạt
        count = 0
        for post in queryset.filter(is_active=False):
            post.is_active = True
            post.save()
            count += 1
        messages.success(request, f'Đã phê duyệt {count} tin tuyển dụng')
    approve_posts.short_description = 'Phê duyệt tin tuyển dụng đã chọn'


@admin.register(JobAlertCriteria)
class JobAlertCriteriaAdmin(BaseAdminClass):
    list_display = ('user', 'enabled', 'min_salary')
    list_filter = ('enabled',)
    search_fields = ('user__email', 'user__username')
