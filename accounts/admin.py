from django.contrib import admin
from .models import UserAccount, UserRole, Role
from base.admin import BaseAdminClass


@admin.register(UserAccount)
class UserAccountAdmin(BaseAdminClass):
    list_display = ('username', 'email', 'full_name', 'is_active', 'is_staff', 'is_banned')
    list_filter = ('is_active', 'is_staff', 'is_banned')
    search_fields = ('username', 'email', 'full_name')
    list_editable = ('is_active', 'is_staff', 'is_banned')
    list_display_links = ('username',)
    exclude = ('password',)


@admin.register(UserRole)
class UserRoleAdmin(BaseAdminClass):
    list_display = ('username', 'rolename')
    list_filter = ('role__name',)
    search_fields = ('user__email', 'role__name')
    list_display_links = ('username', 'rolename')

    def username(self, obj):
        return obj.user.username
    username.short_description = 'Tài khoản'

    def rolename(self, obj):
        return obj.role.name
    rolename.short_description = 'Vai trò'


@admin.register(Role)
class RoleAdmin(BaseAdminClass):
    list_display = ('name',)
    search_fields = ('name',)
