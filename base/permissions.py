from rest_framework.permissions import BasePermission


def is_post_owner(user, post):
    """Kiểm tra user có phải là chủ doanh nghiệp đăng bài không"""
    return bool(user and user.is_authenticated and post.enterprise.user_id == user.id)


def can_manage_application(user, application):
    """
    Nhà tuyển dụng (staff hoặc chủ doanh nghiệp của bài đăng) được phép
    đổi trạng thái, lên lịch phỏng vấn, đánh giá và gửi offer
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_staff:
        return True
    return is_post_owner(user, application.post)


def can_view_application(user, application):
    """Ứng viên nộp đơn hoặc nhà tuyển dụng quản lý đơn"""
    if user and user.is_authenticated and application.user_id == user.id:
        return True
    return can_manage_application(user, application)


class IsRecruiter(BasePermission):
    """
    Chỉ cho phép tài khoản nhà tuyển dụng (employer/hr) hoặc staff
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_recruiter())


class IsNotificationOwner(BasePermission):
    """
    Kiểm tra xem user có phải là người nhận thông báo không
    """
    def has_object_permission(self, request, view, obj):
        return obj.recipient_id == request.user.id


class AdminAccessPermission(BasePermission):
    """
    Cho phép admin truy cập tất cả API và thực hiện mọi thao tác
    Quyền này sẽ override toàn bộ các quyền khác
    """
    def has_permission(self, request, view):
        # Admin luôn có quyền truy cập vào mọi API
        return bool(request.user and request.user.is_staff)

    def has_object_permission(self, request, view, obj):
        return bool(request.user and request.user.is_staff)
