from rest_framework import status
from rest_framework.permissions import BasePermission
from rest_framework.response import Response


def create_permission_class_with_admin_override(*permission_classes):
    """
    Tạo một permission class mới kết hợp các permission class đã cho và quyền admin
    với điều kiện HOẶC: nếu là admin HOẶC thỏa mãn các permission khác

    Sử dụng:
    AdminOrRecruiter = create_permission_class_with_admin_override(IsRecruiter)

    @permission_classes([AdminOrRecruiter])
    def my_view(request):
        ...
    """
    class CombinedPermission(BasePermission):
        def has_permission(self, request, view):
            # Nếu là admin, cho phép ngay lập tức
            if request.user and request.user.is_staff:
                return True

            for permission_class in permission_classes:
                instance = permission_class()
                if not instance.has_permission(request, view):
                    return False
            return True

        def has_object_permission(self, request, view, obj):
            if request.user and request.user.is_staff:
                return True

            for permission_class in permission_classes:
                instance = permission_class()
                if not instance.has_object_permission(request, view, obj):
                    return False
            return True

    return CombinedPermission


def forbidden_response(message='You do not have permission to perform this action'):
    return Response({
        'message': message,
        'status': status.HTTP_403_FORBIDDEN
    }, status=status.HTTP_403_FORBIDDEN)


def error_response(message, errors, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({
        'message': message,
        'status': status_code,
        'errors': errors
    }, status=status_code)
