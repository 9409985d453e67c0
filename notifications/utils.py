import logging
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.utils import timezone

logger = logging.getLogger(__name__)


def send_notification_to_user(user_id, notification_type, title, message, data=None):
    """
    Gửi thông báo realtime tới người dùng qua WebSocket

    Args:
        user_id: ID của người dùng nhận thông báo
        notification_type: Loại thông báo ('application_status_changed', ...)
        title: Tiêu đề thông báo
        message: Nội dung thông báo
        data: Dữ liệu thêm về thông báo (optional)
    """
    try:
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.error("Không thể lấy channel layer")
            return False

        notification_data = {
            'type': 'notify',  # Phương thức consumers.py sẽ xử lý
            'data': {
                'type': 'notification',
                'notification_type': notification_type,
                'title': title,
                'message': message,
                'timestamp': timezone.now().isoformat(),
                'data': data or {}
            }
        }

        group_name = f"user_{user_id}"
        async_to_sync(channel_layer.group_send)(group_name, notification_data)

        logger.info(f"Đã gửi thông báo realtime tới user {user_id}")
        return True
    except Exception as e:
        logger.error(f"Lỗi khi gửi thông báo realtime: {str(e)}")
        return False


def create_and_send_notification(user, notification_type, title, link, message,
                                 related_object=None, priority=None, data=None):
    """
    Tạo thông báo trong cơ sở dữ liệu và gửi thông báo realtime.
    Lỗi chỉ được log, trả về None.
    """
    try:
        from .services import NotificationService
        notification = NotificationService.create_notification(
            recipient=user,
            notification_type=notification_type,
            title=title,
            link=link,
            message=message,
            related_object=related_object,
            priority=priority,
            data=data,
        )

        notification_data = {
            'notification_id': notification.id,
            'link': link,
            'priority': notification.priority,
            'created_at': notification.created_at.isoformat(),
            **notification.data,
        }
        if related_object is not None:
            notification_data.update({
                'object_id': related_object.pk,
                'content_type': related_object._meta.model_name
            })

        send_notification_to_user(
            user_id=user.id,
            notification_type=notification_type,
            title=title,
            message=message,
            data=notification_data
        )
        return notification
    except Exception as e:
        logger.error(f"Lỗi khi tạo và gửi thông báo: {str(e)}")
        return None
