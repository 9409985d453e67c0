# notifications/consumers.py
import logging
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from channels.db import database_sync_to_async
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from .models import Notification

User = get_user_model()
logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    """
    Kênh realtime cho thông báo đơn ứng tuyển.
    Client gửi {'type': 'authenticate', 'token': <JWT access>} ngay sau khi kết nối,
    sau đó nhận các sự kiện 'notification' của group user_<id>.
    """

    async def connect(self):
        self.user_id = None
        self.authenticated = False
        await self.accept()
        await self.send_json({
            'type': 'auth_required',
            'message': 'Please authenticate using JWT token'
        })

    async def disconnect(self, close_code):
        logger.info(f"WebSocket ngắt kết nối: user {self.user_id}, mã {close_code}")
        if self.authenticated and self.user_id:
            await self.channel_layer.group_discard(f"user_{self.user_id}", self.channel_name)

    async def receive_json(self, content):
        message_type = content.get('type')

        if not self.authenticated:
            if message_type == 'authenticate':
                await self.authenticate(content.get('token', ''))
            else:
                await self.send_json({'type': 'auth_required', 'message': 'Authenticate first'})
            return

        if message_type == 'mark_read':
            updated = await self.mark_read(content.get('notification_id'))
            await self.send_json({
                'type': 'mark_read_result',
                'notification_id': content.get('notification_id'),
                'success': updated,
                'unread_count': await self.get_unread_count(),
            })
        elif message_type == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            logger.debug(f"Bỏ qua message không hỗ trợ từ user {self.user_id}: {message_type}")

    async def authenticate(self, token):
        user_id = await self.get_user_from_token(token)
        if not user_id:
            logger.warning("Xác thực WebSocket thất bại: token không hợp lệ")
            await self.send_json({'type': 'auth_fail', 'message': 'Invalid token'})
            return

        self.user_id = user_id
        self.authenticated = True
        await self.channel_layer.group_add(f"user_{self.user_id}", self.channel_name)
        await self.send_json({
            'type': 'auth_success',
            'message': 'Authentication successful',
            'unread_count': await self.get_unread_count(),
        })
        logger.info(f"Xác thực WebSocket thành công cho user: {self.user_id}")

    @database_sync_to_async
    def get_user_from_token(self, token):
        """Xác thực JWT token và trả về user_id"""
        try:
            user_id = AccessToken(token)['user_id']
        except (InvalidToken, TokenError, KeyError) as e:
            logger.warning(f"Lỗi token không hợp lệ: {str(e)}")
            return None
        user = User.objects.filter(id=user_id, is_active=True).first()
        return user.id if user else None

    @database_sync_to_async
    def get_unread_count(self):
        return Notification.objects.filter(recipient_id=self.user_id, is_read=False).count()

    @database_sync_to_async
    def mark_read(self, notification_id):
        if not notification_id:
            return False
        return Notification.objects.filter(
            id=notification_id, recipient_id=self.user_id
        ).update(is_read=True) > 0

    async def notify(self, event):
        """Gửi thông báo tới client"""
        if self.authenticated:
            await self.send_json(event['data'])
