import logging
import queue
import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from email.utils import make_msgid, parseaddr

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    success: bool
    attempts: int
    message_id: str = None
    error: str = None


class MailConnectionPool:
    """
    Pool kết nối mail backend dùng chung cho cả process.
    Tối đa `size` kết nối được mở cùng lúc, kết nối lỗi bị đóng và bỏ đi.
    """

    def __init__(self, size=None, timeout=None, backend=None):
        self.size = size or getattr(settings, 'EMAIL_POOL_SIZE', 5)
        self.timeout = timeout or getattr(settings, 'EMAIL_TIMEOUT', 30)
        self.backend = backend
        self._idle = queue.LifoQueue()
        self._slots = threading.BoundedSemaphore(self.size)

    def _new_connection(self):
        # SMTP backend chỉ có một timeout, dùng chung cho kết nối, EHLO và đọc/ghi socket
        return get_connection(self.backend, fail_silently=False, timeout=self.timeout)

    @contextmanager
    def connection(self):
        self._slots.acquire()
        try:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                conn = self._new_connection()
            try:
                conn.open()
                yield conn
            except Exception:
                conn.close()
                raise
            self._idle.put(conn)
        finally:
            self._slots.release()

    def close_all(self):
        while True:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                return
            conn.close()


_pool = None
_pool_lock = threading.Lock()


def get_mail_pool():
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = MailConnectionPool()
        return _pool


class EmailDeliveryChannel:
    """
    Gửi một email HTML tới một người nhận, thử lại với exponential backoff + jitter.

    Số lần thử tối đa là max_retries + 1. Độ trễ trước lần thử lại thứ n (n bắt đầu từ 0):
        min(base_delay * 2**n, max_delay) + uniform(0, jitter)
    send() không bao giờ raise, mọi lỗi được trả về trong DeliveryResult.
    """

    def __init__(self, max_retries=None, base_delay=None, max_delay=None, jitter=None,
                 sleep=time.sleep, pool=None, from_email=None):
        retry = getattr(settings, 'APPLICATION_EMAIL_RETRY', {})
        self.max_retries = retry.get('MAX_RETRIES', 3) if max_retries is None else max_retries
        self.base_delay = retry.get('BASE_DELAY', 1.0) if base_delay is None else base_delay
        self.max_delay = retry.get('MAX_DELAY', 30.0) if max_delay is None else max_delay
        self.jitter = retry.get('JITTER', 1.0) if jitter is None else jitter
        self.sleep = sleep
        self.pool = pool or get_mail_pool()
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def backoff_delay(self, attempt):
        delay = min(self.base_delay * (2 ** attempt), self.max_delay)
        return delay + random.uniform(0, self.jitter)

    def send(self, recipient, subject, html_body, text_body=None):
        last_error = None
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                message_id = self._send_once(recipient, subject, html_body, text_body)
                logger.info(f"Đã gửi email tới {recipient} (lần thử {attempt + 1}), message_id={message_id}")
                return DeliveryResult(success=True, attempts=attempt + 1, message_id=message_id)
            except Exception as e:
                last_error = e
                logger.warning(f"Gửi email tới {recipient} thất bại (lần thử {attempt + 1}/{attempts}): {str(e)}")
                if attempt < self.max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.debug(f"Thử lại sau {delay:.2f}s")
                    self.sleep(delay)

        error = str(last_error) or last_error.__class__.__name__
        logger.error(f"Không thể gửi email tới {recipient} sau {attempts} lần thử: {error}")
        return DeliveryResult(success=False, attempts=attempts, error=error)

    def _send_once(self, recipient, subject, html_body, text_body):
        domain = parseaddr(self.from_email)[1].rpartition('@')[2] or None
        message_id = make_msgid(domain=domain)
        with self.pool.connection() as connection:
            message = EmailMultiAlternatives(
                subject=subject,
                body=text_body or '',
                from_email=self.from_email,
                to=[recipient],
                connection=connection,
                headers={'Message-ID': message_id},
            )
            message.attach_alternative(html_body, 'text/html')
            sent = message.send(fail_silently=False)
        if not sent:
            raise RuntimeError(f"Mail backend did not accept the message for {recipient}")
        return message_id


def get_delivery_channel(**kwargs):
    return EmailDeliveryChannel(**kwargs)
