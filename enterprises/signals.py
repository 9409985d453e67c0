import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import PostEntity

logger = logging.getLogger(__name__)


@receiver(post_save, sender=PostEntity)
def handle_post_published(sender, instance, created, **kwargs):
    """Gửi job alert khi tin tuyển dụng được đăng (tạo mới đã active, hoặc lần đầu được duyệt)"""
    if instance.job_alerts_sent or not instance.is_active:
        return
    if not created and not instance.tracker.has_changed('is_active'):
        return

    from notifications.job_alerts import dispatch_job_alerts

    # Đánh dấu trước để lần lưu sau không gửi lại
    PostEntity.objects.filter(pk=instance.pk).update(job_alerts_sent=True)
    instance.job_alerts_sent = True

    logger.info(f"Tin tuyển dụng #{instance.id} đã được đăng, lên lịch gửi job alert")
    dispatch_job_alerts(instance)
