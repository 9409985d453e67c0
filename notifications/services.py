# notifications/services.py
import logging

from django.db import transaction

from applications.models import (
    STATUS_INTERVIEW_COMPLETED,
    STATUS_INTERVIEW_SCHEDULED,
    STATUS_OFFER_ACCEPTED,
    STATUS_OFFER_DECLINED,
    STATUS_OFFER_EXTENDED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUS_REVIEWED,
    STATUS_SELECTED,
    STATUS_SHORTLISTED,
    STATUS_WITHDRAWN,
    STATUS_LABELS,
)
from .events import event_type_for_status
from .models import Notification

logger = logging.getLogger(__name__)

# status -> (emoji, title, message)
STATUS_MESSAGES = {
    STATUS_PENDING: ('📝', 'Application Submitted', 'Your application for "{job}" has been submitted.'),
    STATUS_REVIEWED: ('👀', 'Application Viewed', 'Your application for "{job}" has been reviewed.'),
    STATUS_SHORTLISTED: ('⭐', "You've Been Shortlisted!", 'Great news! You\'ve been shortlisted for "{job}".'),
    STATUS_INTERVIEW_SCHEDULED: ('📅', 'Interview Scheduled', 'An interview has been scheduled for "{job}".'),
    STATUS_INTERVIEW_COMPLETED: ('✅', 'Interview Completed', 'Your interview for "{job}" has been completed.'),
    STATUS_SELECTED: ('🎯', "Congratulations! You've Been Selected", 'You\'ve been selected for "{job}"! An offer will follow soon.'),
    STATUS_OFFER_EXTENDED: ('📨', 'Job Offer Received!', 'Exciting news! You\'ve received a job offer for "{job}".'),
    STATUS_OFFER_ACCEPTED: ('🎉', 'Welcome Aboard!', 'Congratulations! You\'ve accepted the offer for "{job}". Welcome to the team!'),
    STATUS_OFFER_DECLINED: ('📋', 'Offer Status Update', 'You\'ve declined the offer for "{job}".'),
    STATUS_REJECTED: ('❌', 'Application Update', 'Your application for "{job}" was not selected this time.'),
    STATUS_WITHDRAWN: ('🔙', 'Application Withdrawn', 'Your application for "{job}" has been withdrawn.'),
}


def priority_for_status(status):
    if status == STATUS_SELECTED:
        return Notification.PRIORITY_HIGH
    if status == STATUS_REJECTED:
        return Notification.PRIORITY_MEDIUM
    return Notification.PRIORITY_LOW


class NotificationService:
    @staticmethod
    def create_notification(recipient, notification_type, title, link, message,
                            related_object=None, priority=None, data=None):
        return Notification.objects.create(
            recipient=recipient,
            notification_type=notification_type,
            title=title,
            link=link,
            message=message,
            priority=priority or Notification.PRIORITY_LOW,
            data=data or {},
            content_object=related_object
        )

    @staticmethod
    def notify_application_status(application, status):
        """Thông báo in-app cho ứng viên khi trạng thái đơn thay đổi"""
        from .utils import create_and_send_notification

        job_title = application.post.title or 'Job'
        label = STATUS_LABELS.get(status, status)
        emoji, title, message = STATUS_MESSAGES.get(
            status,
            ('📋', f'Application Status: {label}', 'Your application for "{job}" status changed to ' + label + '.'),
        )
        return create_and_send_notification(
            user=application.user,
            notification_type='application_status_changed',
            title=f'{emoji} {title}',
            link='/user-profile/applications',
            message=message.format(job=job_title),
            related_object=application,
            priority=priority_for_status(status),
            data={
                'application_id': application.id,
                'job_id': application.post_id,
                'status': status,
            },
        )

    @staticmethod
    def notify_new_application(application):
        """Thông báo cho nhà tuyển dụng khi có đơn ứng tuyển mới"""
        from .utils import create_and_send_notification

        post = application.post
        return create_and_send_notification(
            user=post.enterprise.user,
            notification_type='application_received',
            title='Có đơn ứng tuyển mới',
            link=f'/employer/posts/{post.id}',
            message=f'Bạn nhận được đơn ứng tuyển mới cho vị trí {post.title}',
            related_object=application,
            data={'application_id': application.id, 'job_id': post.id},
        )

    @staticmethod
    def queue_status_notifications(application_id, history_id, status):
        """
        Sau khi transaction commit: gửi email theo trạng thái (nếu có template)
        và tạo thông báo in-app. Không chặn luồng chính.
        """
        from . import tasks

        if event_type_for_status(status) is not None:
            transaction.on_commit(
                lambda: tasks.send_application_status_email.delay(application_id, history_id, status),
                robust=True,
            )
        else:
            logger.debug(f"Không có email cho trạng thái {status}, đơn #{application_id}")
        transaction.on_commit(
            lambda: tasks.create_status_notification.delay(application_id, status),
            robust=True,
        )

    @staticmethod
    def queue_new_application_notifications(application_id, history_id):
        from . import tasks

        NotificationService.queue_status_notifications(application_id, history_id, STATUS_PENDING)
        transaction.on_commit(lambda: tasks.notify_employer_new_application.delay(application_id), robust=True)

    @staticmethod
    def queue_interview_rescheduled(application_id, interview_id, previous_date, previous_time, reason):
        from . import tasks

        transaction.on_commit(
            lambda: tasks.send_interview_rescheduled_email.delay(
                application_id, interview_id, previous_date.isoformat(), previous_time, reason
            ),
            robust=True,
        )
