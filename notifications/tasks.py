import logging
from datetime import date, timedelta

from celery import shared_task
from django.utils import timezone

from applications.models import Application, StatusHistory
from interviews.models import Interview
from . import events
from .delivery import get_delivery_channel
from .email_templates import render_email

logger = logging.getLogger(__name__)

APPLICATION_RELATED = ('post__enterprise', 'user', 'current_interview')


def deliver_event(event, channel=None):
    """Render + gửi một NotificationEvent, trả về DeliveryResult"""
    rendered = render_email(event.event_type, event.payload)
    channel = channel or get_delivery_channel()
    return channel.send(event.recipient_email, rendered.subject, rendered.html, rendered.text)


def _load_application(application_id):
    application = Application.objects.select_related(*APPLICATION_RELATED).filter(pk=application_id).first()
    if application is None:
        logger.warning(f"Không tìm thấy đơn ứng tuyển #{application_id}, bỏ qua thông báo")
    return application


@shared_task(ignore_result=True)
def send_application_status_email(application_id, history_id, status):
    """
    Task gửi email cập nhật trạng thái đơn ứng tuyển.
    Kết quả được ghi vào đúng bản ghi lịch sử trạng thái (history_id).
    """
    event_type = events.event_type_for_status(status)
    if event_type is None:
        logger.info(f"Không có template email cho trạng thái {status}")
        return

    application = _load_application(application_id)
    if application is None:
        return

    event = events.build_application_event(application, event_type)
    if event is None:
        return

    try:
        result = deliver_event(event)
    except Exception as e:
        # lỗi render template
        logger.error(f"Lỗi khi dựng email {event_type} cho đơn #{application_id}: {str(e)}")
        StatusHistory.record_delivery(history_id, False, str(e))
        return

    StatusHistory.record_delivery(history_id, result.success, result.error)
    if result.success:
        logger.info(f"Đã gửi email {event_type} cho đơn #{application_id} sau {result.attempts} lần thử")
    else:
        logger.error(f"Gửi email {event_type} cho đơn #{application_id} thất bại: {result.error}")


@shared_task(ignore_result=True)
def send_interview_rescheduled_email(application_id, interview_id, previous_date, previous_time, reason):
    application = _load_application(application_id)
    if application is None:
        return
    interview = Interview.objects.filter(pk=interview_id, application_id=application_id).first()
    if interview is None:
        logger.warning(f"Không tìm thấy lịch phỏng vấn #{interview_id} của đơn #{application_id}")
        return

    event = events.build_application_event(
        application,
        events.INTERVIEW_RESCHEDULED,
        interview=interview,
        previous_date=date.fromisoformat(previous_date),
        previous_time=previous_time,
        reason=reason,
    )
    if event is None:
        return

    try:
        result = deliver_event(event)
    except Exception as e:
        logger.error(f"Lỗi khi gửi email dời lịch phỏng vấn #{interview_id}: {str(e)}")
        return
    if not result.success:
        logger.error(f"Gửi email dời lịch phỏng vấn #{interview_id} thất bại: {result.error}")


@shared_task(ignore_result=True)
def create_status_notification(application_id, status):
    """Task tạo thông báo in-app cho ứng viên khi trạng thái đơn thay đổi"""
    from .services import NotificationService

    application = _load_application(application_id)
    if application is None:
        return
    NotificationService.notify_application_status(application, status)


@shared_task(ignore_result=True)
def notify_employer_new_application(application_id):
    from .services import NotificationService

    application = _load_application(application_id)
    if application is None:
        return
    NotificationService.notify_new_application(application)


@shared_task
def send_interview_reminders():
    """
    Task định kỳ (celery beat): nhắc ứng viên về các buổi phỏng vấn diễn ra vào ngày mai
    """
    tomorrow = timezone.localdate() + timedelta(days=1)
    interviews = (
        Interview.objects
        .filter(
            scheduled_date=tomorrow,
            status__in=[Interview.STATUS_SCHEDULED, Interview.STATUS_RESCHEDULED],
        )
        .select_related('application__post__enterprise', 'application__user')
    )

    channel = get_delivery_channel()
    sent = 0
    for interview in interviews:
        event = events.build_application_event(
            interview.application, events.INTERVIEW_REMINDER, interview=interview
        )
        if event is None:
            continue
        try:
            result = deliver_event(event, channel=channel)
        except Exception as e:
            logger.error(f"Lỗi khi gửi nhắc lịch phỏng vấn #{interview.id}: {str(e)}")
            continue
        if result.success:
            sent += 1

    logger.info(f"Đã gửi {sent} email nhắc lịch phỏng vấn cho ngày {tomorrow}")
    return sent


@shared_task
def send_job_alerts(post_id):
    """Task gửi job alert cho những người dùng có tiêu chí phù hợp với tin tuyển dụng"""
    from enterprises.models import PostEntity
    from .job_alerts import JobAlertDispatcher, find_matching_users

    post = PostEntity.objects.select_related('enterprise', 'field').filter(pk=post_id).first()
    if post is None:
        logger.warning(f"Không tìm thấy tin tuyển dụng #{post_id}, bỏ qua job alert")
        return None

    users = find_matching_users(post)
    if not users:
        logger.info(f"Không có người dùng phù hợp cho job alert của tin #{post_id}")
        return {'total': 0, 'sent': 0, 'failed': 0, 'batches': 0}

    return JobAlertDispatcher().dispatch(post, users)
