import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.utils import timezone

from applications.models import (
    OfferDetails,
    STATUS_INTERVIEW_SCHEDULED,
    STATUS_OFFER_EXTENDED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUS_REVIEWED,
    STATUS_SELECTED,
    STATUS_SHORTLISTED,
)

logger = logging.getLogger(__name__)

APPLICATION_RECEIVED = 'APPLICATION_RECEIVED'
APPLICATION_REVIEWED = 'APPLICATION_REVIEWED'
APPLICATION_SHORTLISTED = 'APPLICATION_SHORTLISTED'
INTERVIEW_SCHEDULED = 'INTERVIEW_SCHEDULED'
INTERVIEW_RESCHEDULED = 'INTERVIEW_RESCHEDULED'
INTERVIEW_REMINDER = 'INTERVIEW_REMINDER'
APPLICATION_SELECTED = 'APPLICATION_SELECTED'
OFFER_EXTENDED = 'OFFER_EXTENDED'
APPLICATION_REJECTED = 'APPLICATION_REJECTED'
JOB_ALERT = 'JOB_ALERT'

# Trạng thái không có trong bảng này thì không gửi email
STATUS_EVENT_TYPES = {
    STATUS_PENDING: APPLICATION_RECEIVED,
    STATUS_REVIEWED: APPLICATION_REVIEWED,
    STATUS_SHORTLISTED: APPLICATION_SHORTLISTED,
    STATUS_INTERVIEW_SCHEDULED: INTERVIEW_SCHEDULED,
    STATUS_SELECTED: APPLICATION_SELECTED,
    STATUS_OFFER_EXTENDED: OFFER_EXTENDED,
    STATUS_REJECTED: APPLICATION_REJECTED,
}

INTERVIEW_EVENTS = (INTERVIEW_SCHEDULED, INTERVIEW_RESCHEDULED, INTERVIEW_REMINDER)
OFFER_EVENTS = (APPLICATION_SELECTED, OFFER_EXTENDED)


@dataclass
class NotificationEvent:
    event_type: str
    recipient_email: str
    recipient_name: str
    application_id: int = None
    payload: dict = field(default_factory=dict)


def event_type_for_status(status):
    return STATUS_EVENT_TYPES.get(status)


def get_job_summary(post):
    return {
        'title': post.title,
        'company_name': post.enterprise.company_name if post.enterprise_id else '',
    }


def get_user_summary(user):
    return {
        'name': user.get_full_name(),
        'email': user.email,
    }


def interview_payload(interview):
    payload = {
        'interview_id': interview.id,
        'interview_type': interview.get_type_display(),
        'interview_date': interview.scheduled_date,
        'interview_time': interview.scheduled_time,
        'duration': interview.duration,
        'timezone': interview.timezone,
        'instructions': interview.instructions,
    }
    payload.update(interview.details.as_payload())
    return payload


def offer_payload(application):
    offer = OfferDetails.objects.filter(application=application).first()
    if offer is None:
        return {}
    return {
        'salary': offer.salary,
        'currency': offer.currency,
        'joining_date': offer.joining_date,
        'offer_letter_url': offer.offer_letter_url,
        'offer_expires_at': offer.offer_expires_at,
    }


def build_application_event(application, event_type, interview=None, **extra):
    """
    Gom dữ liệu ứng viên / tin tuyển dụng / lịch phỏng vấn / offer thành NotificationEvent.
    Trả về None nếu thiếu email ứng viên hoặc tiêu đề công việc.
    """
    applicant = get_user_summary(application.user)
    job = get_job_summary(application.post)
    if not applicant['email'] or not job['title']:
        logger.error(
            f"Thiếu thông tin ứng viên hoặc công việc cho đơn #{application.id}, bỏ qua email {event_type}"
        )
        return None

    payload = {
        'candidate_name': applicant['name'],
        'job_title': job['title'],
        'company_name': job['company_name'],
        'application_id': application.id,
        'timestamp': timezone.now(),
        'dashboard_url': f"{settings.FRONTEND_URL}/user-profile/applications",
    }
    if event_type in INTERVIEW_EVENTS:
        interview = interview or application.current_interview
        if interview is not None:
            payload.update(interview_payload(interview))
    if event_type in OFFER_EVENTS:
        payload.update(offer_payload(application))
    payload.update(extra)

    return NotificationEvent(
        event_type=event_type,
        recipient_email=applicant['email'],
        recipient_name=applicant['name'],
        application_id=application.id,
        payload=payload,
    )
