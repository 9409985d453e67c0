import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from applications.exceptions import InterviewNotFound
from applications.models import STATUS_INTERVIEW_COMPLETED, STATUS_INTERVIEW_SCHEDULED, STATUS_REVIEWED
from applications.services import ApplicationService
from notifications.services import NotificationService
from .models import Interview, InterviewFeedback, InterviewReschedule
from .serializers import (
    CancelInterviewSerializer,
    InterviewFeedbackSerializer,
    RescheduleInterviewSerializer,
    ScheduleInterviewSerializer,
)

logger = logging.getLogger(__name__)


def _get_interview(application, interview_id):
    interview = Interview.objects.select_for_update().filter(pk=interview_id, application=application).first()
    if interview is None:
        raise InterviewNotFound()
    return interview


class InterviewService:
    """
    Lên lịch / dời lịch / hủy / nhận xét phỏng vấn. Mỗi thao tác đổi trạng thái đơn
    đều đi qua ApplicationService.transition nên chỉ sinh đúng một bản ghi lịch sử.
    """

    @staticmethod
    def schedule(application_id, interview_spec, scheduled_by=None, notify=True):
        serializer = ScheduleInterviewSerializer(data=interview_spec)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            interview = Interview.objects.create(
                application=application,
                status=Interview.STATUS_SCHEDULED,
                scheduled_by=scheduled_by,
                created_at=timezone.now(),
                **data,
            )
            application.current_interview = interview
            application.save(update_fields=['current_interview', 'modified_at'])

            ApplicationService.transition(
                application.id,
                STATUS_INTERVIEW_SCHEDULED,
                notes=f"{interview.get_type_display()} interview scheduled for {interview.scheduled_date.isoformat()}",
                changed_by=scheduled_by,
                notify=notify,
            )

        logger.info(f"Đã lên lịch phỏng vấn #{interview.id} cho đơn #{application_id}")
        return ApplicationService.get_application_with_timeline(application_id)

    @staticmethod
    def reschedule(application_id, interview_id, new_date, new_time, reason, rescheduled_by=None, notify=True):
        serializer = RescheduleInterviewSerializer(data={
            'new_date': new_date,
            'new_time': new_time,
            'reason': reason,
        })
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            interview = _get_interview(application, interview_id)
            previous_date, previous_time = interview.scheduled_date, interview.scheduled_time

            InterviewReschedule.objects.create(
                interview=interview,
                previous_date=previous_date,
                previous_time=previous_time,
                reason=data['reason'],
                rescheduled_by=rescheduled_by,
                rescheduled_at=timezone.now(),
            )
            interview.scheduled_date = data['new_date']
            interview.scheduled_time = data['new_time']
            interview.status = Interview.STATUS_RESCHEDULED
            interview.save(update_fields=['scheduled_date', 'scheduled_time', 'status', 'updated_at'])

            application.current_interview = interview
            application.save(update_fields=['current_interview', 'modified_at'])

            ApplicationService.transition(
                application.id,
                STATUS_INTERVIEW_SCHEDULED,
                notes=(
                    f"Interview rescheduled from {previous_date.isoformat()} {previous_time} "
                    f"to {interview.scheduled_date.isoformat()} {interview.scheduled_time}. "
                    f"Reason: {data['reason']}"
                ),
                changed_by=rescheduled_by,
                notify=False,
            )
            if notify:
                NotificationService.queue_interview_rescheduled(
                    application.id, interview.id, previous_date, previous_time, data['reason']
                )

        logger.info(f"Đã dời lịch phỏng vấn #{interview_id} của đơn #{application_id}")
        return ApplicationService.get_application_with_timeline(application_id)

    @staticmethod
    def cancel(application_id, interview_id, reason='', cancelled_by=None):
        serializer = CancelInterviewSerializer(data={'reason': reason or ''})
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data['reason']

        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            interview = _get_interview(application, interview_id)
            interview.status = Interview.STATUS_CANCELLED
            interview.save(update_fields=['status', 'updated_at'])

            notes = f"Interview cancelled. Reason: {reason}" if reason else "Interview cancelled"
            ApplicationService.transition(
                application.id, STATUS_REVIEWED, notes=notes, changed_by=cancelled_by, notify=False
            )

        logger.info(f"Đã hủy lịch phỏng vấn #{interview_id} của đơn #{application_id}")
        return ApplicationService.get_application_with_timeline(application_id)

    @staticmethod
    def submit_feedback(application_id, interview_id, feedback, submitted_by):
        if submitted_by is None:
            raise ValidationError({'submitted_by': ['Feedback submitter is required']})
        serializer = InterviewFeedbackSerializer(data=feedback or {})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            interview = _get_interview(application, interview_id)

            defaults = dict(serializer.validated_data)
            defaults.update(submitted_by=submitted_by, submitted_at=timezone.now())
            saved, _ = InterviewFeedback.objects.update_or_create(interview=interview, defaults=defaults)

            interview.status = Interview.STATUS_COMPLETED
            interview.save(update_fields=['status', 'updated_at'])

            recommendation = saved.get_recommendation_display() if saved.recommendation else 'None'
            ApplicationService.transition(
                application.id,
                STATUS_INTERVIEW_COMPLETED,
                notes=f"Interview completed. Recommendation: {recommendation}",
                changed_by=submitted_by,
                notify=False,
            )

        logger.info(f"Đã ghi nhận xét phỏng vấn #{interview_id} của đơn #{application_id}")
        return ApplicationService.get_application_with_timeline(application_id)
