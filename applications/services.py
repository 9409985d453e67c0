import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import Count, Prefetch
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from accounts.models import UserAccount
from enterprises.models import PostEntity
from notifications.services import NotificationService
from .exceptions import ApplicationNotFound
from .models import (
    APPLICATION_STATUS,
    STATUS_LABELS,
    STATUS_PENDING,
    Application,
    Evaluation,
    OfferDetails,
    StatusHistory,
)

logger = logging.getLogger(__name__)

APPLICATION_RELATED = ('post__enterprise', 'post__field', 'user', 'current_interview')


def timeline_queryset():
    from interviews.models import Interview

    return Application.objects.select_related(*APPLICATION_RELATED).prefetch_related(
        Prefetch('status_history', queryset=StatusHistory.objects.select_related('changed_by')),
        Prefetch(
            'interviews',
            queryset=Interview.objects.select_related('feedback').prefetch_related('reschedule_history'),
        ),
        'evaluations',
    )


class ApplicationService:
    """
    Vòng đời đơn ứng tuyển. Mọi thay đổi trạng thái đều đi qua transition()
    để sổ lịch sử trạng thái luôn khớp với Application.status.
    """

    @staticmethod
    def get_application(application_id, for_update=False):
        queryset = Application.objects.select_related(*APPLICATION_RELATED)
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        application = queryset.filter(pk=application_id).first()
        if application is None:
            raise ApplicationNotFound()
        return application

    @staticmethod
    def get_application_with_timeline(application_id):
        application = timeline_queryset().filter(pk=application_id).first()
        if application is None:
            raise ApplicationNotFound()
        return application

    @staticmethod
    def apply_to_job(post_id, user_id, send_notification=True, cover_letter='', source='', referral_code=''):
        post = PostEntity.objects.select_related('enterprise').filter(pk=post_id).first()
        if post is None:
            raise NotFound('Job not found')
        user = UserAccount.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFound('User not found')

        if Application.objects.filter(post=post, user=user).exists():
            raise ValidationError({'post': ['You have already applied for this job']})

        now = timezone.now()
        try:
            with transaction.atomic():
                application = Application.objects.create(
                    post=post,
                    user=user,
                    status=STATUS_PENDING,
                    cover_letter=cover_letter or '',
                    source=source or '',
                    referral_code=referral_code or '',
                    applied_at=now,
                    last_activity_at=now,
                )
                entry = StatusHistory.objects.create(
                    application=application,
                    status=STATUS_PENDING,
                    changed_at=now,
                    changed_by=user,
                    notes='Application submitted',
                )
                if send_notification:
                    NotificationService.queue_new_application_notifications(application.id, entry.id)
        except IntegrityError:
            raise ValidationError({'post': ['You have already applied for this job']})

        logger.info(f"User #{user.id} đã ứng tuyển tin #{post.id}, đơn #{application.id}")
        return ApplicationService.get_application_with_timeline(application.id)

    @staticmethod
    def transition(application_id, new_status, notes=None, changed_by=None, notify=True):
        """
        Chuyển đơn sang trạng thái mới (cho phép mọi cặp trạng thái), thêm một bản ghi
        lịch sử và cập nhật last_activity_at. Email / thông báo in-app được gửi sau commit.
        """
        if new_status not in STATUS_LABELS:
            raise ValidationError({
                'status': [f'Invalid status. Must be one of: {", ".join(key for key, _ in APPLICATION_STATUS)}']
            })

        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            now = timezone.now()
            old_status = application.status

            application.apply_status(new_status, now)
            entry = StatusHistory.objects.create(
                application=application,
                status=new_status,
                changed_at=now,
                changed_by=changed_by,
                notes=notes or '',
            )
            if notify:
                NotificationService.queue_status_notifications(application.id, entry.id, new_status)

        logger.info(f"Đơn #{application_id}: {old_status} → {new_status}")
        return ApplicationService.get_application_with_timeline(application_id)

    @staticmethod
    def update_status(application_id, new_status, notes=None, changed_by=None, send_notification=True):
        return ApplicationService.transition(
            application_id, new_status, notes=notes, changed_by=changed_by, notify=send_notification
        )

    @staticmethod
    def add_internal_notes(application_id, notes):
        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            application.internal_notes = notes or ''
            application.touch(extra_fields=['internal_notes'])
        return application

    @staticmethod
    def add_evaluation(application_id, evaluated_by, **scores):
        from .serializers import EvaluationSerializer

        serializer = EvaluationSerializer(data=scores)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            now = timezone.now()
            evaluation = serializer.save(application=application, evaluated_by=evaluated_by, evaluated_at=now)
            application.touch(now)
        logger.info(f"Đã thêm đánh giá #{evaluation.id} cho đơn #{application_id}")
        return evaluation

    @staticmethod
    def set_offer_details(application_id, **details):
        from .serializers import OfferDetailsSerializer

        serializer = OfferDetailsSerializer(data=details)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            application = ApplicationService.get_application(application_id, for_update=True)
            offer, _ = OfferDetails.objects.update_or_create(
                application=application, defaults=serializer.validated_data
            )
            application.touch()
        return offer

    @staticmethod
    def count_by_status(post_id):
        rows = (
            Application.objects.filter(post_id=post_id)
            .values('status')
            .annotate(count=Count('id'))
        )
        counts = {key: 0 for key, _ in APPLICATION_STATUS}
        for row in rows:
            counts[row['status']] = row['count']
        return counts

    @staticmethod
    def get_upcoming_interviews(days=7, post_ids=None):
        from interviews.models import Interview

        today = timezone.localdate()
        interviews = (
            Interview.objects
            .filter(
                status__in=[Interview.STATUS_SCHEDULED, Interview.STATUS_RESCHEDULED],
                scheduled_date__gte=today,
                scheduled_date__lte=today + timedelta(days=days),
            )
            .select_related('application__post__enterprise', 'application__user')
            .order_by('scheduled_date', 'scheduled_time')
        )
        if post_ids is not None:
            interviews = interviews.filter(application__post_id__in=post_ids)
        return interviews
