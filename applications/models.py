import logging

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import DatabaseError, models
from django.db.models import Avg
from django.utils import timezone
from model_utils import FieldTracker

from accounts.models import UserAccount
from enterprises.models import PostEntity
from .exceptions import LedgerEntryImmutable, StatusChangeNotAllowed

logger = logging.getLogger(__name__)

STATUS_PENDING = 'pending'
STATUS_REVIEWED = 'reviewed'
STATUS_SHORTLISTED = 'shortlisted'
STATUS_INTERVIEW_SCHEDULED = 'interview_scheduled'
STATUS_INTERVIEW_COMPLETED = 'interview_completed'
STATUS_SELECTED = 'selected'
STATUS_REJECTED = 'rejected'
STATUS_OFFER_EXTENDED = 'offer_extended'
STATUS_OFFER_ACCEPTED = 'offer_accepted'
STATUS_OFFER_DECLINED = 'offer_declined'
STATUS_WITHDRAWN = 'withdrawn'

APPLICATION_STATUS = (
    (STATUS_PENDING, 'Pending'),
    (STATUS_REVIEWED, 'Reviewed'),
    (STATUS_SHORTLISTED, 'Shortlisted'),
    (STATUS_INTERVIEW_SCHEDULED, 'Interview Scheduled'),
    (STATUS_INTERVIEW_COMPLETED, 'Interview Completed'),
    (STATUS_SELECTED, 'Selected'),
    (STATUS_REJECTED, 'Rejected'),
    (STATUS_OFFER_EXTENDED, 'Offer Extended'),
    (STATUS_OFFER_ACCEPTED, 'Offer Accepted'),
    (STATUS_OFFER_DECLINED, 'Offer Declined'),
    (STATUS_WITHDRAWN, 'Withdrawn'),
)
STATUS_LABELS = dict(APPLICATION_STATUS)


class Application(models.Model):
    post = models.ForeignKey(PostEntity, on_delete=models.CASCADE, related_name='applications')
    user = models.ForeignKey(UserAccount, on_delete=models.CASCADE, related_name='applications')
    status = models.CharField(max_length=30, choices=APPLICATION_STATUS, default=STATUS_PENDING, db_index=True)
    current_interview = models.ForeignKey(
        'interviews.Interview', on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    cover_letter = models.TextField(blank=True, default='')
    internal_notes = models.TextField(blank=True, default='')
    source = models.CharField(max_length=100, blank=True, default='')
    referral_code = models.CharField(max_length=100, blank=True, default='')
    resume_version = models.PositiveIntegerField(default=1)

    applied_at = models.DateTimeField(default=timezone.now, db_index=True)
    last_activity_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    tracker = FieldTracker(fields=['status'])

    class Meta:
        unique_together = ('post', 'user')
        ordering = ['-applied_at']
        verbose_name = 'Đơn ứng tuyển'
        verbose_name_plural = 'Đơn ứng tuyển'
        indexes = [
            models.Index(fields=['post', 'status']),
            models.Index(fields=['user', 'status']),
        ]

    def __str__(self):
        return f"{self.user} - {self.post} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if (
            not self._state.adding
            and self.tracker.has_changed('status')
            and not getattr(self, '_status_transition', False)
        ):
            raise StatusChangeNotAllowed(
                f"Application #{self.pk}: status must be changed through ApplicationService.transition"
            )
        super().save(*args, **kwargs)

    def apply_status(self, new_status, changed_at):
        """Ghi trạng thái mới. Chỉ ApplicationService.transition được gọi."""
        self.status = new_status
        self.last_activity_at = changed_at
        self._status_transition = True
        try:
            self.save(update_fields=['status', 'last_activity_at', 'modified_at'])
        finally:
            self._status_transition = False

    def touch(self, at=None, extra_fields=()):
        self.last_activity_at = at or timezone.now()
        self.save(update_fields=['last_activity_at', 'modified_at', *extra_fields])

    @property
    def average_score(self):
        result = self.evaluations.aggregate(avg=Avg('overall_score'))
        if result['avg'] is None:
            return None
        return round(result['avg'], 1)

    @property
    def upcoming_interview(self):
        from interviews.models import Interview

        return (
            self.interviews
            .filter(
                status__in=[Interview.STATUS_SCHEDULED, Interview.STATUS_RESCHEDULED],
                scheduled_date__gte=timezone.localdate(),
            )
            .order_by('scheduled_date', 'scheduled_time')
            .first()
        )

    @property
    def days_since_application(self):
        return (timezone.now() - self.applied_at).days


class StatusHistory(models.Model):
    """
    Sổ lịch sử trạng thái của đơn ứng tuyển, chỉ được thêm mới.
    Sau khi ghi chỉ có notification_sent / notification_error được cập nhật (qua record_delivery).
    """
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=30, choices=APPLICATION_STATUS)
    changed_at = models.DateTimeField(default=timezone.now)
    changed_by = models.ForeignKey(
        UserAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    notes = models.TextField(blank=True, default='')
    notification_sent = models.BooleanField(default=False)
    notification_error = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['changed_at', 'id']
        verbose_name = 'Lịch sử trạng thái'
        verbose_name_plural = 'Lịch sử trạng thái'

    def __str__(self):
        return f"#{self.application_id} → {self.get_status_display()} at {self.changed_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise LedgerEntryImmutable(f"Status history entry #{self.pk} cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise LedgerEntryImmutable(f"Status history entry #{self.pk} cannot be deleted")

    @classmethod
    def record_delivery(cls, entry_id, success, error=None):
        """Ghi kết quả gửi email vào đúng bản ghi lịch sử. Lỗi DB chỉ log."""
        try:
            cls.objects.filter(pk=entry_id).update(
                notification_sent=success,
                notification_error='' if success else (error or ''),
            )
        except DatabaseError as e:
            logger.error(f"Không thể ghi kết quả gửi email cho lịch sử #{entry_id}: {str(e)}")


class Evaluation(models.Model):
    RECOMMENDATION_CHOICES = (
        ('strongly_recommend', 'Strongly Recommend'),
        ('recommend', 'Recommend'),
        ('neutral', 'Neutral'),
        ('not_recommend', 'Not Recommend'),
    )
    score_validators = [MinValueValidator(1), MaxValueValidator(10)]

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='evaluations')
    evaluated_by = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, related_name='+')
    evaluated_at = models.DateTimeField(default=timezone.now)
    technical_skills = models.PositiveSmallIntegerField(null=True, blank=True, validators=score_validators)
    communication = models.PositiveSmallIntegerField(null=True, blank=True, validators=score_validators)
    experience = models.PositiveSmallIntegerField(null=True, blank=True, validators=score_validators)
    cultural_fit = models.PositiveSmallIntegerField(null=True, blank=True, validators=score_validators)
    overall_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=score_validators)
    recommendation = models.CharField(max_length=30, choices=RECOMMENDATION_CHOICES, blank=True, default='')
    comments = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['evaluated_at', 'id']
        verbose_name = 'Đánh giá ứng viên'
        verbose_name_plural = 'Đánh giá ứng viên'


class OfferDetails(models.Model):
    application = models.OneToOneField(Application, on_delete=models.CASCADE, related_name='offer_details')
    salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default='BDT')
    joining_date = models.DateField(null=True, blank=True)
    offer_letter_url = models.URLField(blank=True, default='')
    offer_sent_at = models.DateTimeField(null=True, blank=True)
    offer_expires_at = models.DateTimeField(null=True, blank=True)
    response_received_at = models.DateTimeField(null=True, blank=True)
    negotiation_notes = models.TextField(blank=True, default='')
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Thông tin offer'
        verbose_name_plural = 'Thông tin offer'

    def __str__(self):
        return f"Offer for application #{self.application_id}"
