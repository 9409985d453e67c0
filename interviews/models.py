# interviews/models.py
from dataclasses import asdict, dataclass

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.timezone import now

from accounts.models import UserAccount


@dataclass(frozen=True)
class OnlineDetails:
    meeting_link: str
    meeting_platform: str
    meeting_id: str
    meeting_password: str
    is_online: bool = True

    def as_payload(self):
        return asdict(self)


@dataclass(frozen=True)
class OfflineDetails:
    location: str
    room_number: str
    contact_person: str
    contact_phone: str
    is_online: bool = False

    def as_payload(self):
        return asdict(self)


ONLINE_FIELDS = ('meeting_link', 'meeting_platform', 'meeting_id', 'meeting_password')
OFFLINE_FIELDS = ('location', 'room_number', 'contact_person', 'contact_phone')


class Interview(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_RESCHEDULED = 'rescheduled'
    STATUS_NO_SHOW = 'no_show'

    INTERVIEW_STATUS = (
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_RESCHEDULED, 'Rescheduled'),
        (STATUS_NO_SHOW, 'No Show'),
    )
    INTERVIEW_TYPES = (
        ('online', 'Online'),
        ('offline', 'Offline'),
        ('phone', 'Phone'),
        ('technical', 'Technical'),
        ('hr', 'HR'),
        ('final', 'Final'),
    )
    MEETING_PLATFORMS = (
        ('zoom', 'Zoom'),
        ('google_meet', 'Google Meet'),
        ('microsoft_teams', 'Microsoft Teams'),
        ('other', 'Other'),
    )

    application = models.ForeignKey('applications.Application', on_delete=models.CASCADE, related_name='interviews')
    type = models.CharField(max_length=20, choices=INTERVIEW_TYPES)
    status = models.CharField(max_length=20, choices=INTERVIEW_STATUS, default=STATUS_SCHEDULED, db_index=True)

    scheduled_date = models.DateField(db_index=True)
    scheduled_time = models.CharField(max_length=20)  # HH:MM
    duration = models.PositiveIntegerField(default=60)  # phút
    timezone = models.CharField(max_length=64, default='Asia/Dhaka')

    is_online = models.BooleanField(default=False)
    # Phỏng vấn online
    meeting_link = models.URLField(blank=True, default='')
    meeting_platform = models.CharField(max_length=30, choices=MEETING_PLATFORMS, blank=True, default='')
    meeting_id = models.CharField(max_length=100, blank=True, default='')
    meeting_password = models.CharField(max_length=100, blank=True, default='')
    # Phỏng vấn trực tiếp
    location = models.CharField(max_length=255, blank=True, default='')
    room_number = models.CharField(max_length=50, blank=True, default='')
    contact_person = models.CharField(max_length=255, blank=True, default='')
    contact_phone = models.CharField(max_length=30, blank=True, default='')

    interviewers = models.JSONField(default=list, blank=True)
    instructions = models.TextField(blank=True, default='')
    internal_notes = models.TextField(blank=True, default='')

    scheduled_by = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(default=now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']
        verbose_name = 'Lịch phỏng vấn'
        verbose_name_plural = 'Lịch phỏng vấn'

    def __str__(self):
        return f"{self.get_type_display()} interview #{self.pk} on {self.scheduled_date} {self.scheduled_time}"

    @property
    def details(self):
        if self.is_online:
            return OnlineDetails(
                meeting_link=self.meeting_link,
                meeting_platform=self.get_meeting_platform_display() if self.meeting_platform else '',
                meeting_id=self.meeting_id,
                meeting_password=self.meeting_password,
            )
        return OfflineDetails(
            location=self.location,
            room_number=self.room_number,
            contact_person=self.contact_person,
            contact_phone=self.contact_phone,
        )

    @property
    def is_active(self):
        return self.status in (self.STATUS_SCHEDULED, self.STATUS_RESCHEDULED)


class InterviewReschedule(models.Model):
    """Lịch sử dời lịch: lưu ngày/giờ trước khi dời"""
    interview = models.ForeignKey(Interview, on_delete=models.CASCADE, related_name='reschedule_history')
    previous_date = models.DateField()
    previous_time = models.CharField(max_length=20)
    reason = models.TextField()
    rescheduled_by = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    rescheduled_at = models.DateTimeField(default=now)

    class Meta:
        ordering = ['rescheduled_at', 'id']
        verbose_name = 'Lịch sử dời lịch'
        verbose_name_plural = 'Lịch sử dời lịch'


class InterviewFeedback(models.Model):
    RECOMMENDATION_CHOICES = (
        ('hire', 'Hire'),
        ('reject', 'Reject'),
        ('next_round', 'Next Round'),
        ('hold', 'Hold'),
    )

    interview = models.OneToOneField(Interview, on_delete=models.CASCADE, related_name='feedback')
    rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)])
    strengths = models.JSONField(default=list, blank=True)
    improvements = models.JSONField(default=list, blank=True)
    recommendation = models.CharField(max_length=20, choices=RECOMMENDATION_CHOICES, blank=True, default='')
    comments = models.TextField(blank=True, default='')
    submitted_by = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, related_name='+')
    submitted_at = models.DateTimeField(default=now)

    class Meta:
        verbose_name = 'Nhận xét phỏng vấn'
        verbose_name_plural = 'Nhận xét phỏng vấn'
