import re

from django.db import models
from model_utils import FieldTracker

from accounts.models import UserAccount


def strip_html_tags(text):
    if text:
        clean = re.compile('<.*?>')
        return re.sub(clean, '', text)
    return text


class EnterpriseEntity(models.Model):
    company_name = models.CharField(max_length=255, db_index=True)
    address = models.CharField(max_length=255, blank=True, default='')
    description = models.TextField(blank=True, default='')
    email_company = models.EmailField(max_length=255, blank=True, default='')
    logo_url = models.CharField(max_length=255, blank=True, null=True)
    phone_number = models.CharField(max_length=20, blank=True, default='')
    is_active = models.BooleanField(default=False, db_index=True)
    user = models.ForeignKey(UserAccount, on_delete=models.CASCADE, related_name='enterprises')
    city = models.CharField(max_length=255, db_index=True, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Doanh nghiệp'
        verbose_name_plural = 'Doanh nghiệp'
        indexes = [
            models.Index(fields=['company_name', 'city'], name='company_city_idx'),
        ]

    def __str__(self):
        return self.company_name

    def save(self, *args, **kwargs):
        self.description = strip_html_tags(self.description)
        super().save(*args, **kwargs)


class FieldEntity(models.Model):
    """Lĩnh vực / ngành nghề của tin tuyển dụng (category)"""
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=255, unique=True)
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive')
    ]
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        verbose_name = 'Lĩnh vực'
        verbose_name_plural = 'Lĩnh vực'


class PostEntity(models.Model):
    title = models.CharField(max_length=255, db_index=True)
    deadline = models.DateField(null=True, blank=True)
    enterprise = models.ForeignKey(EnterpriseEntity, on_delete=models.CASCADE, related_name='posts')
    field = models.ForeignKey(FieldEntity, on_delete=models.SET_NULL, null=True, blank=True, related_name='posts')
    required = models.TextField(default='', blank=True)  # kỹ năng yêu cầu
    salary_range = models.CharField(max_length=100, default='', blank=True)  # dạng tự do, vd "50,000-80,000 BDT"
    type_working = models.CharField(max_length=50, db_index=True, default='Full Time')
    city = models.CharField(max_length=100, db_index=True, blank=True, default='')
    description = models.TextField(default='', blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    modified_at = models.DateTimeField(auto_now=True)
    is_active = models.BooleanField(default=False, db_index=True)
    job_alerts_sent = models.BooleanField(default=False)
    tracker = FieldTracker(fields=['is_active'])

    def __str__(self):
        return self.title

    @property
    def company_name(self):
        return self.enterprise.company_name

    def save(self, *args, **kwargs):
        self.description = strip_html_tags(self.description)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'posts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['title', 'city', 'type_working']),
        ]


class JobAlertCriteria(models.Model):
    """
    Tiêu chí nhận job alert của người dùng.
    Các danh sách rỗng / min_salary = 0 nghĩa là không lọc theo tiêu chí đó.
    """
    user = models.OneToOneField(UserAccount, on_delete=models.CASCADE, related_name='job_alert_criteria')
    enabled = models.BooleanField(default=True)
    categories = models.JSONField(default=list, blank=True)
    locations = models.JSONField(default=list, blank=True)
    job_types = models.JSONField(default=list, blank=True)
    keywords = models.JSONField(default=list, blank=True)
    min_salary = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Job alert criteria for {self.user.username}"

    class Meta:
        verbose_name = 'Tiêu chí job alert'
        verbose_name_plural = 'Tiêu chí job alert'
