import logging
import math
import re
import time

from django.conf import settings
from django.db import transaction

from accounts.models import UserAccount
from . import events
from .delivery import EmailDeliveryChannel
from .email_templates import render_email

logger = logging.getLogger(__name__)

SALARY_NUMBER = re.compile(r'\d[\d,]*')


def extract_salary(salary_range):
    """Số đầu tiên trong chuỗi lương tự do ("৳50,000 - 80,000" -> 50000), không có thì 0"""
    if not salary_range:
        return 0
    match = SALARY_NUMBER.search(salary_range)
    if not match:
        return 0
    return int(match.group(0).replace(',', ''))


def _post_category(post):
    return post.field.name if post.field_id else ''


def _post_text(post):
    return ' '.join([
        post.title or '',
        post.description or '',
        post.company_name or '',
        post.required or '',
    ]).lower()


def matches_criteria(criteria, post):
    """
    Kiểm tra tin tuyển dụng có khớp tiêu chí job alert không.
    Tiêu chí trống thì bỏ qua; tin không có category / city / loại hình thì không lọc theo chiều đó.
    """
    if not criteria.enabled:
        return False

    category = _post_category(post).lower()
    if criteria.categories and category:
        if not any(cat.lower() == category for cat in criteria.categories):
            return False

    city = (post.city or '').lower()
    if criteria.locations and city:
        if not any(loc.lower() in city or city in loc.lower() for loc in criteria.locations):
            return False

    job_type = (post.type_working or '').lower()
    if criteria.job_types and job_type:
        if not any(t.lower() == job_type for t in criteria.job_types):
            return False

    if criteria.keywords:
        text = _post_text(post)
        if not any(keyword.lower() in text for keyword in criteria.keywords):
            return False

    if criteria.min_salary and criteria.min_salary > 0:
        if extract_salary(post.salary_range) < criteria.min_salary:
            return False

    return True


def find_matching_users(post):
    candidates = (
        UserAccount.objects
        .filter(is_active=True, is_banned=False, job_alert_criteria__enabled=True)
        .select_related('job_alert_criteria')
    )
    users = [user for user in candidates if matches_criteria(user.job_alert_criteria, post)]
    logger.info(f"Tìm thấy {len(users)} người dùng phù hợp với tin tuyển dụng: {post.title}")
    return users


def build_job_alert_context(post, user):
    job = events.get_job_summary(post)
    return {
        'user_name': user.get_full_name() or 'there',
        'job_title': job['title'],
        'company_name': job['company_name'],
        'location': post.city,
        'job_type': post.type_working,
        'category': _post_category(post),
        'salary_range': post.salary_range,
        'deadline': post.deadline,
        'skills': post.required,
        'description': post.description,
        'job_url': f"{settings.FRONTEND_URL}/job/{post.id}",
        'manage_alerts_url': f"{settings.FRONTEND_URL}/user-profile/job-alerts",
    }


class JobAlertDispatcher:
    """
    Gửi job alert theo lô: gửi tuần tự từng email, nghỉ email_delay sau mỗi email,
    nghỉ batch_delay giữa các lô (không nghỉ sau lô cuối). Lỗi từng người nhận chỉ được đếm.
    """

    def __init__(self, batch_size=None, email_delay=None, batch_delay=None, sleep=time.sleep, channel=None):
        conf = getattr(settings, 'JOB_ALERT_SETTINGS', {})
        self.batch_size = batch_size or conf.get('BATCH_SIZE', 20)
        self.email_delay = conf.get('EMAIL_DELAY', 0.1) if email_delay is None else email_delay
        self.batch_delay = conf.get('BATCH_DELAY', 3.0) if batch_delay is None else batch_delay
        self.sleep = sleep
        # job alert chỉ gửi một lần, không thử lại
        self.channel = channel or EmailDeliveryChannel(max_retries=0, sleep=sleep)

    def batches(self, users):
        for start in range(0, len(users), self.batch_size):
            yield users[start:start + self.batch_size]

    def send_alert(self, post, user):
        try:
            rendered = render_email(events.JOB_ALERT, build_job_alert_context(post, user))
        except Exception as e:
            logger.error(f"Lỗi khi dựng email job alert cho {user.email}: {str(e)}")
            return False
        result = self.channel.send(user.email, rendered.subject, rendered.html, rendered.text)
        return result.success

    def dispatch(self, post, users):
        users = list(users)
        total_batches = math.ceil(len(users) / self.batch_size) if users else 0
        sent = failed = 0

        logger.info(f"Bắt đầu gửi job alert cho {len(users)} người dùng ({total_batches} lô), tin: {post.title}")
        for index, batch in enumerate(self.batches(users), start=1):
            for user in batch:
                if self.send_alert(post, user):
                    sent += 1
                else:
                    failed += 1
                if self.email_delay:
                    self.sleep(self.email_delay)
            logger.info(f"Hoàn thành lô {index}/{total_batches}")
            if index < total_batches and self.batch_delay:
                self.sleep(self.batch_delay)

        summary = {'total': len(users), 'sent': sent, 'failed': failed, 'batches': total_batches}
        logger.info(f"Kết quả gửi job alert cho tin #{post.id}: {summary}")
        return summary


def dispatch_job_alerts(post):
    """Lên lịch gửi job alert sau khi transaction commit, không chặn luồng đăng tin"""
    from .tasks import send_job_alerts

    post_id = post.id
    transaction.on_commit(lambda: send_job_alerts.delay(post_id), robust=True)
