from dataclasses import dataclass

from django.template.loader import render_to_string
from django.utils.html import strip_tags

from . import events


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


# event_type -> (template, subject)
EMAIL_TEMPLATES = {
    events.APPLICATION_RECEIVED: (
        'notifications/email/application_received.html',
        'Application Received - {job_title} at {company_name}',
    ),
    events.APPLICATION_REVIEWED: (
        'notifications/email/application_reviewed.html',
        'Application Reviewed - {job_title} at {company_name}',
    ),
    events.APPLICATION_SHORTLISTED: (
        'notifications/email/application_shortlisted.html',
        "🎉 Congratulations! You're Shortlisted - {job_title}",
    ),
    events.INTERVIEW_SCHEDULED: (
        'notifications/email/interview_scheduled.html',
        '📅 Interview Scheduled - {job_title} at {company_name}',
    ),
    events.INTERVIEW_RESCHEDULED: (
        'notifications/email/interview_rescheduled.html',
        '🔄 Interview Rescheduled - {job_title} at {company_name}',
    ),
    events.INTERVIEW_REMINDER: (
        'notifications/email/interview_reminder.html',
        '⏰ Interview Reminder - {job_title} at {company_name}',
    ),
    events.APPLICATION_SELECTED: (
        'notifications/email/application_selected.html',
        "🎊 Congratulations! You're Selected - {job_title}",
    ),
    events.OFFER_EXTENDED: (
        'notifications/email/application_selected.html',
        "🎊 Congratulations! You're Selected - {job_title}",
    ),
    events.APPLICATION_REJECTED: (
        'notifications/email/application_rejected.html',
        'Application Update - {job_title} at {company_name}',
    ),
    events.JOB_ALERT: (
        'notifications/email/job_alert.html',
        '🔔 New Job: {job_title} at {company_name}',
    ),
}


def render_email(event_type, context):
    """
    Dựng subject + nội dung HTML (và bản text) cho một loại sự kiện.
    Không có side effect; loại sự kiện không hỗ trợ -> ValueError.
    """
    try:
        template_name, subject_pattern = EMAIL_TEMPLATES[event_type]
    except KeyError:
        raise ValueError(f"Unsupported email event type: {event_type}")

    subject = subject_pattern.format(
        job_title=context.get('job_title', ''),
        company_name=context.get('company_name', ''),
    )
    html = render_to_string(template_name, context)
    text = '\n'.join(line.strip() for line in strip_tags(html).splitlines() if line.strip())
    return RenderedEmail(subject=subject, html=html, text=text)
