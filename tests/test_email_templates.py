import datetime

import pytest

from notifications import events
from notifications.email_templates import EMAIL_TEMPLATES, render_email


@pytest.fixture
def context():
    return {
        'candidate_name': 'Rahim Uddin',
        'job_title': 'Backend Developer',
        'company_name': 'Acme Labs',
        'application_id': 42,
        'timestamp': datetime.datetime(2030, 5, 1, 9, 0),
        'dashboard_url': 'http://localhost:5173/user-profile/applications',
    }


class TestRenderEmail:

    @pytest.mark.parametrize('event_type, subject', [
        (events.APPLICATION_RECEIVED, 'Application Received - Backend Developer at Acme Labs'),
        (events.APPLICATION_REVIEWED, 'Application Reviewed - Backend Developer at Acme Labs'),
        (events.APPLICATION_SHORTLISTED, "🎉 Congratulations! You're Shortlisted - Backend Developer"),
        (events.APPLICATION_SELECTED, "🎊 Congratulations! You're Selected - Backend Developer"),
        (events.APPLICATION_REJECTED, 'Application Update - Backend Developer at Acme Labs'),
    ])
    def test_subjects(self, context, event_type, subject):
        rendered = render_email(event_type, context)
        assert rendered.subject == subject

    def test_every_event_type_renders(self, context):
        for event_type in EMAIL_TEMPLATES:
            rendered = render_email(event_type, context)
            assert 'Backend Developer' in rendered.html
            assert '<' not in rendered.text

    def test_received_body(self, context):
        rendered = render_email(events.APPLICATION_RECEIVED, context)

        assert 'Dear Rahim Uddin' in rendered.html
        assert '#42' in rendered.html
        assert 'May 1, 2030' in rendered.html
        assert 'http://localhost:5173/user-profile/applications' in rendered.html

    def test_offline_interview_venue(self, context):
        context.update({
            'interview_type': 'HR',
            'interview_date': datetime.date(2030, 6, 1),
            'interview_time': '14:00',
            'duration': 45,
            'timezone': 'Asia/Dhaka',
            'is_online': False,
            'location': 'House 12, Road 5, Dhanmondi',
        })
        rendered = render_email(events.INTERVIEW_SCHEDULED, context)

        assert 'Saturday, June 1, 2030' in rendered.html
        assert 'House 12, Road 5, Dhanmondi' in rendered.html
        assert 'Online Meeting Details' not in rendered.html

    def test_rejection_feedback_optional(self, context):
        without = render_email(events.APPLICATION_REJECTED, context)
        with_feedback = render_email(events.APPLICATION_REJECTED, dict(context, feedback='Needs more Django experience'))

        assert 'Needs more Django experience' not in without.html
        assert 'Needs more Django experience' in with_feedback.html

    def test_html_is_escaped(self, context):
        context['candidate_name'] = '<script>alert(1)</script>'
        rendered = render_email(events.APPLICATION_RECEIVED, context)
        assert '<script>' not in rendered.html

    def test_unknown_event_type(self, context):
        with pytest.raises(ValueError):
            render_email('INTERVIEW_CANCELLED', context)

    def test_job_alert(self):
        rendered = render_email(events.JOB_ALERT, {
            'user_name': 'Rahim',
            'job_title': 'Data Analyst',
            'company_name': 'Beta Corp',
            'location': 'Chittagong',
            'salary_range': '40,000 BDT',
            'job_url': 'http://localhost:5173/job/7',
            'manage_alerts_url': 'http://localhost:5173/user-profile/job-alerts',
        })

        assert rendered.subject == '🔔 New Job: Data Analyst at Beta Corp'
        assert 'Hi Rahim' in rendered.html
        assert 'http://localhost:5173/job/7' in rendered.html
        assert 'Chittagong' in rendered.text
