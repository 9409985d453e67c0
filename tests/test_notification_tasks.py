import datetime

import pytest
from django.utils import timezone

from applications.models import STATUS_REJECTED, STATUS_SELECTED, STATUS_SHORTLISTED, StatusHistory
from applications.services import ApplicationService
from interviews.models import Interview
from interviews.services import InterviewService
from notifications import events, tasks
from notifications.delivery import DeliveryResult
from notifications.models import Notification
from notifications.services import NotificationService


class StubChannel:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def send(self, recipient, subject, html_body, text_body=None):
        self.calls.append((recipient, subject))
        return self.result


@pytest.fixture
def failing_channel(monkeypatch):
    channel = StubChannel(DeliveryResult(success=False, attempts=4, error='Connection refused'))
    monkeypatch.setattr(tasks, 'get_delivery_channel', lambda **kwargs: channel)
    return channel


@pytest.mark.django_db
class TestStatusEmailTask:

    def test_failure_recorded_on_ledger_entry(self, application, failing_channel):
        updated = ApplicationService.transition(application.id, STATUS_SHORTLISTED, notify=False)
        entry = updated.status_history.last()

        tasks.send_application_status_email(application.id, entry.id, STATUS_SHORTLISTED)

        entry.refresh_from_db()
        assert entry.notification_sent is False
        assert entry.notification_error == 'Connection refused'
        assert failing_channel.calls == [(application.user.email, "🎉 Congratulations! You're Shortlisted - Backend Developer")]

    def test_failure_does_not_change_application(self, application, failing_channel,
                                                 django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            updated = ApplicationService.update_status(application.id, STATUS_REJECTED, notes='Position filled')

        assert updated.status == STATUS_REJECTED
        entry = StatusHistory.objects.filter(application=application).last()
        assert entry.status == STATUS_REJECTED
        assert entry.notification_error == 'Connection refused'

    def test_render_error_recorded(self, application, monkeypatch):
        def broken_render(event_type, context):
            raise ValueError('template missing')

        monkeypatch.setattr(tasks, 'render_email', broken_render)
        entry = application.status_history.first()

        tasks.send_application_status_email(application.id, entry.id, entry.status)

        entry.refresh_from_db()
        assert entry.notification_sent is False
        assert entry.notification_error == 'template missing'

    def test_missing_email_skips_delivery(self, application, failing_channel):
        application.user.email = ''
        application.user.save(update_fields=['email'])
        entry = application.status_history.first()

        tasks.send_application_status_email(application.id, entry.id, entry.status)

        assert failing_channel.calls == []

    def test_unknown_application_is_ignored(self, db, failing_channel):
        tasks.send_application_status_email(424242, 1, STATUS_SHORTLISTED)
        assert failing_channel.calls == []

    def test_selected_email_includes_offer(self, application, mailoutbox):
        ApplicationService.set_offer_details(application.id, salary='85000', joining_date='2030-08-01')
        updated = ApplicationService.transition(application.id, STATUS_SELECTED, notify=False)

        tasks.send_application_status_email(application.id, updated.status_history.last().id, STATUS_SELECTED)

        assert len(mailoutbox) == 1
        html = mailoutbox[0].alternatives[0][0]
        assert '85,000' in html or '85000' in html
        assert 'August 1, 2030' in html


@pytest.mark.django_db
class TestApplicationEvents:

    def test_interview_event_payload(self, application, online_interview_spec):
        result = InterviewService.schedule(application.id, online_interview_spec, notify=False)

        event = events.build_application_event(result, events.INTERVIEW_SCHEDULED)

        assert event.recipient_email == application.user.email
        assert event.payload['interview_date'] == datetime.date(2030, 5, 20)
        assert event.payload['interview_time'] == '10:30'
        assert event.payload['meeting_link'] == 'https://meet.example.com/abc-defg-hij'
        assert event.payload['is_online'] is True
        assert event.payload['company_name'] == 'Acme Labs'

    def test_status_without_event(self):
        assert events.event_type_for_status('interview_completed') is None
        assert events.event_type_for_status('withdrawn') is None
        assert events.event_type_for_status(STATUS_SHORTLISTED) == events.APPLICATION_SHORTLISTED


@pytest.mark.django_db
class TestInAppNotifications:

    def test_status_notification(self, application):
        notification = NotificationService.notify_application_status(application, STATUS_SELECTED)

        assert notification.recipient == application.user
        assert notification.notification_type == 'application_status_changed'
        assert notification.priority == Notification.PRIORITY_HIGH
        assert notification.title.startswith('🎯')
        assert 'Backend Developer' in notification.message
        assert notification.link == '/user-profile/applications'
        assert notification.content_object == application
        assert notification.data == {
            'application_id': application.id,
            'job_id': application.post_id,
            'status': STATUS_SELECTED,
        }

    def test_rejection_priority(self, application):
        notification = NotificationService.notify_application_status(application, STATUS_REJECTED)
        assert notification.priority == Notification.PRIORITY_MEDIUM

    def test_employer_notification(self, application, employer):
        notification = NotificationService.notify_new_application(application)

        assert notification.recipient == employer
        assert notification.link == f'/employer/posts/{application.post_id}'


@pytest.mark.django_db
class TestInterviewReminders:

    def schedule_for(self, application, day, **extra):
        spec = {
            'type': 'hr',
            'scheduled_date': day.isoformat(),
            'scheduled_time': '09:00',
            'is_online': False,
            'location': 'Head office',
        }
        spec.update(extra)
        InterviewService.schedule(application.id, spec, notify=False)
        return Interview.objects.filter(application=application).last()

    def test_reminds_tomorrow_only(self, application, post, make_user, mailoutbox):
        tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        self.schedule_for(application, tomorrow)

        other = ApplicationService.apply_to_job(post.id, make_user('later').id, send_notification=False)
        self.schedule_for(other, tomorrow + datetime.timedelta(days=3))

        sent = tasks.send_interview_reminders()

        assert sent == 1
        assert mailoutbox[0].to == [application.user.email]
        assert mailoutbox[0].subject == '⏰ Interview Reminder - Backend Developer at Acme Labs'

    def test_cancelled_interview_not_reminded(self, application, mailoutbox):
        tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        interview = self.schedule_for(application, tomorrow)
        InterviewService.cancel(application.id, interview.id)

        assert tasks.send_interview_reminders() == 0
        assert mailoutbox == []


def test_realtime_push_reaches_user_group():
    from asgiref.sync import async_to_sync
    from channels.layers import get_channel_layer

    from notifications.utils import send_notification_to_user

    layer = get_channel_layer()
    channel_name = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)('user_7', channel_name)

    assert send_notification_to_user(7, 'application_status_changed', 'Shortlisted', 'Good news', {'status': 'shortlisted'})

    message = async_to_sync(layer.receive)(channel_name)
    assert message['type'] == 'notify'
    assert message['data']['title'] == 'Shortlisted'
    assert message['data']['data'] == {'status': 'shortlisted'}
