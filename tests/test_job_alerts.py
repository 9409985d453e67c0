import pytest
from kombu.exceptions import OperationalError

from enterprises.models import JobAlertCriteria, PostEntity
from notifications import tasks
from notifications.delivery import DeliveryResult
from notifications.job_alerts import (
    JobAlertDispatcher,
    build_job_alert_context,
    extract_salary,
    find_matching_users,
    matches_criteria,
)
from notifications.tasks import send_job_alerts


class RecordingChannel:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    def send(self, recipient, subject, html_body, text_body=None):
        self.sent.append((recipient, subject))
        if recipient in self.failing:
            return DeliveryResult(success=False, attempts=1, error='mailbox full')
        return DeliveryResult(success=True, attempts=1, message_id='<x@test>')


@pytest.mark.parametrize('salary_range, expected', [
    ('50,000 - 80,000 BDT', 50000),
    ('৳45000+', 45000),
    ('Negotiable', 0),
    ('', 0),
    (None, 0),
])
def test_extract_salary(salary_range, expected):
    assert extract_salary(salary_range) == expected


@pytest.mark.django_db
class TestMatchesCriteria:

    def criteria(self, **extra):
        return JobAlertCriteria(**extra)

    def test_empty_criteria_matches_everything(self, post):
        assert matches_criteria(self.criteria(), post) is True

    def test_disabled_never_matches(self, post):
        assert matches_criteria(self.criteria(enabled=False), post) is False

    def test_category_case_insensitive(self, post):
        assert matches_criteria(self.criteria(categories=['software engineering']), post)
        assert not matches_criteria(self.criteria(categories=['Marketing']), post)

    def test_location_substring_either_direction(self, post):
        assert matches_criteria(self.criteria(locations=['dhaka']), post)
        assert matches_criteria(self.criteria(locations=['Dhaka, Bangladesh']), post)
        assert not matches_criteria(self.criteria(locations=['Sylhet']), post)

    def test_job_type(self, post):
        assert matches_criteria(self.criteria(job_types=['full time']), post)
        assert not matches_criteria(self.criteria(job_types=['Part Time']), post)

    def test_keywords_search_title_description_company_and_skills(self, post):
        assert matches_criteria(self.criteria(keywords=['backend']), post)
        assert matches_criteria(self.criteria(keywords=['acme']), post)
        assert matches_criteria(self.criteria(keywords=['postgresql']), post)
        assert not matches_criteria(self.criteria(keywords=['golang', 'rust']), post)

    def test_min_salary(self, post):
        assert matches_criteria(self.criteria(min_salary=50000), post)
        assert not matches_criteria(self.criteria(min_salary=60000), post)

    def test_post_without_city_skips_location_filter(self, make_post):
        remote = make_post(title='Remote Engineer', city='')
        assert matches_criteria(self.criteria(locations=['Sylhet']), remote)

    def test_all_dimensions_must_match(self, post):
        criteria = self.criteria(categories=['Software Engineering'], locations=['Dhaka'], keywords=['golang'])
        assert not matches_criteria(criteria, post)


@pytest.mark.django_db
class TestFindMatchingUsers:

    def test_filters_inactive_banned_and_disabled(self, post, make_user, alert_criteria):
        wanted = make_user('wanted')
        alert_criteria(wanted, keywords=['django'])
        alert_criteria(make_user('inactive', is_active=False))
        alert_criteria(make_user('banned', is_banned=True))
        alert_criteria(make_user('disabled'), enabled=False)
        alert_criteria(make_user('mismatch'), locations=['Sylhet'])
        make_user('no-criteria')

        assert find_matching_users(post) == [wanted]


@pytest.mark.django_db
class TestJobAlertDispatcher:

    def make_users(self, make_user, count):
        return [make_user(f'seeker{i}') for i in range(count)]

    def test_batches_and_delays(self, post, make_user):
        users = self.make_users(make_user, 5)
        sleeps = []
        channel = RecordingChannel()
        dispatcher = JobAlertDispatcher(batch_size=2, email_delay=0.1, batch_delay=3.0,
                                        sleep=sleeps.append, channel=channel)

        summary = dispatcher.dispatch(post, users)

        assert summary == {'total': 5, 'sent': 5, 'failed': 0, 'batches': 3}
        assert [recipient for recipient, _ in channel.sent] == [u.email for u in users]
        # 5 lần nghỉ sau mỗi email + 2 lần nghỉ giữa 3 lô
        assert sleeps.count(0.1) == 5
        assert sleeps.count(3.0) == 2
        assert sleeps[-1] == 0.1

    def test_exact_multiple_of_batch_size(self, post, make_user):
        sleeps = []
        dispatcher = JobAlertDispatcher(batch_size=2, email_delay=0, batch_delay=3.0,
                                        sleep=sleeps.append, channel=RecordingChannel())

        summary = dispatcher.dispatch(post, self.make_users(make_user, 4))

        assert summary['batches'] == 2
        assert sleeps == [3.0]

    def test_failures_counted_and_do_not_stop_batch(self, post, make_user):
        users = self.make_users(make_user, 3)
        channel = RecordingChannel(failing={users[1].email})
        dispatcher = JobAlertDispatcher(batch_size=20, email_delay=0, batch_delay=0,
                                        sleep=lambda s: None, channel=channel)

        summary = dispatcher.dispatch(post, users)

        assert summary == {'total': 3, 'sent': 2, 'failed': 1, 'batches': 1}
        assert len(channel.sent) == 3

    def test_empty_user_list(self, post):
        dispatcher = JobAlertDispatcher(channel=RecordingChannel(), sleep=lambda s: None)
        assert dispatcher.dispatch(post, []) == {'total': 0, 'sent': 0, 'failed': 0, 'batches': 0}

    def test_default_channel_sends_once(self, post):
        dispatcher = JobAlertDispatcher(sleep=lambda s: None)
        assert dispatcher.channel.max_retries == 0

    def test_context(self, post, candidate):
        context = build_job_alert_context(post, candidate)

        assert context['user_name'] == 'Rahim Uddin'
        assert context['company_name'] == 'Acme Labs'
        assert context['category'] == 'Software Engineering'
        assert context['job_url'].endswith(f'/job/{post.id}')
        assert context['manage_alerts_url'].endswith('/user-profile/job-alerts')


@pytest.mark.django_db
class TestJobAlertTrigger:

    def test_publishing_post_sends_alerts_once(self, make_post, make_user, alert_criteria, mailoutbox,
                                              django_capture_on_commit_callbacks):
        seeker = make_user('seeker')
        alert_criteria(seeker, keywords=['django'])

        with django_capture_on_commit_callbacks(execute=True):
            post = make_post(is_active=True)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [seeker.email]
        assert mailoutbox[0].subject == '🔔 New Job: Backend Developer at Acme Labs'

        post.refresh_from_db()
        assert post.job_alerts_sent is True
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            post.title = 'Senior Backend Developer'
            post.save()
        assert callbacks == []

    def test_alerts_sent_when_post_is_approved(self, make_post, make_user, alert_criteria, mailoutbox,
                                               django_capture_on_commit_callbacks):
        alert_criteria(make_user('seeker'))

        with django_capture_on_commit_callbacks(execute=True):
            post = make_post(is_active=False)
        assert mailoutbox == []

        post = PostEntity.objects.get(pk=post.pk)
        with django_capture_on_commit_callbacks(execute=True):
            post.is_active = True
            post.save()
        assert len(mailoutbox) == 1

    def test_task_without_matches(self, post):
        assert send_job_alerts(post.id) == {'total': 0, 'sent': 0, 'failed': 0, 'batches': 0}

    def test_task_unknown_post(self, db):
        assert send_job_alerts(999999) is None


@pytest.mark.django_db(transaction=True)
def test_publishing_post_survives_unreachable_broker(make_post, make_user, alert_criteria, monkeypatch, mailoutbox):
    def unreachable(*args, **kwargs):
        raise OperationalError('broker unreachable')

    monkeypatch.setattr(tasks.send_job_alerts, 'delay', unreachable)
    alert_criteria(make_user('seeker'))

    post = make_post(is_active=True)

    assert PostEntity.objects.get(pk=post.pk).is_active is True
    assert mailoutbox == []
