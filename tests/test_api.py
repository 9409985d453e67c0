import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from applications.models import STATUS_INTERVIEW_SCHEDULED, STATUS_PENDING, STATUS_SHORTLISTED
from applications.services import ApplicationService
from interviews.models import Interview
from notifications.models import Notification


@pytest.mark.django_db
class TestApplicationEndpoints:

    def test_apply(self, candidate_client, post):
        response = candidate_client.post(reverse('apply-to-job'), {'post_id': post.id, 'cover_letter': 'Hello'}, format='json')

        assert response.status_code == 201
        assert response.data['data']['status'] == STATUS_PENDING
        assert len(response.data['data']['status_history']) == 1
        assert 'internal_notes' not in response.data['data']

    def test_apply_twice(self, candidate_client, application, post):
        response = candidate_client.post(reverse('apply-to-job'), {'post_id': post.id}, format='json')

        assert response.status_code == 400
        assert response.data['status'] == 400
        assert 'post' in response.data['errors']

    def test_apply_unknown_post(self, candidate_client):
        response = candidate_client.post(reverse('apply-to-job'), {'post_id': 999999}, format='json')
        assert response.status_code == 404

    def test_requires_authentication(self, post):
        response = APIClient().post(reverse('apply-to-job'), {'post_id': post.id}, format='json')
        assert response.status_code == 401

    def test_my_applications(self, candidate_client, application):
        response = candidate_client.get(reverse('get-my-applications'))

        assert response.status_code == 200
        assert response.data['message'] == 'Applications retrieved successfully'
        assert response.data['data']['total'] == 1
        assert response.data['data']['results'][0]['id'] == application.id

    def test_detail_visibility(self, candidate_client, employer_client, application, make_user):
        ApplicationService.add_internal_notes(application.id, 'Strong referral')
        url = reverse('get-application-detail', args=[application.id])

        as_candidate = candidate_client.get(url)
        as_employer = employer_client.get(url)

        assert as_candidate.status_code == 200
        assert 'internal_notes' not in as_candidate.data['data']
        assert as_employer.data['data']['internal_notes'] == 'Strong referral'

        stranger = APIClient()
        stranger.force_authenticate(user=make_user('stranger'))
        assert stranger.get(url).status_code == 403

    def test_detail_not_found(self, candidate_client):
        response = candidate_client.get(reverse('get-application-detail', args=[999999]))
        assert response.status_code == 404

    def test_update_status(self, employer_client, application):
        response = employer_client.patch(
            reverse('update-application-status', args=[application.id]),
            {'status': STATUS_SHORTLISTED, 'notes': 'Great portfolio', 'send_notification': False},
            format='json',
        )

        assert response.status_code == 200
        assert response.data['data']['status'] == STATUS_SHORTLISTED
        history = response.data['data']['status_history']
        assert [entry['status'] for entry in history] == [STATUS_PENDING, STATUS_SHORTLISTED]
        assert history[-1]['notes'] == 'Great portfolio'

    def test_update_status_invalid(self, employer_client, application):
        response = employer_client.patch(
            reverse('update-application-status', args=[application.id]), {'status': 'hired'}, format='json'
        )
        assert response.status_code == 400
        assert 'status' in response.data['errors']

    def test_candidate_cannot_update_status(self, candidate_client, application):
        response = candidate_client.patch(
            reverse('update-application-status', args=[application.id]), {'status': STATUS_SHORTLISTED}, format='json'
        )
        assert response.status_code == 403

    def test_add_evaluation(self, employer_client, application):
        response = employer_client.post(
            reverse('add-evaluation', args=[application.id]),
            {'overall_score': 9, 'recommendation': 'strongly_recommend'},
            format='json',
        )
        assert response.status_code == 201
        assert response.data['data']['overall_score'] == 9

    def test_set_offer(self, employer_client, application):
        response = employer_client.put(
            reverse('set-offer-details', args=[application.id]),
            {'salary': '90000.00', 'currency': 'BDT', 'joining_date': '2030-09-01'},
            format='json',
        )
        assert response.status_code == 200
        assert response.data['data']['joining_date'] == '2030-09-01'

    def test_count_by_status(self, employer_client, application, post):
        response = employer_client.get(reverse('count-applications-by-status', args=[post.id]))

        assert response.status_code == 200
        assert response.data['data'][STATUS_PENDING] == 1


@pytest.mark.django_db
class TestInterviewEndpoints:

    def test_schedule(self, employer_client, application, online_interview_spec):
        response = employer_client.post(
            reverse('schedule-interview', args=[application.id]),
            dict(online_interview_spec, send_notification=False),
            format='json',
        )

        assert response.status_code == 201
        data = response.data['data']
        assert data['status'] == STATUS_INTERVIEW_SCHEDULED
        assert data['current_interview']['details']['meeting_link'] == 'https://meet.example.com/abc-defg-hij'
        assert 'location' not in data['current_interview']['details']

    def test_schedule_invalid(self, employer_client, application):
        response = employer_client.post(
            reverse('schedule-interview', args=[application.id]), {'type': 'online'}, format='json'
        )
        assert response.status_code == 400
        assert 'scheduled_date' in response.data['errors']

    def test_candidate_cannot_schedule(self, candidate_client, application, online_interview_spec):
        response = candidate_client.post(
            reverse('schedule-interview', args=[application.id]), online_interview_spec, format='json'
        )
        assert response.status_code == 403
        assert not Interview.objects.exists()

    def test_reschedule_cancel_and_feedback(self, employer_client, application, online_interview_spec):
        employer_client.post(
            reverse('schedule-interview', args=[application.id]),
            dict(online_interview_spec, send_notification=False),
            format='json',
        )
        interview = Interview.objects.get(application=application)

        missing_reason = employer_client.patch(
            reverse('reschedule-interview', args=[application.id, interview.id]),
            {'new_date': '2030-05-25', 'new_time': '11:00'},
            format='json',
        )
        assert missing_reason.status_code == 400

        feedback = employer_client.post(
            reverse('submit-interview-feedback', args=[application.id, interview.id]),
            {'rating': 5, 'recommendation': 'hire'},
            format='json',
        )
        assert feedback.status_code == 200
        assert feedback.data['data']['status'] == 'interview_completed'

        cancelled = employer_client.patch(
            reverse('cancel-interview', args=[application.id, interview.id]), {'reason': 'Duplicate'}, format='json'
        )
        assert cancelled.status_code == 200
        assert cancelled.data['data']['status'] == 'reviewed'

    def test_unknown_interview(self, employer_client, application):
        response = employer_client.patch(
            reverse('cancel-interview', args=[application.id, 999999]), {}, format='json'
        )
        assert response.status_code == 404

    def test_upcoming_interviews_scoped_to_employer(self, employer_client, application, make_user, make_post):
        from datetime import timedelta

        from django.utils import timezone

        from enterprises.models import EnterpriseEntity
        from interviews.services import InterviewService

        soon = (timezone.localdate() + timedelta(days=2)).isoformat()
        spec = {'type': 'hr', 'scheduled_date': soon, 'scheduled_time': '10:00', 'is_online': False}
        InterviewService.schedule(application.id, spec, notify=False)

        other_owner = make_user('other-owner', role='employer')
        other_enterprise = EnterpriseEntity.objects.create(company_name='Other Co', user=other_owner)
        other_post = make_post(title='Accountant', enterprise=other_enterprise)
        other_application = ApplicationService.apply_to_job(other_post.id, make_user('applicant2').id, send_notification=False)
        InterviewService.schedule(other_application.id, spec, notify=False)

        response = employer_client.get(reverse('get-upcoming-interviews'), {'days': 7})

        assert response.status_code == 200
        assert response.data['data']['total'] == 1
        assert response.data['data']['results'][0]['application'] == application.id

    def test_upcoming_interviews_requires_recruiter(self, candidate_client):
        assert candidate_client.get(reverse('get-upcoming-interviews')).status_code == 403


@pytest.mark.django_db
class TestNotificationEndpoints:

    def test_list_mark_read_and_count(self, candidate_client, application):
        from notifications.services import NotificationService

        first = NotificationService.notify_application_status(application, STATUS_SHORTLISTED)
        NotificationService.notify_application_status(application, STATUS_PENDING)

        listing = candidate_client.get(reverse('list-application-notifications'))
        assert listing.status_code == 200
        assert listing.data['data']['total'] == 2

        assert candidate_client.get(reverse('count-unread-notifications')).data == {'unread_count': 2}

        marked = candidate_client.post(reverse('mark-notification-read', args=[first.id]))
        assert marked.status_code == 200
        assert Notification.objects.get(pk=first.id).is_read is True

        unread = candidate_client.get(reverse('list-application-notifications'), {'is_read': 'false'})
        assert unread.data['data']['total'] == 1

    def test_cannot_mark_someone_elses(self, employer_client, application):
        from notifications.services import NotificationService

        notification = NotificationService.notify_application_status(application, STATUS_SHORTLISTED)
        response = employer_client.post(reverse('mark-notification-read', args=[notification.id]))
        assert response.status_code == 404

    def test_filter_by_application_and_mark_all_read(self, candidate_client, candidate, application, make_post):
        from notifications.services import NotificationService

        NotificationService.notify_application_status(application, STATUS_SHORTLISTED)
        second_post = make_post(title='Data Engineer')
        other = ApplicationService.apply_to_job(second_post.id, candidate.id, send_notification=False)
        NotificationService.notify_application_status(other, STATUS_SHORTLISTED)

        listing = candidate_client.get(reverse('list-application-notifications'), {'application_id': application.id})
        assert listing.data['message'] == 'Notifications retrieved successfully'
        assert listing.data['data']['total'] == 1
        assert listing.data['data']['results'][0]['data']['application_id'] == application.id

        marked = candidate_client.post(reverse('mark-all-notifications-read'))
        assert marked.data == {'message': 'Marked all as read', 'updated': 2}
        assert candidate_client.get(reverse('count-unread-notifications')).data == {'unread_count': 0}


@pytest.mark.django_db
class TestJobAlertCriteriaEndpoint:

    def test_create_then_update(self, candidate_client, candidate):
        url = reverse('job-alert-criteria')
        assert candidate_client.get(url).status_code == 404

        created = candidate_client.put(url, {'keywords': ['django'], 'locations': ['Dhaka']}, format='json')
        assert created.status_code == 200
        assert created.data['data']['keywords'] == ['django']

        updated = candidate_client.put(url, {'min_salary': 40000}, format='json')
        assert updated.data['data']['min_salary'] == 40000
        assert updated.data['data']['keywords'] == ['django']
        assert candidate.job_alert_criteria.enabled is True
