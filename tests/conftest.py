import pytest
from rest_framework.test import APIClient

from accounts.models import Role, UserAccount, UserRole
from applications.services import ApplicationService
from enterprises.models import EnterpriseEntity, FieldEntity, JobAlertCriteria, PostEntity


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make_user(username=None, role=None, **extra):
        counter['n'] += 1
        username = username or f"user{counter['n']}"
        extra.setdefault('is_active', True)
        user = UserAccount.objects.create_user(
            email=f"{username}@example.com",
            username=username,
            password='secret-pass',
            **extra,
        )
        if role:
            role_obj, _ = Role.objects.get_or_create(name=role)
            UserRole.objects.create(user=user, role=role_obj)
        return user

    return _make_user


@pytest.fixture
def candidate(make_user):
    return make_user('candidate', full_name='Rahim Uddin')


@pytest.fixture
def employer(make_user):
    return make_user('employer', role='employer', full_name='Karim HR')


@pytest.fixture
def admin_user(make_user):
    return make_user('admin', is_staff=True, is_superuser=True)


@pytest.fixture
def enterprise(employer):
    return EnterpriseEntity.objects.create(
        company_name='Acme Labs',
        user=employer,
        city='Dhaka',
        is_active=True,
    )


@pytest.fixture
def field(db):
    return FieldEntity.objects.create(name='Software Engineering', code='software-engineering')


@pytest.fixture
def make_post(enterprise, field):
    def _make_post(**extra):
        values = {
            'title': 'Backend Developer',
            'enterprise': enterprise,
            'field': field,
            'required': 'Python, Django, PostgreSQL',
            'salary_range': '50,000 - 80,000 BDT',
            'type_working': 'Full Time',
            'city': 'Dhaka',
            'description': 'Build and maintain the hiring platform API.',
            'is_active': True,
        }
        values.update(extra)
        return PostEntity.objects.create(**values)

    return _make_post


@pytest.fixture
def post(make_post):
    return make_post()


@pytest.fixture
def application(post, candidate):
    return ApplicationService.apply_to_job(post.id, candidate.id, send_notification=False)


@pytest.fixture
def online_interview_spec():
    return {
        'type': 'technical',
        'scheduled_date': '2030-05-20',
        'scheduled_time': '10:30',
        'is_online': True,
        'meeting_link': 'https://meet.example.com/abc-defg-hij',
        'meeting_platform': 'google_meet',
        'meeting_id': 'abc-defg-hij',
        'location': 'Should be dropped',
        'interviewers': [{'name': 'Karim HR', 'email': 'employer@example.com'}],
    }


@pytest.fixture
def alert_criteria(db):
    def _alert_criteria(user, **extra):
        return JobAlertCriteria.objects.create(user=user, **extra)

    return _alert_criteria


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def employer_client(api_client, employer):
    api_client.force_authenticate(user=employer)
    return api_client


@pytest.fixture
def candidate_client(candidate):
    client = APIClient()
    client.force_authenticate(user=candidate)
    return client
