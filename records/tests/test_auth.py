import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APIClient

from records.models import AuditEvent, MedicalRecord

pytestmark = pytest.mark.django_db

User = get_user_model()


def login(client, username, password):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_register_creates_user_with_hashed_password():
    client = APIClient()
    r = client.post(reverse('register_view'), {'username': 'newbie', 'password': 'secret1'}, format='json')
    assert r.status_code == 201
    assert r.data['ok'] is True and r.data['username'] == 'newbie'
    u = User.objects.get(username='newbie')
    assert u.password != 'secret1'
    assert u.check_password('secret1')
    assert AuditEvent.objects.filter(user=u, action='register').exists()


def test_register_duplicate_username_conflicts():
    User.objects.create_user(username='taken', password='secret1')
    client = APIClient()
    r = client.post(reverse('register_view'), {'username': 'taken', 'password': 'another1'}, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'conflict'
    assert r.data['error']['message'] == 'username already exists'


@pytest.mark.parametrize('payload', [
    {'username': 'shorty', 'password': '12345'},
    {'username': '', 'password': 'secret1'},
    {'password': 'secret1'},
    {'username': 'nopass'},
])
def test_register_validation_errors(payload):
    r = APIClient().post(reverse('register_view'), payload, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'


def test_login_returns_token_and_username():
    User.objects.create_user(username='u1', password='secret1')
    r = login(APIClient(), 'u1', 'secret1')
    assert r.status_code == 200
    assert r.data['username'] == 'u1'
    assert r.data['token']
    assert r.data['refresh']


def test_login_with_wrong_password_is_unauthorized():
    User.objects.create_user(username='u1', password='secret1')
    r = login(APIClient(), 'u1', 'wrong-pass')
    assert r.status_code == 401
    assert r.data['error']['message'] == 'invalid credentials'
    assert AuditEvent.objects.filter(action='login', user__isnull=True).count() == 1


def test_login_unknown_user_is_unauthorized():
    r = login(APIClient(), 'ghost', 'secret1')
    assert r.status_code == 401


def test_bearer_token_scopes_requests_to_its_user():
    u = User.objects.create_user(username='u1', password='secret1')
    other = User.objects.create_user(username='u2', password='secret1')
    MedicalRecord.objects.create(owner=u, patient_name='Mine', age=33)
    MedicalRecord.objects.create(owner=other, patient_name='Theirs', age=44)
    client = APIClient()
    token = login(client, 'u1', 'secret1').data['token']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get('/api/records')
    assert r.status_code == 200
    assert [x['patient_name'] for x in r.data] == ['Mine']


def test_garbage_token_is_unauthorized():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
    r = client.get('/api/records')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthorized'
    assert 'WWW-Authenticate' in r


def test_token_for_deleted_user_is_unauthorized():
    u = User.objects.create_user(username='u1', password='secret1')
    client = APIClient()
    token = login(client, 'u1', 'secret1').data['token']
    u.delete()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get('/api/dashboard/stats')
    assert r.status_code == 401


def test_refresh_issues_new_access_token():
    User.objects.create_user(username='u1', password='secret1')
    client = APIClient()
    refresh = login(client, 'u1', 'secret1').data['refresh']
    r = client.post(reverse('jwt_refresh_view'), {'refresh': refresh}, format='json')
    assert r.status_code == 200
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    assert client.get('/api/records').status_code == 200


def test_refresh_with_invalid_token_is_unauthorized():
    r = APIClient().post(reverse('jwt_refresh_view'), {'refresh': 'nope'}, format='json')
    assert r.status_code == 401


def test_logout_blacklists_refresh_token():
    User.objects.create_user(username='u1', password='secret1')
    client = APIClient()
    data = login(client, 'u1', 'secret1').data
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    r = client.post(reverse('jwt_logout_view'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1
    anon = APIClient()
    r = anon.post(reverse('jwt_refresh_view'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 401


def test_logout_without_token_blacklists_all_outstanding():
    User.objects.create_user(username='u1', password='secret1')
    client = APIClient()
    first = login(client, 'u1', 'secret1').data
    login(client, 'u1', 'secret1')
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {first['token']}")
    r = client.post(reverse('jwt_logout_view'), {}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 2


def test_healthz_is_public():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json()['ok'] is True
