from unittest.mock import patch

import pytest
from fastapi import status

from app.api.users.crud import student as student_crud
from app.api.users.models import User
from app.core.security import verify_password
from app.core.utils import barcode_check_digit
from tests.conftest import TEST_PASSWORD


@pytest.fixture
def signup_data():
    return {
        'name': 'Jane Doe',
        'username': 'UGR_1234',
        'email': 'Jane.Doe@Example.com',
        'password': 'secret123',
        'phone': '',
        'department': 'Law',
        'year': '2',
        'gender': 'Female',
    }


def test_signup_success(client, signup_data, db_session):
    response = client.post('/users/signup', json=signup_data)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data['username'] == 'UGR_1234'
    assert data['email'] == 'jane.doe@example.com'
    assert data['role'] == 'Student'
    assert data['batch'] == '2'
    assert data['phone'] is None
    assert data['completed'] is True
    assert 'password' not in data

    barcode_id = data['barcode_id']
    assert len(barcode_id) == 13
    assert barcode_id.isdigit()
    assert barcode_check_digit(barcode_id[:12]) == barcode_id[12]

    user = db_session.query(User).filter_by(username='UGR_1234').first()
    assert user.password != 'secret123'
    assert verify_password('secret123', user.password)


def test_signup_duplicate_username(client, signup_data):
    client.post('/users/signup', json=signup_data)
    signup_data['email'] = 'other@example.com'
    response = client.post('/users/signup', json=signup_data)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()['detail'] == 'ID already exists.'


def test_signup_duplicate_email(client, signup_data):
    client.post('/users/signup', json=signup_data)
    signup_data['username'] = 'UGR_9999'
    response = client.post('/users/signup', json=signup_data)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()['detail'] == 'Email already registered.'


@pytest.mark.parametrize(
    'field, value',
    [
        ('username', 'a b'),
        ('username', 'ab'),
        ('password', '123'),
        ('department', 'Astrology'),
        ('year', '9'),
        ('gender', 'Unknown'),
        ('email', 'not-an-email'),
    ],
)
def test_signup_invalid_input(client, signup_data, field, value):
    signup_data[field] = value
    response = client.post('/users/signup', json=signup_data)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()['detail'][0]['loc'][-1] == field


def test_get_me(client, test_student, student_headers):
    response = client.get('/users/me', headers=student_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()['id'] == test_student.id
    assert response.json()['barcode_id'] == 'BC12345'


def test_update_me(client, test_student, student_headers):
    response = client.patch(
        '/users/me',
        json={'name': 'New Name', 'phone': '555-0100', 'department': 'Finance'},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data['name'] == 'New Name'
    assert data['phone'] == '555-0100'
    assert data['department'] == 'Finance'
    assert data['barcode_id'] == 'BC12345'


def test_update_me_email_taken(client, test_student, test_registrar, student_headers):
    response = client.patch(
        '/users/me',
        json={'email': test_registrar.email},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.parametrize('field', ['email', 'name'])
def test_update_me_rejects_null_required_field(
    client, test_student, student_headers, db_session, field
):
    response = client.patch('/users/me', json={field: None}, headers=student_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()['detail'][0]['loc'] == ['body', field]

    db_session.refresh(test_student)
    assert test_student.email == 'student1@example.com'
    assert test_student.name == 'Test Student1'


def test_change_password(client, test_student, student_headers, db_session):
    response = client.post(
        '/users/me/password',
        json={'new_password': 'brand-new-pass'},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_200_OK

    db_session.refresh(test_student)
    assert test_student.changed_password is True
    assert test_student.changed_password_at is not None

    response = client.post(
        '/users/login',
        json={'username': test_student.username, 'password': 'brand-new-pass'},
    )
    assert response.status_code == status.HTTP_200_OK


def test_change_password_too_short(client, test_student, student_headers):
    response = client.post(
        '/users/me/password', json={'new_password': 'short'}, headers=student_headers
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_students(client, create_test_student, test_registrar, registrar_headers):
    create_test_student(1, batch='1')
    create_test_student(2, batch='2')

    response = client.get('/users/students', headers=registrar_headers)
    assert response.status_code == status.HTTP_200_OK
    usernames = {s['username'] for s in response.json()}
    assert usernames == {'STU0001', 'STU0002'}

    response = client.get('/users/students?batch=2', headers=registrar_headers)
    assert [s['username'] for s in response.json()] == ['STU0002']


def test_list_students_forbidden_for_students(client, test_student, student_headers):
    response = client.get('/users/students', headers=student_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_registrar_creates_student(client, registrar_headers):
    response = client.post(
        '/users/students',
        json={
            'name': 'Added Student',
            'username': 'ADD001',
            'email': 'added@example.com',
            'password': 'secret123',
            'year': '4',
        },
        headers=registrar_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data['batch'] == '4'
    assert data['role'] == 'Student'
    assert data['barcode_id']


def test_get_student(client, test_student, registrar_headers):
    response = client.get(f'/users/students/{test_student.id}', headers=registrar_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()['username'] == test_student.username


def test_get_student_rejects_registrar_id(client, test_registrar, registrar_headers):
    response = client.get(
        f'/users/students/{test_registrar.id}', headers=registrar_headers
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()['detail'] == 'Student not found'


def test_update_student(client, test_student, registrar_headers):
    response = client.patch(
        f'/users/students/{test_student.id}',
        json={'year': '5', 'password': 'changed123', 'department': 'Accounting'},
        headers=registrar_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data['batch'] == '5'
    assert data['department'] == 'Accounting'

    response = client.post(
        '/users/login',
        json={'username': test_student.username, 'password': 'changed123'},
    )
    assert response.status_code == status.HTTP_200_OK


def test_update_student_empty_password_keeps_current(
    client, test_student, registrar_headers
):
    response = client.patch(
        f'/users/students/{test_student.id}',
        json={'password': ''},
        headers=registrar_headers,
    )
    assert response.status_code == status.HTTP_200_OK

    response = client.post(
        '/users/login',
        json={'username': test_student.username, 'password': TEST_PASSWORD},
    )
    assert response.status_code == status.HTTP_200_OK


def test_update_student_username_taken(client, create_test_student, registrar_headers):
    first = create_test_student(1)
    create_test_student(2)
    response = client.patch(
        f'/users/students/{first.id}',
        json={'username': 'STU0002'},
        headers=registrar_headers,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.parametrize('field', ['username', 'email', 'name'])
def test_update_student_rejects_null_required_field(
    client, test_student, registrar_headers, db_session, field
):
    response = client.patch(
        f'/users/students/{test_student.id}',
        json={field: None},
        headers=registrar_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()['detail'][0]['loc'] == ['body', field]

    db_session.refresh(test_student)
    assert test_student.username == 'STU0001'
    assert test_student.email == 'student1@example.com'


def test_update_student_unique_clash_on_commit(
    client, create_test_student, registrar_headers
):
    """A clash that slips past the availability check is rolled back as a 409"""
    first = create_test_student(1)
    create_test_student(2)

    with patch.object(student_crud, 'get_by_username', return_value=None):
        response = client.patch(
            f'/users/students/{first.id}',
            json={'username': 'STU0002'},
            headers=registrar_headers,
        )
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.get(f'/users/students/{first.id}', headers=registrar_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()['username'] == 'STU0001'


def test_delete_student(client, test_student, registrar_headers, db_session):
    client.post('/validator/', json={'barcode_id': 'BC12345'}, headers=registrar_headers)

    response = client.delete(
        f'/users/students/{test_student.id}', headers=registrar_headers
    )
    assert response.status_code == status.HTTP_200_OK

    response = client.get(f'/users/students/{test_student.id}', headers=registrar_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
