from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.users.models import User
from app.api.users.schemas import Role
from app.core.config import Environment, settings
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from main import app

TEST_PASSWORD = 'secret123'


@pytest.fixture(scope='session', autouse=True)
def check_test_environment():
    if settings.ENVIRONMENT != Environment.TEST:
        raise RuntimeError(
            f'Tests can only be executed in test environment. Current environment: {settings.ENVIRONMENT}'
        )


@pytest.fixture(scope='session', autouse=True)
def setup_test_settings():
    """Use a real signing key and cheap password hashing during tests"""
    original_secret_key = settings.SECRET_KEY
    original_rounds = settings.BCRYPT_ROUNDS

    settings.SECRET_KEY = 'test_secret_key'
    settings.BCRYPT_ROUNDS = 4

    yield

    settings.SECRET_KEY = original_secret_key
    settings.BCRYPT_ROUNDS = original_rounds


@pytest.fixture(scope='session')
def test_db_engine():
    engine = create_engine(
        settings.SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope='function')
def db_session(test_db_engine):
    """Create a fresh database session for each test"""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_db_engine
    )

    # Drop and recreate all tables before each test
    Base.metadata.drop_all(bind=test_db_engine)
    Base.metadata.create_all(bind=test_db_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope='function')
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def get_auth_headers_for_user(
    user: User, expires_delta: timedelta = timedelta(minutes=30)
) -> dict:
    """Generate auth headers for a specific user"""
    user_data = {
        'user_id': user.id,
        'username': user.username,
        'role': user.role,
    }
    access_token = create_access_token(data=user_data, expires_delta=expires_delta)
    return {'Authorization': f'Bearer {access_token}'}


@pytest.fixture(scope='function')
def create_test_student(db_session):
    """Factory fixture to create test students"""

    def _create_student(index: int, batch: str = '3', barcode_id: str = None):
        student = User(
            name=f'Test Student{index}',
            username=f'STU{index:04d}',
            email=f'student{index}@example.com',
            password=hash_password(TEST_PASSWORD),
            department='Software Engineering',
            gender='Female',
            batch=batch,
            barcode_id=barcode_id or f'BC{index:05d}',
            role=Role.STUDENT.value,
            completed=True,
        )
        db_session.add(student)
        db_session.commit()
        return student

    yield _create_student


@pytest.fixture(scope='function')
def test_student(create_test_student):
    """Creates the default scenario student with barcode BC12345"""
    return create_test_student(1, batch='3', barcode_id='BC12345')


@pytest.fixture(scope='function')
def test_registrar(db_session):
    registrar = User(
        name='Test Registrar',
        username='registrar',
        email='registrar@example.com',
        password=hash_password(TEST_PASSWORD),
        role=Role.REGISTRAR.value,
        completed=True,
    )
    db_session.add(registrar)
    db_session.commit()
    return registrar


@pytest.fixture(scope='function')
def registrar_headers(test_registrar):
    return get_auth_headers_for_user(test_registrar)


@pytest.fixture(scope='function')
def student_headers(test_student):
    return get_auth_headers_for_user(test_student)
