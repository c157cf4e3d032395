import pytest
from rest_framework.test import APIClient

from tests.factories import DJProfileFactory, UserFactory


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    return DJProfileFactory(user__email="blaze@example.com").user


@pytest.fixture
def other_user(db):
    return UserFactory(email="rival@example.com")


@pytest.fixture
def auth_client(api_client, user):
    api_client.force_login(user)
    return api_client


@pytest.fixture
def other_client(other_user):
    client = APIClient()
    client.force_login(other_user)
    return client
