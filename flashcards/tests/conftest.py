import pytest
from django.contrib.auth import get_user_model

User = get_user_model()


@pytest.fixture
def user(db):
    return User.objects.create_user(username="testuser")


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="otheruser")


@pytest.fixture
def api(client, user):
    """Django test client that always sends the mock login header."""

    class Api:
        headers = {"HTTP_X_USER_NAME": user.username}

        def get(self, url, params=None, **extra):
            return client.get(url, params or {}, **self.headers, **extra)

        def post(self, url, payload=None, **extra):
            return client.post(url, data=payload or {}, content_type="application/json", **self.headers, **extra)

        def patch(self, url, payload=None, **extra):
            return client.patch(url, data=payload or {}, content_type="application/json", **self.headers, **extra)

        def delete(self, url, **extra):
            return client.delete(url, **self.headers, **extra)

    return Api()
