import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom User model that extends the default Django User model.
    Ids are UUIDs so they can be shared with the flashcard tables as-is.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
