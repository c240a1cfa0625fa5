import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    # username, email, password, first_name, last_name, is_active, is_staff,
    # is_superuser, groups, user_permissions are inherited
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    phone = models.CharField(max_length=50, blank=True, null=True)
    # Ensure email uniqueness across users
    email = models.EmailField(unique=True)

    def __str__(self):
        return self.username
