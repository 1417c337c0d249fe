"""Database models for dashboard users."""

from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Dashboard user.

    Extends Django's :class:`~django.contrib.auth.models.AbstractUser` with:
    - ``role`` to separate platform admins, school admins and trustees
    - optional ``school_id`` / ``trustee_id`` references
    - login by ``email`` instead of ``username``
    """

    ROLE_ADMIN = 'admin'
    ROLE_SCHOOL_ADMIN = 'school_admin'
    ROLE_TRUSTEE = 'trustee'
    ROLE_CHOICES = (
        (ROLE_ADMIN, 'Admin'),
        (ROLE_SCHOOL_ADMIN, 'School Admin'),
        (ROLE_TRUSTEE, 'Trustee'),
    )

    email = models.EmailField('email address', unique=True)
    name = models.CharField(max_length=150, blank=True, default='')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ADMIN)
    school_id = models.CharField(max_length=64, null=True, blank=True)
    trustee_id = models.CharField(max_length=64, null=True, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.email
