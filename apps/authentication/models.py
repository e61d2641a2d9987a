"""
Authentication Models - Custom User Model with role-based access
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """Custom user manager"""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_ADMIN)
        return self.create_user(email, password, **extra_fields)

    def with_role(self, *roles):
        """Active users holding any of ``roles``"""
        return self.filter(role__in=roles, is_active=True)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Platform user. Login is by email; ``role`` drives what the user may do
    with offboarding processes.
    """

    ROLE_ADMIN = 'admin'
    ROLE_HR = 'hr'
    ROLE_USER = 'user'
    ROLE_IT = 'it'
    ROLE_FINANCE = 'finance'
    ROLE_PAYROLL = 'payroll'
    ROLE_MANAGER = 'manager'

    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_HR, 'HR'),
        (ROLE_USER, 'User'),
        (ROLE_IT, 'IT'),
        (ROLE_FINANCE, 'Finance'),
        (ROLE_PAYROLL, 'Payroll'),
        (ROLE_MANAGER, 'Manager'),
    ]

    ELEVATED_ROLES = (ROLE_ADMIN, ROLE_HR)

    # Department roles map onto the department names used by task templates
    ROLE_DEPARTMENTS = {
        ROLE_IT: 'IT',
        ROLE_HR: 'Human Capital',
        ROLE_FINANCE: 'Finance',
        ROLE_PAYROLL: 'Payroll',
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ['email']

    def __str__(self):
        return self.identifier

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def identifier(self):
        """Stable identity recorded on audit fields: email, else name."""
        return self.email or self.full_name

    def has_role(self, *roles):
        if self.is_superuser and self.ROLE_ADMIN in roles:
            return True
        return self.role in roles

    @property
    def is_hr_or_admin(self):
        return self.has_role(*self.ELEVATED_ROLES)

    @property
    def department_name(self):
        return self.ROLE_DEPARTMENTS.get(self.role)
