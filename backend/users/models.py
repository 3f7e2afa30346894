from django.contrib.auth.models import AbstractUser
from django.db import models
from core.models import BaseModel


class User(AbstractUser, BaseModel):
    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Admin'
        SENIOR_RECEPTIONIST = 'SENIOR_RECEPTIONIST', 'Senior Receptionist'
        JUNIOR_RECEPTIONIST = 'JUNIOR_RECEPTIONIST', 'Junior Receptionist'
        SENIOR_LAB_TECH = 'SENIOR_LAB_TECH', 'Senior Lab Technician'
        JUNIOR_LAB_TECH = 'JUNIOR_LAB_TECH', 'Junior Lab Technician'

    # Screens each role can open by default
    DEFAULT_PERMISSIONS = {
        Role.ADMIN: [
            'dashboard', 'create-test', 'all-tests', 'create-user', 'all-users',
            'references', 'referral-reports', 'edit-lab-info', 'finance-analytics',
            'inventory', 'expenses', 'revenue-summary', 'register-patients',
            'reg-reports', 'payments', 'results', 'final-reports',
        ],
        Role.SENIOR_RECEPTIONIST: [
            'dashboard', 'revenue-summary', 'expenses', 'inventory',
            'register-patients', 'reg-reports', 'payments', 'final-reports',
        ],
        Role.JUNIOR_RECEPTIONIST: [
            'dashboard', 'register-patients', 'reg-reports', 'results', 'final-reports',
        ],
        Role.SENIOR_LAB_TECH: ['dashboard', 'reg-reports', 'results', 'final-reports'],
        Role.JUNIOR_LAB_TECH: ['dashboard', 'reg-reports', 'results', 'final-reports'],
    }

    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=30, choices=Role.choices, default=Role.JUNIOR_RECEPTIONIST)

    def __str__(self):
        return self.username

    @property
    def permissions(self):
        return list(self.DEFAULT_PERMISSIONS.get(self.role, []))

    @property
    def display_name(self):
        return self.full_name or self.username
