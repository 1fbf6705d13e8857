from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        STAFF = "STAFF", _("Staff")
        COMPANY_ADMIN = "COMPANY_ADMIN", _("Company Admin")
        KITCHEN = "KITCHEN", _("Kitchen")
        ADMIN = "ADMIN", _("Admin")

    class Gender(models.TextChoices):
        MALE = "MALE", _("Male")
        FEMALE = "FEMALE", _("Female")

    class ActivityLevel(models.TextChoices):
        SEDENTARY = "SEDENTARY", _("Sedentary")
        MODERATE = "MODERATE", _("Moderate")
        ACTIVE = "ACTIVE", _("Active")
        VERY_ACTIVE = "VERY_ACTIVE", _("Very Active")

    class HealthGoal(models.TextChoices):
        WEIGHT_LOSS = "WEIGHT_LOSS", _("Weight Loss")
        MUSCLE_GAIN = "MUSCLE_GAIN", _("Muscle Gain")
        MAINTENANCE = "MAINTENANCE", _("Maintenance")
        GENERAL_WELLNESS = "GENERAL_WELLNESS", _("General Wellness")

    # Staff and company admins belong to a company; kitchen and platform admins don't
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="users",
    )

    email = models.EmailField(_("email address"), unique=True)
    name = models.CharField(_("name"), max_length=150, blank=True)
    phone_number = models.CharField(_("phone number"), max_length=20, blank=True, null=True)
    staff_code = models.CharField(max_length=20, blank=True, null=True)

    role = models.CharField(_("role"), max_length=20, choices=Role.choices, default=Role.STAFF)

    # --- Health profile ---
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True, help_text=_("Kilograms"))
    height = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True, help_text=_("Centimetres"))
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    medical_conditions = models.JSONField(default=list, blank=True)
    dietary_restrictions = models.JSONField(default=list, blank=True)
    disliked_foods = models.JSONField(default=list, blank=True)
    preferred_cuisines = models.JSONField(default=list, blank=True)
    activity_level = models.CharField(max_length=20, choices=ActivityLevel.choices, blank=True)
    health_goal = models.CharField(max_length=20, choices=HealthGoal.choices, blank=True)
    is_onboarded = models.BooleanField(
        default=False,
        help_text=_("Set once the staff member has completed their health profile."),
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(
        _("staff status"),
        default=False,
        help_text=_("Designates whether the user can log into this admin site."),
    )
    date_joined = models.DateTimeField(_("date joined"), default=timezone.now)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "staff_code"],
                name="unique_staff_code_per_company",
                condition=models.Q(staff_code__isnull=False),
            ),
        ]
        indexes = [
            models.Index(fields=["company", "role", "is_active"], name="users_company_role_idx"),
            models.Index(fields=["is_onboarded"], name="users_onboarded_idx"),
        ]

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.name or self.email

    @property
    def is_operator(self):
        """Kitchen and platform admins may drive any order transition."""
        return self.role in (self.Role.KITCHEN, self.Role.ADMIN)
