from django.contrib.auth.forms import UserChangeForm as DjangoUserChangeForm
from django.contrib.auth.forms import UserCreationForm as DjangoUserCreationForm

from ..models import User

# -----------------------------
# Custom admin forms
# ----------------------------


# Subclass `DjangoUserCreationForm` (form used when adding a new user)
class UserAdminCreationForm(DjangoUserCreationForm):
    class Meta(DjangoUserCreationForm.Meta):
        model = User  # Points `model` to custom User model
        fields = ("username", "email", "default_organization")


# Subclass `DjangoUserChangeForm` (form used when editing an existing user)
class UserAdminChangeForm(DjangoUserChangeForm):
    class Meta(DjangoUserChangeForm.Meta):
        model = User
        fields = (
            "username",
            "email",
            "is_active",
            "is_staff",
            "is_superuser",
            "default_organization",
        )
