from zoneinfo import ZoneInfo

from django import forms
from django.core.validators import RegexValidator

from accounts.models import Organization

slug_validator = RegexValidator(
    r"^[a-z0-9-]+$", "Slug may contain only lowercase letters, numbers and hyphens."
)


class OrganizationForm(forms.ModelForm):
    REQUIRED = ("email", "phone", "address", "city", "state", "postal_code", "timezone")
    POSITIVE = ("total_area", "play_area", "square_meters_per_student", "maximum_allowed_students")

    class Meta:
        model = Organization
        fields = [
            "name", "slug", "email", "phone", "website", "address", "city", "state",
            "postal_code", "timezone", "total_area", "play_area",
            "square_meters_per_student", "maximum_allowed_students",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["slug"].validators.append(slug_validator)
        for name in self.REQUIRED:
            self.fields[name].required = True

    def clean_timezone(self):
        tz = self.cleaned_data["timezone"].strip()
        try:
            ZoneInfo(tz)
        except (ValueError, KeyError, OSError):
            raise forms.ValidationError("Unknown timezone.")
        return tz

    def clean(self):
        data = super().clean()
        for name in self.POSITIVE:
            value = data.get(name)
            if value is not None and value <= 0:
                self.add_error(name, "Must be greater than zero.")
        return data


class PrincipalForm(forms.Form):
    email = forms.EmailField()
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    phone = forms.CharField(max_length=50, required=False)
    org_id = forms.IntegerField(min_value=1)
    password = forms.CharField(min_length=8, required=False)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()

    def clean_org_id(self):
        org_id = self.cleaned_data["org_id"]
        if not Organization.objects.filter(id=org_id).exists():
            raise forms.ValidationError("Organization not found.")
        return org_id


class PrincipalUpdateForm(forms.Form):
    email = forms.EmailField(required=False)
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)
    phone = forms.CharField(max_length=50, required=False)
    is_active = forms.NullBooleanField(required=False)
