from django import forms
from django.utils import timezone

from .models import Classroom, Guardian, Student


class ClassroomForm(forms.ModelForm):
    class Meta:
        model = Classroom
        fields = ["name", "code"]

    def __init__(self, *args, organization=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.organization = organization

    def clean_code(self):
        code = (self.cleaned_data.get("code") or "").strip()
        if not code:
            return None
        qs = Classroom.objects.live().filter(organization=self.organization, code__iexact=code)
        if self.instance.pk:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise forms.ValidationError("A class with this code already exists.")
        return code

    def validate_unique(self):
        # organization is not a form field; code uniqueness is checked in clean_code
        pass


class TeacherClassForm(forms.Form):
    classId = forms.IntegerField(min_value=1)
    userId = forms.IntegerField(min_value=1)


class GuardianForm(forms.ModelForm):
    class Meta:
        model = Guardian
        fields = ["first_name", "last_name", "email", "phone", "ssn", "address"]

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class StudentForm(forms.ModelForm):
    class Meta:
        model = Student
        fields = [
            "first_name", "last_name", "dob", "gender", "start_date", "barngildi",
            "student_language", "medical_notes", "allergies", "emergency_contact",
            "address", "social_security_number",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # omitted values fall back to the model defaults
        for name in ("gender", "barngildi", "student_language"):
            self.fields[name].required = False

    def clean_dob(self):
        dob = self.cleaned_data["dob"]
        if dob and dob > timezone.localdate():
            raise forms.ValidationError("Date of birth cannot be in the future.")
        return dob


class LinkForm(forms.Form):
    guardian_id = forms.IntegerField(min_value=1)
    student_id = forms.IntegerField(min_value=1)
    relation = forms.CharField(max_length=32, required=False)
