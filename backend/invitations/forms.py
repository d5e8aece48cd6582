from django import forms

from .models import Invitation


class InvitationForm(forms.Form):
    email = forms.EmailField(max_length=255)
    role = forms.ChoiceField(choices=Invitation.ROLE_CHOICES)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class AcceptForm(forms.Form):
    token = forms.CharField(max_length=64)
    password = forms.CharField(min_length=8, max_length=128)
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)
