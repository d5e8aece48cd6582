from django import forms

from .models import User


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField()

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class PreferencesForm(forms.Form):
    theme = forms.ChoiceField(choices=User.Theme.choices, required=False)
    language = forms.ChoiceField(choices=User.Language.choices, required=False)


class SwitchOrgForm(forms.Form):
    org_id = forms.IntegerField(min_value=1)
