from django import forms
from django.utils import timezone

from .models import Story


class StoryForm(forms.ModelForm):
    class Meta:
        model = Story
        fields = ["title", "caption", "is_public", "expires_at"]

    def clean_expires_at(self):
        expires_at = self.cleaned_data["expires_at"]
        # an untouched expiry on an existing story is left alone
        if self.instance.pk and expires_at == self.instance.expires_at:
            return expires_at
        if expires_at <= timezone.now():
            raise forms.ValidationError("Expiry must be in the future.")
        return expires_at


class StoryItemForm(forms.Form):
    url = forms.URLField(max_length=2000, required=False)
    caption = forms.CharField(max_length=2000, required=False)
    mime_type = forms.CharField(max_length=100, required=False)
    order_index = forms.IntegerField(min_value=0, required=False)
    duration_ms = forms.IntegerField(min_value=0, required=False)
