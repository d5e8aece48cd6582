from django import forms

from .models import Menu


class MenuForm(forms.ModelForm):
    class Meta:
        model = Menu
        fields = ["breakfast", "lunch", "snack", "notes", "is_public"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["is_public"].required = False

    def clean_is_public(self):
        if "is_public" not in self.data:
            return self.instance.is_public if self.instance.pk else True
        return self.cleaned_data["is_public"]
