from django import forms

from .models import Attendance


class AttendanceRecordForm(forms.Form):
    """One roll-call entry; the batch endpoint validates each record with it."""
    student_id = forms.IntegerField(min_value=1)
    date = forms.DateField()
    status = forms.ChoiceField(choices=Attendance.Status.choices, required=False)
    class_id = forms.IntegerField(min_value=1, required=False)
    notes = forms.CharField(max_length=5000, required=False)
    left_at = forms.DateTimeField(required=False)


class AttendanceForm(forms.ModelForm):
    class Meta:
        model = Attendance
        fields = ["status", "notes", "left_at"]
