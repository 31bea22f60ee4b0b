from django import forms
from django.core.exceptions import ValidationError

from .images import MAX_UPLOAD_BYTES, prepare_photo
from .relations import GENDER_CHOICES, as_choices, compute_eligible_relatives
from .utils import parse_api_date

INPUT_CLASSES = 'w-full px-4 py-3 border border-brand-border rounded-lg focus:ring-2 focus:ring-brand-primary focus:border-transparent'

DATE_INPUT_FORMATS = ['%Y-%m-%d', '%d/%m/%Y']


class PersonForm(forms.Form):
    """
    Create or edit a person.

    The father, mother and spouse dropdowns are fed from the roster with
    ``compute_eligible_relatives``; a submitted relation must be one of the
    offered choices.
    """

    last_name = forms.CharField(
        label='Nom',
        max_length=100,
        error_messages={'required': 'Le nom est requis'},
        widget=forms.TextInput(attrs={'class': INPUT_CLASSES, 'placeholder': 'Nom de famille'})
    )
    first_name = forms.CharField(
        label='Prénom',
        max_length=100,
        error_messages={'required': 'Le prénom est requis'},
        widget=forms.TextInput(attrs={'class': INPUT_CLASSES, 'placeholder': 'Prénom'})
    )
    gender = forms.ChoiceField(
        label='Genre',
        choices=[('', '--Choisir--')] + GENDER_CHOICES,
        error_messages={'required': 'Le genre est requis'},
        widget=forms.Select(attrs={'class': INPUT_CLASSES})
    )
    birth_date = forms.DateField(
        label='Date de naissance',
        input_formats=DATE_INPUT_FORMATS,
        error_messages={
            'required': 'La date de naissance est requise',
            'invalid': 'Format de date invalide',
        },
        widget=forms.DateInput(
            attrs={'class': INPUT_CLASSES, 'type': 'date'},
            format='%Y-%m-%d'
        )
    )
    birth_place = forms.CharField(
        label='Lieu de naissance',
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASSES, 'placeholder': 'Lieu de naissance'})
    )
    date_deces = forms.DateField(
        label='Date de décès',
        required=False,
        input_formats=DATE_INPUT_FORMATS,
        error_messages={'invalid': 'Format de date invalide'},
        widget=forms.DateInput(
            attrs={'class': INPUT_CLASSES, 'type': 'date'},
            format='%Y-%m-%d'
        )
    )
    father = forms.ChoiceField(
        label='Père',
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASSES})
    )
    mother = forms.ChoiceField(
        label='Mère',
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASSES})
    )
    conjoint = forms.ChoiceField(
        label='Conjoint(e)',
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASSES})
    )
    photo = forms.ImageField(
        label='Photo',
        required=False,
        widget=forms.FileInput(attrs={'accept': 'image/*'})
    )
    notes = forms.CharField(
        label='Notes',
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASSES, 'rows': 4, 'placeholder': 'Notes, anecdotes...'})
    )

    def __init__(self, *args, roster=None, person=None, **kwargs):
        self.person = person
        if person and 'initial' not in kwargs:
            kwargs['initial'] = self.initial_from_person(person)
        super().__init__(*args, **kwargs)

        relatives = compute_eligible_relatives(roster or [], self._current_person(person))
        self.fields['father'].choices = as_choices(relatives['father_candidates'])
        self.fields['mother'].choices = as_choices(relatives['mother_candidates'])
        self.fields['conjoint'].choices = as_choices(relatives['conjoint_candidates'])

        # Drop initial relations that are not offered (e.g. removed from the roster)
        for name in ('father', 'mother', 'conjoint'):
            offered = {value for value, _ in self.fields[name].choices}
            if self.initial.get(name) not in offered:
                self.initial[name] = ''

    def _current_person(self, person):
        """The edited person, with the submitted gender when one was posted"""
        gender = self.data.get('gender') if self.is_bound else None
        if gender not in dict(GENDER_CHOICES):
            return person
        return dict(person or {}, gender=gender)

    @staticmethod
    def initial_from_person(person):
        def relation(key):
            value = person.get(key)
            return str(value) if value not in (None, '') else ''

        return {
            'last_name': person.get('last_name') or '',
            'first_name': person.get('first_name') or '',
            'gender': person.get('gender') or '',
            'birth_date': parse_api_date(person.get('birth_date')),
            'birth_place': person.get('birth_place') or '',
            'date_deces': parse_api_date(person.get('dateDeces')),
            'notes': person.get('notes') or '',
            'father': relation('fatherId'),
            'mother': relation('motherId'),
            'conjoint': relation('conjointId'),
        }

    def clean_first_name(self):
        value = self.cleaned_data['first_name'].strip()
        if not value:
            raise ValidationError('Le prénom est requis')
        return value

    def clean_last_name(self):
        value = self.cleaned_data['last_name'].strip()
        if not value:
            raise ValidationError('Le nom est requis')
        return value

    def clean_photo(self):
        photo = self.cleaned_data.get('photo')
        if photo and getattr(photo, 'size', 0) > MAX_UPLOAD_BYTES:
            raise ValidationError('La photo ne doit pas dépasser 5 Mo.')
        return photo

    def clean(self):
        cleaned_data = super().clean()
        birth_date = cleaned_data.get('birth_date')
        date_deces = cleaned_data.get('date_deces')

        if birth_date and date_deces and date_deces < birth_date:
            self.add_error('date_deces', 'La date de décès doit être postérieure à la date de naissance.')

        return cleaned_data

    def to_api_payload(self):
        """Form data in the shape the family API expects"""
        data = self.cleaned_data
        payload = {
            'first_name': data['first_name'],
            'last_name': data['last_name'],
            'gender': data['gender'],
            'birth_date': data['birth_date'].isoformat(),
            'birth_place': data.get('birth_place') or '',
            'notes': data.get('notes') or '',
        }

        for field, key in (('father', 'fatherId'), ('mother', 'motherId'), ('conjoint', 'conjointId')):
            if data.get(field):
                payload[key] = data[field]

        if data.get('date_deces'):
            payload['dateDeces'] = data['date_deces'].isoformat()

        return payload

    def photo_upload(self):
        """Resized photo ready for upload, or None when no new photo was sent"""
        photo = self.cleaned_data.get('photo')
        if not photo or not hasattr(photo, 'content_type'):
            return None
        return prepare_photo(photo)
