import re

from django import forms
from django.contrib.auth.forms import AuthenticationForm
from django.core.exceptions import ValidationError

from .models import User

INPUT_CLASSES = 'w-full px-4 py-3 border border-brand-border rounded-lg focus:ring-2 focus:ring-brand-primary focus:border-transparent'

USERNAME_RE = re.compile(r'^[a-zA-Z0-9_]+$')


def validate_username(value):
    if len(value) < 3:
        raise ValidationError("Le nom d'utilisateur doit contenir au moins 3 caractères")
    if len(value) > 20:
        raise ValidationError("Le nom d'utilisateur ne doit pas dépasser 20 caractères")
    if not USERNAME_RE.match(value):
        raise ValidationError("Le nom d'utilisateur ne peut contenir que des lettres, chiffres et _")


def validate_password_strength(value):
    if len(value) < 8:
        raise ValidationError("Le mot de passe doit contenir au moins 8 caractères")
    if not re.search(r'[A-Z]', value):
        raise ValidationError("Le mot de passe doit contenir au moins une majuscule")
    if not re.search(r'[0-9]', value):
        raise ValidationError("Le mot de passe doit contenir au moins un chiffre")


class UniqueAccountFieldsMixin:
    """French duplicate messages for username and email"""

    def clean_username(self):
        username = self.cleaned_data.get('username')
        others = User.objects.filter(username__iexact=username)
        if self.instance.pk:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise ValidationError("Ce nom d'utilisateur est déjà pris.")
        return username

    def clean_email(self):
        email = self.cleaned_data.get('email')
        others = User.objects.filter(email__iexact=email)
        if self.instance.pk:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise ValidationError("Un utilisateur avec cette adresse email existe déjà.")
        return email


class RegistrationForm(UniqueAccountFieldsMixin, forms.ModelForm):
    """Self-service sign up: username, email and password"""

    password = forms.CharField(
        validators=[validate_password_strength],
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASSES,
            'placeholder': 'Mot de passe'
        })
    )

    class Meta:
        model = User
        fields = ('username', 'email')
        widgets = {
            'username': forms.TextInput(attrs={
                'class': INPUT_CLASSES,
                'placeholder': "Nom d'utilisateur"
            }),
            'email': forms.EmailInput(attrs={
                'class': INPUT_CLASSES,
                'placeholder': 'Adresse email'
            }),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['username'].validators.append(validate_username)
        self.fields['username'].help_text = ''

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data['password'])
        user.role = User.ROLE_USER
        if commit:
            user.save()
        return user


class LoginForm(AuthenticationForm):
    """Email + password login"""

    username = forms.EmailField(
        label='Adresse email',
        error_messages={'invalid': "Format d'email invalide"},
        widget=forms.EmailInput(attrs={
            'class': INPUT_CLASSES,
            'placeholder': 'Adresse email'
        })
    )
    password = forms.CharField(
        label='Mot de passe',
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASSES,
            'placeholder': 'Mot de passe'
        })
    )

    def clean_password(self):
        password = self.cleaned_data.get('password')
        if len(password) < 6:
            raise ValidationError("Le mot de passe doit contenir au moins 6 caractères")
        return password


class AdminUserForm(UniqueAccountFieldsMixin, forms.ModelForm):
    """User creation and edition from the administration panel"""

    password = forms.CharField(
        required=False,
        validators=[validate_password_strength],
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASSES,
            'placeholder': 'Mot de passe'
        })
    )

    class Meta:
        model = User
        fields = ('username', 'email', 'role', 'is_active')
        widgets = {
            'username': forms.TextInput(attrs={'class': INPUT_CLASSES}),
            'email': forms.EmailInput(attrs={'class': INPUT_CLASSES}),
            'role': forms.Select(attrs={'class': INPUT_CLASSES}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['username'].validators.append(validate_username)
        if not self.instance.pk:
            self.fields['password'].required = True

    def save(self, commit=True):
        user = super().save(commit=False)
        password = self.cleaned_data.get('password')
        if password:
            user.set_password(password)
        if commit:
            user.save()
        return user

    def first_error(self):
        """First validation message, for JSON replies"""
        for errors in self.errors.values():
            if errors:
                return errors[0]
        return "Données invalides"
