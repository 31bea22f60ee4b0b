import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme

from .forms import LoginForm, RegistrationForm

logger = logging.getLogger(__name__)


def login_view(request):
    """Email/password login"""
    if request.user.is_authenticated:
        return redirect('genealogy:home')

    if request.method == 'POST':
        form = LoginForm(request, data=request.POST)
        if form.is_valid():
            user = form.get_user()
            login(request, user)
            logger.info(f"User {user.pk} logged in")
            messages.success(request, 'Connexion réussie.')
            next_url = request.GET.get('next')
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect('genealogy:home')
    else:
        form = LoginForm(request)

    return render(request, 'accounts/login.html', {'form': form})


def register(request):
    """Create an account and log the new user in"""
    if request.user.is_authenticated:
        return redirect('genealogy:home')

    if request.method == 'POST':
        form = RegistrationForm(request.POST)
        if form.is_valid():
            user = form.save()
            login(request, user, backend='django.contrib.auth.backends.ModelBackend')
            logger.info(f"User {user.pk} registered")
            messages.success(request, 'Votre compte a été créé avec succès.')
            return redirect('genealogy:home')
    else:
        form = RegistrationForm()

    return render(request, 'accounts/register.html', {'form': form})


def logout_view(request):
    """Handle user logout"""
    logout(request)
    messages.success(request, 'Vous avez été déconnecté avec succès.')
    return redirect('genealogy:home')
