import logging

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.db.models import Count, Q
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from accounts.forms import AdminUserForm

from . import api
from .api import FamilyApiError
from .forms import PersonForm
from .relations import build_family_sections, family_key_for
from .utils import compute_roster_stats, normalize_person, search_persons, sort_persons, SORT_KEYS

User = get_user_model()

logger = logging.getLogger(__name__)

USERS_PER_PAGE = 10

SORT_OPTIONS = [
    ('last_name', 'Nom'),
    ('first_name', 'Prénom'),
    ('gender', 'Genre'),
    ('birth_date', 'Année'),
]


def _is_admin(user):
    return user.is_authenticated and getattr(user, 'role', None) == 'admin'


def _load_roster():
    return [normalize_person(p) for p in api.get_client().list_persons()]


def home(request):
    """Entry points to persons, families and administration"""
    return render(request, 'genealogy/home.html', {
        'is_admin': _is_admin(request.user),
    })


# Persons

@login_required
def person_list(request):
    """Searchable, sortable list of every person"""
    search_term = request.GET.get('q', '').strip()
    sort_key = request.GET.get('sort')
    direction = 'desc' if request.GET.get('dir') == 'desc' else 'asc'

    error = None
    try:
        roster = _load_roster()
    except FamilyApiError as e:
        logger.error(f"Person list unavailable: {e}")
        error = "Impossible de charger les données"
        roster = []

    persons = sort_persons(search_persons(roster, search_term), sort_key, direction)

    context = {
        'persons': persons,
        'error': error,
        'search_term': search_term,
        'sort_key': sort_key if sort_key in SORT_KEYS else None,
        'direction': direction,
        'sort_options': SORT_OPTIONS,
        'is_admin': _is_admin(request.user),
    }

    return render(request, 'genealogy/person_list.html', context)


@login_required
def person_detail(request, person_id):
    """Detailed view of a person"""
    try:
        person = normalize_person(api.get_client().get_person(person_id))
    except FamilyApiError as e:
        if e.not_found:
            raise Http404("Personne non trouvée")
        messages.error(request, "Impossible de charger cette personne.")
        return redirect('genealogy:person_list')

    context = {
        'person': person,
        'family_id': family_key_for(person),
        'children': person.get('children') or [],
        'is_admin': _is_admin(request.user),
    }

    return render(request, 'genealogy/person_detail.html', context)


@login_required
def person_create(request):
    """Create a new person"""
    try:
        roster = _load_roster()
    except FamilyApiError:
        messages.error(request, "Impossible de charger la liste des personnes")
        roster = []

    if request.method == 'POST':
        form = PersonForm(request.POST, request.FILES, roster=roster)
        if form.is_valid():
            try:
                api.get_client().create_person(form.to_api_payload(), photo=form.photo_upload())
            except FamilyApiError as e:
                logger.error(f"Person creation failed: {e}")
                form.add_error(None, "Erreur lors de l'ajout !")
            else:
                logger.info(f"Person created by user {request.user.pk}")
                messages.success(request, 'Personne ajoutée avec succès')
                return redirect('genealogy:person_list')
    else:
        form = PersonForm(roster=roster)

    return render(request, 'genealogy/person_form.html', {
        'form': form,
        'title': 'Ajouter une personne',
        'mode': 'add',
    })


@login_required
def person_edit(request, person_id):
    """Edit a person's information"""
    client = api.get_client()
    try:
        person = client.get_person(person_id)
        roster = _load_roster()
    except FamilyApiError as e:
        if e.not_found:
            raise Http404("Personne non trouvée")
        messages.error(request, "Impossible de charger cette personne.")
        return redirect('genealogy:person_list')

    if request.method == 'POST':
        form = PersonForm(request.POST, request.FILES, roster=roster, person=person)
        if form.is_valid():
            try:
                client.update_person(person_id, form.to_api_payload(), photo=form.photo_upload())
            except FamilyApiError as e:
                logger.error(f"Person {person_id} update failed: {e}")
                form.add_error(None, "Erreur lors de la modification !")
            else:
                logger.info(f"Person {person_id} updated by user {request.user.pk}")
                messages.success(request, 'Personne modifiée avec succès')
                return redirect('genealogy:person_detail', person_id=person_id)
    else:
        form = PersonForm(roster=roster, person=person)

    return render(request, 'genealogy/person_form.html', {
        'form': form,
        'person': person,
        'title': 'Modifier une personne',
        'mode': 'edit',
    })


@login_required
@require_POST
def person_delete(request, person_id):
    """Delete a person (admin only)"""
    if not _is_admin(request.user):
        messages.error(request, "Vous n'avez pas l'autorisation de supprimer cette personne.")
        return redirect('genealogy:person_detail', person_id=person_id)

    try:
        api.get_client().delete_person(person_id)
    except FamilyApiError as e:
        logger.error(f"Person {person_id} deletion failed: {e}")
        messages.error(request, 'Erreur lors de la suppression !')
        return redirect('genealogy:person_detail', person_id=person_id)

    logger.info(f"Person {person_id} deleted by user {request.user.pk}")
    messages.success(request, 'Personne supprimée avec succès.')
    return redirect('genealogy:person_list')


# Families

@login_required
def family_list(request):
    """Every family head"""
    error = None
    try:
        families = api.get_client().list_families()
    except FamilyApiError as e:
        logger.error(f"Family list unavailable: {e}")
        error = "Impossible de charger les familles"
        families = []

    return render(request, 'genealogy/family_list.html', {
        'families': families,
        'error': error,
    })


@login_required
def family_detail(request, family_id):
    """Grandparents, parents and children of a family, each linked to their own family"""
    try:
        famille = api.get_client().get_family(family_id)
    except FamilyApiError as e:
        if e.not_found:
            raise Http404("Famille non trouvée")
        messages.error(request, "Impossible de charger cette famille.")
        return redirect('genealogy:family_list')

    pere = famille.get('pere') or {}
    title = f"Famille de {pere.get('first_name') or ''} {pere.get('last_name') or ''}".strip()

    return render(request, 'genealogy/family_detail.html', {
        'famille': famille,
        'title': title,
        'sections': build_family_sections(famille),
    })


# Administration

@login_required
def admin_dashboard(request):
    """User and person statistics"""
    if not _is_admin(request.user):
        messages.error(request, "Seuls les administrateurs peuvent accéder à l'administration.")
        return redirect('genealogy:home')

    users_by_role = list(
        User.objects.values('role').annotate(count=Count('id')).order_by('role')
    )

    person_stats = None
    try:
        person_stats = compute_roster_stats(_load_roster())
    except FamilyApiError as e:
        logger.error(f"Dashboard person stats unavailable: {e}")
        messages.warning(request, "Les statistiques des personnes sont indisponibles.")

    context = {
        'users_by_role': users_by_role,
        'total_users': sum(row['count'] for row in users_by_role),
        'active_users': User.objects.filter(is_active=True).count(),
        'person_stats': person_stats,
    }

    return render(request, 'genealogy/admin_dashboard.html', context)


@login_required
def manage_users(request):
    """Paginated user list with search"""
    if not _is_admin(request.user):
        messages.error(request, "Seuls les administrateurs peuvent gérer les utilisateurs.")
        return redirect('genealogy:home')

    users = User.objects.all().order_by('username')

    search_query = request.GET.get('search', '').strip()
    if search_query:
        users = users.filter(
            Q(username__icontains=search_query) |
            Q(email__icontains=search_query)
        )

    paginator = Paginator(users, USERS_PER_PAGE)
    page_obj = paginator.get_page(request.GET.get('page'))

    context = {
        'users': page_obj,
        'search_query': search_query,
        'create_form': AdminUserForm(),
    }

    return render(request, 'genealogy/manage_users.html', context)


@login_required
@require_POST
def create_user(request):
    """Create a user account"""
    if not _is_admin(request.user):
        return JsonResponse({'error': 'Permission denied'}, status=403)

    form = AdminUserForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'error': form.first_error()}, status=400)

    user = form.save()
    logger.info(f"User {user.pk} created by admin {request.user.pk}")

    return JsonResponse({
        'success': True,
        'message': f'Utilisateur {user.username} créé avec succès',
        'id': user.pk,
    }, status=201)


@login_required
@require_POST
def edit_user(request, user_id):
    """Update username, email, role, active flag and optionally password"""
    if not _is_admin(request.user):
        return JsonResponse({'error': 'Permission denied'}, status=403)

    user = get_object_or_404(User, id=user_id)

    form = AdminUserForm(request.POST, instance=user)
    if not form.is_valid():
        return JsonResponse({'error': form.first_error()}, status=400)

    if user == request.user and not form.cleaned_data.get('is_active'):
        return JsonResponse({'error': 'Vous ne pouvez pas vous désactiver vous-même'}, status=400)

    form.save()
    logger.info(f"User {user.pk} updated by admin {request.user.pk}")

    return JsonResponse({
        'success': True,
        'message': f'Utilisateur {user.username} mis à jour avec succès',
    })


@login_required
@require_POST
def delete_user(request, user_id):
    """Delete user account"""
    if not _is_admin(request.user):
        return JsonResponse({'error': 'Permission denied'}, status=403)

    user = get_object_or_404(User, id=user_id)

    if user == request.user:
        return JsonResponse({'error': 'Vous ne pouvez pas supprimer votre propre compte'}, status=400)

    username = user.username
    user.delete()
    logger.info(f"User {user_id} deleted by admin {request.user.pk}")

    return JsonResponse({
        'success': True,
        'message': f'Utilisateur {username} supprimé avec succès',
        'redirect': reverse('genealogy:manage_users'),
    })
