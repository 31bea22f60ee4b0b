from django.shortcuts import render
import logging

logger = logging.getLogger(__name__)


def _error_response(request, status, title, message, suggestions):
    context = {
        'request_path': request.path,
        'error_code': str(status),
        'error_title': title,
        'error_message': message,
        'suggestions': suggestions,
    }
    response = render(request, f'errors/{status}.html', context)
    response.status_code = status
    return response


def custom_404_view(request, exception=None):
    """
    Custom 404 error handler
    """
    user = getattr(request, 'user', None)
    logger.warning(f'404 Error: {request.path} - User: {user if user and user.is_authenticated else "Anonymous"}')

    return _error_response(
        request, 404,
        'Page introuvable',
        'La page ou la personne que vous recherchez n\'existe pas ou a été supprimée.',
        [
            'Vérifiez l\'orthographe de l\'adresse',
            'Retournez à la liste des personnes',
            'Utilisez la recherche pour retrouver un membre de la famille',
        ],
    )


def custom_500_view(request):
    """
    Custom 500 error handler
    """
    logger.error(f'500 Error: {request.path}')

    return _error_response(
        request, 500,
        'Erreur interne du serveur',
        'Une erreur technique s\'est produite. Réessayez dans quelques instants.',
        [
            'Rafraîchissez la page dans quelques instants',
            'Retournez à la page d\'accueil',
        ],
    )


def custom_403_view(request, exception=None):
    """
    Custom 403 error handler (Permission Denied)
    """
    logger.warning(f'403 Error: {request.path}')

    return _error_response(
        request, 403,
        'Accès refusé',
        'Vous n\'avez pas les permissions nécessaires pour accéder à cette page.',
        [
            'Connectez-vous avec un compte autorisé',
            'Contactez un administrateur pour demander l\'accès',
        ],
    )


def custom_400_view(request, exception=None):
    """
    Custom 400 error handler (Bad Request)
    """
    logger.warning(f'400 Error: {request.path}')

    return _error_response(
        request, 400,
        'Requête incorrecte',
        'La requête envoyée n\'est pas valide ou contient des données incorrectes.',
        [
            'Vérifiez les informations saisies',
            'Retournez à la page précédente',
        ],
    )
