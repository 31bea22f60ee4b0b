"""
Client for the remote family API.

Persons and families live in the hosted backend; this module is the only
place that talks to it. Every call goes through ``FamilyApiClient.request``
which adds the bearer token, applies the timeout and turns transport or HTTP
failures into ``FamilyApiError``.
"""

import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class FamilyApiError(Exception):
    """Raised when the family API cannot be reached or answers with an error"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self):
        return self.status_code == 404


class FamilyApiClient:
    """Thin wrapper around ``requests`` for the ``/api`` routes of the backend"""

    def __init__(self, base_url=None, token=None, timeout=None, session=None):
        self.base_url = (base_url or settings.FAMILY_API_BASE_URL).rstrip('/')
        self.token = token if token is not None else settings.FAMILY_API_TOKEN
        self.timeout = timeout or settings.FAMILY_API_TIMEOUT
        self.session = session or requests.Session()

    def build_url(self, path):
        clean_path = path if path.startswith('/') else f'/{path}'
        return f'{self.base_url}/api{clean_path}'

    def request(self, method, path, json=None, data=None, files=None, params=None):
        url = self.build_url(path)

        headers = {'Accept': 'application/json'}
        if files is None and data is None:
            headers['Content-Type'] = 'application/json'
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'

        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json,
                data=data,
                files=files,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"Family API timed out after {self.timeout}s: {method} {url}")
            raise FamilyApiError("Le serveur ne répond pas.")
        except requests.exceptions.RequestException as e:
            logger.error(f"Family API request failed: {method} {url}: {e}")
            raise FamilyApiError("Impossible de contacter le serveur.")

        if not response.ok:
            logger.error(f"Family API error {response.status_code}: {method} {url}: {response.text[:200]}")
            raise FamilyApiError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        return response

    def _json(self, response):
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.error(f"Family API returned invalid JSON for {response.url}")
            raise FamilyApiError("Réponse invalide du serveur.", status_code=response.status_code)

    def _json_list(self, response):
        payload = self._json(response)
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get('data'), list):
            return payload['data']
        return []

    # Persons

    def list_persons(self):
        return self._json_list(self.request('GET', '/personnes'))

    def get_person(self, person_id):
        payload = self._json(self.request('GET', f'/personnes/{person_id}/'))
        if not payload or (isinstance(payload, dict) and payload.get('error')):
            raise FamilyApiError("Personne non trouvée", status_code=404)
        return payload

    def create_person(self, data, photo=None):
        files = {'photo': photo} if photo else None
        return self._json(self.request('POST', '/personnes/', data=data, files=files))

    def update_person(self, person_id, data, photo=None):
        files = {'photo': photo} if photo else None
        return self._json(self.request('PUT', f'/personnes/{person_id}/', data=data, files=files))

    def delete_person(self, person_id):
        self.request('DELETE', f'/personnes/{person_id}/')

    # Families

    def list_families(self):
        return self._json_list(self.request('GET', '/familles'))

    def get_family(self, family_id):
        payload = self._json(self.request('GET', f'/familles/{family_id}/'))
        if not payload or (isinstance(payload, dict) and payload.get('error')):
            raise FamilyApiError("Famille non trouvée", status_code=404)
        return payload


def get_client():
    return FamilyApiClient()


def get_photo_url(photo_url):
    return photo_url or settings.DEFAULT_PHOTO_URL
