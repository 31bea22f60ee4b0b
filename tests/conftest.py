from unittest import mock

import pytest

from accounts.models import User
from genealogy.api import FamilyApiClient

PASSWORD = 'Secret123'


@pytest.fixture
def member(db):
    return User.objects.create_user(
        username='member', email='member@example.com', password=PASSWORD
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin_famille', email='admin@example.com', password=PASSWORD,
        role=User.ROLE_ADMIN,
    )


@pytest.fixture
def member_client(client, member):
    client.force_login(member)
    return client


@pytest.fixture
def admin_client(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def roster():
    return [
        {'id': 1, 'first_name': 'Jean', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 70,
         'conjointId': 2, 'birth_place': 'Lyon', 'birth_date': '1955-03-12',
         'children': [{'id': 3}, {'id': 4}]},
        {'id': 2, 'first_name': 'Marie', 'last_name': 'Martin', 'gender': 'Femme', 'age': 68,
         'conjointId': 1, 'birth_place': 'Paris', 'birth_date': '1957-06-01',
         'children': [{'id': 3}, {'id': 4}]},
        {'id': 3, 'first_name': 'Paul', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 40,
         'fatherId': 1, 'motherId': 2, 'birth_place': 'Lyon', 'birth_date': '1985-09-20'},
        {'id': 4, 'first_name': 'Claire', 'last_name': 'Dupont', 'gender': 'Femme', 'age': 36,
         'fatherId': 1, 'motherId': 2, 'birth_place': 'Grenoble', 'birth_date': '1989-01-05',
         'dateDeces': '2020-02-02'},
        {'id': 5, 'first_name': 'Sophie', 'last_name': 'Bernard', 'gender': 'Femme', 'age': 38,
         'birth_place': 'Nantes', 'birth_date': '1987-04-14'},
    ]


@pytest.fixture
def api_client(roster):
    """Family API client double, patched into the views"""
    fake = mock.create_autospec(FamilyApiClient, instance=True)
    fake.list_persons.return_value = roster
    fake.list_families.return_value = [roster[0]]
    with mock.patch('genealogy.views.api.get_client', return_value=fake):
        yield fake
