import pytest

from genealogy.relations import (
    CONJOINT_PLACEHOLDER,
    FATHER_PLACEHOLDER,
    MOTHER_PLACEHOLDER,
    ROLE_ENFANT,
    ROLE_GRAND_MERE_MATERNELLE,
    ROLE_GRAND_MERE_PATERNELLE,
    ROLE_GRAND_PERE_MATERNEL,
    ROLE_GRAND_PERE_PATERNEL,
    ROLE_MERE,
    ROLE_PERE,
    as_choices,
    as_person_id,
    build_family_sections,
    compute_eligible_relatives,
    family_key_for,
    resolve_target_family_id,
)


def values(items):
    return [item['value'] for item in items]


# resolve_target_family_id

@pytest.mark.parametrize('role', [ROLE_PERE, ROLE_MERE])
@pytest.mark.parametrize('person', [
    {'id': 1, 'gender': 'Homme', 'conjointId': 2},
    {'id': 2, 'gender': 'Femme', 'conjointId': 1},
    {'id': 3},
])
def test_parents_never_link(role, person):
    assert resolve_target_family_id({'role': role, 'personne': person}) is None


@pytest.mark.parametrize('role', [ROLE_PERE, ROLE_GRAND_PERE_PATERNEL, ROLE_ENFANT])
def test_missing_person_has_no_target(role):
    assert resolve_target_family_id({'role': role, 'personne': None}) is None
    assert resolve_target_family_id({'role': role}) is None


@pytest.mark.parametrize('role', [ROLE_GRAND_MERE_PATERNELLE, ROLE_GRAND_MERE_MATERNELLE])
def test_grandmother_links_to_husband_family(role):
    slot = {'role': role, 'personne': {'id': 9, 'gender': 'Femme', 'conjointId': 42}}
    assert resolve_target_family_id(slot) == 42


def test_both_grandmother_roles_behave_the_same():
    person = {'id': 9, 'gender': 'Femme', 'conjointId': 42}
    paternal = resolve_target_family_id({'role': ROLE_GRAND_MERE_PATERNELLE, 'personne': person})
    maternal = resolve_target_family_id({'role': ROLE_GRAND_MERE_MATERNELLE, 'personne': person})
    assert paternal == maternal


@pytest.mark.parametrize('role', [ROLE_GRAND_MERE_PATERNELLE, ROLE_GRAND_MERE_MATERNELLE])
def test_unmarried_grandmother_has_no_target(role):
    slot = {'role': role, 'personne': {'id': 9, 'gender': 'Femme'}}
    assert resolve_target_family_id(slot) is None


@pytest.mark.parametrize('role', [ROLE_GRAND_PERE_PATERNEL, ROLE_GRAND_PERE_MATERNEL])
def test_grandfather_links_to_own_family(role):
    slot = {'role': role, 'personne': {'id': 7, 'gender': 'Homme'}}
    assert resolve_target_family_id(slot) == 7


def test_married_daughter_links_to_husband_family():
    slot = {'role': ROLE_ENFANT, 'personne': {'id': 8, 'gender': 'Femme', 'conjointId': 15}}
    assert resolve_target_family_id(slot) == 15


def test_married_son_links_to_own_family():
    slot = {'role': ROLE_ENFANT, 'personne': {'id': 8, 'gender': 'Homme', 'conjointId': 15}}
    assert resolve_target_family_id(slot) == 8


@pytest.mark.parametrize('gender', ['Homme', 'Femme', None])
def test_unmarried_child_has_no_target(gender):
    slot = {'role': ROLE_ENFANT, 'personne': {'id': 8, 'gender': gender}}
    assert resolve_target_family_id(slot) is None


def test_married_child_without_gender_falls_back_to_own_id():
    slot = {'role': ROLE_ENFANT, 'personne': {'id': 8, 'conjointId': 15}}
    assert resolve_target_family_id(slot) == 8


def test_string_ids_are_coerced():
    slot = {'role': ROLE_ENFANT, 'personne': {'id': '8', 'gender': 'Femme', 'conjointId': '15'}}
    assert resolve_target_family_id(slot) == 15


def test_family_key_for():
    assert family_key_for({'id': 1, 'gender': 'Homme', 'conjointId': 2}) == 1
    assert family_key_for({'id': 2, 'gender': 'Femme', 'conjointId': 1}) == 1
    assert family_key_for({'id': 3, 'gender': 'Homme'}) is None
    assert family_key_for({'id': 4, 'conjointId': 1}) is None
    assert family_key_for(None) is None


def test_as_person_id():
    assert as_person_id(5) == 5
    assert as_person_id('5') == 5
    assert as_person_id('') is None
    assert as_person_id(None) is None
    assert as_person_id(True) is None
    assert as_person_id('abc') is None


# compute_eligible_relatives

def test_new_person_gets_every_adult():
    roster = [
        {'id': 1, 'first_name': 'Jean', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 45},
        {'id': 2, 'first_name': 'Marie', 'last_name': 'Martin', 'gender': 'Femme', 'age': 40},
        {'id': 3, 'first_name': 'Paul', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 12},
        {'id': 4, 'first_name': 'Anne', 'last_name': 'Petit', 'gender': 'Femme'},
        {'id': 5, 'first_name': 'Inconnu', 'last_name': 'X', 'age': 50},
    ]

    result = compute_eligible_relatives(roster)

    assert result['father_candidates'] == [
        {'label': FATHER_PLACEHOLDER, 'value': ''},
        {'label': 'Dupont Jean', 'value': '1'},
    ]
    assert values(result['mother_candidates']) == ['', '2', '4']
    # Any defined gender qualifies when the current person is unknown
    assert values(result['conjoint_candidates']) == ['', '1', '2', '4']


def test_placeholders_come_first():
    result = compute_eligible_relatives([])

    assert result['father_candidates'] == [{'label': FATHER_PLACEHOLDER, 'value': ''}]
    assert result['mother_candidates'] == [{'label': MOTHER_PLACEHOLDER, 'value': ''}]
    assert result['conjoint_candidates'] == [{'label': CONJOINT_PLACEHOLDER, 'value': ''}]


def test_concrete_three_person_scenario():
    roster = [
        {'id': 1, 'gender': 'Homme', 'age': 45},
        {'id': 2, 'gender': 'Femme', 'age': 40},
        {'id': 3, 'gender': 'Homme', 'age': 10, 'fatherId': 1, 'motherId': 2},
    ]
    current = {'id': 3, 'gender': 'Homme', 'fatherId': 1, 'motherId': 2}

    result = compute_eligible_relatives(roster, current)

    assert '3' not in values(result['father_candidates'])
    assert values(result['father_candidates']) == ['', '1']
    assert values(result['mother_candidates']) == ['', '2']
    # The mother is excluded from spouses and no spouse is assigned
    assert values(result['conjoint_candidates']) == ['']


def test_excludes_self_children_and_siblings(roster):
    current = roster[2]  # Paul, son of 1 and 2, brother of Claire (4)
    current = dict(current, children=[{'id': 6}])
    everyone = roster + [
        {'id': 6, 'first_name': 'Leo', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 21, 'fatherId': 3},
        {'id': 7, 'first_name': 'Hugo', 'last_name': 'Moreau', 'gender': 'Homme', 'age': 60},
        {'id': 8, 'first_name': 'Lise', 'last_name': 'Roux', 'gender': 'Femme', 'age': 25, 'motherId': 2},
    ]

    result = compute_eligible_relatives(everyone, current)

    father_ids = values(result['father_candidates'])
    mother_ids = values(result['mother_candidates'])
    conjoint_ids = values(result['conjoint_candidates'])

    for forbidden in ('3', '4', '6', '8'):
        assert forbidden not in conjoint_ids
    for forbidden in ('3', '6'):
        assert forbidden not in father_ids
    for forbidden in ('4', '8'):
        assert forbidden not in mother_ids

    assert '7' in father_ids
    assert conjoint_ids == ['', '5']


def test_conjoint_must_have_opposite_gender(roster):
    current = {'id': 10, 'gender': 'Femme'}

    result = compute_eligible_relatives(roster, current)

    assert values(result['conjoint_candidates']) == ['', '1', '3']


def test_age_filter_is_inclusive_and_fails_open():
    roster = [
        {'id': 1, 'gender': 'Homme', 'age': 20},
        {'id': 2, 'gender': 'Homme', 'age': 19},
        {'id': 3, 'gender': 'Homme', 'age': None},
        {'id': 4, 'gender': 'Homme', 'age': ''},
        {'id': 5, 'gender': 'Homme', 'age': 0},
    ]

    result = compute_eligible_relatives(roster)

    assert values(result['father_candidates']) == ['', '1', '3', '4']


def test_selected_father_is_preserved_when_filtered_out():
    roster = [
        {'id': 5, 'first_name': 'Tom', 'last_name': 'Jeune', 'gender': 'Homme', 'age': 15},
        {'id': 6, 'first_name': 'Max', 'last_name': 'Vieux', 'gender': 'Homme', 'age': 50},
    ]
    current = {'id': 9, 'gender': 'Homme', 'fatherId': 5}

    result = compute_eligible_relatives(roster, current)

    assert result['father_candidates'][1] == {'label': 'Jeune Tom', 'value': '5'}
    assert values(result['father_candidates']) == ['', '5', '6']


def test_selected_relation_missing_from_roster_is_omitted():
    roster = [{'id': 6, 'gender': 'Homme', 'age': 50}]
    current = {'id': 9, 'gender': 'Femme', 'fatherId': 99, 'conjointId': 98}

    result = compute_eligible_relatives(roster, current)

    assert values(result['father_candidates']) == ['', '6']
    assert '99' not in values(result['father_candidates'])
    assert '98' not in values(result['conjoint_candidates'])


def test_selected_conjoint_is_preserved():
    roster = [
        {'id': 1, 'first_name': 'Jean', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 45, 'conjointId': 2},
        {'id': 2, 'first_name': 'Marie', 'last_name': 'Martin', 'gender': 'Femme', 'age': 40, 'conjointId': 1},
    ]

    result = compute_eligible_relatives(roster, roster[1])

    assert values(result['conjoint_candidates']) == ['', '1']


def test_is_idempotent_and_does_not_mutate(roster):
    snapshot = [dict(p) for p in roster]
    current = roster[3]

    first = compute_eligible_relatives(roster, current)
    second = compute_eligible_relatives(roster, current)

    assert first == second
    assert roster == snapshot


def test_malformed_entries_are_ignored():
    roster = [
        None,
        {'gender': 'Homme', 'age': 40},
        {'id': 'abc', 'gender': 'Homme', 'age': 40},
        {'id': 1, 'first_name': 'Jean', 'last_name': 'Dupont', 'gender': 'Homme', 'age': 'inconnu'},
    ]

    result = compute_eligible_relatives(roster, {'id': 2, 'children': [None, {'id': None}]})

    assert values(result['father_candidates']) == ['', '1']


def test_as_choices():
    items = [{'label': FATHER_PLACEHOLDER, 'value': ''}, {'label': 'Dupont Jean', 'value': '1'}]
    assert as_choices(items) == [('', FATHER_PLACEHOLDER), ('1', 'Dupont Jean')]


# build_family_sections

def test_family_sections_layout():
    famille = {
        'pere': {'id': 1, 'first_name': 'Jean', 'gender': 'Homme', 'conjointId': 2},
        'mere': {'id': 2, 'first_name': 'Marie', 'gender': 'Femme', 'conjointId': 1},
        'grand_pere_paternel': {'id': 10, 'gender': 'Homme', 'conjointId': 11},
        'grand_mere_paternelle': {'id': 11, 'gender': 'Femme', 'conjointId': 10},
        'grand_pere_maternel': None,
        'grand_mere_maternelle': {'id': 13, 'gender': 'Femme'},
        'enfants': [
            {'id': 3, 'gender': 'Homme', 'age': 12},
            {'id': 4, 'gender': 'Femme', 'age': 30, 'conjointId': 20},
            {'id': 5, 'gender': 'Homme'},
            {'id': 6, 'gender': 'Homme', 'age': 25, 'conjointId': 21},
        ],
    }

    sections = build_family_sections(famille)

    assert [s['title'] for s in sections] == [
        'Grands-parents paternels',
        'Grands-parents maternels',
        'Parents',
        'Enfants',
    ]
    assert [s['special'] for s in sections] == [False, False, True, False]

    paternal, maternal, parents, children = sections
    assert [slot['target_id'] for slot in paternal['slots']] == [10, 10]
    assert [slot['target_id'] for slot in maternal['slots']] == [None, None]
    assert [slot['target_id'] for slot in parents['slots']] == [None, None]

    assert [slot['personne']['id'] for slot in children['slots']] == [4, 6, 3, 5]
    assert [slot['target_id'] for slot in children['slots']] == [20, 6, None, None]
    assert all(slot['role'] == ROLE_ENFANT for slot in children['slots'])


def test_family_sections_without_children():
    sections = build_family_sections({'pere': {'id': 1, 'gender': 'Homme'}})
    assert sections[-1]['slots'] == []


def test_mother_and_spouse_lists_apply_age_limit():
    roster = [
        {'id': 1, 'gender': 'Femme', 'age': 20},
        {'id': 2, 'gender': 'Femme', 'age': 19},
        {'id': 3, 'gender': 'Homme', 'age': 19},
        {'id': 4, 'gender': 'Homme', 'age': 25},
    ]

    result = compute_eligible_relatives(roster)

    assert values(result['mother_candidates']) == ['', '1']
    assert values(result['conjoint_candidates']) == ['', '1', '4']


def test_mother_list_excludes_daughters():
    roster = [
        {'id': 1, 'gender': 'Femme', 'age': 30},
        {'id': 2, 'gender': 'Femme', 'age': 60},
    ]
    current = {'id': 9, 'gender': 'Homme', 'children': [{'id': 1}]}

    result = compute_eligible_relatives(roster, current)

    assert values(result['mother_candidates']) == ['', '2']
    assert '1' not in values(result['conjoint_candidates'])


def test_children_given_as_bare_ids():
    roster = [
        {'id': 1, 'gender': 'Homme', 'age': 30},
        {'id': 2, 'gender': 'Homme', 'age': 60},
    ]
    current = {'id': 9, 'gender': 'Femme', 'children': [1, '3', [4], None]}

    result = compute_eligible_relatives(roster + [5, 'x'], current)

    assert values(result['father_candidates']) == ['', '2']
    assert values(result['conjoint_candidates']) == ['', '2']


def test_family_sections_skip_malformed_children():
    sections = build_family_sections({'enfants': [3, None, {'id': 4, 'gender': 'Homme'}]})

    assert [slot['personne']['id'] for slot in sections[-1]['slots']] == [4]
