"""
Relationship rules used by the family and person screens.

Everything here works on plain person dicts as returned by the family API
(``id``, ``first_name``, ``last_name``, ``gender``, ``age``, ``fatherId``,
``motherId``, ``conjointId``, ``children``). Nothing is fetched and nothing is
mutated: the roster is always passed in explicitly.

A "famille" is keyed by its male head (father or husband). The convention
lives in ``family_key_for`` so every screen resolves families the same way.
"""

HOMME = 'Homme'
FEMME = 'Femme'

GENDER_CHOICES = [
    (HOMME, 'Homme'),
    (FEMME, 'Femme'),
]

OPPOSITE_GENDER = {
    HOMME: FEMME,
    FEMME: HOMME,
}

ROLE_PERE = 'Père'
ROLE_MERE = 'Mère'
ROLE_GRAND_PERE_PATERNEL = 'Grand-père paternel'
ROLE_GRAND_MERE_PATERNELLE = 'Grand-mère paternelle'
ROLE_GRAND_PERE_MATERNEL = 'Grand-père maternel'
ROLE_GRAND_MERE_MATERNELLE = 'Grand-mère maternelle'
ROLE_ENFANT = 'Enfant'

PARENT_ROLES = (ROLE_PERE, ROLE_MERE)
GRANDPARENT_ROLES = (
    ROLE_GRAND_PERE_PATERNEL,
    ROLE_GRAND_MERE_MATERNELLE,
    ROLE_GRAND_PERE_MATERNEL,
    ROLE_GRAND_MERE_PATERNELLE,
)

# Youngest plausible age for a parent or a spouse
MIN_RELATIVE_AGE = 20

FATHER_PLACEHOLDER = '--Aucun--'
MOTHER_PLACEHOLDER = '--Aucune--'
CONJOINT_PLACEHOLDER = '--Aucun(e)--'


def as_person_id(value):
    """Coerce an id coming from JSON or a form field to an int, or None."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def family_key_for(person):
    """
    Return the id of the family a married person belongs to.

    Men head their own family, women belong to their husband's. Unmarried
    persons and persons whose gender is unknown have no family key.
    """
    if not person:
        return None

    conjoint_id = as_person_id(person.get('conjointId'))
    if conjoint_id is None:
        return None

    gender = person.get('gender')
    if gender == HOMME:
        return as_person_id(person.get('id'))
    if gender == FEMME:
        return conjoint_id
    return None


def resolve_target_family_id(slot):
    """
    Return the family id to open when a card of the family grid is selected.

    ``slot`` is a mapping with a ``role`` label and an optional ``personne``.
    Parents are never linked: the current page already is their family.
    Grandmothers link to their husband's family, married children to the
    family they head or married into. Everyone else links to their own id.
    """
    person = slot.get('personne')
    if not person:
        return None

    role = slot.get('role')
    if role in PARENT_ROLES:
        return None

    gender = person.get('gender')

    if role in GRANDPARENT_ROLES and gender == FEMME:
        # Unmarried grandmothers have nowhere to go
        return family_key_for(person)

    if role == ROLE_ENFANT:
        if as_person_id(person.get('conjointId')) is None:
            return None
        if gender in (HOMME, FEMME):
            return family_key_for(person)

    return as_person_id(person.get('id'))


def person_label(person):
    """Dropdown label, last name first."""
    return f"{person.get('last_name') or ''} {person.get('first_name') or ''}".strip()


def _child_ids(person):
    ids = set()
    for child in person.get('children') or []:
        # Entries are partial persons; a bare id is accepted too
        if isinstance(child, dict):
            child_id = as_person_id(child.get('id'))
        else:
            child_id = as_person_id(child)
        if child_id is not None:
            ids.add(child_id)
    return ids


def _excluded_ids(all_persons, current):
    """Ids that can never be offered as father, mother or spouse of ``current``."""
    excluded = set()
    if not current:
        return excluded

    own_id = as_person_id(current.get('id'))
    if own_id is not None:
        excluded.add(own_id)

    for key in ('fatherId', 'motherId', 'conjointId'):
        related_id = as_person_id(current.get(key))
        if related_id is not None:
            excluded.add(related_id)

    excluded.update(_child_ids(current))

    # Siblings share a father or a mother
    father_id = as_person_id(current.get('fatherId'))
    mother_id = as_person_id(current.get('motherId'))
    for person in all_persons:
        same_father = father_id is not None and as_person_id(person.get('fatherId')) == father_id
        same_mother = mother_id is not None and as_person_id(person.get('motherId')) == mother_id
        if same_father or same_mother:
            sibling_id = as_person_id(person.get('id'))
            if sibling_id is not None:
                excluded.add(sibling_id)

    return excluded


def _is_old_enough(person):
    age = person.get('age')
    if age is None or age == '' or isinstance(age, bool):
        return True
    try:
        return int(age) >= MIN_RELATIVE_AGE
    except (TypeError, ValueError):
        return True


def _is_opposite_gender(person, current):
    current_gender = current.get('gender') if current else None
    if not current_gender:
        return True
    return OPPOSITE_GENDER.get(current_gender) == person.get('gender')


def _is_eligible(person, role, current, child_ids):
    if not _is_old_enough(person):
        return False

    person_id = as_person_id(person.get('id'))
    gender = person.get('gender')

    if role == 'father':
        return gender == HOMME and person_id not in child_ids
    if role == 'mother':
        return gender == FEMME and person_id not in child_ids
    if role == 'conjoint':
        return gender is not None and _is_opposite_gender(person, current)
    return False


def _candidate_items(all_persons, current, role, excluded, child_ids, selected_key, placeholder):
    items = []
    for person in all_persons:
        person_id = as_person_id(person.get('id'))
        if person_id is None or person_id in excluded:
            continue
        if _is_eligible(person, role, current, child_ids):
            items.append({'label': person_label(person), 'value': str(person_id)})

    selected_id = as_person_id(current.get(selected_key)) if current else None
    if selected_id is not None and not any(item['value'] == str(selected_id) for item in items):
        selected = next(
            (p for p in all_persons if as_person_id(p.get('id')) == selected_id),
            None,
        )
        if selected is not None:
            items.insert(0, {'label': person_label(selected), 'value': str(selected_id)})

    return [{'label': placeholder, 'value': ''}] + items


def compute_eligible_relatives(all_persons, current_person=None):
    """
    Build the father, mother and spouse dropdown items for the person form.

    ``current_person`` is the person being edited, or None when creating one.
    Each list starts with its "nobody" placeholder (value ``''``). A relation
    already assigned to ``current_person`` stays in its list even when it no
    longer passes the filters, as long as it is still part of the roster.
    """
    all_persons = [p for p in (all_persons or []) if isinstance(p, dict)]
    excluded = _excluded_ids(all_persons, current_person)
    child_ids = _child_ids(current_person) if current_person else set()

    return {
        'father_candidates': _candidate_items(
            all_persons, current_person, 'father', excluded, child_ids,
            'fatherId', FATHER_PLACEHOLDER,
        ),
        'mother_candidates': _candidate_items(
            all_persons, current_person, 'mother', excluded, child_ids,
            'motherId', MOTHER_PLACEHOLDER,
        ),
        'conjoint_candidates': _candidate_items(
            all_persons, current_person, 'conjoint', excluded, child_ids,
            'conjointId', CONJOINT_PLACEHOLDER,
        ),
    }


def as_choices(items):
    """Turn ``{label, value}`` items into Django ``(value, label)`` choices."""
    return [(item['value'], item['label']) for item in items]


def _age_sort_key(slot):
    age = slot['personne'].get('age')
    try:
        return -int(age)
    except (TypeError, ValueError):
        return float('inf')


def build_family_sections(famille):
    """
    Arrange a family payload into the sections of the family grid.

    Every slot carries its ``target_id`` so templates only have to build the
    link. Children are listed oldest first, unknown ages last.
    """
    def slot(role, person):
        entry = {'role': role, 'personne': person or None}
        entry['target_id'] = resolve_target_family_id(entry)
        return entry

    children = [
        slot(ROLE_ENFANT, child)
        for child in famille.get('enfants') or []
        if isinstance(child, dict)
    ]
    children.sort(key=_age_sort_key)

    return [
        {
            'title': 'Grands-parents paternels',
            'slots': [
                slot(ROLE_GRAND_PERE_PATERNEL, famille.get('grand_pere_paternel')),
                slot(ROLE_GRAND_MERE_PATERNELLE, famille.get('grand_mere_paternelle')),
            ],
            'special': False,
        },
        {
            'title': 'Grands-parents maternels',
            'slots': [
                slot(ROLE_GRAND_PERE_MATERNEL, famille.get('grand_pere_maternel')),
                slot(ROLE_GRAND_MERE_MATERNELLE, famille.get('grand_mere_maternelle')),
            ],
            'special': False,
        },
        {
            'title': 'Parents',
            'slots': [
                slot(ROLE_PERE, famille.get('pere')),
                slot(ROLE_MERE, famille.get('mere')),
            ],
            'special': True,
        },
        {
            'title': 'Enfants',
            'slots': children,
            'special': False,
        },
    ]
