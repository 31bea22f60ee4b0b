from collections import Counter
from datetime import date, datetime

from django.utils import formats, timezone


SORT_KEYS = ['last_name', 'first_name', 'gender', 'birth_date']


def parse_api_date(value):
    """Parse a date sent by the family API (``YYYY-MM-DD`` or full ISO timestamp)."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        return None


def age_from_birth_date(birth_date, death_date=None, today=None):
    """Calculate age at death, or today for living persons"""
    birth_date = parse_api_date(birth_date)
    if not birth_date:
        return None

    end_date = parse_api_date(death_date) or today or timezone.now().date()

    age = end_date.year - birth_date.year
    if (end_date.month, end_date.day) < (birth_date.month, birth_date.day):
        age -= 1

    return age if age >= 0 else None


def normalize_person(raw, today=None):
    """
    Return a copy of a person payload with ``age`` filled in.

    The backend usually sends the age; older records only carry a birth date.
    """
    person = dict(raw)
    if person.get('age') is None:
        person['age'] = age_from_birth_date(
            person.get('birth_date'), person.get('dateDeces'), today=today
        )
    return person


def search_persons(roster, term):
    """Case-insensitive match on first name, last name and birth place"""
    term = (term or '').strip().lower()
    if not term:
        return list(roster)

    results = []
    for person in roster:
        haystack = f"{person.get('first_name') or ''} {person.get('last_name') or ''} {person.get('birth_place') or ''}"
        if term in haystack.lower():
            results.append(person)
    return results


def sort_persons(roster, key=None, direction='asc'):
    """Sort the roster like the list screen does; unknown keys keep API order."""
    if key not in SORT_KEYS:
        return list(roster)

    reverse = direction == 'desc'

    if key == 'birth_date':
        # Missing dates sort as the oldest possible date
        return sorted(
            roster,
            key=lambda p: parse_api_date(p.get('birth_date')) or date.min,
            reverse=reverse,
        )

    return sorted(
        roster,
        key=lambda p: str(p.get(key) or '').lower(),
        reverse=reverse,
    )


def compute_roster_stats(roster):
    """Person figures shown on the administration dashboard"""
    ages = [p['age'] for p in roster if isinstance(p.get('age'), int)]
    genders = Counter(p.get('gender') or None for p in roster)

    return {
        'total_persons': len(roster),
        'deceased': sum(1 for p in roster if p.get('dateDeces')),
        'average_age': round(sum(ages) / len(ages)) if ages else 0,
        'gender_distribution': [
            {'gender': gender, 'count': count}
            for gender, count in genders.most_common()
        ],
    }


def format_date_fr(value):
    """``1950-03-12`` -> ``12 mars 1950`` (in the active language)"""
    parsed = parse_api_date(value)
    if not parsed:
        return ''
    return formats.date_format(parsed, 'j F Y')
