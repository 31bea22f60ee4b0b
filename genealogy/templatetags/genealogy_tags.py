from django import template

from ..api import get_photo_url
from ..utils import format_date_fr

register = template.Library()


@register.filter
def photo_url(photo):
    """Photo URL or the default avatar"""
    return get_photo_url(photo)


@register.filter
def date_fr(value):
    """Format an API date as '12 mars 1950'"""
    return format_date_fr(value)


@register.filter
def full_name(person):
    if not person:
        return 'Non renseigné'
    return f"{person.get('first_name') or ''} {person.get('last_name') or ''}".strip() or 'Non renseigné'


@register.simple_tag
def sort_direction(current_key, key, direction):
    """Direction a sort button should request next"""
    if current_key == key and direction == 'asc':
        return 'desc'
    return 'asc'
