"""
Shared page/limit pagination with an explicit whitelist of sortable fields.
"""

import math

from django.conf import settings

from . import exceptions

SORT_ORDERS = ('asc', 'desc')


def _positive_int(value, name, default):
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise exceptions.ValidationError(f"'{name}' must be a positive integer")
    if number < 1:
        raise exceptions.ValidationError(f"'{name}' must be a positive integer")
    return number


def resolve_ordering(params, sort_fields, default_sort, default_order='desc'):
    """
    Translate ``sort_by``/``sort_order`` query params into an ORM ordering.

    ``sort_fields`` maps the public sort names to model field paths. Names
    outside the map are rejected; the order applies the same way to every field.
    """
    sort_by = params.get('sort_by') or default_sort
    sort_order = (params.get('sort_order') or default_order).lower()

    if sort_by not in sort_fields:
        allowed = ', '.join(sorted(sort_fields))
        raise exceptions.ValidationError(f"Invalid sort field '{sort_by}'. Allowed: {allowed}")
    if sort_order not in SORT_ORDERS:
        raise exceptions.ValidationError("'sort_order' must be 'asc' or 'desc'")

    field = sort_fields[sort_by]
    ordering = [field if sort_order == 'asc' else f'-{field}']
    # Stable tie-break so pages never overlap.
    if field != 'id':
        ordering.append('-id' if sort_order == 'desc' else 'id')
    return ordering


def paginate(queryset, params, sort_fields, default_sort, default_order='desc'):
    """
    Order and slice ``queryset`` according to ``page``/``limit``/``sort_*`` params.

    Returns a tuple of (page items, pagination metadata dict).
    """
    page = _positive_int(params.get('page'), 'page', 1)
    limit = _positive_int(params.get('limit'), 'limit', settings.DEFAULT_PAGE_SIZE)
    limit = min(limit, settings.MAX_PAGE_SIZE)

    queryset = queryset.order_by(*resolve_ordering(params, sort_fields, default_sort, default_order))
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])

    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'total_pages': math.ceil(total / limit) if total else 0,
    }
