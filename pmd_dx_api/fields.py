from typing import Any

from pmd_dx_api.params import FieldFilter


def limit_fields(body: dict[str, Any], field_filter: FieldFilter) -> dict[str, Any]:
    """Keeps only the top-level keys the client asked for.

    Nested objects are left untouched and surviving keys keep their order.
    Unknown field names simply never match, so asking only for unknown
    fields yields an empty object.
    """
    if not field_filter.enabled:
        return body
    return {key: value for key, value in body.items() if key in field_filter.allowed_keys}
