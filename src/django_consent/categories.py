"""
Consent category registry.

Categories come from the CONSENT_CATEGORIES setting. Required categories
(dataProcessing by default) are granted on every customer and cannot be
revoked.
"""

from .conf import get_categories
from .exceptions import ConsentValidationError


def category_keys() -> list[str]:
    return list(get_categories())


def required_categories() -> list[str]:
    return [key for key, spec in get_categories().items() if spec.get('required')]


def default_preferences() -> dict:
    """Preferences for a new customer: each category's default, required ones granted."""
    return {
        key: bool(spec.get('default') or spec.get('required'))
        for key, spec in get_categories().items()
    }


def validate_preference_changes(changes) -> dict:
    """
    Check a {category: bool} mapping against the registry.

    Raises:
        ConsentValidationError: For a non-object payload, unknown categories,
            non-boolean values or attempts to revoke a required category
    """
    if not isinstance(changes, dict):
        raise ConsentValidationError({'payload': ["Expected a JSON object."]})

    categories = get_categories()
    errors = {}
    for key, value in changes.items():
        if key not in categories:
            errors[key] = ["Unknown consent category."]
        elif not isinstance(value, bool):
            errors[key] = ["Must be true or false."]
        elif categories[key].get('required') and not value:
            errors[key] = ["Required consent cannot be revoked."]
    if errors:
        raise ConsentValidationError(errors)
    return dict(changes)
