"""Input validation for account ids and repository names."""

from imsaccess.exceptions import ValidationError
from imsaccess.types import REPOSITORY_SEPARATOR


def validate_account(account: str) -> str:
    """
    Check an account identifier and return it stripped of surrounding whitespace.

    Raises:
        ValidationError: If the account is empty
    """
    if not isinstance(account, str) or not account.strip():
        raise ValidationError("Field 'account' is required")
    return account.strip()


def validate_repository_name(name: str) -> str:
    """
    Check a user-supplied repository base name.

    The base name is later joined to its owner with ``/``, so it must not
    contain that separator itself.

    Raises:
        ValidationError: If the name is empty or contains '/'
    """
    if not name:
        raise ValidationError("Field 'name' is required")

    if REPOSITORY_SEPARATOR in name:
        raise ValidationError(
            f"Field 'name' cannot contain '{REPOSITORY_SEPARATOR}' characters"
        )

    return name


def validate_owner(owner: str) -> str:
    """Owners follow the same rule as base names."""
    if not owner:
        raise ValidationError("Field 'owner' is required")

    if REPOSITORY_SEPARATOR in owner:
        raise ValidationError(
            f"Field 'owner' cannot contain '{REPOSITORY_SEPARATOR}' characters"
        )

    return owner


def validate_tag(tag: str) -> str:
    if not tag:
        raise ValidationError("Field 'tag' is required")
    return tag
