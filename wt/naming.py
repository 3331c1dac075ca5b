"""Branch name validation and title-to-slug conversion.

Every name a user types, or that is derived from an issue title, passes
through here before it reaches git.
"""

import re
from typing import Optional

from wt.exceptions import InvalidBranchNameError, NameDerivationError

SLUG_MAX_LENGTH = 50

_INVALID_CHARS = re.compile(r"[\s~^:?*\[\]\\]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")
_HYPHEN_RUN = re.compile(r"-{2,}")


def validate_branch_name(name: str) -> Optional[str]:
    """
    Check a branch name against git's ref naming rules.

    Rules are evaluated in a fixed order and the first failure wins, so the
    message for a given name is always the same.

    Args:
        name: Proposed branch name

    Returns:
        An error message, or None when the name is valid
    """
    if not name:
        return "branch name cannot be empty"
    if name.startswith("."):
        return "branch name cannot start with '.'"
    if name.startswith("-"):
        return "branch name cannot start with '-'"
    if name.endswith("/"):
        return "branch name cannot end with '/'"
    if name.endswith(".lock"):
        return "branch name cannot end with '.lock'"
    if ".." in name:
        return "branch name cannot contain '..'"
    if "@{" in name:
        return "branch name cannot contain '@{'"
    if _INVALID_CHARS.search(name):
        return "branch name contains invalid characters"
    if _CONTROL_CHARS.search(name):
        return "branch name contains control characters"
    return None


def ensure_valid_branch_name(name: str) -> str:
    """Return name unchanged, or raise InvalidBranchNameError."""
    error = validate_branch_name(name)
    if error:
        raise InvalidBranchNameError(name, error)
    return name


def slugify(title: str) -> str:
    """
    Turn free text into a lowercase, hyphen-delimited branch name.

    Non-ASCII letters are replaced, not transliterated.

    Args:
        title: Arbitrary text, e.g. an issue title

    Returns:
        A slug of at most 50 characters

    Raises:
        NameDerivationError: If nothing usable is left
    """
    slug = _NON_SLUG_RUN.sub("-", title.lower())
    slug = slug.strip("-")
    slug = _HYPHEN_RUN.sub("-", slug)
    slug = slug[:SLUG_MAX_LENGTH]
    if slug.endswith("-"):
        slug = slug[:-1]
    if not slug:
        raise NameDerivationError(title)
    return slug
