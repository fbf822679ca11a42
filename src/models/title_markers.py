"""Title-prefix markers used to tag destination pages.

Confluence offers no per-page metadata channel we can rely on, so page
titles carry the sync state as literal prefixes. Every check and rewrite of
those prefixes lives here; nothing else in the code base should compare
against the raw strings.

Markers:
    [Temp]        placeholder created to reserve a position in the tree
    [Deprecated]  page whose source document no longer exists
    [Protected]   page that must never be deprecated
"""

TEMPORARY_MARKER = "[Temp]"
DEPRECATED_MARKER = "[Deprecated]"
PROTECTED_MARKER = "[Protected]"


def is_temporary(title: str) -> bool:
    return title.startswith(TEMPORARY_MARKER)


def is_deprecated(title: str) -> bool:
    return title.startswith(DEPRECATED_MARKER)


def is_protected(title: str) -> bool:
    return title.startswith(PROTECTED_MARKER)


def is_matchable(title: str) -> bool:
    """Return True if a destination page may be paired with a source document."""
    return not is_deprecated(title) and not is_temporary(title)


def can_deprecate(title: str) -> bool:
    """Return True if a destination page may be flagged as deprecated."""
    return not is_protected(title) and not is_deprecated(title)


def mark_temporary(title: str) -> str:
    return TEMPORARY_MARKER + title


def mark_deprecated(title: str) -> str:
    return DEPRECATED_MARKER + title


def strip_temporary(title: str) -> str:
    """Remove a single leading temporary marker, if present."""
    if is_temporary(title):
        return title[len(TEMPORARY_MARKER):]
    return title
