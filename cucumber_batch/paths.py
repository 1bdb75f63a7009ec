"""Matching of feature file identities between the tree and a report."""

import re

_URI_SCHEME = re.compile(r"^file:(//)?")


def normalize_path(path: str) -> str:
    """Normalize a path-like string for comparison.

    Strips a ``file://`` or ``file:`` prefix, converts backslashes to forward
    slashes, drops a leading ``./`` or ``/`` and lower-cases the result.
    """
    normalized = _URI_SCHEME.sub("", path).replace("\\", "/")
    normalized = normalized.removeprefix("./").removeprefix("/")
    return normalized.lower()


def is_same_file(candidate: str, reported: str) -> bool:
    """Check whether two paths denote the same feature file.

    ``candidate`` is usually the absolute path held by the tree, ``reported``
    the (often workspace-relative) path written into the report. Files whose
    names differ never match, so ``login.feature`` is not confused with
    ``user-login.feature`` nor with a ``login.feature`` in another folder.
    """
    full = normalize_path(candidate)
    relative = normalize_path(reported)

    if full == relative:
        return True

    if full.endswith("/" + relative):
        return True

    full_parts = full.split("/")
    relative_parts = relative.split("/")

    if full_parts[-1] != relative_parts[-1]:
        return False

    if len(full_parts) >= len(relative_parts):
        return "/".join(full_parts[-len(relative_parts) :]) == relative

    return False
