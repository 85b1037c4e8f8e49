"""Identifier normalisation and ergonomic operation naming.

API descriptions are full of loosely-formatted identifiers: ``operationId``
values like ``repos/list-for-org`` or ``listRepoIssues``, tags like
``Pull Requests``, schema names like ``repo_Issue``. This module turns them
into a normalised token sequence and derives the two projections the
generator needs:

* **type case** -- ``ListRepoIssues``, used for module and schema names.
* **function case** -- ``list_repo_issues``, used for function names and
  file stems.

:func:`normalize` is idempotent, so already-normalised names pass through
unchanged and every projection can be recomputed safely.

:func:`operation_names` implements the two naming modes:

1. **No tags** -- the operation id is a ``/``-separated path; leading
   segments become the module path, the last one the function name.
2. **Tags** -- one module per tag; the function name is the normalised
   operation id with a redundant ``<tag>_`` prefix removed.
"""

from __future__ import annotations

import re

# A token is an optional run of separators, an optional run of capitals and
# an optional run of lowercase letters or digits. The three groups together
# split "listRepoIssues", "list-repo-issues" and "ListRepoIssues" alike.
_TOKEN_RE = re.compile(r"[^A-Za-z0-9]*[A-Z]*[a-z0-9]*")
_EDGE_RE = re.compile(r"^[^A-Za-z0-9]+|[^A-Za-z0-9]+$")
# Everything but alphanumerics and the module separator.
_ID_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9/]+")
_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


def tokens(identifier: str) -> list[str]:
    """Split *identifier* into lowercase tokens.

    Example::

        >>> tokens("listRepoIssues")
        ['list', 'repo', 'issues']
        >>> tokens("  Pull Requests! ")
        ['pull', 'requests']
    """
    result: list[str] = []
    for match in _TOKEN_RE.finditer(identifier):
        segment = _EDGE_RE.sub("", match.group(0)).lower()
        if segment:
            result.append(segment)
    return result


def normalize(identifier: str) -> str:
    """Return the canonical ``snake_case`` form of *identifier*.

    ``normalize(normalize(x)) == normalize(x)`` for every string ``x``.

    Example::

        >>> normalize("repos/list-for-org")
        'repos_list_for_org'
        >>> normalize("getHTTPStatus")
        'get_httpstatus'
    """
    return "_".join(tokens(identifier))


def type_case(identifier: str) -> str:
    """Capitalise every token and concatenate them (``pull requests`` -> ``PullRequests``)."""
    return "".join(token.capitalize() for token in tokens(identifier))


def function_case(identifier: str) -> str:
    """Join the tokens with underscores (``PullRequests`` -> ``pull_requests``)."""
    return normalize(identifier)


def operation_names(
    operation_id: str, tags: list[str]
) -> list[tuple[list[str], str]]:
    """Compute ``(module_path, function_name)`` pairs for an operation.

    Args:
        operation_id: The raw ``operationId``.
        tags: The tags to home the operation under. Pass an empty list for
            no-tags mode; tag mode is decided by configuration, not here.

    Returns:
        One pair per distinct tag in declaration order, or a single pair in
        no-tags mode. Tags with the same type-cased form (``issues`` and
        ``Issues``) count once; tags with no letters or digits are ignored,
        and if none remain the operation is named as in no-tags mode. The
        module path may be empty; the caller substitutes the configured
        default module.

    Example::

        >>> operation_names("repos/list-for-org", [])
        [(['Repos'], 'list_for_org')]
        >>> operation_names("issues_list_for_repo", ["issues", "repos"])
        [(['Issues'], 'list_for_repo'), (['Repos'], 'issues_list_for_repo')]
    """
    homes = [home for home in dict.fromkeys(type_case(tag) for tag in tags) if home]
    if not homes:
        *modules, function = _ID_SEPARATOR_RE.sub("_", operation_id).split("/")
        module_path = [type_case(m) for m in modules if type_case(m)]
        return [(module_path, function_case(function))]

    function = normalize(operation_id)
    names: list[tuple[list[str], str]] = []
    for home in homes:
        prefix = function_case(home) + "_"
        tagged = function[len(prefix):] if function.startswith(prefix) else function
        names.append(([home], tagged))
    return names


def fallback_operation_id(method: str, path: str) -> str:
    """Derive an operation id for operations that do not declare one.

    Placeholders become ``by_<name>`` so that ``GET /users`` and
    ``GET /users/{id}`` stay distinct.

    Example::

        >>> fallback_operation_id("get", "/users/{user_id}/posts")
        'get_users_by_user_id_posts'
    """
    path_part = _PLACEHOLDER_RE.sub(lambda m: f"by_{m.group(1)}", path)
    return normalize(f"{method} {path_part}")
