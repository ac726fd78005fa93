"""Identifier matching for page targets.

An identifier names a target in one of three ways:

- a string, compared against the target's title and URL;
- a compiled regular expression, searched in the title and URL forms;
- a reference carrying a ``name`` registered in a :class:`TargetRegistry`.

The predicates never raise. A malformed identifier or target URL is a miss.
"""

import logging
import re
from collections.abc import Mapping

from cdptargets.targets.registry import TargetRegistry
from cdptargets.targets.url_utils import (
    escape_html,
    join_url_path,
    parse_url,
    prepend_http,
    resolve_url_redirection,
    trim_char_left,
)
from cdptargets.targets.views import Identifier, TargetInfo

logger = logging.getLogger(__name__)


def identifier_name(identifier: Identifier | None) -> str | None:
    """Return the registered name an identifier refers to, if it carries one."""
    if identifier is None or isinstance(identifier, (str, re.Pattern)):
        return None
    if isinstance(identifier, Mapping):
        name = identifier.get('name')
    else:
        name = getattr(identifier, 'name', None)
    return name if isinstance(name, str) and name else None


def is_matching_url(target: TargetInfo, identifier: Identifier | None) -> bool:
    """Match a string identifier against the target's title, host+path or href.

    Example:
        >>> target = TargetInfo(id='A1', url='http://example.com/', title='Example Domain')
        >>> is_matching_url(target, 'example.com')
        True
    """
    if not isinstance(identifier, str) or not identifier:
        return False

    normalized = prepend_http(identifier)
    parsed_target = parse_url(resolve_url_redirection(target.url))
    parsed_identifier = parse_url(normalized)

    target_path = join_url_path(parsed_target.host, parsed_target.pathname)
    identifier_path = join_url_path(parsed_identifier.host, parsed_identifier.pathname)

    # Titles may arrive entity-escaped; the identifier is escaped, never the title
    return (
        target.title == identifier
        or target.title == escape_html(identifier)
        or target_path == (identifier_path or identifier)
        or parsed_target.href == normalized
    )


def is_matching_regex(target: TargetInfo, identifier: Identifier | None) -> bool:
    """Search a compiled pattern in the title, host+path, href and protocol+host."""
    if not isinstance(identifier, re.Pattern):
        return False

    parsed = parse_url(target.url)
    url_path = join_url_path(parsed.host, trim_char_left(parsed.pathname, '/'))
    url_href_path = f'{parsed.protocol}//{trim_char_left(parsed.host, "/")}'

    candidates = (target.title, url_path, parsed.href, url_href_path)
    return any(identifier.search(candidate) for candidate in candidates)


def is_matching_target(target: TargetInfo, identifier: Identifier | None, registry: TargetRegistry) -> bool:
    """True when `identifier.name` is registered to exactly this target's id."""
    name = identifier_name(identifier)
    if name is None:
        return False
    stored_target_id = registry.get_mapping(name)
    return stored_target_id is not None and stored_target_id == target.id


def matches(target: TargetInfo, identifier: Identifier | None, registry: TargetRegistry) -> bool:
    """Evaluate URL, regex and name matching in that order."""
    return (
        is_matching_url(target, identifier)
        or is_matching_regex(target, identifier)
        or is_matching_target(target, identifier, registry)
    )
