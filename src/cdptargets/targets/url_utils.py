"""URL helpers used when matching targets against identifiers.

None of these raise on malformed input: unparseable URLs degrade to empty
host and pathname so a bad identifier is simply a miss.
"""

import html
import logging
import posixpath
from typing import NamedTuple
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

# Internal pages Chrome shows under a different address than the one requested
URL_REDIRECTIONS = {
    'chrome://newtab/': 'about:blank',
    'chrome://new-tab-page/': 'about:blank',
    'chrome://newtab': 'about:blank',
    'chrome://new-tab-page': 'about:blank',
}


class ParsedUrl(NamedTuple):
    """The parts of a URL that target matching looks at."""

    protocol: str
    host: str
    pathname: str
    href: str


def parse_url(url: str) -> ParsedUrl:
    """Split a URL into protocol, host, pathname and normalized href."""
    try:
        parts = urlsplit(url)
    except ValueError:
        logger.debug(f'Could not parse url {url!r}')
        return ParsedUrl(protocol='', host='', pathname='', href=url)

    protocol = f'{parts.scheme}:' if parts.scheme else ''
    # netloc minus credentials; hostnames compare case-insensitively
    host = parts.netloc.rpartition('@')[2].lower()
    pathname = parts.path
    if host and not pathname:
        pathname = '/'

    href = url
    if host and not parts.path:
        href = parts._replace(path='/').geturl()
    return ParsedUrl(protocol=protocol, host=host, pathname=pathname, href=href)


def has_host(url: str) -> bool:
    return bool(parse_url(url).host)


def prepend_http(url: str) -> str:
    """Prefix `http://` when the url has no parseable host."""
    if url and not has_host(url):
        return f'http://{url}'
    return url


def trim_char_left(value: str, char: str) -> str:
    return value.lstrip(char) if value else ''


def join_url_path(host: str, pathname: str) -> str:
    """Join host and pathname with duplicate and trailing separators removed.

    >>> join_url_path('example.com', '/')
    'example.com'
    >>> join_url_path('example.com', '//docs//intro/')
    'example.com/docs/intro'
    """
    parts = [part.strip('/') for part in (host or '', pathname or '')]
    joined = '/'.join(part for part in parts if part)
    if not joined:
        return ''
    return posixpath.normpath(joined)


def resolve_url_redirection(url: str) -> str:
    return URL_REDIRECTIONS.get(url, url)


def escape_html(value: str) -> str:
    return html.escape(value, quote=True)
