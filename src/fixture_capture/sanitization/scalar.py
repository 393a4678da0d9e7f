"""Scalar redaction rules.

Each attribute value or text node selected by the HTML sanitizer passes
through sanitize_scalar(), which applies, in order:

1. Token scrub: ntn_ tokens, Bearer tokens, z_c0 cookie assignments and
   generic opaque runs of 24+ characters
2. URL scrub: numeric content ids in known routes, /people/ handles, and
   tracking or id-bearing query parameters of absolute URLs
3. Bare 9+ digit attribute values
4. Capitalized name runs (text nodes, or values mentioning name/author/user)
5. Any remaining word-bounded 9+ digit run

All patterns use ASCII semantics for \\b and \\d. Whitespace is matched by an
explicit class that also covers non-breaking and other Unicode spaces, as
captured pages often carry &nbsp; between words.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fixture_capture.patterns import PlaceholderStore, SanitizationCategory, SourceType, load_redaction_policy

# \s under re.ASCII plus the Unicode space separators (U+00A0 is &nbsp;)
_WS_CHARS = r"\s\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
_WS = f"[{_WS_CHARS}]"

_NTN_TOKEN_RE = re.compile(r"\bntn_[A-Za-z0-9._-]{8,}\b", re.ASCII)
_BEARER_RE = re.compile(r"\bBearer" + _WS + r"+[A-Za-z0-9._-]{16,}\b", re.ASCII | re.IGNORECASE)
_Z_C0_RE = re.compile(
    r"\bz_c0" + _WS + r"*[=:]" + _WS + r"*[^;\"" + _WS_CHARS + r"]+",
    re.ASCII | re.IGNORECASE,
)
_OPAQUE_RUN_RE = re.compile(r"\b[A-Za-z0-9._-]{24,}\b", re.ASCII)

_PEOPLE_RE = re.compile(r"(/people/)\b([a-z0-9_-]{3,})\b", re.ASCII | re.IGNORECASE)
_ABSOLUTE_HTTP_RE = re.compile(r"^https?://", re.ASCII | re.IGNORECASE)
_LONG_DIGITS_RE = re.compile(r"\d{9,}", re.ASCII)
_OPAQUE_VALUE_RE = re.compile(r"[A-Za-z0-9._-]{24,}", re.ASCII)

_BARE_DIGITS_RE = re.compile(r"[0-9]{9,}", re.ASCII)
_BOUNDED_DIGITS_RE = re.compile(r"\b\d{9,}\b", re.ASCII)
_PERSONISH_CONTEXT_RE = re.compile(r"\b(?:name|author|user)\b", re.ASCII | re.IGNORECASE)
_PERSON_NAME_RE = re.compile(r"\b([A-Z][a-z]+(?:" + _WS + r"+[A-Z][a-z]+){0,3})\b", re.ASCII)

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*", re.ASCII)
_NETWORK_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


@dataclass(frozen=True)
class RedactionPolicy:
    """Compiled redaction policy tables.

    Attributes:
        tracking_query_keys: Query keys always replaced (lowercase)
        route_re: Pattern for numeric content ids in known routes
        person_stoplist: Capitalized words never treated as names
        sensitive_key_fragments: Attribute-key fragments marking secrets
        url_key_fragments: Attribute-key fragments marking URL/id values
        exact_keys: Attribute keys always scrubbed
        personish_fragments: Key/itemprop fragments marking person fields
        text_container_tags: Tags whose text nodes are rewritten
    """

    tracking_query_keys: frozenset[str]
    route_re: re.Pattern[str]
    person_stoplist: frozenset[str]
    sensitive_key_fragments: tuple[str, ...]
    url_key_fragments: tuple[str, ...]
    exact_keys: frozenset[str]
    personish_fragments: tuple[str, ...]
    text_container_tags: tuple[str, ...]

    @classmethod
    def from_tables(cls, tables: dict[str, Any]) -> RedactionPolicy:
        """Compile a policy from loaded redaction tables."""
        routes = "|".join(re.escape(route) for route in tables["content_id_routes"])
        attributes = tables["attributes"]
        return cls(
            tracking_query_keys=frozenset(key.lower() for key in tables["tracking_query_keys"]),
            route_re=re.compile(rf"(/(?:{routes})/)(\d{{9,}})", re.ASCII),
            person_stoplist=frozenset(tables["person_stoplist"]),
            sensitive_key_fragments=tuple(f.lower() for f in attributes["sensitive_key_fragments"]),
            url_key_fragments=tuple(attributes["url_key_fragments"]),
            exact_keys=frozenset(attributes["exact_keys"]),
            personish_fragments=tuple(f.lower() for f in attributes["personish_fragments"]),
            text_container_tags=tuple(tables["text_container_tags"]),
        )

    @classmethod
    def load(cls, custom_patterns: Path | str | None = None) -> RedactionPolicy:
        """Load and compile the built-in policy, merged with custom patterns.

        Raises:
            PatternLoadError: If a patterns file cannot be loaded
        """
        return cls.from_tables(load_redaction_policy(custom_patterns))

    def is_scrubbable_attribute(self, key: str) -> bool:
        """Check if an attribute's value goes through the scalar pipeline.

        Example:
            >>> policy = RedactionPolicy.load()
            >>> policy.is_scrubbable_attribute("data-user-id")
            True
            >>> policy.is_scrubbable_attribute("class")
            False
        """
        lowered = key.lower()
        if any(fragment in lowered for fragment in self.sensitive_key_fragments):
            return True
        if any(fragment in key for fragment in self.url_key_fragments):
            return True
        return key in self.exact_keys

    def is_personish_attribute(self, key: str, itemprop: str = "") -> bool:
        """Check if an attribute holds a person/author/user value."""
        if any(fragment in key.lower() for fragment in self.personish_fragments):
            return True
        return key == "content" and any(fragment in itemprop.lower() for fragment in self.personish_fragments)


def is_valid_url(value: str) -> bool:
    """Check if a string is a syntactically valid absolute URL.

    Args:
        value: Candidate URL

    Returns:
        True if the string has a scheme and, for network schemes, a host

    Example:
        >>> is_valid_url("https://www.zhihu.com/question/123")
        True
        >>> is_valid_url("not a url")
        False
    """
    candidate = value.strip()
    try:
        parts = urlsplit(candidate)
        # Port access validates the port range
        _ = parts.port
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.fullmatch(parts.scheme):
        return False
    scheme = parts.scheme.lower()
    if scheme in _NETWORK_SCHEMES:
        return bool(parts.hostname)
    if scheme == "file":
        return True
    return len(candidate) > len(parts.scheme) + 1


def scrub_tokens(value: str, store: PlaceholderStore, source_type: SourceType = SourceType.ATTR) -> str:
    """Replace credential-shaped substrings with placeholders.

    Literal framing is kept: "Bearer <placeholder>", "z_c0=<placeholder>".
    """
    result = _NTN_TOKEN_RE.sub(
        lambda m: store.next(SanitizationCategory.TOKEN, m.group(0), source_type),
        value,
    )
    result = _BEARER_RE.sub(
        lambda m: f"Bearer {store.next(SanitizationCategory.TOKEN, m.group(0), source_type)}",
        result,
    )
    result = _Z_C0_RE.sub(
        lambda m: f"z_c0={store.next(SanitizationCategory.COOKIE, m.group(0), source_type)}",
        result,
    )
    # The run's character class has no ':' or '/', so it is never a URL itself
    return _OPAQUE_RUN_RE.sub(
        lambda m: store.next(SanitizationCategory.TOKEN, m.group(0), source_type),
        result,
    )


def scrub_query(url: str, store: PlaceholderStore, policy: RedactionPolicy) -> str:
    """Replace tracking and id-bearing query parameters of an absolute URL.

    The URL is rebuilt only when at least one parameter changed.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.query:
        return url

    changed = False
    params: list[tuple[str, str]] = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if (
            key.lower() in policy.tracking_query_keys
            or _LONG_DIGITS_RE.search(value)
            or _OPAQUE_VALUE_RE.search(value)
        ):
            value = store.next(SanitizationCategory.TRACKING, f"{key}:{value}", SourceType.QUERY)
            changed = True
        params.append((key, value))

    if not changed:
        return url
    return urlunsplit(parts._replace(query=urlencode(params)))


def scrub_url(value: str, store: PlaceholderStore, policy: RedactionPolicy) -> str:
    """Replace route ids and profile handles, then scrub the query string."""
    result = policy.route_re.sub(
        lambda m: f"{m.group(1)}{store.next(SanitizationCategory.CONTENT_ID, m.group(2), SourceType.URL_PART)}",
        value,
    )
    result = _PEOPLE_RE.sub(
        lambda m: f"{m.group(1)}{store.next(SanitizationCategory.PERSON, m.group(2), SourceType.URL_PART)}",
        result,
    )
    if not _ABSOLUTE_HTTP_RE.match(result):
        return result
    return scrub_query(result, store, policy)


def scrub_person_names(
    value: str,
    store: PlaceholderStore,
    policy: RedactionPolicy,
    source_type: SourceType = SourceType.ATTR,
) -> str:
    """Replace runs of 1-4 capitalized words with person placeholders."""

    def replace_name(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in policy.person_stoplist:
            return name
        return store.next(SanitizationCategory.PERSON, name, source_type)

    return _PERSON_NAME_RE.sub(replace_name, value)


def sanitize_scalar(
    value: str,
    store: PlaceholderStore,
    policy: RedactionPolicy,
    context: SourceType = SourceType.ATTR,
) -> str:
    """Run one attribute value or text node through the redaction pipeline.

    Args:
        value: Raw attribute value or text
        store: Placeholder store for this run
        policy: Compiled redaction policy
        context: SourceType.ATTR for attribute values, SourceType.TEXT for text

    Returns:
        Redacted value

    Example:
        >>> store = PlaceholderStore()
        >>> policy = RedactionPolicy.load()
        >>> sanitize_scalar("https://zhuanlan.zhihu.com/p/123456789123", store, policy)
        'https://zhuanlan.zhihu.com/p/CID_001'
    """
    result = scrub_tokens(value, store, context)
    result = scrub_url(result, store, policy)

    if context is SourceType.ATTR:
        bare = result.strip()
        if _BARE_DIGITS_RE.fullmatch(bare):
            return store.next(SanitizationCategory.CONTENT_ID, bare, context)

    if context is SourceType.TEXT or _PERSONISH_CONTEXT_RE.search(result):
        result = scrub_person_names(result, store, policy, context)

    return _BOUNDED_DIGITS_RE.sub(
        lambda m: store.next(SanitizationCategory.CONTENT_ID, m.group(0), context),
        result,
    )
