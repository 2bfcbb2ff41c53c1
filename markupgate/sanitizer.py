# sanitizer.py
"""Best-effort rewriting of submitted markup for display.

Nothing here decides whether content is acceptable; that is the scanner's
job. These transforms only reduce what a viewer is exposed to.
"""

import re
import nh3
from markupgate.models import SecurityPolicy
from markupgate.policy import DEFAULT_POLICY

_EVENT_HANDLER_QUOTED_RE = re.compile(r'''\s?\bon[a-z]+\s*=\s*(?:"[^"]*"|'[^']*')''', re.IGNORECASE)
_EVENT_HANDLER_BARE_RE = re.compile(r'''\bon[a-z]+\s*=\s*[^\s"'>]*''', re.IGNORECASE)
_JAVASCRIPT_PROTOCOL_RE = re.compile(r'javascript\s*:', re.IGNORECASE)
_STYLE_EXPRESSION_RE = re.compile(
    r'''\bstyle\s*=\s*(?:"[^"]*expression\s*\([^"]*"|'[^']*expression\s*\([^']*')''',
    re.IGNORECASE,
)

# Elements whose whole body is dropped, not just the tags
_RAW_TEXT_TAGS = frozenset({'script', 'style'})


def _sanitize_once(content: str) -> str:
    content = _EVENT_HANDLER_QUOTED_RE.sub('', content)
    content = _EVENT_HANDLER_BARE_RE.sub('', content)
    content = _JAVASCRIPT_PROTOCOL_RE.sub('', content)
    return _STYLE_EXPRESSION_RE.sub('', content)


def sanitize(content: str) -> str:
    """Strip event handler attributes, ``javascript:`` and CSS expressions.

    Removal can join the text around it into a new match
    (``javajavascript:script:``), so the passes repeat until nothing changes.
    Every pass that changes the text makes it shorter, which bounds the loop.
    """
    while True:
        sanitized = _sanitize_once(content)
        if sanitized == content:
            return sanitized
        content = sanitized


def _display_attributes(policy: SecurityPolicy) -> tuple[dict[str, set[str]], set[str]]:
    attributes = {}
    prefixes = set()
    for tag, names in policy.allowed_attributes.items():
        if tag in _RAW_TEXT_TAGS:
            continue
        exact = set()
        for name in names:
            if name.endswith('*'):
                prefixes.add(name[:-1])
            elif name != 'rel':  # ammonia sets rel itself through link_rel
                exact.add(name)
        attributes[tag] = exact
    return attributes, prefixes


def clean_for_display(content: str, policy: SecurityPolicy = DEFAULT_POLICY) -> str:
    """Reduce markup to the policy's tag and attribute allow-lists.

    Script and style elements are removed together with their bodies.

    Args:
        content: Markup to clean
        policy: Policy whose allow-lists are applied

    Returns:
        str: Cleaned markup
    """
    attributes, prefixes = _display_attributes(policy)
    return nh3.clean(
        sanitize(content),
        tags=set(policy.allowed_tags - _RAW_TEXT_TAGS),
        clean_content_tags=set(_RAW_TEXT_TAGS),
        attributes=attributes,
        generic_attribute_prefixes=prefixes or None,
        link_rel='noopener noreferrer',
    )
