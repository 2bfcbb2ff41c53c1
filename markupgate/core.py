# core.py
import itertools
import logging
import re
from typing import Iterator
from markupgate.models import SecurityPolicy, ValidationResult, ViolationKind, WarningKind
from markupgate.policy import DEFAULT_POLICY
from markupgate.validators import content_size

logger = logging.getLogger(__name__)

MAX_EXCERPTS = 3

# A tag body is quoted strings or single characters other than angle brackets
# and quotes. The alternatives start on distinct characters, so matching stays
# linear, and a ">" inside a quoted value does not end the tag.
_TAG_BODY = r'''((?:"[^"]*"|'[^']*'|[^<>"'])*)'''
_TAG_RE = re.compile(r'<(/?)([a-zA-Z][a-zA-Z0-9]*)(?![a-zA-Z0-9])' + _TAG_BODY + r'>')
_ATTRIBUTE_RE = re.compile(
    r'''(?<![^\s"'/])([^\s"'`<>/=]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|`([^`]*)`|([^\s"'`<>]*))'''
)
_EVENT_HANDLER_RE = re.compile(r'on[a-zA-Z]+', re.IGNORECASE | re.ASCII)
_JAVASCRIPT_PROTOCOL_RE = re.compile(r'\s*javascript\s*:', re.IGNORECASE)

_SCRIPT_OPEN_RE = re.compile(r'<script(?=[\s/>])' + _TAG_BODY + r'>', re.IGNORECASE)
_SCRIPT_CLOSE_RE = re.compile(r'</script\s*>', re.IGNORECASE)
_STYLE_OPEN_RE = re.compile(r'<style(?=[\s/>])' + _TAG_BODY + r'>', re.IGNORECASE)
_STYLE_CLOSE_RE = re.compile(r'</style\s*>', re.IGNORECASE)

_CSS_JAVASCRIPT_RE = re.compile(r'javascript\s*:', re.IGNORECASE)
_CSS_EXPRESSION_RE = re.compile(r'expression\s*\(', re.IGNORECASE)
_CSS_EXTERNAL_IMPORT_RE = re.compile(r'@import\s+url\s*\(\s*["\'`]?\s*https?:', re.IGNORECASE)


def iter_attributes(attribute_text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(name, value)`` for every ``name=value`` pair in a tag body.

    Names are lowercased. Attributes without a value are skipped.
    """
    for match in _ATTRIBUTE_RE.finditer(attribute_text):
        name = match.group(1).lower()
        value = next((v for v in match.group(2, 3, 4, 5) if v is not None), '')
        yield name, value


def iter_blocks(content: str, open_re: re.Pattern, close_re: re.Pattern) -> Iterator[tuple[str, str]]:
    """Yield ``(opening tag attributes, inner text)`` for each raw-text block.

    The first close tag after an opening tag ends the block. An opening tag
    with no close tag after it ends the scan.
    """
    pos = 0
    while True:
        opening = open_re.search(content, pos)
        if opening is None:
            return
        closing = close_re.search(content, opening.end())
        if closing is None:
            return
        yield opening.group(1), content[opening.end():closing.start()]
        pos = closing.end()


def _excerpts(pattern: re.Pattern, text: str) -> list[str] | None:
    matches = [m.group(0) for m in itertools.islice(pattern.finditer(text), MAX_EXCERPTS)]
    return matches or None


class ContentScanner:
    def __init__(self, policy: SecurityPolicy = DEFAULT_POLICY):
        self.policy = policy

    def scan(self, content: str) -> ValidationResult:
        if not isinstance(content, str):
            raise TypeError(f"content must be str, not {type(content).__name__}")

        violations: list[str] = []
        warnings: list[str] = []

        self._check_size(content, violations)

        # Blank input is absent markup, not malformed markup
        if content.strip():
            self._check_forbidden_patterns(content, violations)
            tags = list(_TAG_RE.finditer(content))
            self._check_tags(tags, warnings)
            self._check_attributes(tags, violations)
            self._check_scripts(content, violations)
            self._check_styles(content, violations)

        logger.debug(
            "Scanned %d characters: %d violations, %d warnings",
            len(content), len(violations), len(warnings),
        )
        return ValidationResult.from_findings(content, violations, warnings)

    def _check_size(self, content: str, violations: list[str]) -> None:
        size = content_size(content)
        if size > self.policy.max_content_size:
            violations.append(ViolationKind.FILE_TOO_LARGE.message(
                f"size {size} exceeds limit {self.policy.max_content_size}"
            ))

    def _check_forbidden_patterns(self, content: str, violations: list[str]) -> None:
        for pattern in self.policy.forbidden_patterns:
            matches = _excerpts(pattern, content)
            if matches is not None:
                violations.append(ViolationKind.FORBIDDEN_PATTERN.message(
                    f"pattern {pattern.pattern} matched: {', '.join(matches)}"
                ))

    def _check_tags(self, tags: list[re.Match], warnings: list[str]) -> None:
        seen = set()
        for tag in tags:
            name = tag.group(2).lower()
            if name in seen:
                continue
            seen.add(name)
            if name not in self.policy.allowed_tags:
                warnings.append(WarningKind.SUSPICIOUS_TAG.message(name))

    def _check_attributes(self, tags: list[re.Match], violations: list[str]) -> None:
        for tag in tags:
            for name, value in iter_attributes(tag.group(3)):
                if _EVENT_HANDLER_RE.fullmatch(name):
                    violations.append(ViolationKind.DANGEROUS_ATTRIBUTE.message(name))
                if _JAVASCRIPT_PROTOCOL_RE.match(value):
                    violations.append(ViolationKind.JAVASCRIPT_PROTOCOL.message(f'attribute "{name}"'))

    def _check_scripts(self, content: str, violations: list[str]) -> None:
        for attributes, body in iter_blocks(content, _SCRIPT_OPEN_RE, _SCRIPT_CLOSE_RE):
            for pattern in self.policy.forbidden_patterns:
                matches = _excerpts(pattern, body)
                if matches is not None:
                    violations.append(ViolationKind.MALICIOUS_SCRIPT.message(
                        f"pattern {pattern.pattern} matched in script: {', '.join(matches)}"
                    ))
            for name, value in iter_attributes(attributes):
                if name == 'src' and value.lower().startswith('http'):
                    violations.append(ViolationKind.EXTERNAL_SCRIPT.message(value))

    def _check_styles(self, content: str, violations: list[str]) -> None:
        for _, body in iter_blocks(content, _STYLE_OPEN_RE, _STYLE_CLOSE_RE):
            if _CSS_JAVASCRIPT_RE.search(body):
                violations.append(ViolationKind.CSS_JAVASCRIPT.message("javascript: protocol in style block"))
            if _CSS_EXPRESSION_RE.search(body):
                violations.append(ViolationKind.CSS_EXPRESSION.message("expression() in style block"))
            if _CSS_EXTERNAL_IMPORT_RE.search(body):
                violations.append(ViolationKind.CSS_EXTERNAL_IMPORT.message("@import of an external stylesheet"))


def scan(content: str, policy: SecurityPolicy = DEFAULT_POLICY) -> ValidationResult:
    """Run every check in ``policy`` over ``content`` without modifying it."""
    return ContentScanner(policy).scan(content)
