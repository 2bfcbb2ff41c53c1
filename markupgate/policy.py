# policy.py
"""Default security policy for submitted markup.

The values here are shared with the client-side pre-submission check, so the
tag list, attribute lists and pattern order must stay in step with it.
"""

from markupgate.models import SecurityPolicy

MAX_CONTENT_SIZE = 5 * 1024 * 1024

ALLOWED_EXTENSIONS: tuple[str, ...] = ('.html', '.htm', '.txt')

ALLOWED_TAGS: frozenset[str] = frozenset({
    'div', 'span', 'canvas', 'script', 'style', 'p',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'button', 'input', 'textarea', 'select', 'option', 'label', 'form',
    'img', 'audio', 'video',
    'br', 'hr',
    'ul', 'ol', 'li',
    'table', 'tr', 'td', 'th', 'thead', 'tbody',
    'strong', 'em', 'b', 'i', 'u', 'a',
})

ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    '*': frozenset({'class', 'id', 'style', 'data-*'}),
    'canvas': frozenset({'width', 'height'}),
    'input': frozenset({'type', 'value', 'placeholder', 'name', 'required', 'disabled'}),
    'button': frozenset({'type', 'disabled'}),
    'img': frozenset({'src', 'alt', 'width', 'height'}),
    'audio': frozenset({'src', 'controls', 'autoplay', 'loop'}),
    'video': frozenset({'src', 'controls', 'autoplay', 'loop', 'width', 'height'}),
    'a': frozenset({'href', 'target', 'rel'}),
    'form': frozenset({'action', 'method'}),
    'select': frozenset({'name', 'required', 'disabled'}),
    'option': frozenset({'value', 'selected'}),
    'textarea': frozenset({'name', 'placeholder', 'rows', 'cols', 'required', 'disabled'}),
}

FORBIDDEN_PATTERNS: tuple[str, ...] = (
    # network calls
    r'fetch\s*\(',
    r'XMLHttpRequest',
    r'axios\.',
    r'\$\.ajax',
    r'\$\.get',
    r'\$\.post',
    # storage access
    r'document\.cookie',
    r'localStorage',
    r'sessionStorage',
    r'indexedDB',
    # dangerous execution; timers only when given a string body
    r'eval\s*\(',
    r'Function\s*\(',
    r'setTimeout\s*\(\s*["\'`][^"\'`]*["\'`]',
    r'setInterval\s*\(\s*["\'`][^"\'`]*["\'`]',
    # DOM write hazards
    r'document\.write',
    r'document\.writeln',
    r'innerHTML\s*=\s*["\'`][^"\'`]*<script',
    # dynamic loading
    r'import\s*\(',
    r'require\s*\(',
    r'loadScript',
    # navigation
    r'window\.open',
    r'window\.location',
    r'location\.href',
    r'location\.replace',
    # cross-origin form submission
    r'action\s*=\s*["\'`]https?://',
    # realtime channels
    r'WebSocket',
    r'EventSource',
    # file APIs
    r'FileReader',
    r'FormData',
    r'Blob',
    r'URL\.createObjectURL',
)

ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset({'text/html', 'text/plain'})

DEFAULT_POLICY = SecurityPolicy(
    allowed_tags=ALLOWED_TAGS,
    allowed_attributes=ALLOWED_ATTRIBUTES,
    forbidden_patterns=FORBIDDEN_PATTERNS,
    max_content_size=MAX_CONTENT_SIZE,
    allowed_content_types=ALLOWED_CONTENT_TYPES,
)
