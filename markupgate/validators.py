# validators.py
from markupgate.models import FileDescriptor, FileErrorKind, FileValidationResult, SecurityPolicy
from markupgate.policy import ALLOWED_EXTENSIONS, DEFAULT_POLICY


def content_size(content: str) -> int:
    """Size of ``content`` in UTF-8 bytes; lone surrogates count as three bytes."""
    return len(content.encode('utf-8', 'surrogatepass'))


def validate_file(file: FileDescriptor, policy: SecurityPolicy = DEFAULT_POLICY) -> FileValidationResult:
    """Check upload metadata before the content is read or scanned.

    Size, declared content type and file extension are all checked and every
    failure is reported.
    """
    errors = []

    if file.size > policy.max_content_size:
        errors.append(FileErrorKind.SIZE_EXCEEDED.message(
            f"file size {file.size} bytes exceeds limit {policy.max_content_size} bytes"
        ))

    if file.content_type not in policy.allowed_content_types:
        supported = ', '.join(sorted(policy.allowed_content_types))
        errors.append(FileErrorKind.UNSUPPORTED_CONTENT_TYPE.message(
            f"unsupported content type {file.content_type!r}, supported types: {supported}"
        ))

    if not file.name.lower().endswith(ALLOWED_EXTENSIONS):
        errors.append(FileErrorKind.UNSUPPORTED_EXTENSION.message(
            f"unsupported file extension, supported extensions: {', '.join(ALLOWED_EXTENSIONS)}"
        ))

    return FileValidationResult(
        is_valid=not errors,
        errors=errors,
        size=file.size,
        content_type=file.content_type,
    )


def validate_string_content(content: str, max_size: int = DEFAULT_POLICY.max_content_size) -> FileValidationResult:
    """Check pasted markup for size and emptiness."""
    if not isinstance(content, str):
        raise TypeError(f"content must be str, not {type(content).__name__}")

    errors = []
    size = content_size(content)

    if size > max_size:
        errors.append(FileErrorKind.SIZE_EXCEEDED.message(
            f"content size {size} bytes exceeds limit {max_size} bytes"
        ))

    if not content.strip():
        errors.append(FileErrorKind.EMPTY_CONTENT.message("content must not be empty"))

    return FileValidationResult(
        is_valid=not errors,
        errors=errors,
        size=size,
        content_type='text/html',
    )
