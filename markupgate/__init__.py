# __init__.py
from markupgate.core import ContentScanner, scan
from markupgate.models import (
    FileDescriptor,
    FileErrorKind,
    FileValidationResult,
    SecurityPolicy,
    SecurityReport,
    ValidationResult,
    ViolationKind,
    WarningKind,
)
from markupgate.pipeline import GateDecision, check_content, check_upload
from markupgate.policy import DEFAULT_POLICY
from markupgate.report import generate_security_report
from markupgate.sanitizer import clean_for_display, sanitize
from markupgate.validators import validate_file, validate_string_content

__all__ = [
    "DEFAULT_POLICY",
    "ContentScanner",
    "FileDescriptor",
    "FileErrorKind",
    "FileValidationResult",
    "GateDecision",
    "SecurityPolicy",
    "SecurityReport",
    "ValidationResult",
    "ViolationKind",
    "WarningKind",
    "check_content",
    "check_upload",
    "clean_for_display",
    "generate_security_report",
    "sanitize",
    "scan",
    "validate_file",
    "validate_string_content",
]
