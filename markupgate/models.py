# models.py
import enum
import re
from types import MappingProxyType
from typing import Any, Mapping
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


class ViolationKind(str, enum.Enum):
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FORBIDDEN_PATTERN = "FORBIDDEN_PATTERN"
    DANGEROUS_ATTRIBUTE = "DANGEROUS_ATTRIBUTE"
    JAVASCRIPT_PROTOCOL = "JAVASCRIPT_PROTOCOL"
    MALICIOUS_SCRIPT = "MALICIOUS_SCRIPT"
    EXTERNAL_SCRIPT = "EXTERNAL_SCRIPT"
    CSS_JAVASCRIPT = "CSS_JAVASCRIPT"
    CSS_EXPRESSION = "CSS_EXPRESSION"
    CSS_EXTERNAL_IMPORT = "CSS_EXTERNAL_IMPORT"

    def message(self, detail: str) -> str:
        return f"{self.value}: {detail}"


class WarningKind(str, enum.Enum):
    SUSPICIOUS_TAG = "SUSPICIOUS_TAG"

    def message(self, detail: str) -> str:
        return f"{self.value}: {detail}"


class FileErrorKind(str, enum.Enum):
    SIZE_EXCEEDED = "SIZE_EXCEEDED"
    EMPTY_CONTENT = "EMPTY_CONTENT"
    UNSUPPORTED_CONTENT_TYPE = "UNSUPPORTED_CONTENT_TYPE"
    UNSUPPORTED_EXTENSION = "UNSUPPORTED_EXTENSION"

    def message(self, detail: str) -> str:
        return f"{self.value}: {detail}"


class SecurityPolicy(BaseModel):
    """Allow-lists, forbidden patterns and limits that parameterize a scan.

    Forbidden patterns may be given as strings or compiled patterns; either
    way they are stored compiled and case-insensitive, in the given order.
    """

    allowed_tags: frozenset[str]
    allowed_attributes: Mapping[str, frozenset[str]]
    forbidden_patterns: tuple[re.Pattern, ...]
    max_content_size: int = Field(gt=0)
    allowed_content_types: frozenset[str]

    model_config = ConfigDict(frozen=True)

    @field_validator('allowed_tags', mode='before')
    @classmethod
    def lowercase_tags(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(tag).lower() for tag in value)
        return value

    @field_validator('allowed_attributes', mode='after')
    @classmethod
    def freeze_attributes(cls, value: Mapping[str, frozenset[str]]) -> Mapping[str, frozenset[str]]:
        # Read-only view so the shared default policy cannot be edited in place
        return MappingProxyType({tag.lower(): frozenset(names) for tag, names in value.items()})

    @field_serializer('allowed_attributes')
    def serialize_attributes(self, value: Mapping[str, frozenset[str]]) -> dict[str, list[str]]:
        return {tag: sorted(names) for tag, names in value.items()}

    @field_validator('forbidden_patterns', mode='before')
    @classmethod
    def compile_patterns(cls, value: Any) -> Any:
        if isinstance(value, (str, re.Pattern)):
            value = [value]
        compiled = []
        for pattern in value:
            try:
                if isinstance(pattern, re.Pattern):
                    if isinstance(pattern.pattern, bytes):
                        raise ValueError(f"forbidden pattern {pattern.pattern!r} must be text, not bytes")
                    pattern = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
                elif isinstance(pattern, str):
                    pattern = re.compile(pattern, re.IGNORECASE)
                else:
                    raise ValueError(f"forbidden pattern {pattern!r} is not a string or compiled pattern")
            except re.error as e:
                raise ValueError(f"invalid forbidden pattern {pattern!r}: {e}") from e
            compiled.append(pattern)
        return tuple(compiled)

    def with_overrides(self, **changes: Any) -> 'SecurityPolicy':
        """Return a validated copy with the given fields replaced."""
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self).model_validate(data)

    def __hash__(self) -> int:
        return hash((
            self.allowed_tags,
            frozenset(self.allowed_attributes.items()),
            self.forbidden_patterns,
            self.max_content_size,
            self.allowed_content_types,
        ))


class ValidationResult(BaseModel):
    is_valid: bool
    violations: list[str] = []
    warnings: list[str] = []
    sanitized_content: str | None = None

    @model_validator(mode='after')
    def check_consistency(self) -> 'ValidationResult':
        if self.is_valid == bool(self.violations):
            raise ValueError("is_valid must be true exactly when there are no violations")
        if not self.is_valid and self.sanitized_content is not None:
            raise ValueError("sanitized_content is only present on valid results")
        return self

    @classmethod
    def from_findings(cls, content: str, violations: list[str], warnings: list[str]) -> 'ValidationResult':
        is_valid = not violations
        return cls(
            is_valid=is_valid,
            violations=list(violations),
            warnings=list(warnings),
            sanitized_content=content if is_valid else None,
        )


class FileDescriptor(BaseModel):
    name: str
    content_type: str
    size: int = Field(ge=0)


class FileValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = []
    size: int
    content_type: str


class SecurityReport(BaseModel):
    summary: str
    details: ValidationResult
    recommendations: list[str] = []
