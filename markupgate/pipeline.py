# pipeline.py
"""Accept path for submitted markup: validators first, then the scanner."""

import enum
import logging
from typing import Any
from pydantic import BaseModel
from markupgate.core import scan
from markupgate.models import FileDescriptor, FileValidationResult, SecurityPolicy, ValidationResult
from markupgate.policy import DEFAULT_POLICY
from markupgate.validators import validate_file, validate_string_content

logger = logging.getLogger(__name__)


class GateStage(str, enum.Enum):
    VALIDATION = "validation"
    SCAN = "scan"


class RejectionCode(str, enum.Enum):
    INVALID_CONTENT = "INVALID_CONTENT"
    MALICIOUS_CONTENT = "MALICIOUS_CONTENT"


class GateDecision(BaseModel):
    accepted: bool
    stage: GateStage
    file_check: FileValidationResult
    scan_result: ValidationResult | None = None
    upload_check: FileValidationResult | None = None
    warnings: list[str] = []

    def rejection(self) -> dict[str, Any] | None:
        """Payload a transport layer can forward for a rejected submission.

        Returns None when the content was accepted.
        """
        if self.accepted:
            return None
        if self.stage is GateStage.VALIDATION:
            return {
                "error": RejectionCode.INVALID_CONTENT.value,
                "message": "content validation failed",
                "details": list(self.file_check.errors),
            }
        return {
            "error": RejectionCode.MALICIOUS_CONTENT.value,
            "message": "content contains unsafe elements",
            "details": {
                "violations": list(self.scan_result.violations),
                "warnings": list(self.scan_result.warnings),
            },
        }


def check_content(content: str, policy: SecurityPolicy = DEFAULT_POLICY) -> GateDecision:
    """Decide whether ``content`` may be stored.

    Oversized or blank content is rejected by the validators and never
    reaches pattern scanning. Accepted content is stored as submitted.
    """
    file_check = validate_string_content(content, policy.max_content_size)
    if not file_check.is_valid:
        logger.info("Rejected content at validation: %s", "; ".join(file_check.errors))
        return GateDecision(accepted=False, stage=GateStage.VALIDATION, file_check=file_check)

    result = scan(content, policy)
    if not result.is_valid:
        logger.info("Rejected content at scan with %d violations", len(result.violations))

    return GateDecision(
        accepted=result.is_valid,
        stage=GateStage.SCAN,
        file_check=file_check,
        scan_result=result,
        warnings=list(result.warnings),
    )


def check_upload(file: FileDescriptor, data: bytes | str, policy: SecurityPolicy = DEFAULT_POLICY) -> GateDecision:
    """Decide whether an uploaded file may be stored.

    The upload's name, declared type and size are checked before its body is
    decoded; a failure there rejects at the validation stage with those
    errors. Otherwise the decoded text goes through ``check_content``.

    Raises:
        UnicodeDecodeError: ``data`` is bytes that are not valid UTF-8
    """
    upload_check = validate_file(file, policy)
    if not upload_check.is_valid:
        logger.info("Rejected upload %r: %s", file.name, "; ".join(upload_check.errors))
        return GateDecision(
            accepted=False,
            stage=GateStage.VALIDATION,
            file_check=upload_check,
            upload_check=upload_check,
        )

    content = data.decode('utf-8') if isinstance(data, bytes) else data
    decision = check_content(content, policy)
    return decision.model_copy(update={"upload_check": upload_check})
