# report.py
from markupgate.core import scan
from markupgate.models import SecurityPolicy, SecurityReport
from markupgate.policy import DEFAULT_POLICY

VIOLATION_RECOMMENDATIONS = (
    "Fix all security violations and resubmit",
    "Avoid external resources and network requests",
    "Use safe DOM manipulation methods instead of writing markup strings",
)

WARNING_RECOMMENDATIONS = (
    "Review the warnings and make sure the code is safe",
    "Consider safer alternatives to the flagged elements",
)


def generate_security_report(content: str, policy: SecurityPolicy = DEFAULT_POLICY) -> SecurityReport:
    """Scan ``content`` and summarize the findings for the submitter."""
    details = scan(content, policy)

    recommendations = []
    if details.violations:
        recommendations.extend(VIOLATION_RECOMMENDATIONS)
    if details.warnings:
        recommendations.extend(WARNING_RECOMMENDATIONS)

    if details.is_valid:
        summary = "content passed security check"
    else:
        summary = f"found {len(details.violations)} security issues"

    return SecurityReport(summary=summary, details=details, recommendations=recommendations)
