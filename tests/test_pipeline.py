import logging
import pytest
from markupgate.models import FileDescriptor
from markupgate.pipeline import GateStage, check_content, check_upload
from markupgate.policy import DEFAULT_POLICY
import markupgate.pipeline as pipeline


def test_accepts_safe_content():
    decision = check_content('<canvas width="800" height="600"></canvas><script>ctx.fillRect(0,0,1,1)</script>')

    assert decision.accepted
    assert decision.stage is GateStage.SCAN
    assert decision.rejection() is None
    assert decision.scan_result.sanitized_content.startswith("<canvas")


def test_accepted_content_carries_warnings():
    decision = check_content("<blink>hi</blink>")

    assert decision.accepted
    assert decision.warnings == ["SUSPICIOUS_TAG: blink"]


def test_blank_content_is_rejected_before_scanning(monkeypatch):
    def fail_scan(*args, **kwargs):
        raise AssertionError("scanner should not run")

    monkeypatch.setattr(pipeline, "scan", fail_scan)
    decision = check_content("   ")

    assert not decision.accepted
    assert decision.stage is GateStage.VALIDATION
    assert decision.scan_result is None
    assert decision.rejection() == {
        "error": "INVALID_CONTENT",
        "message": "content validation failed",
        "details": ["EMPTY_CONTENT: content must not be empty"],
    }


def test_oversized_content_never_reaches_scanner(monkeypatch):
    monkeypatch.setattr(pipeline, "scan", pytest.fail)
    policy = DEFAULT_POLICY.with_overrides(max_content_size=8)

    decision = check_content("<script>fetch('/x')</script>", policy)

    assert decision.stage is GateStage.VALIDATION
    assert decision.file_check.errors[0].startswith("SIZE_EXCEEDED")


def test_malicious_content_rejection_payload():
    decision = check_content('<button onclick="steal()">x</button><object></object>')

    assert not decision.accepted
    payload = decision.rejection()
    assert payload["error"] == "MALICIOUS_CONTENT"
    assert payload["details"]["violations"] == ["DANGEROUS_ATTRIBUTE: onclick"]
    assert payload["details"]["warnings"] == ["SUSPICIOUS_TAG: object"]


def test_rejection_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger=pipeline.__name__):
        check_content("<script>eval('1')</script>")

    assert "Rejected content at scan" in caplog.text


def test_upload_with_bad_metadata_is_rejected_before_scanning(monkeypatch):
    monkeypatch.setattr(pipeline, "scan", pytest.fail)
    file = FileDescriptor(name="game.exe", content_type="application/octet-stream", size=12)

    decision = check_upload(file, b"<p>hello</p>")

    assert not decision.accepted
    assert decision.stage is GateStage.VALIDATION
    assert decision.scan_result is None
    assert decision.upload_check == decision.file_check
    payload = decision.rejection()
    assert payload["error"] == "INVALID_CONTENT"
    assert [e.split(":", 1)[0] for e in payload["details"]] == [
        "UNSUPPORTED_CONTENT_TYPE",
        "UNSUPPORTED_EXTENSION",
    ]


def test_oversized_upload_is_rejected_by_declared_size(monkeypatch):
    monkeypatch.setattr(pipeline, "scan", pytest.fail)
    policy = DEFAULT_POLICY.with_overrides(max_content_size=64)
    file = FileDescriptor(name="game.html", content_type="text/html", size=65)

    decision = check_upload(file, b"<p>hi</p>", policy)

    assert decision.stage is GateStage.VALIDATION
    assert decision.rejection()["details"] == [
        "SIZE_EXCEEDED: file size 65 bytes exceeds limit 64 bytes",
    ]


def test_upload_body_is_decoded_and_scanned():
    body = '<p>café</p><script>eval("1")</script>'.encode("utf-8")
    file = FileDescriptor(name="Game.HTML", content_type="text/html", size=len(body))

    decision = check_upload(file, body)

    assert not decision.accepted
    assert decision.stage is GateStage.SCAN
    assert decision.upload_check.is_valid
    assert decision.upload_check.content_type == "text/html"
    assert decision.rejection()["error"] == "MALICIOUS_CONTENT"


def test_safe_upload_is_accepted():
    file = FileDescriptor(name="notes.txt", content_type="text/plain", size=12)

    decision = check_upload(file, "<p>hello</p>")

    assert decision.accepted
    assert decision.upload_check.size == 12
    assert decision.scan_result.sanitized_content == "<p>hello</p>"


def test_blank_upload_is_empty_content():
    file = FileDescriptor(name="game.html", content_type="text/html", size=3)

    decision = check_upload(file, b"   ")

    assert decision.stage is GateStage.VALIDATION
    assert decision.upload_check.is_valid
    assert decision.rejection()["details"] == ["EMPTY_CONTENT: content must not be empty"]


def test_upload_that_is_not_utf8_raises():
    file = FileDescriptor(name="game.html", content_type="text/html", size=2)

    with pytest.raises(UnicodeDecodeError):
        check_upload(file, b"\xff\xfe")
