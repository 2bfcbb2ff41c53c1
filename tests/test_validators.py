import pytest
from pydantic import ValidationError
from markupgate.models import FileDescriptor
from markupgate.policy import DEFAULT_POLICY, MAX_CONTENT_SIZE
from markupgate.validators import content_size, validate_file, validate_string_content


def make_file(name="game.html", content_type="text/html", size=13):
    return FileDescriptor(name=name, content_type=content_type, size=size)


def test_accepts_html_file():
    result = validate_file(make_file())

    assert result.is_valid
    assert result.errors == []
    assert result.size == 13
    assert result.content_type == "text/html"


@pytest.mark.parametrize("name", ["game.htm", "notes.txt", "GAME.HTML", "Game.Htm"])
def test_accepts_allowed_extensions_case_insensitively(name):
    assert validate_file(make_file(name=name)).is_valid


def test_rejects_oversized_file():
    result = validate_file(make_file(size=MAX_CONTENT_SIZE + 1))

    assert not result.is_valid
    assert len(result.errors) == 1
    assert result.errors[0].startswith("SIZE_EXCEEDED")
    assert "exceeds limit" in result.errors[0]


def test_rejects_unsupported_content_type():
    result = validate_file(make_file(content_type="application/javascript"))

    assert not result.is_valid
    assert result.errors == [
        "UNSUPPORTED_CONTENT_TYPE: unsupported content type 'application/javascript', "
        "supported types: text/html, text/plain"
    ]


def test_rejects_unsupported_extension():
    result = validate_file(make_file(name="game.js"))

    assert not result.is_valid
    assert result.errors[0].startswith("UNSUPPORTED_EXTENSION")


def test_file_errors_accumulate_in_order():
    result = validate_file(make_file(name="payload.exe", content_type="application/octet-stream", size=MAX_CONTENT_SIZE * 2))

    assert [e.split(':', 1)[0] for e in result.errors] == [
        "SIZE_EXCEEDED",
        "UNSUPPORTED_CONTENT_TYPE",
        "UNSUPPORTED_EXTENSION",
    ]


def test_file_check_uses_policy_limits():
    policy = DEFAULT_POLICY.with_overrides(max_content_size=10, allowed_content_types=["text/html"])

    result = validate_file(make_file(name="a.txt", content_type="text/plain", size=11), policy)

    assert [e.split(':', 1)[0] for e in result.errors] == ["SIZE_EXCEEDED", "UNSUPPORTED_CONTENT_TYPE"]


def test_negative_file_size_is_rejected_by_model():
    with pytest.raises(ValidationError):
        make_file(size=-1)


def test_accepts_string_content():
    result = validate_string_content("<html><body>Hello World</body></html>")

    assert result.is_valid
    assert result.errors == []
    assert result.size == 37
    assert result.content_type == "text/html"


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_rejects_blank_string_content(content):
    result = validate_string_content(content)

    assert not result.is_valid
    assert result.errors == ["EMPTY_CONTENT: content must not be empty"]


def test_rejects_oversized_string_content():
    result = validate_string_content("a" * (MAX_CONTENT_SIZE + 1))

    assert not result.is_valid
    assert any("exceeds limit" in e for e in result.errors)


def test_custom_string_size_limit():
    result = validate_string_content("<p>hello</p>", max_size=5)

    assert not result.is_valid
    assert result.errors == ["SIZE_EXCEEDED: content size 12 bytes exceeds limit 5 bytes"]


def test_string_size_is_measured_in_utf8_bytes():
    result = validate_string_content("é\U0001F600", max_size=5)

    assert result.size == 6
    assert not result.is_valid


def test_content_size_counts_lone_surrogates():
    assert content_size("\ud800") == 3
