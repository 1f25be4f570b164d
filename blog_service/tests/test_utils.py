import pytest

from blog_service.utils import make_excerpt, sanitize_string, validate_email, validate_user_data


@pytest.mark.parametrize("email", ["test@example.com", "user.name@domain.co.uk"])
def test_validate_email_accepts(email):
    assert validate_email(email)


@pytest.mark.parametrize("email", ["invalid.email", "test@", "@example.com", "a b@example.com", ""])
def test_validate_email_rejects(email):
    assert not validate_email(email)


def test_sanitize_string_trims_whitespace():
    assert sanitize_string("  hello  ") == "hello"


def test_sanitize_string_removes_angle_brackets():
    assert sanitize_string('<script>alert("xss")</script>') == 'scriptalert("xss")/script'


def test_validate_user_data():
    assert validate_user_data("Ada", "ada@example.com") is None
    assert validate_user_data() is None
    assert validate_user_data(name="  ") == "Name must be a non-empty string"
    assert validate_user_data(email="nope") == "Invalid email format"


def test_make_excerpt():
    assert make_excerpt("a" * 300) == "a" * 150
    assert make_excerpt("short") == "short"
    assert make_excerpt("body", "given") == "given"
    assert make_excerpt("body", "") == "body"
    assert make_excerpt("abcdef", length=3) == "abc"


def test_sanitize_string_trims_after_stripping_brackets():
    assert sanitize_string("< >") == ""
    assert sanitize_string(" <b> bold </b> ") == "b bold /b"
