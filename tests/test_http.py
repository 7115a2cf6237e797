import pytest

from artto_handler.errors import AuthError
from artto_handler.http import bearer_auth_middleware, check_bearer, redact_headers


def test_check_bearer_accepts_exact_token():
    check_bearer("Bearer token", "token")


@pytest.mark.parametrize("header", [None, "", "token", "Bearer other", "bearer token", "Bearer token "])
def test_check_bearer_rejects(header):
    with pytest.raises(AuthError):
        check_bearer(header, "token")


def test_redact_headers():
    headers = {"Authorization": "Bearer token", "Cookie": "a=b", "Content-Type": "application/json"}
    assert redact_headers(headers) == {
        "Authorization": "[REDACTED]",
        "Cookie": "[REDACTED]",
        "Content-Type": "application/json",
    }


def test_empty_token_is_refused():
    with pytest.raises(ValueError):
        bearer_auth_middleware("")
