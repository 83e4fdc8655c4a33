"""
Unit tests for the service-exception to HTTP status mapping
"""

import pytest

from app.api.errors import status_for
from app.services.exceptions import (
    AlreadyDecided,
    AlreadyTerminal,
    EmailAlreadyRegistered,
    Forbidden,
    IllegalTransition,
    InvalidToken,
    MemberInactive,
    NotFound,
    SelfReferral,
    ValidationError,
)


@pytest.mark.parametrize("exc,expected", [
    (ValidationError("bad"), 422),
    (EmailAlreadyRegistered("taken"), 422),
    (SelfReferral("self"), 422),
    (NotFound("missing"), 404),
    (AlreadyDecided("done"), 409),
    (AlreadyTerminal("done"), 409),
    (IllegalTransition("nope"), 409),
    (MemberInactive("inactive"), 409),
    (InvalidToken(), 400),
    (Forbidden("no"), 403),
])
def test_status_for(exc, expected):
    assert status_for(exc) == expected


def test_invalid_token_message_is_fixed():
    assert str(InvalidToken()) == "Invitation token is invalid or has expired"
