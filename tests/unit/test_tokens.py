"""
Unit tests for invitation token generation
"""

import re
from unittest.mock import patch

import pytest

from app.core.tokens import TOKEN_BYTES, generate_token
from app.services.exceptions import InfrastructureError, TokenGenerationError

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_token_is_url_safe_and_long_enough():
    token = generate_token()
    assert URL_SAFE.match(token)
    # 32 random bytes encode to 43 base64url characters
    assert len(token) >= 43
    assert TOKEN_BYTES >= 32


def test_tokens_do_not_repeat():
    tokens = {generate_token() for _ in range(1000)}
    assert len(tokens) == 1000


def test_entropy_failure_raises_infrastructure_error():
    with patch("app.core.tokens.secrets.token_urlsafe", side_effect=OSError("no entropy")):
        with pytest.raises(TokenGenerationError) as exc_info:
            generate_token()

    assert isinstance(exc_info.value, InfrastructureError)
