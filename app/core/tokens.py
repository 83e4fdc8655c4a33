"""
Invitation token generation
"""

import secrets

from app.services.exceptions import TokenGenerationError

# 32 bytes = 256 bits of entropy, encoded to 43 URL-safe characters
TOKEN_BYTES = 32


def generate_token() -> str:
    """
    Generate an opaque, URL-safe invitation token.

    Returns:
        Token string

    Raises:
        TokenGenerationError: if the OS entropy source is unavailable
    """
    try:
        return secrets.token_urlsafe(TOKEN_BYTES)
    except (OSError, NotImplementedError) as e:
        raise TokenGenerationError(f"Entropy source unavailable: {e}") from e
