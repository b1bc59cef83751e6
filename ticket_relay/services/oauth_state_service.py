#!/usr/bin/env python3
"""
OAuth State Service

Issues and verifies the ``state`` value carried through the Atlassian consent
redirect. Each value is a short-lived HS256 JWT holding a random nonce, so the
callback can check that the state was minted here and recently, without the
relay keeping any server-side session.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ticket_relay.integrations.base.exceptions import ClientInputError

logger = logging.getLogger(__name__)

STATE_PURPOSE = "atlassian-oauth-state"
ALGORITHM = "HS256"


class OAuthStateService:
    """Mint and check anti-replay state values for the authorization-code flow"""

    def __init__(self, secret_key: str, ttl_seconds: int = 600):
        """
        Args:
            secret_key: HMAC key used to sign state values
            ttl_seconds: How long a state value stays acceptable
        """
        if not secret_key:
            raise ValueError("OAuth state secret must not be empty")
        self.secret_key = secret_key
        self.ttl = timedelta(seconds=ttl_seconds)

    def issue_state(self) -> str:
        """Fresh, unpredictable state value for one authorization request"""
        now = datetime.now(timezone.utc)
        claims = {
            "nonce": secrets.token_urlsafe(16),
            "purpose": STATE_PURPOSE,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)

    def verify_state(self, state: Optional[str]) -> Dict[str, Any]:
        """
        Check a state value returned on the callback.

        Returns:
            The decoded claims

        Raises:
            ClientInputError: If the state is missing, forged, expired or not ours
        """
        if not state:
            raise ClientInputError("Missing state in callback")
        try:
            claims = jwt.decode(state, self.secret_key, algorithms=[ALGORITHM])
        except ExpiredSignatureError:
            logger.warning("OAuth callback rejected: state expired")
            raise ClientInputError("OAuth state has expired, start the authorization again")
        except JWTError as e:
            logger.warning(f"OAuth callback rejected: invalid state ({e})")
            raise ClientInputError("Invalid OAuth state")

        if claims.get("purpose") != STATE_PURPOSE or not claims.get("nonce"):
            logger.warning("OAuth callback rejected: state has unexpected claims")
            raise ClientInputError("Invalid OAuth state")
        return claims
