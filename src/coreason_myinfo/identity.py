# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

"""
IdentityExtractor component for verifying MyInfo access tokens and extracting the UIN/FIN.
"""

import json
from typing import Any

from authlib.jose import JsonWebSignature, JWTClaims
from authlib.jose.errors import BadSignatureError, ExpiredTokenError, JoseError

from coreason_myinfo.exceptions import (
    MalformedClaimsError,
    SignatureVerificationError,
    TokenExpiredError,
    TokenVerificationError,
)
from coreason_myinfo.utils.logger import logger, mask_uinfin

ALLOWED_ALGORITHMS = ["RS256"]


class IdentityExtractor:
    """
    Verifies RS256 identity tokens with the MyInfo public key.

    Attributes:
        public_key (str): PEM public key of the MyInfo server.
        leeway (int): Acceptable clock skew in seconds for exp/nbf/iat.
    """

    def __init__(self, public_key: str, leeway: int = 0) -> None:
        self.public_key = public_key
        self.leeway = leeway
        # Restricting the JWS instance rejects "none", HS256 and every other algorithm
        self._jws = JsonWebSignature(algorithms=ALLOWED_ALGORITHMS)

    def verify_claims(self, token: str) -> dict[str, Any]:
        """
        Verifies the token signature, then decodes and validates its time claims.

        The signature is checked before the payload is parsed, so an unverified
        payload never influences which error is raised.

        Args:
            token: The compact-serialised JWT.

        Returns:
            dict[str, Any]: The verified claims.

        Raises:
            SignatureVerificationError: If the signature or algorithm is rejected.
            TokenExpiredError: If the token has expired.
            TokenVerificationError: If the token is otherwise malformed or invalid.
            MalformedClaimsError: If the verified payload is not a JSON object.
        """
        token = token.strip()
        try:
            data = self._jws.deserialize_compact(token, self.public_key)
        except BadSignatureError as e:
            logger.error("Token verification failed: Bad signature")
            raise SignatureVerificationError(f"Invalid signature: {e}") from e
        except JoseError as e:
            # UnsupportedAlgorithmError and DecodeError both land here
            logger.error(f"Token verification failed: {e.error}")
            raise SignatureVerificationError(f"Token verification failed: {e}") from e
        except (ValueError, TypeError) as e:
            logger.error("Token verification failed: Unusable token or key")
            raise TokenVerificationError(f"Token could not be verified: {e}") from e

        try:
            payload = json.loads(data["payload"])
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedClaimsError(f"JWT returned from MyInfo had unexpected shape: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedClaimsError("JWT returned from MyInfo had unexpected shape")

        claims = JWTClaims(payload, data["header"])
        try:
            claims.validate(leeway=self.leeway)
        except ExpiredTokenError as e:
            logger.warning("Token verification failed: Token expired")
            raise TokenExpiredError(f"Token has expired: {e}") from e
        except JoseError as e:
            logger.warning(f"Token verification failed: Invalid claim ({e.error})")
            raise TokenVerificationError(f"Invalid claim: {e}") from e

        return dict(claims)

    def extract_uinfin(self, token: str) -> str:
        """
        Returns the UIN/FIN carried in the `sub` claim of a verified token.

        Raises:
            TokenVerificationError: If the token cannot be verified.
            MalformedClaimsError: If the claims lack a string `sub`.
        """
        claims = self.verify_claims(token)
        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise MalformedClaimsError("JWT returned from MyInfo did not contain UIN/FIN")

        logger.info(f"Token verified for subject {mask_uinfin(sub)}")
        return sub
