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
Custom exceptions for the coreason-myinfo package.
"""


class CoreasonMyInfoError(Exception):
    """Base exception for all coreason-myinfo errors."""


class ConfigValidationError(CoreasonMyInfoError, ValueError):
    """Raised when the client configuration is missing a required field or is otherwise invalid."""


class SigningError(CoreasonMyInfoError):
    """Raised when the PKI_SIGN authorization header cannot be produced."""


class TokenExchangeError(CoreasonMyInfoError):
    """Raised when the authorisation code cannot be exchanged for an access token."""


class TokenVerificationError(CoreasonMyInfoError):
    """
    Raised when the identity token cannot be verified
    (bad signature, disallowed algorithm, expired, malformed).
    """


class SignatureVerificationError(TokenVerificationError):
    """Raised when the token's signature or algorithm is rejected."""


class TokenExpiredError(TokenVerificationError):
    """Raised when the provided token has expired."""


class MalformedClaimsError(CoreasonMyInfoError):
    """Raised when a verified token does not carry a usable subject claim."""


class ResourceFetchError(CoreasonMyInfoError):
    """Raised when the Person API call fails."""


class OversizedResponseError(CoreasonMyInfoError):
    """Raised when an HTTP response is too large."""
