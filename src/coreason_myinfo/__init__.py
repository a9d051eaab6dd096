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
Client for the MyInfo Person API: SingPass redirect, authorisation code exchange,
RS256 token verification and PKI_SIGN request signing.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .client import MyInfoClient, MyInfoClientAsync
from .config import MyInfoClientConfig, MyInfoMode
from .exceptions import (
    ConfigValidationError,
    CoreasonMyInfoError,
    MalformedClaimsError,
    ResourceFetchError,
    SigningError,
    TokenExchangeError,
    TokenVerificationError,
)
from .identity import IdentityExtractor
from .models import AuthorisationRequest, MyInfoAttribute, PersonResult, SignedHeader, TokenResponse
from .redirect import create_redirect_url
from .signer import generate_auth_header

__all__ = [
    "AuthorisationRequest",
    "ConfigValidationError",
    "CoreasonMyInfoError",
    "IdentityExtractor",
    "MalformedClaimsError",
    "MyInfoAttribute",
    "MyInfoClient",
    "MyInfoClientAsync",
    "MyInfoClientConfig",
    "MyInfoMode",
    "PersonResult",
    "ResourceFetchError",
    "SignedHeader",
    "SigningError",
    "TokenExchangeError",
    "TokenResponse",
    "TokenVerificationError",
    "create_redirect_url",
    "generate_auth_header",
]
