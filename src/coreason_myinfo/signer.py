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
RequestSigner component producing PKI_SIGN authorization headers (RSA-SHA256).
"""

import base64
import binascii
import secrets
import time
from collections.abc import Mapping
from typing import Literal

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from coreason_myinfo.canonical import build_param_string
from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.exceptions import SigningError
from coreason_myinfo.models import SignedHeader
from coreason_myinfo.utils.logger import logger

HttpMethod = Literal["GET", "POST"]

SIGNATURE_METHOD = "RS256"
NONCE_BYTES = 32


def generate_nonce() -> str:
    """Returns 32 bytes from the OS CSPRNG, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(NONCE_BYTES)).decode("ascii")


def generate_timestamp() -> str:
    """Returns the current time in milliseconds since the epoch."""
    return str(time.time_ns() // 1_000_000)


def build_base_string(
    method: str,
    url: str,
    params: Mapping[str, str],
    app_id: str,
    nonce: str,
    timestamp: str,
    encode: bool = True,
) -> str:
    """
    Builds the string that is signed: `METHOD&URL&canonicalParams`.

    The request parameters are merged with the four protocol parameters
    (signature_method, nonce, timestamp, app_id) before canonicalisation.
    A verifier holding the same inputs reconstructs the identical string.

    Args:
        method: "GET" or "POST" (case-insensitive).
        url: The full request URL without a query string.
        params: The query or form parameters of the request.
        app_id: The client ID.
        nonce: The per-request nonce.
        timestamp: The per-request timestamp in milliseconds.
        encode: Percent-encode the parameter segment.

    Returns:
        str: The signing base string.

    Raises:
        ValueError: If the method is not GET or POST.
    """
    method = method.upper()
    if method not in ("GET", "POST"):
        raise ValueError(f"Unsupported HTTP method for signing: {method}")

    auth_params = {
        **params,
        "signature_method": SIGNATURE_METHOD,
        "nonce": nonce,
        "timestamp": timestamp,
        "app_id": app_id,
    }
    return f"{method}&{url}&{build_param_string(auth_params, encode=encode)}"


def _load_private_key(pem: str) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"Client private key could not be loaded: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError(f"Client private key must be an RSA key, got {type(key).__name__}")
    return key


def sign_base_string(base_string: str, private_key_pem: str) -> str:
    """
    Signs the base string with RSASSA-PKCS1-v1_5 and SHA-256.

    Returns:
        str: The base64-encoded signature.

    Raises:
        SigningError: If the key is malformed, an injected nonce or timestamp is empty,
            or signing fails.
    """
    key = _load_private_key(private_key_pem)
    try:
        signature = key.sign(base_string.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
    except Exception as e:
        raise SigningError(f"Failed to sign request: {e}") from e
    return base64.b64encode(signature).decode("ascii")


def verify_signature(base_string: str, signature: str, public_key_pem: str) -> bool:
    """
    Checks a base64 PKI_SIGN signature against the base string with an RSA public key.

    Returns:
        bool: True if the signature is valid, False otherwise.
    """
    key = serialization.load_pem_public_key(public_key_pem.encode("utf-8"))
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"Public key must be an RSA key, got {type(key).__name__}")
    try:
        key.verify(
            base64.b64decode(signature, validate=True),
            base_string.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except (InvalidSignature, binascii.Error):
        return False
    return True


def generate_auth_header(
    config: MyInfoClientConfig,
    method: HttpMethod,
    url: str,
    params: Mapping[str, str],
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> SignedHeader:
    """
    Produces the signed authorization header for one request.

    A fresh nonce and timestamp are generated unless given explicitly.

    Args:
        config: The client configuration holding the client ID and private key.
        method: The HTTP method of the request.
        url: The full request URL without a query string.
        params: The query or form parameters of the request, in any order.
        nonce: Optional fixed nonce.
        timestamp: Optional fixed timestamp (milliseconds since the epoch).

    Returns:
        SignedHeader: The captured values; use `header_value` for the header string.

    Raises:
        SigningError: If the key is malformed, an injected nonce or timestamp is empty,
            or signing fails.
    """
    if nonce is None:
        nonce = generate_nonce()
    if timestamp is None:
        timestamp = generate_timestamp()
    if not nonce or not timestamp:
        raise SigningError("Injected nonce and timestamp must not be empty")

    try:
        base_string = build_base_string(
            method,
            url,
            params,
            app_id=config.client_id,
            nonce=nonce,
            timestamp=timestamp,
            encode=config.percent_encode_base_string,
        )
    except ValueError as e:
        raise SigningError(str(e)) from e

    signature = sign_base_string(base_string, config.client_private_key.get_secret_value())
    logger.debug(f"Signed {method.upper()} request to {url}")

    return SignedHeader(
        timestamp=timestamp,
        nonce=nonce,
        app_id=config.client_id,
        signature_method=SIGNATURE_METHOD,
        signature=signature,
    )
