# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from authlib.jose import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from coreason_myinfo.config import MyInfoClientConfig, MyInfoMode


def _generate_pem_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    return private_pem, public_pem


@pytest.fixture(scope="session")
def client_keys() -> tuple[str, str]:
    """(private, public) PEM pair registered by the client with MyInfo."""
    return _generate_pem_pair()


@pytest.fixture(scope="session")
def myinfo_keys() -> tuple[str, str]:
    """(private, public) PEM pair MyInfo signs its tokens with."""
    return _generate_pem_pair()


@pytest.fixture
def config_kwargs(client_keys: tuple[str, str], myinfo_keys: tuple[str, str]) -> dict[str, Any]:
    return {
        "client_id": "STG2-MYINFO-SELF-TEST",
        "client_secret": "44d953c796cccebcec9bdc826852857ab412fbe2",
        "singpass_eservice_id": "MYINFO-CONSENTPLATFORM",
        "redirect_endpoint": "https://app.example/cb",
        "client_private_key": client_keys[0],
        "myinfo_public_key": myinfo_keys[1],
        "mode": MyInfoMode.STAGING,
    }


@pytest.fixture
def config(config_kwargs: dict[str, Any]) -> MyInfoClientConfig:
    return MyInfoClientConfig(**config_kwargs)


@pytest.fixture
def mint_token(myinfo_keys: tuple[str, str]) -> Callable[..., str]:
    """Returns a helper that signs claims as MyInfo would."""

    def _mint(claims: dict[str, Any], key: str | None = None, alg: str = "RS256") -> str:
        signing_key = key if key is not None else myinfo_keys[0]
        return jwt.encode({"alg": alg, "typ": "JWT"}, claims, signing_key).decode("utf-8")  # type: ignore[no-any-return]

    return _mint


def _parse_pki_header(value: str) -> dict[str, str]:
    assert value.startswith("PKI_SIGN ")
    return dict(re.findall(r'(\w+)="([^"]*)"', value))


@pytest.fixture
def parse_pki_header() -> Callable[[str], dict[str, str]]:
    """Splits a PKI_SIGN header value into its quoted fields."""
    return _parse_pki_header


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Builds an AsyncClient whose requests are answered by the given handler."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
