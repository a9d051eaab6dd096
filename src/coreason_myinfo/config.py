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
Configuration for the coreason-myinfo package.
"""

from enum import StrEnum
from typing import Any

from pydantic import Field, SecretStr, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreason_myinfo.exceptions import ConfigValidationError


class MyInfoMode(StrEnum):
    """Selects which MyInfo environment the client talks to."""

    DEV = "dev"
    STAGING = "stg"
    PRODUCTION = "prod"


BASE_URLS: dict[MyInfoMode, str] = {
    MyInfoMode.DEV: "http://localhost:5156/myinfo/v3",
    MyInfoMode.STAGING: "https://myinfosgstg.api.gov.sg/gov/test/v3",
    MyInfoMode.PRODUCTION: "https://myinfosg.api.gov.sg/gov/v3",
}

_unmapped_modes = set(MyInfoMode) - set(BASE_URLS)
if _unmapped_modes:  # pragma: no cover
    raise RuntimeError(f"No base URL configured for mode(s): {sorted(_unmapped_modes)}")

REQUIRED_FIELDS = (
    "client_id",
    "client_secret",
    "singpass_eservice_id",
    "redirect_endpoint",
    "client_private_key",
    "myinfo_public_key",
)


class MyInfoClientConfig(BaseSettings):
    """
    Immutable configuration for one set of credentials registered with MyInfo.

    Attributes:
        client_id (str): Client ID (also known as App ID).
        client_secret (SecretStr): Client secret issued by MyInfo.
        singpass_eservice_id (str): e-service ID registered with SingPass.
        redirect_endpoint (str): Endpoint the user is redirected to after login.
        client_private_key (SecretStr): PEM RSA private key matching the public key given to MyInfo at onboarding.
        myinfo_public_key (str): PEM public key of the MyInfo server, used to verify its tokens.
        mode (MyInfoMode): Environment selector. Defaults to production.
        http_timeout (float): Timeout in seconds for all MyInfo network operations.
        clock_skew_leeway (int): Acceptable clock skew in seconds when validating token time claims.
        percent_encode_base_string (bool): Percent-encode parameters in the signing base string.
            Disable to sign the raw values, as the MyInfo reference verifier does.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_MYINFO_",
        case_sensitive=False,
        frozen=True,
    )

    client_id: str
    client_secret: SecretStr
    singpass_eservice_id: str
    redirect_endpoint: str
    client_private_key: SecretStr
    myinfo_public_key: str
    mode: MyInfoMode = MyInfoMode.PRODUCTION
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for MyInfo network operations.")
    clock_skew_leeway: int = Field(default=0, ge=0)
    percent_encode_base_string: bool = True

    def __init__(self, **values: Any) -> None:
        try:
            super().__init__(**values)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ConfigValidationError(
                f"Invalid or missing client configuration field(s): {', '.join(fields) or 'unknown'}. "
                f"Required: {', '.join(REQUIRED_FIELDS)}."
            ) from e

    @field_validator("client_private_key", "myinfo_public_key", mode="before")
    @classmethod
    def strip_trailing_newline(cls, v: Any) -> Any:
        """
        Accepts keys as str or bytes and removes a single trailing newline.
        """
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if isinstance(v, bytes):
            v = v.decode("utf-8")
        if isinstance(v, str) and v.endswith("\n"):
            v = v[:-1]
        return v

    @field_validator(*REQUIRED_FIELDS, mode="after")
    @classmethod
    def require_non_empty(cls, v: str | SecretStr, info: ValidationInfo) -> str | SecretStr:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if not raw.strip():
            raise ValueError(f"'{info.field_name}' must not be empty")
        return v

    @property
    def base_url(self) -> str:
        """The MyInfo API base URL for the configured mode."""
        return BASE_URLS[self.mode]
