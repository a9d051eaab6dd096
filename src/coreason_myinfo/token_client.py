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
TokenExchanger component for the OAuth 2.0 authorisation code grant against MyInfo.
"""

import httpx
from pydantic import ValidationError

from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.exceptions import CoreasonMyInfoError, SigningError, TokenExchangeError
from coreason_myinfo.models import TokenResponse
from coreason_myinfo.signer import generate_auth_header
from coreason_myinfo.transport import safe_json_fetch
from coreason_myinfo.utils.logger import logger

TOKEN_PATH = "/token"


class TokenExchanger:
    """
    Exchanges an authorisation code for an access token.

    Attributes:
        config (MyInfoClientConfig): The client configuration.
        client (httpx.AsyncClient): The async HTTP client to use for requests.
    """

    def __init__(self, config: MyInfoClientConfig, client: httpx.AsyncClient) -> None:
        self.config = config
        self.client = client

    @property
    def token_url(self) -> str:
        return f"{self.config.base_url}{TOKEN_PATH}"

    async def exchange_code(self, auth_code: str) -> TokenResponse:
        """
        POSTs the authorisation code to the token endpoint.

        All five form parameters, the client secret included, are covered by
        the PKI_SIGN signature.

        Args:
            auth_code: The authorisation code MyInfo passed to the redirect endpoint.

        Returns:
            TokenResponse: The parsed token response.

        Raises:
            TokenExchangeError: On transport errors, non-success status codes or
                a response without an access token.
        """
        if not auth_code or not auth_code.strip():
            raise TokenExchangeError("Authorisation code must not be empty.")

        url = self.token_url
        data = {
            "grant_type": "authorization_code",
            "code": auth_code,
            "redirect_uri": self.config.redirect_endpoint,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret.get_secret_value(),
        }
        try:
            auth_header = generate_auth_header(self.config, "POST", url, data)
        except SigningError as e:
            raise TokenExchangeError(f"Failed to sign token request: {e}") from e

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Cache-Control": "no-cache",
            "Authorization": auth_header.header_value,
        }

        try:
            resp_data = await safe_json_fetch(self.client, url, method="POST", data=data, headers=headers)
        except httpx.HTTPStatusError as e:
            logger.error(f"Token request failed with status {e.response.status_code}")
            raise TokenExchangeError(f"Token endpoint returned {e.response.status_code}: {e}") from e
        except (httpx.HTTPError, CoreasonMyInfoError) as e:
            logger.error(f"Token request failed: {e}")
            raise TokenExchangeError(f"Failed to call token endpoint: {e}") from e

        if not isinstance(resp_data, dict):
            raise TokenExchangeError("Invalid response from token endpoint: expected a JSON object")

        try:
            token = TokenResponse(**resp_data)
        except ValidationError as e:
            logger.error("Token response did not contain an access token")
            raise TokenExchangeError(f"Invalid response from token endpoint: {e}") from e

        logger.info("Access token retrieved successfully.")
        return token
