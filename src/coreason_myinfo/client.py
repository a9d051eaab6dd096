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
MyInfo client orchestrating token exchange, identity verification and Person retrieval.
"""

from collections.abc import Sequence
from typing import Any

import anyio
import httpx
from opentelemetry import trace
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.trace import Status, StatusCode

from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.exceptions import (
    MalformedClaimsError,
    ResourceFetchError,
    TokenExchangeError,
    TokenVerificationError,
)
from coreason_myinfo.identity import IdentityExtractor
from coreason_myinfo.models import AuthorisationRequest, PersonResult
from coreason_myinfo.person_client import PersonFetcher
from coreason_myinfo.redirect import create_redirect_url
from coreason_myinfo.token_client import TokenExchanger
from coreason_myinfo.utils.logger import logger

tracer = trace.get_tracer(__name__)


class MyInfoClientAsync:
    """
    Async MyInfo client. Each instance uses one set of credentials registered with MyInfo.
    Handles resources via async context manager.
    """

    def __init__(self, config: MyInfoClientConfig, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the MyInfoClientAsync.

        Args:
            config: The client configuration.
            client: External async client (optional). If not provided, one is created with
                `config.http_timeout` and closed on exit.
        """
        self.config = config
        self._internal_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=self.config.http_timeout)

        HTTPXClientInstrumentor().instrument_client(self._client)

        self.identity_extractor = IdentityExtractor(config.myinfo_public_key, leeway=config.clock_skew_leeway)
        self.token_exchanger = TokenExchanger(config, self._client)
        self.person_fetcher = PersonFetcher(config, self._client, self.identity_extractor)

    async def __aenter__(self) -> "MyInfoClientAsync":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._internal_client:
            await self._client.aclose()

    def create_redirect_url(self, request: AuthorisationRequest) -> str:
        """
        Constructs the redirect URL that starts SingPass login.
        See `coreason_myinfo.redirect.create_redirect_url`.
        """
        return create_redirect_url(self.config, request)

    async def get_person(self, auth_code: str, requested_attributes: Sequence[str]) -> PersonResult:
        """
        Retrieves the given attributes after the user has logged in and consented.

        Runs token exchange, token verification and the Person request in order.
        Each stage's error is re-raised as the same type with a message naming the stage.

        Args:
            auth_code: Authorisation code given by MyInfo.
            requested_attributes: Attributes to request. Should match those given when initiating login.

        Returns:
            PersonResult: The access token and the Person data.

        Raises:
            TokenExchangeError: If the access token could not be retrieved.
            TokenVerificationError: If the access token could not be verified.
            MalformedClaimsError: If the verified token carries no UIN/FIN.
            ResourceFetchError: If the Person API call failed.
        """
        with tracer.start_as_current_span("myinfo.get_person") as span:
            span.set_attribute("myinfo.attribute_count", len(requested_attributes))

            try:
                token = await self.token_exchanger.exchange_code(auth_code)
            except TokenExchangeError as e:
                self._record_failure(span, e)
                raise TokenExchangeError(
                    f"The following error occurred while retrieving the access token: {e}"
                ) from e
            access_token = token.access_token

            try:
                uinfin = self.identity_extractor.extract_uinfin(access_token)
            except TokenVerificationError as e:
                self._record_failure(span, e)
                raise type(e)(f"The following error occurred while decoding the token from MyInfo: {e}") from e
            except MalformedClaimsError as e:
                self._record_failure(span, e)
                raise MalformedClaimsError(
                    f"The following error occurred while decoding the token from MyInfo: {e}"
                ) from e

            try:
                data = await self.person_fetcher.fetch(access_token, requested_attributes, uinfin)
            except ResourceFetchError as e:
                self._record_failure(span, e)
                raise ResourceFetchError(f"The following error occurred while calling the Person API: {e}") from e

            span.set_status(Status(StatusCode.OK))
            return PersonResult(access_token=access_token, data=data)

    @staticmethod
    def _record_failure(span: trace.Span, error: Exception) -> None:
        logger.error(f"MyInfo Person retrieval failed: {type(error).__name__}")
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, type(error).__name__))


class MyInfoClient:
    """
    Sync facade for MyInfoClientAsync.

    Every network call runs a fresh MyInfoClientAsync under `anyio.run`, so one
    instance can be shared between threads.
    """

    def __init__(self, config: MyInfoClientConfig) -> None:
        self.config = config

    def __enter__(self) -> "MyInfoClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        pass

    def create_redirect_url(self, request: AuthorisationRequest) -> str:
        return create_redirect_url(self.config, request)

    def get_person(self, auth_code: str, requested_attributes: Sequence[str]) -> PersonResult:
        """
        Blocking version of `MyInfoClientAsync.get_person`.
        """

        async def _run() -> PersonResult:
            async with MyInfoClientAsync(self.config) as client:
                return await client.get_person(auth_code, requested_attributes)

        return anyio.run(_run)
