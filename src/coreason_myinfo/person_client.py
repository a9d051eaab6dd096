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
PersonFetcher component for retrieving consented attributes from the Person API.
"""

from collections.abc import Sequence
from urllib.parse import quote

import httpx

from coreason_myinfo.canonical import encode_query
from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.exceptions import CoreasonMyInfoError, ResourceFetchError, SigningError
from coreason_myinfo.identity import IdentityExtractor
from coreason_myinfo.models import PersonRecord
from coreason_myinfo.signer import generate_auth_header
from coreason_myinfo.transport import safe_json_fetch
from coreason_myinfo.utils.logger import logger, mask_uinfin

PERSON_PATH = "/person"


class PersonFetcher:
    """
    Issues the signed, bearer-authenticated GET to `/person/{uinfin}/`.

    Attributes:
        config (MyInfoClientConfig): The client configuration.
        client (httpx.AsyncClient): The async HTTP client to use for requests.
        extractor (IdentityExtractor): Used to derive the UIN/FIN when the caller does not supply it.
    """

    def __init__(
        self,
        config: MyInfoClientConfig,
        client: httpx.AsyncClient,
        extractor: IdentityExtractor | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.extractor = extractor or IdentityExtractor(config.myinfo_public_key, leeway=config.clock_skew_leeway)

    def person_url(self, uinfin: str) -> str:
        return f"{self.config.base_url}{PERSON_PATH}/{quote(uinfin, safe='')}/"

    async def fetch(
        self,
        access_token: str,
        requested_attributes: Sequence[str],
        uinfin: str | None = None,
    ) -> PersonRecord:
        """
        Retrieves the requested attributes for the token's subject.

        The body is returned as received; it is not validated against the Person data shapes.

        Args:
            access_token: The access token from the token endpoint.
            requested_attributes: Attributes to request. Should match those consented to at login.
            uinfin: The UIN/FIN, if already extracted from the token.

        Returns:
            PersonRecord: The decoded Person API response.

        Raises:
            TokenVerificationError: If `uinfin` is omitted and the token cannot be verified.
            MalformedClaimsError: If `uinfin` is omitted and the token has no usable subject.
            ResourceFetchError: On signing failures, transport errors, non-success status codes
                or a body that is not a JSON object.
        """
        if uinfin is None:
            uinfin = self.extractor.extract_uinfin(access_token)

        url = self.person_url(uinfin)
        params = {
            "client_id": self.config.client_id,
            "attributes": ",".join(requested_attributes),
        }
        try:
            auth_header = generate_auth_header(self.config, "GET", url, params)
        except SigningError as e:
            raise ResourceFetchError(f"Failed to sign Person request: {e}") from e

        headers = {
            "Cache-Control": "no-cache",
            "Authorization": f"{auth_header.header_value},Bearer {access_token}",
        }

        try:
            data = await safe_json_fetch(self.client, f"{url}?{encode_query(params)}", headers=headers)
        except httpx.HTTPStatusError as e:
            logger.error(f"Person request for {mask_uinfin(uinfin)} failed with status {e.response.status_code}")
            raise ResourceFetchError(f"Person API returned {e.response.status_code}: {e}") from e
        except (httpx.HTTPError, CoreasonMyInfoError) as e:
            logger.error(f"Person request for {mask_uinfin(uinfin)} failed: {type(e).__name__}")
            raise ResourceFetchError(f"Failed to call Person API: {e}") from e

        if not isinstance(data, dict):
            logger.error(f"Person response for {mask_uinfin(uinfin)} was a JSON {type(data).__name__}, not an object")
            raise ResourceFetchError(
                f"Invalid response from Person API: expected a JSON object, got {type(data).__name__}"
            )

        logger.info(f"Retrieved {len(requested_attributes)} attribute(s) for {mask_uinfin(uinfin)}")
        return data
