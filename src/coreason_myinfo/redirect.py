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
Builds the redirect URL that starts SingPass login and MyInfo consent.
"""

from coreason_myinfo.canonical import encode_query
from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.models import AuthorisationRequest

AUTHORISE_PATH = "/authorise"


def create_redirect_url(config: MyInfoClientConfig, request: AuthorisationRequest) -> str:
    """
    Constructs the URL the user visits to log in and consent to the requested attributes.

    Per-request `singpass_eservice_id` and `redirect_endpoint` override the configured defaults
    whenever they are set, including to an empty string.

    Args:
        config: The client configuration.
        request: The purpose, attributes and relay state of this login.

    Returns:
        str: The `/authorise` URL with its query string.
    """
    query = {
        "purpose": request.purpose,
        "attributes": ",".join(request.requested_attributes),
        "state": request.relay_state,
        "client_id": config.client_id,
        "redirect_uri": config.redirect_endpoint if request.redirect_endpoint is None else request.redirect_endpoint,
        "sp_esvcId": (
            config.singpass_eservice_id if request.singpass_eservice_id is None else request.singpass_eservice_id
        ),
    }
    return f"{config.base_url}{AUTHORISE_PATH}?{encode_query(query)}"
