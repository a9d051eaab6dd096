# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

from typing import Any
from urllib.parse import parse_qs, urlsplit

from coreason_myinfo.config import MyInfoClientConfig
from coreason_myinfo.models import AuthorisationRequest
from coreason_myinfo.redirect import create_redirect_url


def test_redirect_url_structure(config: MyInfoClientConfig) -> None:
    req = AuthorisationRequest(purpose="demo", relay_state="xyz", requested_attributes=["name", "email"])
    url = create_redirect_url(config, req)

    assert url.startswith("https://myinfosgstg.api.gov.sg/gov/test/v3/authorise?")
    query = urlsplit(url).query
    assert "attributes=name%2Cemail" in query
    assert "redirect_uri=https%3A%2F%2Fapp.example%2Fcb" in query
    assert [pair.split("=")[0] for pair in query.split("&")] == [
        "purpose",
        "attributes",
        "state",
        "client_id",
        "redirect_uri",
        "sp_esvcId",
    ]
    assert parse_qs(query) == {
        "purpose": ["demo"],
        "attributes": ["name,email"],
        "state": ["xyz"],
        "client_id": ["STG2-MYINFO-SELF-TEST"],
        "redirect_uri": ["https://app.example/cb"],
        "sp_esvcId": ["MYINFO-CONSENTPLATFORM"],
    }


def test_redirect_url_spaces_encoded_as_percent20(config: MyInfoClientConfig) -> None:
    req = AuthorisationRequest(purpose="Loan application", relay_state="a b", requested_attributes=["name"])
    url = create_redirect_url(config, req)
    assert "purpose=Loan%20application" in url
    assert "state=a%20b" in url
    assert "+" not in url


def test_redirect_url_per_request_overrides(config: MyInfoClientConfig) -> None:
    req = AuthorisationRequest(
        purpose="demo",
        relay_state="xyz",
        requested_attributes=["vehicles.vehicleno"],
        singpass_eservice_id="SVC1",
        redirect_endpoint="https://other.example/return",
    )
    query = parse_qs(urlsplit(create_redirect_url(config, req)).query)
    assert query["sp_esvcId"] == ["SVC1"]
    assert query["redirect_uri"] == ["https://other.example/return"]
    assert query["attributes"] == ["vehicles.vehicleno"]


def test_redirect_url_empty_override_is_kept(config: MyInfoClientConfig) -> None:
    req = AuthorisationRequest(
        purpose="demo", relay_state="xyz", requested_attributes=["name"], singpass_eservice_id="", redirect_endpoint=""
    )
    query = parse_qs(urlsplit(create_redirect_url(config, req)).query, keep_blank_values=True)
    assert query["sp_esvcId"] == [""]
    assert query["redirect_uri"] == [""]


def test_redirect_url_follows_mode(config_kwargs: dict[str, Any]) -> None:
    config = MyInfoClientConfig(**{**config_kwargs, "mode": "dev"})
    req = AuthorisationRequest(purpose="demo", relay_state="xyz", requested_attributes=["name"])
    assert create_redirect_url(config, req).startswith("http://localhost:5156/myinfo/v3/authorise?")
