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
Data models for the coreason-myinfo package.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shape of data returned by the Person API. Attribute values are nested field
# objects, lists of records, or a "not applicable" marker; they are not validated here.
PersonRecord = dict[str, Any]


class MyInfoAttribute(StrEnum):
    """Top-level Person attributes that a user can consent to release."""

    UINFIN = "uinfin"
    NAME = "name"
    HANYUPINYINNAME = "hanyupinyinname"
    ALIASNAME = "aliasname"
    HANYUPINYINALIASNAME = "hanyupinyinaliasname"
    MARRIEDNAME = "marriedname"
    SEX = "sex"
    RACE = "race"
    SECONDARYRACE = "secondaryrace"
    DIALECT = "dialect"
    NATIONALITY = "nationality"
    DOB = "dob"
    BIRTHCOUNTRY = "birthcountry"
    RESIDENTIALSTATUS = "residentialstatus"
    PASSPORTNUMBER = "passportnumber"
    PASSPORTEXPIRYDATE = "passportexpirydate"
    REGADD = "regadd"
    HOUSINGTYPE = "housingtype"
    HDBTYPE = "hdbtype"
    HDBOWNERSHIP = "hdbownership"
    OWNERPRIVATE = "ownerprivate"
    EMAIL = "email"
    MOBILENO = "mobileno"
    MARITAL = "marital"
    MARRIAGECERTNO = "marriagecertno"
    COUNTRYOFMARRIAGE = "countryofmarriage"
    MARRIAGEDATE = "marriagedate"
    DIVORCEDATE = "divorcedate"
    CHILDRENBIRTHRECORDS = "childrenbirthrecords"
    SPONSOREDCHILDRENRECORDS = "sponsoredchildrenrecords"
    OCCUPATION = "occupation"
    EMPLOYMENT = "employment"
    PASSTYPE = "passtype"
    PASSSTATUS = "passstatus"
    PASSEXPIRYDATE = "passexpirydate"
    EMPLOYMENTSECTOR = "employmentsector"
    HOUSEHOLDINCOME = "householdincome"
    VEHICLES = "vehicles"
    DRIVINGLICENCE = "drivinglicence"
    MERDEKAGEN = "merdekagen"
    SILVERSUPPORT = "silversupport"
    GSTVOUCHER = "gstvoucher"
    NOA_BASIC = "noa-basic"
    NOA = "noa"
    NOAHISTORY_BASIC = "noahistory-basic"
    NOAHISTORY = "noahistory"
    CPFCONTRIBUTIONS = "cpfcontributions"
    CPFEMPLOYERS = "cpfemployers"
    CPFBALANCES = "cpfbalances"


# Attributes that can only be requested one sub-field at a time (e.g. "vehicles.vehicleno").
SUB_ATTRIBUTE_SCOPES = frozenset(
    {
        MyInfoAttribute.HDBOWNERSHIP,
        MyInfoAttribute.CHILDRENBIRTHRECORDS,
        MyInfoAttribute.SPONSOREDCHILDRENRECORDS,
        MyInfoAttribute.VEHICLES,
        MyInfoAttribute.DRIVINGLICENCE,
    }
)


def validate_scope(scope: str) -> str:
    """
    Checks that a requested attribute is a known Person attribute or a dotted
    sub-attribute of one of the record-list attributes.

    Raises:
        ValueError: If the scope is not recognised.
    """
    root, _, sub_field = scope.partition(".")
    try:
        attribute = MyInfoAttribute(root)
    except ValueError:
        raise ValueError(f"Unknown MyInfo attribute '{scope}'") from None

    if attribute in SUB_ATTRIBUTE_SCOPES and not sub_field:
        raise ValueError(f"'{attribute}' must be requested as a sub-attribute, e.g. '{attribute}.<field>'")
    if sub_field and attribute not in SUB_ATTRIBUTE_SCOPES:
        raise ValueError(f"'{attribute}' does not support sub-attribute scopes")
    return scope


class AuthorisationRequest(BaseModel):
    """
    Parameters to create a redirect URL that starts SingPass login and consent.

    Attributes:
        purpose (str): Purpose of requesting the data, shown to the user.
        requested_attributes (list[str]): Attributes the user must consent to provide.
        relay_state (str): State forwarded to the redirect endpoint via query parameters.
        singpass_eservice_id (str | None): Alternative e-service ID for this request only.
        redirect_endpoint (str | None): Alternative redirect endpoint for this request only.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    purpose: str
    requested_attributes: list[str] = Field(..., min_length=1)
    relay_state: str
    singpass_eservice_id: str | None = None
    redirect_endpoint: str | None = None

    @field_validator("requested_attributes")
    @classmethod
    def check_scopes(cls, v: list[str]) -> list[str]:
        return [validate_scope(scope) for scope in v]


class SignedHeader(BaseModel):
    """
    The values captured when signing one request. Only valid for the exact
    method, URL and parameters it was computed over.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    nonce: str
    app_id: str
    signature_method: str = "RS256"
    signature: str

    @property
    def header_value(self) -> str:
        """Renders the Authorization header value."""
        return (
            f'PKI_SIGN timestamp="{self.timestamp}",'
            f'nonce="{self.nonce}",'
            f'app_id="{self.app_id}",'
            f'signature_method="{self.signature_method}",'
            f'signature="{self.signature}"'
        )

    def __str__(self) -> str:
        return self.header_value


class TokenResponse(BaseModel):
    """
    Response from the token endpoint.

    Attributes:
        access_token (str): The access token, itself an RS256-signed JWT.
        token_type (str | None): The type of the token (e.g. "Bearer").
        scope (str | None): The scopes granted.
        expires_in (int | None): The lifetime in seconds of the access token.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    token_type: str | None = None
    scope: str | None = None
    expires_in: int | None = None

    def __repr__(self) -> str:
        return f"TokenResponse(access_token='<REDACTED>', token_type={self.token_type!r}, expires_in={self.expires_in!r})"


class PersonResult(BaseModel):
    """
    Result of a complete Person retrieval: the access token used and the Person data.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    data: PersonRecord

    def __repr__(self) -> str:
        # Person data is PII and MUST NOT appear in logs
        return f"PersonResult(access_token='<REDACTED>', data=<{len(self.data)} attribute(s) REDACTED>)"

    def __str__(self) -> str:
        return self.__repr__()
