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
Canonical parameter ordering and serialisation shared by request signing and verification.
"""

from collections.abc import Mapping
from urllib.parse import quote, urlencode


def sort_params(params: Mapping[str, str]) -> dict[str, str]:
    """
    Returns a new dict with the keys in ascending code-point order.

    Key order is part of the signing contract: the counterparty rebuilds the
    base string in this order, so it must not depend on insertion order.
    """
    return {key: params[key] for key in sorted(params)}


def build_param_string(params: Mapping[str, str], encode: bool = True) -> str:
    """
    Serialises the canonical form of `params` as `key=value&key=value`.

    Args:
        params: The parameters to serialise, in any order.
        encode: Percent-encode keys and values (space becomes %20, never '+').
            When False, values are emitted verbatim.

    Returns:
        str: The serialised parameter string.
    """
    canonical = sort_params(params)
    if encode:
        return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in canonical.items())
    return "&".join(f"{key}={value}" for key, value in canonical.items())


def encode_query(params: Mapping[str, str]) -> str:
    """
    Encodes query parameters in insertion order using %20 for spaces and
    escaping reserved characters such as ',' and '/'.
    """
    return urlencode(params, quote_via=quote)
