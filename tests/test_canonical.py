# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

import itertools

from coreason_myinfo.canonical import build_param_string, encode_query, sort_params


def test_sort_params_orders_keys_by_code_point() -> None:
    params = {"nonce": "n", "app_id": "a", "Zeta": "z", "timestamp": "t"}
    assert list(sort_params(params)) == ["Zeta", "app_id", "nonce", "timestamp"]


def test_sort_params_does_not_mutate_source() -> None:
    params = {"b": "2", "a": "1"}
    result = sort_params(params)
    assert list(params) == ["b", "a"]
    assert result is not params
    assert result == {"a": "1", "b": "2"}


def test_sort_params_idempotent() -> None:
    once = sort_params({"c": "3", "a": "1", "b": "2"})
    assert list(sort_params(once).items()) == list(once.items())


def test_sort_params_permutation_independent() -> None:
    items = [("client_id", "X"), ("attributes", "name,email"), ("nonce", "abc"), ("app_id", "X")]
    outputs = {tuple(sort_params(dict(perm)).items()) for perm in itertools.permutations(items)}
    assert len(outputs) == 1


def test_build_param_string_percent_encodes_without_plus() -> None:
    params = {"purpose": "demo purpose", "redirect_uri": "https://app.example/cb", "attributes": "name,email"}
    assert build_param_string(params) == (
        "attributes=name%2Cemail&purpose=demo%20purpose&redirect_uri=https%3A%2F%2Fapp.example%2Fcb"
    )


def test_build_param_string_verbatim() -> None:
    params = {"redirect_uri": "https://app.example/cb", "attributes": "name,email"}
    assert build_param_string(params, encode=False) == "attributes=name,email&redirect_uri=https://app.example/cb"


def test_build_param_string_empty() -> None:
    assert build_param_string({}) == ""


def test_encode_query_keeps_insertion_order() -> None:
    assert encode_query({"b": "x y", "a": "1,2"}) == "b=x%20y&a=1%2C2"
