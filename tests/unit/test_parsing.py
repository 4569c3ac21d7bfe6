"""Tests for the two-stage structured-data parser."""

import pytest

from agent_dispatch.protocol.parsing import parse_lenient, parse_strict, parse_structured
from agent_dispatch.utils.error_handling import ArgumentParseError, ResponseParseError


def test_strict_json_object():
    result = parse_structured('{"origin": "SEA", "passengers": 2}')
    assert result.ok
    assert result.stage == "strict"
    assert result.value == {"origin": "SEA", "passengers": 2}


def test_mapping_input_is_already_parsed():
    result = parse_structured({"hotel_id": "HTL789"})
    assert result.stage == "native"
    assert result.unwrap() == {"hotel_id": "HTL789"}


def test_empty_input_yields_empty_arguments():
    assert parse_structured("").unwrap() == {}
    assert parse_structured(None).unwrap() == {}


def test_fenced_block_is_recovered():
    text = 'Here you go:\n```json\n{"agents": ["trait"]}\n```\nThanks'
    result = parse_structured(text)
    assert result.stage == "embedded"
    assert result.value == {"agents": ["trait"]}


def test_object_embedded_in_prose():
    result = parse_lenient('Sure! {"location": "SFO", "nested": {"a": "}"}} done')
    assert result.value == {"location": "SFO", "nested": {"a": "}"}}


def test_key_value_pairs_from_broken_json():
    result = parse_structured('{"origin": "SEA", "destination": "SFO", "passengers": 2,')
    assert result.stage == "pairs"
    assert result.value == {"origin": "SEA", "destination": "SFO", "passengers": 2}


def test_non_object_json_is_an_error():
    result = parse_structured("[1, 2, 3]")
    assert not result.ok
    with pytest.raises(ArgumentParseError):
        result.unwrap()


def test_unparseable_text_uses_requested_error_type():
    result = parse_structured("no structure here", error_cls=ResponseParseError)
    assert isinstance(result.error, ResponseParseError)


def test_parse_strict_reports_errors_without_raising():
    assert not parse_strict("{oops").ok


def test_undecodable_pair_values_are_skipped():
    result = parse_structured('{"location": "Paris\\q", "nights": 3, broken')

    assert result.stage == "pairs"
    assert result.value == {"nights": 3}


def test_only_undecodable_pairs_is_an_error():
    result = parse_structured('{"location": "Paris\\q", broken', error_cls=ResponseParseError)

    assert not result.ok
    assert isinstance(result.error, ResponseParseError)
