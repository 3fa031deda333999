import pytest

from meditrust.parser import (
    MalformedPayload,
    MalformedPayloadError,
    ParsedOk,
    parse,
    parse_payload,
)


def test_full_payload_is_split_and_trimmed():
    record = parse(" pharmacorp | B123 | 03/2030 | Amoxicillin 500mg ")

    assert record.manufacturer_id == "pharmacorp"
    assert record.batch_id == "B123"
    assert record.expiry_raw == "03/2030"
    assert record.product_name == "Amoxicillin 500mg"
    assert record.raw == " pharmacorp | B123 | 03/2030 | Amoxicillin 500mg "


def test_missing_trailing_fields_use_sentinels():
    record = parse("medlife")

    assert record.manufacturer_id == "medlife"
    assert record.batch_id == "Unknown"
    assert record.expiry_raw == "Unknown"
    assert record.product_name is None


def test_blank_manufacturer_with_batch_still_parses():
    record = parse("|B999|12/2031")

    assert record.manufacturer_id == "Unknown"
    assert record.batch_id == "B999"


@pytest.mark.parametrize("raw", ["||", "", "   ", " | |2030-01-01", "|"])
def test_empty_identity_is_malformed(raw):
    outcome = parse_payload(raw)

    assert isinstance(outcome, MalformedPayload)
    with pytest.raises(MalformedPayloadError):
        parse(raw)


def test_parse_payload_returns_tagged_success():
    outcome = parse_payload("biopharm|X1|202912")

    assert isinstance(outcome, ParsedOk)
    assert outcome.record.expiry_raw == "202912"


def test_error_carries_reason():
    with pytest.raises(MalformedPayloadError) as excinfo:
        parse("||")

    assert excinfo.value.raw == "||"
    assert "empty" in excinfo.value.reason
