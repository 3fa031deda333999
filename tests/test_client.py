import json

import httpx
import pytest

from meditrust.client import (
    REPORT_PATH,
    VERIFY_PATH,
    RemoteOk,
    RemoteUnavailable,
    RemoteVerifier,
    ReportSubmissionError,
)
from meditrust.models import CounterfeitReport, ScanRecord

pytestmark = pytest.mark.anyio

RECORD = ScanRecord(
    manufacturer_id="pharmacorp",
    batch_id="B123",
    expiry_raw="03/2030",
    product_name=None,
    raw="pharmacorp|B123|03/2030",
)


def _verifier(handler, **kwargs) -> RemoteVerifier:
    return RemoteVerifier(
        base_url="http://verify.test/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_verify_posts_record_and_maps_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={
                "authentic": True,
                "expired": False,
                "nearExpiry": True,
                "manufacturer": "PharmaCorp Ltd",
                "batchNumber": "B123",
                "expiryDate": "2030-03-31",
            },
        )

    async with _verifier(handler, api_key="secret") as verifier:
        outcome = await verifier.verify(RECORD)

    assert seen["path"] == VERIFY_PATH
    assert seen["body"] == {"manufacturerId": "pharmacorp", "batchId": "B123", "expiryDate": "03/2030"}
    assert seen["auth"] == "Bearer secret"
    assert isinstance(outcome, RemoteOk)
    assert outcome.result.near_expiry is True
    assert outcome.result.manufacturer == "PharmaCorp Ltd"
    assert outcome.result.verified_remotely is True


async def test_missing_descriptive_fields_fall_back_to_record():
    def handler(request):
        return httpx.Response(200, json={"authentic": False, "expired": False, "nearExpiry": False})

    async with _verifier(handler) as verifier:
        outcome = await verifier.verify(RECORD)

    assert isinstance(outcome, RemoteOk)
    assert outcome.result.batch_number == "B123"
    assert outcome.result.expiry_date == "03/2030"


@pytest.mark.parametrize("status", [404, 500, 503])
async def test_non_success_status_is_unavailable(status):
    async with _verifier(lambda request: httpx.Response(status)) as verifier:
        outcome = await verifier.verify(RECORD)

    assert isinstance(outcome, RemoteUnavailable)
    assert str(status) in outcome.reason


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["authentic", True]),
        httpx.Response(200, json={"authentic": "yes", "expired": False, "nearExpiry": False}),
        httpx.Response(200, json={"expired": False}),
    ],
)
async def test_malformed_body_is_unavailable(response):
    async with _verifier(lambda request: response) as verifier:
        outcome = await verifier.verify(RECORD)

    assert isinstance(outcome, RemoteUnavailable)


async def test_timeout_is_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with _verifier(handler, timeout_seconds=0.5) as verifier:
        outcome = await verifier.verify(RECORD)

    assert isinstance(outcome, RemoteUnavailable)
    assert "timed out" in outcome.reason


async def test_transport_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with _verifier(handler) as verifier:
        outcome = await verifier.verify(RECORD)

    assert isinstance(outcome, RemoteUnavailable)


async def test_verify_issues_a_single_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(502)

    async with _verifier(handler) as verifier:
        await verifier.verify(RECORD)

    assert len(calls) == 1


async def test_submit_report_sends_camel_case_payload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201)

    report = CounterfeitReport.from_record(RECORD, location="Nairobi", notes="blurry print")
    async with _verifier(handler) as verifier:
        await verifier.submit_report(report)

    assert seen["path"] == REPORT_PATH
    assert seen["body"] == {
        "manufacturerId": "pharmacorp",
        "batchId": "B123",
        "expiryDate": "03/2030",
        "reporterLocation": "Nairobi",
        "additionalNotes": "blurry print",
    }


async def test_submit_report_failure_raises():
    async with _verifier(lambda request: httpx.Response(500)) as verifier:
        with pytest.raises(ReportSubmissionError):
            await verifier.submit_report(CounterfeitReport.from_record(RECORD, location="Lagos"))
