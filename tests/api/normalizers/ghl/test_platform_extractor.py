"""Testes da extração do webhook da Platform."""

from __future__ import annotations

import pytest

from api.normalizers.ghl import parse_platform_event
from utils.errors import MalformedPayloadError


def test_parses_camel_case_fields() -> None:
    event = parse_platform_event(
        {
            "type": "SMS",
            "locationId": "loc1",
            "contactId": "c1",
            "messageId": "m1",
            "conversationProviderId": "prov",
            "userId": "u1",
            "phone": "+5511999998888",
            "message": "Olá",
        }
    )

    assert event.location_id == "loc1"
    assert event.contact_id == "c1"
    assert event.message_id == "m1"
    assert event.conversation_provider_id == "prov"
    assert event.user_id == "u1"
    assert event.outbound_text() == "Olá"


def test_location_header_fills_missing_location() -> None:
    event = parse_platform_event({"message": "x"}, location_header=" loc-header ")

    assert event.location_id == "loc-header"


def test_body_location_wins_over_header() -> None:
    event = parse_platform_event({"locationId": "body"}, location_header="header")

    assert event.location_id == "body"


def test_attachments_are_appended_as_urls() -> None:
    event = parse_platform_event(
        {
            "message": " veja ",
            "attachments": [
                "https://files/a.pdf",
                {"url": "https://files/b.png", "fileName": "b.png"},
                {"fileName": "no-url"},
                "",
            ],
        }
    )

    assert event.outbound_text() == "veja\nhttps://files/a.pdf\nhttps://files/b.png"


def test_attachments_only_message() -> None:
    event = parse_platform_event({"attachments": ["https://files/a.pdf"]})

    assert event.outbound_text() == "https://files/a.pdf"


def test_empty_message_has_empty_text() -> None:
    assert parse_platform_event({"message": "   "}).outbound_text() == ""


@pytest.mark.parametrize("payload", [None, ["x"], {"contactId": {"nested": True}}])
def test_malformed_payload(payload: object) -> None:
    with pytest.raises(MalformedPayloadError):
        parse_platform_event(payload)
