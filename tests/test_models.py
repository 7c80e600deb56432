"""Tests for bento.models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from bento.errors import InvalidBatchSizeError, UnexpectedResponseError
from bento.models import (
    MAX_EMAIL_BATCH_SIZE,
    BroadcastData,
    BroadcastType,
    CommandData,
    CommandResponse,
    CommandType,
    ContactData,
    EmailBatch,
    EmailData,
    EventData,
    FieldData,
    ImportSubscriberData,
    SubscriberData,
    TagData,
    ValidationData,
)


class TestEmailData:
    def test_wire_shape_uses_from(self, email_factory):
        data = email_factory().to_dict()
        assert data == {
            "to": "test@example.com",
            "from": "sender@example.com",
            "subject": "Test",
            "html_body": "<p>Test</p>",
            "transactional": True,
        }

    @pytest.mark.parametrize("personalizations", [None, {"first_name": "Jane", "items": [1, 2]}])
    def test_round_trip(self, email_factory, personalizations):
        email = email_factory(personalizations=personalizations, transactional=False)
        data = email.to_dict()
        assert ("personalizations" in data) is (personalizations is not None)
        assert EmailData.from_dict(data) == email

    def test_from_dict_missing_key(self):
        with pytest.raises(UnexpectedResponseError, match="from"):
            EmailData.from_dict({"to": "a@b.co", "subject": "x", "html_body": "y", "transactional": True})


class TestEmailBatch:
    def test_accepts_max_size(self, email_factory):
        batch = EmailBatch([email_factory() for _ in range(MAX_EMAIL_BATCH_SIZE)])
        assert len(batch) == 60
        assert not batch.is_empty()

    def test_rejects_over_max_size(self, email_factory):
        with pytest.raises(InvalidBatchSizeError):
            EmailBatch([email_factory() for _ in range(61)])

    def test_add_email_when_full(self, email_factory):
        batch = EmailBatch([email_factory() for _ in range(60)])
        with pytest.raises(InvalidBatchSizeError):
            batch.add_email(email_factory())
        assert len(batch) == 60

    def test_add_email(self, email_factory):
        batch = EmailBatch()
        assert batch.is_empty()
        batch.add_email(email_factory())
        assert len(batch) == 1

    def test_to_dict(self, email_factory):
        batch = EmailBatch([email_factory(to="a@example.com"), email_factory(to="b@example.com")])
        assert [e["to"] for e in batch.to_dict()["emails"]] == ["a@example.com", "b@example.com"]
        assert EmailBatch.from_dict(batch.to_dict()) == batch


class TestCommands:
    def test_command_wire_shape(self):
        command = CommandData(CommandType.ADD_TAG, "test@example.com", "new-tag")
        assert command.to_dict() == {"command": "add_tag", "email": "test@example.com", "query": "new-tag"}

    def test_command_from_dict_unknown_type(self):
        with pytest.raises(UnexpectedResponseError, match="Unknown command"):
            CommandData.from_dict({"command": "explode", "email": "a@b.co", "query": "x"})

    def test_command_response_defaults_failed(self):
        assert CommandResponse.from_dict({"results": 3}) == CommandResponse(results=3, failed=0)

    def test_command_response_rejects_bool(self):
        with pytest.raises(UnexpectedResponseError):
            CommandResponse.from_dict({"results": True, "failed": 0})


class TestEventData:
    def test_optional_fields_omitted(self):
        event = EventData(event_type="$purchase", email="test@example.com")
        assert event.to_dict() == {"type": "$purchase", "email": "test@example.com"}

    def test_with_details(self):
        event = EventData("$purchase", "test@example.com", details={"value": {"amount": 1000}})
        assert EventData.from_dict(event.to_dict()) == event


class TestBroadcastData:
    def test_wire_shape(self):
        broadcast = BroadcastData(
            name="Launch",
            subject="We launched",
            content="<p>Hi</p>",
            broadcast_type=BroadcastType.PLAIN,
            sender=ContactData(email="sender@example.com", name="Sender"),
            batch_size_per_hour=1000,
            inclusive_tags="customers",
        )
        data = broadcast.to_dict()
        assert data["type"] == "plain"
        assert data["from"] == {"name": "Sender", "email": "sender@example.com"}
        assert "segment_id" not in data
        assert "exclusive_tags" not in data
        assert BroadcastData.from_dict(data) == broadcast


class TestSubscribers:
    def test_import_flattens_custom_fields(self):
        row = ImportSubscriberData(
            email="test@example.com",
            first_name="Jane",
            tags="lead",
            custom_fields={"company": "Acme"},
        )
        assert row.to_dict() == {
            "email": "test@example.com",
            "first_name": "Jane",
            "tags": "lead",
            "company": "Acme",
        }
        assert ImportSubscriberData.from_dict(row.to_dict()) == row

    def test_subscriber_from_dict(self):
        subscriber = SubscriberData.from_dict({
            "id": "123",
            "type": "visitors",
            "attributes": {
                "uuid": "abc-123",
                "email": "test@example.com",
                "fields": {"first_name": "Jane"},
                "cached_tag_ids": ["1", "2"],
                "unsubscribed_at": "2024-01-02T03:04:05Z",
            },
        })
        assert subscriber.email == "test@example.com"
        assert subscriber.attributes.cached_tag_ids == ["1", "2"]
        assert subscriber.attributes.unsubscribed_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert not subscriber.attributes.is_subscribed

    def test_subscriber_missing_attributes(self):
        with pytest.raises(UnexpectedResponseError, match="attributes"):
            SubscriberData.from_dict({"id": "1", "type": "visitors"})

    def test_subscriber_bad_timestamp(self):
        with pytest.raises(UnexpectedResponseError, match="timestamp"):
            SubscriberData.from_dict({
                "id": "1",
                "type": "visitors",
                "attributes": {"uuid": "u", "email": "a@b.co", "unsubscribed_at": "yesterday"},
            })


class TestTagsAndFields:
    def test_tag_from_dict(self):
        tag = TagData.from_dict({
            "id": "1",
            "type": "tags",
            "attributes": {"name": "customer", "created_at": "2024-01-01T00:00:00Z",
                           "discarded_at": None, "site_id": 7},
        })
        assert tag.name == "customer"
        assert tag.attributes.site_id == 7

    def test_field_from_dict(self):
        field = FieldData.from_dict({
            "id": 2,
            "type": "visitors-fields",
            "attributes": {"name": "Company", "key": "company", "whitelisted": None,
                           "created_at": "2024-01-01T00:00:00Z"},
        })
        assert field.id == "2"
        assert field.key == "company"
        assert field.attributes.created_at.year == 2024


def test_validation_data_omits_missing():
    assert ValidationData(email="a@example.com", ip="1.1.1.1").to_dict() == {
        "email": "a@example.com",
        "ip": "1.1.1.1",
    }
