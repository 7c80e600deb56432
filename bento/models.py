"""
Typed request and response structures for the Bento API.

Every class converts to the wire JSON shape with ``to_dict()`` (optional
fields that are ``None`` are left out) and back with ``from_dict()``.
``from_dict()`` raises UnexpectedResponseError when the payload does not
have the expected shape, since it is mostly used on API responses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import InvalidBatchSizeError, UnexpectedResponseError

MAX_EMAIL_BATCH_SIZE = 60


def _require(data: Dict, key: str, expected_type=None, what: str = "object"):
    """Fetch a required key from a response payload."""
    if not isinstance(data, dict):
        raise UnexpectedResponseError(
            f"Expected {what} to be a JSON object, got {type(data).__name__}"
        )
    if key not in data:
        raise UnexpectedResponseError(f"Missing '{key}' in {what}")
    value = data[key]
    # bool is an int subclass, keep counts and flags apart
    if expected_type is int and isinstance(value, bool):
        raise UnexpectedResponseError(f"'{key}' in {what} must be int")
    if expected_type is not None and not isinstance(value, expected_type):
        name = getattr(expected_type, "__name__", str(expected_type))
        raise UnexpectedResponseError(f"'{key}' in {what} must be {name}")
    return value


def _optional(data: Dict, key: str, expected_type, what: str = "object"):
    if isinstance(data, dict) and data.get(key) is None:
        return None
    return _require(data, key, expected_type, what)


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as sent by the API (``Z`` suffix allowed)."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise UnexpectedResponseError(f"Invalid timestamp: {value!r}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise UnexpectedResponseError(f"Invalid timestamp: {value!r}") from None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


# =============================================================================
# Enumerations
# =============================================================================

class BroadcastType(str, Enum):
    PLAIN = "plain"
    RAW = "raw"


class CommandType(str, Enum):
    """Subscriber mutations understood by ``/fetch/commands``."""
    ADD_TAG = "add_tag"
    ADD_TAG_VIA_EVENT = "add_tag_via_event"
    REMOVE_TAG = "remove_tag"
    ADD_FIELD = "add_field"
    REMOVE_FIELD = "remove_field"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    CHANGE_EMAIL = "change_email"


def _enum_value(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise UnexpectedResponseError(f"Unknown {what}: {value!r}") from None


# =============================================================================
# Commands
# =============================================================================

@dataclass
class CommandData:
    """A single subscriber command.

    Attributes:
        command: What to do
        email: Target subscriber
        query: Command argument (tag name, field spec, new email, ...)
    """
    command: CommandType
    email: str
    query: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": CommandType(self.command).value,
            "email": self.email,
            "query": self.query,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandData":
        what = "command"
        return cls(
            command=_enum_value(CommandType, _require(data, "command", str, what), what),
            email=_require(data, "email", str, what),
            query=_require(data, "query", str, what),
        )


@dataclass
class CommandResponse:
    """Outcome counts of a batch call (commands, imports, events)."""
    results: int
    failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"results": self.results, "failed": self.failed}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandResponse":
        what = "batch response"
        failed = _optional(data, "failed", int, what)
        return cls(
            results=_require(data, "results", int, what),
            failed=failed or 0,
        )


# =============================================================================
# Events
# =============================================================================

@dataclass
class EventData:
    event_type: str
    email: str
    fields: Optional[Dict[str, Any]] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "type": self.event_type,
            "email": self.email,
            "fields": self.fields,
            "details": self.details,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventData":
        what = "event"
        return cls(
            event_type=_require(data, "type", str, what),
            email=_require(data, "email", str, what),
            fields=_optional(data, "fields", dict, what),
            details=_optional(data, "details", dict, what),
        )


# =============================================================================
# Emails
# =============================================================================

@dataclass
class EmailData:
    """A single outgoing email.

    ``sender`` is serialized as ``from``, which is a Python keyword.
    """
    to: str
    sender: str
    subject: str
    html_body: str
    transactional: bool = False
    personalizations: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "to": self.to,
            "from": self.sender,
            "subject": self.subject,
            "html_body": self.html_body,
            "transactional": self.transactional,
            "personalizations": self.personalizations,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailData":
        what = "email"
        return cls(
            to=_require(data, "to", str, what),
            sender=_require(data, "from", str, what),
            subject=_require(data, "subject", str, what),
            html_body=_require(data, "html_body", str, what),
            transactional=_require(data, "transactional", bool, what),
            personalizations=_optional(data, "personalizations", dict, what),
        )


class EmailBatch:
    """Up to 60 emails sent in one ``/batch/emails`` call.

    Example:
        batch = EmailBatch([EmailData(to="a@example.com", sender="me@example.com",
                                      subject="Hi", html_body="<p>Hi</p>")])
        client.send_emails(batch)
    """

    max_size = MAX_EMAIL_BATCH_SIZE

    def __init__(self, emails: Optional[Iterable[EmailData]] = None):
        emails = list(emails or [])
        if len(emails) > self.max_size:
            raise InvalidBatchSizeError(
                f"Maximum batch size is {self.max_size} emails, got {len(emails)}"
            )
        self.emails: List[EmailData] = emails

    def add_email(self, email: EmailData):
        """Append an email.

        Raises:
            InvalidBatchSizeError: If the batch is already full
        """
        if len(self.emails) >= self.max_size:
            raise InvalidBatchSizeError(
                f"Maximum batch size is {self.max_size} emails"
            )
        self.emails.append(email)

    def __len__(self) -> int:
        return len(self.emails)

    def __iter__(self) -> Iterator[EmailData]:
        return iter(self.emails)

    def __eq__(self, other) -> bool:
        if not isinstance(other, EmailBatch):
            return NotImplemented
        return self.emails == other.emails

    def __repr__(self) -> str:
        return f"EmailBatch({len(self.emails)} emails)"

    def is_empty(self) -> bool:
        return not self.emails

    def to_dict(self) -> Dict[str, Any]:
        return {"emails": [email.to_dict() for email in self.emails]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailBatch":
        emails = _require(data, "emails", list, "email batch")
        return cls(EmailData.from_dict(item) for item in emails)


# =============================================================================
# Broadcasts
# =============================================================================

@dataclass
class ContactData:
    email: str
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"name": self.name, "email": self.email})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContactData":
        return cls(
            email=_require(data, "email", str, "contact"),
            name=_optional(data, "name", str, "contact"),
        )


@dataclass
class BroadcastData:
    """A broadcast campaign.

    Targeting is either by tags (``inclusive_tags`` / ``exclusive_tags``,
    comma-separated) or by ``segment_id``. Both may be set; the API decides
    which one wins.
    """
    name: str
    subject: str
    content: str
    broadcast_type: BroadcastType
    sender: ContactData
    batch_size_per_hour: int
    inclusive_tags: Optional[str] = None
    exclusive_tags: Optional[str] = None
    segment_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "name": self.name,
            "subject": self.subject,
            "content": self.content,
            "type": BroadcastType(self.broadcast_type).value,
            "from": self.sender.to_dict(),
            "inclusive_tags": self.inclusive_tags,
            "exclusive_tags": self.exclusive_tags,
            "segment_id": self.segment_id,
            "batch_size_per_hour": self.batch_size_per_hour,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BroadcastData":
        what = "broadcast"
        return cls(
            name=_require(data, "name", str, what),
            subject=_require(data, "subject", str, what),
            content=_require(data, "content", str, what),
            broadcast_type=_enum_value(
                BroadcastType, _require(data, "type", str, what), "broadcast type"),
            sender=ContactData.from_dict(_require(data, "from", dict, what)),
            batch_size_per_hour=_require(data, "batch_size_per_hour", int, what),
            inclusive_tags=_optional(data, "inclusive_tags", str, what),
            exclusive_tags=_optional(data, "exclusive_tags", str, what),
            segment_id=_optional(data, "segment_id", str, what),
        )


# =============================================================================
# Subscribers
# =============================================================================

@dataclass
class ImportSubscriberData:
    """Subscriber row for ``/batch/subscribers``.

    ``custom_fields`` are flattened into the top-level object next to the
    named attributes. ``tags`` and ``remove_tags`` are comma-separated.
    """
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tags: Optional[str] = None
    remove_tags: Optional[str] = None
    custom_fields: Dict[str, Any] = field(default_factory=dict)

    _named = ("email", "first_name", "last_name", "tags", "remove_tags")

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.custom_fields)
        payload.update(_drop_none({
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "tags": self.tags,
            "remove_tags": self.remove_tags,
        }))
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportSubscriberData":
        what = "subscriber import"
        return cls(
            email=_require(data, "email", str, what),
            first_name=_optional(data, "first_name", str, what),
            last_name=_optional(data, "last_name", str, what),
            tags=_optional(data, "tags", str, what),
            remove_tags=_optional(data, "remove_tags", str, what),
            custom_fields={k: v for k, v in data.items() if k not in cls._named},
        )


@dataclass
class SubscriberAttributes:
    uuid: str
    email: str
    fields: Dict[str, Any] = field(default_factory=dict)
    cached_tag_ids: List[str] = field(default_factory=list)
    unsubscribed_at: Optional[datetime] = None

    @property
    def is_subscribed(self) -> bool:
        return self.unsubscribed_at is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "email": self.email,
            "fields": self.fields,
            "cached_tag_ids": self.cached_tag_ids,
            "unsubscribed_at": format_timestamp(self.unsubscribed_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscriberAttributes":
        what = "subscriber attributes"
        return cls(
            uuid=_require(data, "uuid", str, what),
            email=_require(data, "email", str, what),
            fields=_optional(data, "fields", dict, what) or {},
            cached_tag_ids=[str(t) for t in _optional(data, "cached_tag_ids", list, what) or []],
            unsubscribed_at=parse_timestamp(data.get("unsubscribed_at")),
        )


@dataclass
class SubscriberData:
    """Read-only projection of a subscriber as stored by Bento."""
    id: str
    data_type: str
    attributes: SubscriberAttributes

    @property
    def email(self) -> str:
        return self.attributes.email

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.data_type,
            "attributes": self.attributes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscriberData":
        what = "subscriber"
        return cls(
            id=str(_require(data, "id", (str, int), what)),
            data_type=_require(data, "type", str, what),
            attributes=SubscriberAttributes.from_dict(_require(data, "attributes", dict, what)),
        )


# =============================================================================
# Tags and fields
# =============================================================================

@dataclass
class TagAttributes:
    name: str
    created_at: Optional[str] = None
    discarded_at: Optional[str] = None
    site_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "created_at": self.created_at,
            "discarded_at": self.discarded_at,
            "site_id": self.site_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TagAttributes":
        what = "tag attributes"
        return cls(
            name=_require(data, "name", str, what),
            created_at=_optional(data, "created_at", str, what),
            discarded_at=_optional(data, "discarded_at", str, what),
            site_id=_optional(data, "site_id", int, what),
        )


@dataclass
class TagData:
    id: str
    data_type: str
    attributes: TagAttributes

    @property
    def name(self) -> str:
        return self.attributes.name

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.data_type, "attributes": self.attributes.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TagData":
        what = "tag"
        return cls(
            id=str(_require(data, "id", (str, int), what)),
            data_type=_require(data, "type", str, what),
            attributes=TagAttributes.from_dict(_require(data, "attributes", dict, what)),
        )


@dataclass
class FieldAttributes:
    name: str
    key: str
    whitelisted: Optional[bool] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "key": self.key,
            "whitelisted": self.whitelisted,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldAttributes":
        what = "field attributes"
        return cls(
            name=_require(data, "name", str, what),
            key=_require(data, "key", str, what),
            whitelisted=_optional(data, "whitelisted", bool, what),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class FieldData:
    id: str
    data_type: str
    attributes: FieldAttributes

    @property
    def key(self) -> str:
        return self.attributes.key

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.data_type, "attributes": self.attributes.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldData":
        what = "field"
        return cls(
            id=str(_require(data, "id", (str, int), what)),
            data_type=_require(data, "type", str, what),
            attributes=FieldAttributes.from_dict(_require(data, "attributes", dict, what)),
        )


# =============================================================================
# Experimental endpoints
# =============================================================================

@dataclass
class BlacklistData:
    """Domain and/or IP to look up on public blacklists."""
    domain: Optional[str] = None
    ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"domain": self.domain, "ip": self.ip})


@dataclass
class ValidationData:
    email: str
    name: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "email": self.email,
            "name": self.name,
            "user_agent": self.user_agent,
            "ip": self.ip,
        })


@dataclass
class ValidationResponse:
    valid: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationResponse":
        return cls(valid=_require(data, "valid", bool, "validation response"))
