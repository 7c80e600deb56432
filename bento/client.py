"""
Bento API Client for subscriber, email and campaign operations.

Provides:
- Subscriber lookup, creation, import and commands
- Transactional/marketing email batches
- Event tracking
- Broadcasts, tags and fields
- Statistics
- Experimental utilities (blacklist, validation, moderation, gender, geolocation)
"""

import logging
from typing import Any, Dict, Iterable, List, Union

from .base_client import BaseAPIClient
from .config import BentoConfig, SDK_VERSION
from .errors import (
    AuthenticationFailedError,
    InvalidBatchSizeError,
    InvalidRequestError,
    UnexpectedResponseError,
)
from .models import (
    BlacklistData,
    BroadcastData,
    CommandData,
    CommandResponse,
    CommandType,
    EmailBatch,
    EmailData,
    EventData,
    FieldData,
    ImportSubscriberData,
    SubscriberData,
    TagData,
    ValidationData,
    ValidationResponse,
)
from .validation import (
    require_content,
    require_name,
    require_non_empty,
    require_segment_id,
    require_tags,
    require_text,
    validate_email,
    validate_ip,
)

logger = logging.getLogger(__name__)

TAG_COMMANDS = (CommandType.ADD_TAG, CommandType.ADD_TAG_VIA_EVENT, CommandType.REMOVE_TAG)


class BentoClient(BaseAPIClient):
    """Client for Bento API interactions.

    Every request carries the publishable/secret key pair as HTTP Basic
    auth and the site UUID as ``site_uuid`` query parameter.

    Inputs are validated before anything is sent. A batch with a single
    invalid item is rejected as a whole.

    Sends (emails, events, broadcasts) are only retried on 429. If such a
    call times out, the server may still have accepted it: these calls are
    at-least-once from the caller's point of view.
    """

    def __init__(self, config: BentoConfig):
        """Initialize Bento client.

        Args:
            config: BentoConfig with credentials and settings
        """
        super().__init__(config)

        # Basic Auth: publishable key as username, secret key as password
        self.session.auth = (config.publishable_key, config.secret_key)
        self.session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': f'bento-python-{SDK_VERSION}-{config.site_uuid}',
        })

    def _default_params(self) -> Dict[str, Any]:
        return {'site_uuid': self.config.site_uuid}

    def verify_token(self) -> bool:
        """Verify that the API keys are valid.

        Returns:
            True if the keys are accepted, False otherwise

        Raises:
            BentoError: For non-auth related errors
        """
        try:
            self._make_request('GET', '/fetch/tags')
            return True
        except AuthenticationFailedError:
            return False

    # =========================================================================
    # Response helpers
    # =========================================================================

    def _json_object(self, response, what: str) -> Dict[str, Any]:
        data = self._parse_json(response)
        if not isinstance(data, dict):
            raise UnexpectedResponseError(
                f"Expected JSON object for {what}, got {type(data).__name__}"
            )
        return data

    def _data(self, response, what: str) -> Any:
        """Return the ``data`` member of a ``{"data": ...}`` envelope."""
        payload = self._json_object(response, what)
        if 'data' not in payload:
            raise UnexpectedResponseError(f"Missing 'data' in {what} response")
        return payload['data']

    def _data_list(self, response, what: str) -> List[Dict[str, Any]]:
        items = self._data(response, what)
        if not isinstance(items, list):
            raise UnexpectedResponseError(f"Expected a list of {what}")
        return items

    def _batch_result(self, response, submitted: int, what: str) -> CommandResponse:
        """Read ``{"results": n, "failed": m}``.

        An empty 2xx body means every submitted item was accepted.

        Raises:
            UnexpectedResponseError: If any item failed server side
        """
        data = self._parse_json(response)
        if data is None:
            return CommandResponse(results=submitted, failed=0)

        result = CommandResponse.from_dict(data)
        if result.failed > 0:
            logger.error(f"{what} partially failed: {result.results} succeeded, {result.failed} failed")
            raise UnexpectedResponseError(
                f"{what} partially failed: {result.results} succeeded, {result.failed} failed"
            )
        return result

    # =========================================================================
    # Subscriber Operations
    # =========================================================================

    def find_subscriber(self, email: str) -> SubscriberData:
        """Look up a subscriber by email.

        Args:
            email: Subscriber email address

        Returns:
            SubscriberData with uuid, fields, tag ids and subscription state

        Example:
            subscriber = client.find_subscriber('jane@example.com')
            print(subscriber.attributes.cached_tag_ids)
        """
        validate_email(email)
        response = self._make_request('GET', '/fetch/subscribers', params={'email': email})
        return SubscriberData.from_dict(self._data(response, 'subscriber'))

    def create_subscriber(self, email: str) -> SubscriberData:
        """Create a subscriber with just an email address.

        Further attributes can be set with commands or an import.
        """
        validate_email(email)
        response = self._make_request(
            'POST',
            '/fetch/subscribers',
            json={'subscriber': {'email': email}},
        )
        return SubscriberData.from_dict(self._data(response, 'subscriber'))

    def import_subscribers(self, subscribers: List[ImportSubscriberData]) -> CommandResponse:
        """Create or update several subscribers with full data.

        Args:
            subscribers: Rows to import, custom fields included

        Returns:
            CommandResponse with the number of imported rows

        Raises:
            InvalidEmailError: If any row has an invalid email
            InvalidTagsError: If a row sets ``tags``/``remove_tags`` to a blank string
            UnexpectedResponseError: If the API reports failed rows
        """
        require_non_empty(subscribers, 'subscribers')
        for subscriber in subscribers:
            validate_email(subscriber.email)
            if subscriber.tags is not None:
                require_tags(subscriber.tags)
            if subscriber.remove_tags is not None:
                require_tags(subscriber.remove_tags)

        response = self._make_request(
            'POST',
            '/batch/subscribers',
            json={'subscribers': [s.to_dict() for s in subscribers]},
        )
        return self._batch_result(response, len(subscribers), 'Import')

    # =========================================================================
    # Command Operations
    # =========================================================================

    def subscriber_command(self, commands: List[CommandData]) -> CommandResponse:
        """Execute commands (tags, fields, subscription, email change) on subscribers.

        Args:
            commands: Commands to send in one batch

        Returns:
            CommandResponse, ``results`` is the number of accepted commands

        Raises:
            InvalidRequestError: No commands, or a command without query
            InvalidEmailError: Invalid target email (or new email for change_email)
            InvalidTagsError: Tag command with a blank tag
            UnexpectedResponseError: If the API reports failed commands

        Example:
            client.subscriber_command([
                CommandData(CommandType.ADD_TAG, 'jane@example.com', 'customer'),
                CommandData(CommandType.ADD_FIELD, 'jane@example.com', 'plan'),
            ])
        """
        require_non_empty(commands, 'commands')
        for command in commands:
            validate_email(command.email)
            try:
                command_type = CommandType(command.command)
            except ValueError:
                raise InvalidRequestError(f"Unknown command type: {command.command!r}") from None
            if command_type in TAG_COMMANDS:
                require_tags(command.query)
            elif command_type == CommandType.CHANGE_EMAIL:
                validate_email(command.query)
            else:
                require_text(command.query, 'Command query')

        response = self._make_request(
            'POST',
            '/fetch/commands',
            json={'command': [c.to_dict() for c in commands]},
        )
        return self._batch_result(response, len(commands), 'Command execution')

    def add_tag(self, email: str, tag: str) -> CommandResponse:
        return self.subscriber_command([CommandData(CommandType.ADD_TAG, email, tag)])

    def remove_tag(self, email: str, tag: str) -> CommandResponse:
        return self.subscriber_command([CommandData(CommandType.REMOVE_TAG, email, tag)])

    def change_email(self, old_email: str, new_email: str) -> CommandResponse:
        return self.subscriber_command([CommandData(CommandType.CHANGE_EMAIL, old_email, new_email)])

    # =========================================================================
    # Email Operations
    # =========================================================================

    def send_emails(self, emails: Union[EmailBatch, Iterable[EmailData]]) -> int:
        """Send a batch of up to 60 emails.

        Args:
            emails: EmailBatch, or any iterable of EmailData

        Returns:
            Number of emails queued by the API

        Raises:
            InvalidBatchSizeError: More than 60 emails
            InvalidRequestError: Empty batch
            InvalidEmailError: Invalid recipient or sender

        Note:
            Not retried on timeouts. A timed out call may still have been
            queued, so retrying it yourself can send duplicates.
        """
        batch = emails if isinstance(emails, EmailBatch) else EmailBatch(emails)
        if len(batch) > EmailBatch.max_size:
            raise InvalidBatchSizeError(
                f"Maximum batch size is {EmailBatch.max_size} emails, got {len(batch)}"
            )
        require_non_empty(batch.emails, 'emails')
        for email in batch:
            validate_email(email.to)
            validate_email(email.sender)
            require_text(email.subject, 'Subject')
            require_content(email.html_body)

        response = self._make_request('POST', '/batch/emails', json=batch.to_dict(), idempotent=False)

        data = self._parse_json(response)
        if data is None:
            return len(batch)
        if not isinstance(data, dict) or isinstance(data.get('results'), bool) \
                or not isinstance(data.get('results'), int):
            raise UnexpectedResponseError(f"Unexpected email batch response: {data!r}")
        return data['results']

    # =========================================================================
    # Event Operations
    # =========================================================================

    def track_events(self, events: List[EventData]) -> CommandResponse:
        """Record events (purchases, page views, custom types) for subscribers.

        Not retried on timeouts, see send_emails.
        """
        require_non_empty(events, 'events')
        for event in events:
            validate_email(event.email)
            require_text(event.event_type, 'Event type')

        response = self._make_request(
            'POST',
            '/batch/events',
            json={'events': [e.to_dict() for e in events]},
            idempotent=False,
        )
        return self._batch_result(response, len(events), 'Event tracking')

    def track_event(self, event: EventData) -> CommandResponse:
        return self.track_events([event])

    # =========================================================================
    # Broadcast Operations
    # =========================================================================

    def get_broadcasts(self) -> List[BroadcastData]:
        """Fetch all broadcasts."""
        response = self._make_request('GET', '/fetch/broadcasts')
        payload = self._json_object(response, 'broadcasts')
        items = payload.get('broadcasts', payload.get('data'))
        if not isinstance(items, list):
            raise UnexpectedResponseError("Expected a list of broadcasts")
        return [BroadcastData.from_dict(item) for item in items]

    def create_broadcasts(self, broadcasts: List[BroadcastData]):
        """Create broadcasts.

        Raises:
            InvalidNameError: Blank broadcast name
            InvalidContentError: Blank content
            InvalidTagsError: Tag filter set to a blank string
            InvalidSegmentIdError: Segment set to a blank string
            InvalidEmailError: Invalid sender
            InvalidBatchSizeError: batch_size_per_hour not positive
        """
        require_non_empty(broadcasts, 'broadcasts')
        for broadcast in broadcasts:
            require_name(broadcast.name)
            require_text(broadcast.subject, 'Subject')
            require_content(broadcast.content)
            validate_email(broadcast.sender.email)
            if broadcast.inclusive_tags is not None:
                require_tags(broadcast.inclusive_tags)
            if broadcast.exclusive_tags is not None:
                require_tags(broadcast.exclusive_tags)
            if broadcast.segment_id is not None:
                require_segment_id(broadcast.segment_id)
            if broadcast.batch_size_per_hour <= 0:
                raise InvalidBatchSizeError("Batch size per hour must be positive")

        self._make_request(
            'POST',
            '/batch/broadcasts',
            json={'broadcasts': [b.to_dict() for b in broadcasts]},
            idempotent=False,
        )

    # =========================================================================
    # Tag and Field Operations
    # =========================================================================

    def get_tags(self) -> List[TagData]:
        response = self._make_request('GET', '/fetch/tags')
        return [TagData.from_dict(item) for item in self._data_list(response, 'tags')]

    def create_tag(self, name: str) -> TagData:
        require_tags(name)
        response = self._make_request('POST', '/fetch/tags', json={'tag': {'name': name}})
        return TagData.from_dict(self._data(response, 'tag'))

    def get_fields(self) -> List[FieldData]:
        response = self._make_request('GET', '/fetch/fields')
        return [FieldData.from_dict(item) for item in self._data_list(response, 'fields')]

    def create_field(self, key: str) -> FieldData:
        """Create a custom field.

        Args:
            key: Field key, e.g. ``company_name``
        """
        require_text(key, 'Field key')
        response = self._make_request('POST', '/fetch/fields', json={'field': {'key': key}})
        return FieldData.from_dict(self._data(response, 'field'))

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_site_stats(self) -> Dict[str, Any]:
        response = self._make_request('GET', '/stats/site')
        return self._json_object(response, 'site stats')

    def get_segment_stats(self, segment_id: str) -> Dict[str, Any]:
        require_segment_id(segment_id)
        response = self._make_request('GET', '/stats/segment', params={'segment_id': segment_id})
        return self._json_object(response, 'segment stats')

    def get_report_stats(self, report_id: str) -> Dict[str, Any]:
        require_text(report_id, 'Report ID')
        response = self._make_request('GET', '/stats/report', params={'report_id': report_id})
        return self._json_object(response, 'report stats')

    # =========================================================================
    # Experimental Operations
    # =========================================================================

    def get_blacklist_status(self, data: BlacklistData) -> Dict[str, Any]:
        """Check whether a domain or IP address is on a public blacklist.

        Args:
            data: BlacklistData with a domain, an IP, or both

        Raises:
            InvalidRequestError: Neither domain nor IP given
            InvalidIpAddressError: IP is not a valid IPv4/IPv6 literal
        """
        if not data.domain and not data.ip:
            raise InvalidRequestError("Either domain or IP is required")
        if data.ip is not None:
            validate_ip(data.ip)

        response = self._make_request('GET', '/experimental/blacklist.json', params=data.to_dict())
        return self._json_object(response, 'blacklist status')

    def validate_email(self, data: ValidationData) -> ValidationResponse:
        """Ask Bento whether an email address looks legitimate.

        Name, user agent and IP improve the verdict when known.
        """
        validate_email(data.email)
        if data.ip is not None:
            validate_ip(data.ip)

        response = self._make_request('POST', '/experimental/validation', json=data.to_dict())
        return ValidationResponse.from_dict(self._json_object(response, 'validation'))

    def get_content_moderation(self, content: str) -> Dict[str, Any]:
        require_content(content)
        response = self._make_request(
            'POST', '/experimental/content_moderation', params={'content': content}
        )
        return self._json_object(response, 'content moderation')

    def get_gender(self, name: str) -> Dict[str, Any]:
        """Guess gender from a first name."""
        require_name(name)
        response = self._make_request('POST', '/experimental/gender', params={'name': name})
        return self._json_object(response, 'gender')

    def geolocate_ip(self, ip: str) -> Dict[str, Any]:
        validate_ip(ip)
        response = self._make_request('GET', '/experimental/geolocation', params={'ip': ip})
        return self._json_object(response, 'geolocation')
