"""
Bento API Client Package

Client implementation for the Bento email marketing API.

Main exports:
- BentoClient: Client for the Bento REST API
- BentoConfig: Configuration dataclass
- Request/response dataclasses (EmailData, EmailBatch, CommandData, ...)
- BentoError and one subclass per error kind

StreamlitBentoClient lives in ``bento.streamlit_wrappers`` and needs the
``streamlit`` extra.
"""

from .client import BentoClient
from .config import BentoConfig, SDK_VERSION
from .errors import (
    AuthenticationFailedError,
    BentoError,
    HttpClientError,
    InvalidBatchSizeError,
    InvalidConfigError,
    InvalidContentError,
    InvalidEmailError,
    InvalidIpAddressError,
    InvalidNameError,
    InvalidRequestError,
    InvalidSegmentIdError,
    InvalidTagsError,
    RateLimitError,
    UnexpectedResponseError,
)
from .models import (
    MAX_EMAIL_BATCH_SIZE,
    BlacklistData,
    BroadcastData,
    BroadcastType,
    CommandData,
    CommandResponse,
    CommandType,
    ContactData,
    EmailBatch,
    EmailData,
    EventData,
    FieldAttributes,
    FieldData,
    ImportSubscriberData,
    SubscriberAttributes,
    SubscriberData,
    TagAttributes,
    TagData,
    ValidationData,
    ValidationResponse,
)

__version__ = SDK_VERSION

__all__ = [
    'BentoClient',
    'BentoConfig',
    'BentoError',
    'AuthenticationFailedError',
    'HttpClientError',
    'InvalidBatchSizeError',
    'InvalidConfigError',
    'InvalidContentError',
    'InvalidEmailError',
    'InvalidIpAddressError',
    'InvalidNameError',
    'InvalidRequestError',
    'InvalidSegmentIdError',
    'InvalidTagsError',
    'RateLimitError',
    'UnexpectedResponseError',
    'MAX_EMAIL_BATCH_SIZE',
    'BlacklistData',
    'BroadcastData',
    'BroadcastType',
    'CommandData',
    'CommandResponse',
    'CommandType',
    'ContactData',
    'EmailBatch',
    'EmailData',
    'EventData',
    'FieldAttributes',
    'FieldData',
    'ImportSubscriberData',
    'SubscriberAttributes',
    'SubscriberData',
    'TagAttributes',
    'TagData',
    'ValidationData',
    'ValidationResponse',
]
