"""
Pre-flight checks run before any request is dispatched.

All functions are pure: they return the accepted value or raise the
matching BentoError subclass. Nothing here touches the network.
"""

import ipaddress
import re
from typing import Optional, Sequence, TypeVar

from .errors import (
    InvalidBatchSizeError,
    InvalidContentError,
    InvalidEmailError,
    InvalidIpAddressError,
    InvalidNameError,
    InvalidRequestError,
    InvalidSegmentIdError,
    InvalidTagsError,
)

T = TypeVar("T")

# local@domain.tld, no whitespace, exactly one "@"
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def validate_email(email: Optional[str]) -> str:
    """Check that *email* looks like an email address.

    Args:
        email: Candidate address

    Returns:
        The address unchanged

    Raises:
        InvalidEmailError: If the address does not match the pattern
    """
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email):
        raise InvalidEmailError(str(email))
    return email


def validate_ip(ip: Optional[str]) -> str:
    """Check that *ip* is an IPv4 or IPv6 literal.

    Raises:
        InvalidIpAddressError: If the value cannot be parsed
    """
    # ip_address() also accepts integers
    if not isinstance(ip, str):
        raise InvalidIpAddressError(str(ip))
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        raise InvalidIpAddressError(str(ip)) from None
    return ip


def validate_batch_size(items: Sequence[T], limit: int) -> Sequence[T]:
    if len(items) > limit:
        raise InvalidBatchSizeError(
            f"Maximum batch size is {limit}, got {len(items)}"
        )
    return items


def _is_blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


def require_tags(tags: Optional[str]) -> str:
    if _is_blank(tags):
        raise InvalidTagsError("Tags are required")
    return tags


def require_segment_id(segment_id: Optional[str]) -> str:
    if _is_blank(segment_id):
        raise InvalidSegmentIdError("Segment ID is required")
    return segment_id


def require_content(content: Optional[str]) -> str:
    if _is_blank(content):
        raise InvalidContentError("Content is required")
    return content


def require_name(name: Optional[str]) -> str:
    if _is_blank(name):
        raise InvalidNameError("Name is required")
    return name


def require_text(value: Optional[str], what: str) -> str:
    """Reject empty strings for required request parameters.

    Args:
        value: Parameter value
        what: Human readable parameter name used in the error message

    Raises:
        InvalidRequestError: If the value is empty or blank
    """
    if _is_blank(value):
        raise InvalidRequestError(f"{what} is required")
    return value


def require_non_empty(items: Sequence[T], what: str) -> Sequence[T]:
    if not items:
        raise InvalidRequestError(f"No {what} provided")
    return items
