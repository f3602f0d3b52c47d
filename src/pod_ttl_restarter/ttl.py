"""
TTL parsing, resolution and expiry checks
"""

import re
from datetime import datetime, timedelta
from typing import Mapping, Optional

from pod_ttl_restarter import TTL_ANNOTATION
from pod_ttl_restarter.exceptions import InvalidTTLFormatError
from pod_ttl_restarter.models import EffectiveTTL

TTL_PATTERN = re.compile(r"^(?:\d+[smhdw])+$")
TTL_PART = re.compile(r"(\d+)([smhdw])")

FACTORS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
}


def parse_duration(text: str, source: Optional[str] = None) -> timedelta:
    """Parse a TTL such as "24h", "2d" or "1h30m" into a timedelta"""
    if not isinstance(text, str):
        raise InvalidTTLFormatError(repr(text), source)
    value = text.strip()
    if not TTL_PATTERN.match(value):
        raise InvalidTTLFormatError(text, source)

    seconds = 0
    for amount, unit in TTL_PART.findall(value):
        seconds += int(amount) * FACTORS[unit]
    try:
        return timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        # beyond timedelta.max
        raise InvalidTTLFormatError(text, source) from None


def resolve_ttl(
    pod_annotations: Optional[Mapping[str, str]],
    namespace_annotations: Optional[Mapping[str, str]],
    annotation: str = TTL_ANNOTATION,
) -> Optional[EffectiveTTL]:
    """Return the TTL that applies to a pod, or None if the pod is exempt.

    The pod annotation wins whenever it is present, even if it cannot be
    parsed: an invalid pod value raises and never falls back to the
    namespace value.
    """
    pod_annotations = pod_annotations or {}
    namespace_annotations = namespace_annotations or {}

    if annotation in pod_annotations:
        raw = pod_annotations[annotation]
        return EffectiveTTL(parse_duration(raw, "pod"), "pod", raw)

    if annotation in namespace_annotations:
        raw = namespace_annotations[annotation]
        return EffectiveTTL(parse_duration(raw, "namespace"), "namespace", raw)

    return None


def pod_age(now: datetime, creation_timestamp: datetime) -> timedelta:
    return now - creation_timestamp


def is_expired(now: datetime, creation_timestamp: Optional[datetime],
               ttl: timedelta, inclusive: bool = True) -> bool:
    """Check whether a pod created at creation_timestamp has outlived ttl.

    With inclusive=True a pod whose age equals the TTL exactly is expired.
    """
    if creation_timestamp is None:
        return False
    age = pod_age(now, creation_timestamp)
    if inclusive:
        return age >= ttl
    return age > ttl
