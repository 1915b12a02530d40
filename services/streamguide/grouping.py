from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from .types import AvailabilityOffer, DEFAULT_STREAM_TYPE, STREAM_TYPES

logger = logging.getLogger(__name__)

GroupedOffers = Dict[str, List[AvailabilityOffer]]

STREAM_TYPE_LABELS = {
    "subscription": "Streaming",
    "free": "Free",
    "ads": "Free with Ads",
    "rent": "Rent",
    "buy": "Buy",
}


def stream_type_label(stream_type: str) -> str:
    return STREAM_TYPE_LABELS.get(stream_type, stream_type)


def group(offers: Iterable[AvailabilityOffer], *, drop_unknown: bool = False) -> GroupedOffers:
    """Bucket offers by stream type, always returning the five buckets in display order.

    Offers with a stream type outside the fixed vocabulary go to `subscription`,
    unless `drop_unknown` is set, in which case they are discarded.
    """
    groups: OrderedDict[str, List[AvailabilityOffer]] = OrderedDict((t, []) for t in STREAM_TYPES)
    for offer in offers:
        bucket = offer.stream_type or DEFAULT_STREAM_TYPE
        if bucket not in groups:
            if drop_unknown:
                logger.debug("dropping offer %s with stream type %r", offer.service_name, bucket)
                continue
            bucket = DEFAULT_STREAM_TYPE
        groups[bucket].append(offer)
    return groups


def non_empty(groups: GroupedOffers) -> List[tuple[str, List[AvailabilityOffer]]]:
    return [(t, offers) for t, offers in groups.items() if offers]
