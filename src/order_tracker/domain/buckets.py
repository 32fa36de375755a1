"""
order_tracker.domain.buckets

Workflow buckets (dashboard tabs) and the fixed status-to-bucket partition.

Responsibilities:
- Define which raw order statuses belong to which bucket.
- Project an order collection onto a single bucket, and count per bucket.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from order_tracker.domain.models import Order
from order_tracker.errors import ConfigError


class Bucket(enum.StrEnum):
    created = "created"
    processed = "processed"
    dispersed = "dispersed"
    completed = "completed"
    canceled = "canceled"


@dataclass(frozen=True, slots=True)
class BucketSpec:
    bucket: Bucket
    label: str
    statuses: frozenset[str]


# Tab order is the declaration order.
BUCKETS: dict[Bucket, BucketSpec] = {
    Bucket.created: BucketSpec(Bucket.created, "Created", frozenset({"pending", "on-hold"})),
    Bucket.processed: BucketSpec(Bucket.processed, "Processed", frozenset({"processing"})),
    Bucket.dispersed: BucketSpec(Bucket.dispersed, "Dispersed", frozenset({"dispatched"})),
    Bucket.completed: BucketSpec(Bucket.completed, "Completed", frozenset({"completed"})),
    Bucket.canceled: BucketSpec(Bucket.canceled, "Canceled", frozenset({"cancelled"})),
}

DEFAULT_BUCKET = Bucket.created


def _build_status_index(buckets: Iterable[BucketSpec]) -> dict[str, Bucket]:
    index: dict[str, Bucket] = {}
    for spec in buckets:
        for status in spec.statuses:
            if status in index:
                raise ConfigError(
                    f"status {status!r} mapped to both {index[status]} and {spec.bucket}"
                )
            index[status] = spec.bucket
    return index


STATUS_TO_BUCKET: dict[str, Bucket] = _build_status_index(BUCKETS.values())


def parse_bucket(bucket_id: str | Bucket) -> Bucket:
    if isinstance(bucket_id, Bucket):
        return bucket_id
    try:
        return Bucket(str(bucket_id).strip().lower())
    except ValueError as e:
        raise ConfigError(f"unknown bucket: {bucket_id!r}") from e


def bucket_for(status: str | None) -> Bucket | None:
    # Unknown statuses belong to no bucket; they are invisible rather than fatal.
    if status is None:
        return None
    return STATUS_TO_BUCKET.get(status)


def classify(orders: Iterable[Order], bucket_id: str | Bucket) -> list[Order]:
    bucket = parse_bucket(bucket_id)
    return [o for o in orders if bucket_for(o.status) is bucket]


def count_by_bucket(orders: Iterable[Order]) -> dict[Bucket, int]:
    counts = {bucket: 0 for bucket in BUCKETS}
    for order in orders:
        bucket = bucket_for(order.status)
        if bucket is not None:
            counts[bucket] += 1
    return counts


# --- Module Notes -----------------------------------------------------------
# The partition is validated at import: a status listed under two buckets raises
# ConfigError before the service can start.
