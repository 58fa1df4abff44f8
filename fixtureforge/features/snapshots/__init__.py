"""Snapshot feature: capture, persist and restore cataloged table content."""

from fixtureforge.features.snapshots.codec import (
    decode_value,
    encode_value,
    snapshot_from_xml,
    snapshot_to_xml,
)
from fixtureforge.features.snapshots.models import Row, Snapshot
from fixtureforge.features.snapshots.store import SnapshotStore

__all__ = [
    "Row",
    "Snapshot",
    "SnapshotStore",
    "decode_value",
    "encode_value",
    "snapshot_from_xml",
    "snapshot_to_xml",
]
