#!/usr/bin/env python3
"""
Stream Data Stores

The engine's single upstream read path: fetch all streams (optionally
filtered by flow direction and/or provider) and fetch all providers.

StreamRepository is the contract; InMemoryStreamStore and JsonStreamStore
are the two implementations shipped with the package. Any failure to
produce data surfaces as UpstreamFailure.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from .json_utils import read_json, write_json
from .models import Provider, Stream, StreamType
from .results import UpstreamFailure

logger = logging.getLogger(__name__)


class StreamRepository(Protocol):
    """
    Protocol for the upstream stream/snapshot collaborator.

    Implementations return immutable point-in-time views; the engine never
    writes through this interface.
    """

    def fetch_streams(
        self,
        stream_type: StreamType | None = None,
        provider_id: str | None = None,
    ) -> list[Stream]:
        """
        Fetch streams with their full snapshot history.

        Args:
            stream_type: Only streams of this flow direction (None = all)
            provider_id: Only streams owned by this provider (None = all)

        Returns:
            Matching streams

        Raises:
            UpstreamFailure: If the underlying storage cannot be read
        """
        ...

    def fetch_providers(self) -> list[Provider]:
        """
        Fetch all providers.

        Raises:
            UpstreamFailure: If the underlying storage cannot be read
        """
        ...


def _filter_streams(
    streams: list[Stream],
    stream_type: StreamType | None,
    provider_id: str | None,
) -> list[Stream]:
    return [
        s
        for s in streams
        if (stream_type is None or s.stream_type == stream_type)
        and (provider_id is None or s.provider_id == provider_id)
    ]


class InMemoryStreamStore:
    """Stream repository over in-memory lists."""

    def __init__(self, streams: list[Stream] | None = None, providers: list[Provider] | None = None):
        self._streams = list(streams or [])
        self._providers = list(providers or [])

    def fetch_streams(
        self,
        stream_type: StreamType | None = None,
        provider_id: str | None = None,
    ) -> list[Stream]:
        """Fetch matching streams."""
        return _filter_streams(self._streams, stream_type, provider_id)

    def fetch_providers(self) -> list[Provider]:
        """Fetch all providers."""
        return list(self._providers)


class JsonStreamStore:
    """
    Stream repository backed by a JSON document on disk.

    Document format:
        {"providers": [{...}], "streams": [{..., "snapshots": [{...}]}]}

    The file is re-read on every fetch so each query sees the current state.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if the data file exists."""
        return self.path.exists()

    def last_modified(self) -> datetime | None:
        """Modification time of the data file, or None if it doesn't exist."""
        if not self.path.exists():
            return None
        return datetime.fromtimestamp(self.path.stat().st_mtime)

    def _load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            raise UpstreamFailure(f"Stream data not found: {self.path}")
        try:
            data = read_json(self.path)
        except (OSError, ValueError) as e:
            raise UpstreamFailure(f"Failed to read stream data from {self.path}: {e}") from e

        if isinstance(data, list):
            return {"streams": data, "providers": []}
        if not isinstance(data, dict):
            raise UpstreamFailure(f"Unexpected stream data format in {self.path}")
        return data

    def fetch_streams(
        self,
        stream_type: StreamType | None = None,
        provider_id: str | None = None,
    ) -> list[Stream]:
        """Fetch matching streams from the data file."""
        document = self._load_document()
        try:
            streams = [Stream.from_dict(s) for s in document.get("streams", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamFailure(f"Invalid stream record in {self.path}: {e}") from e

        logger.debug(f"Loaded {len(streams)} streams from {self.path}")
        return _filter_streams(streams, stream_type, provider_id)

    def fetch_providers(self) -> list[Provider]:
        """Fetch all providers from the data file."""
        document = self._load_document()
        try:
            return [Provider.from_dict(p) for p in document.get("providers", [])]
        except (KeyError, TypeError) as e:
            raise UpstreamFailure(f"Invalid provider record in {self.path}: {e}") from e

    def save(self, streams: list[Stream], providers: list[Provider]) -> None:
        """Write streams and providers to the data file."""
        write_json(
            self.path,
            {
                "providers": [p.to_dict() for p in providers],
                "streams": [s.to_dict() for s in streams],
            },
        )
