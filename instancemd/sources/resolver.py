# This file is part of instancemd. See LICENSE file for license information.
"""Resolve instance metadata by trying each configured channel in order.

Metadata is fixed for the current host, so the first record found is cached
for the lifetime of the cache, by default for the whole process.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from instancemd import settings, util
from instancemd.sources.config_drive import ConfigDriveRetriever
from instancemd.sources.errors import (
    MetadataError,
    ResolutionError,
    UnknownChannelError,
)
from instancemd.sources.metadata import MetadataRecord
from instancemd.sources.metadata_service import MetadataServiceRetriever

LOG = logging.getLogger(__name__)


class Channel(enum.Enum):
    CONFIG_DRIVE = settings.CONFIG_DRIVE_ID
    METADATA_SERVICE = settings.METADATA_SERVICE_ID

    @classmethod
    def from_id(cls, ident: Union[str, "Channel"]) -> "Channel":
        if isinstance(ident, cls):
            return ident
        if isinstance(ident, str):
            ident = ident.strip()
        try:
            return cls(ident)
        except ValueError:
            raise UnknownChannelError(ident) from None


@dataclass(frozen=True)
class SearchOrder:
    channels: Tuple[Channel, ...]

    @classmethod
    def parse(cls, order: str) -> "SearchOrder":
        """Parse a comma separated list of channel identifiers.

        :raises UnknownChannelError: on the first unsupported identifier.
        """
        return cls.from_channels(order.split(","))

    @classmethod
    def from_channels(
        cls, channels: Iterable[Union[str, Channel]]
    ) -> "SearchOrder":
        """Build an order from Channels or channel identifiers.

        :raises UnknownChannelError: on the first unsupported identifier.
        """
        if isinstance(channels, str):
            return cls.parse(channels)
        return cls(tuple(Channel.from_id(c) for c in channels))

    def __iter__(self) -> Iterator[Channel]:
        return iter(self.channels)

    def __len__(self) -> int:
        return len(self.channels)

    def __str__(self) -> str:
        return ",".join(c.value for c in self.channels)


class MetadataCache:
    """Single-assignment cell holding the resolved MetadataRecord.

    Concurrent first callers of get_or_populate serialise on a lock so only
    one resolution runs. A failed resolution stores nothing.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._record: Optional[MetadataRecord] = None

    @property
    def is_populated(self) -> bool:
        return self._record is not None

    def get(self) -> Optional[MetadataRecord]:
        return self._record

    def get_or_populate(
        self, factory: Callable[[], MetadataRecord]
    ) -> MetadataRecord:
        record = self._record
        if record is not None:
            return record
        with self._lock:
            if self._record is None:
                self._record = factory()
            return self._record


_DEFAULT_CACHE = MetadataCache()


def get_default_cache() -> MetadataCache:
    return _DEFAULT_CACHE


def default_retrievers(url_timeout: Optional[float] = None) -> Dict:
    return {
        Channel.CONFIG_DRIVE: ConfigDriveRetriever(),
        Channel.METADATA_SERVICE: MetadataServiceRetriever(
            timeout=url_timeout
        ),
    }


class MetadataResolver:
    def __init__(
        self,
        order: Union[str, Iterable[Union[str, Channel]]],
        *,
        cache: Optional[MetadataCache] = None,
        retrievers: Optional[Dict] = None,
        version: str = settings.DEFAULT_METADATA_VERSION,
    ):
        if isinstance(order, SearchOrder):
            self.order = order
        else:
            self.order = SearchOrder.from_channels(order)
        self.cache = cache if cache is not None else get_default_cache()
        if retrievers is None:
            retrievers = default_retrievers()
        self.retrievers = retrievers
        self.version = version

    @classmethod
    def from_config(
        cls, cfg: dict, *, cache: Optional[MetadataCache] = None
    ) -> "MetadataResolver":
        md_cfg = util.mergemanydict(
            [
                util.get_cfg_by_path(cfg, ["metadata"], {}),
                settings.CFG_BUILTIN["metadata"],
            ]
        )
        return cls(
            md_cfg["search_order"],
            cache=cache,
            retrievers=default_retrievers(md_cfg.get("url_timeout")),
            version=md_cfg["version"],
        )

    def resolve(self) -> MetadataRecord:
        """Return the cached record, resolving it on first use.

        :raises MetadataError: the error of the last channel tried when
            every channel failed.
        """
        return self.cache.get_or_populate(self._resolve)

    def _resolve(self) -> MetadataRecord:
        if not self.order:
            raise ResolutionError("empty metadata search order")

        error = None
        for channel in self.order:
            retriever = self.retrievers.get(channel)
            if retriever is None:
                raise ResolutionError(
                    "no retriever configured for %s" % channel.value
                )
            LOG.debug("Trying metadata channel %s", channel.value)
            try:
                md = retriever.retrieve(self.version)
            except MetadataError as e:
                LOG.debug("Metadata channel %s failed: %s", channel.value, e)
                error = e
                continue
            LOG.debug(
                "Found metadata for instance %s via %s", md.uuid, channel.value
            )
            return md

        LOG.warning("Unable to read metadata from %s: %s", self.order, error)
        raise error


def get_metadata(
    order: Union[str, Iterable[Channel]],
    *,
    cache: Optional[MetadataCache] = None,
) -> MetadataRecord:
    """Resolve metadata using the comma separated channel order."""
    return MetadataResolver(order, cache=cache).resolve()
