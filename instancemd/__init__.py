# This file is part of instancemd. See LICENSE file for license information.
"""Instance metadata retrieval for OpenStack guests."""

from instancemd.sources.errors import MetadataError
from instancemd.sources.metadata import (
    DeviceRecord,
    MetadataRecord,
    parse_metadata,
)
from instancemd.sources.resolver import (
    Channel,
    MetadataCache,
    MetadataResolver,
    SearchOrder,
    get_metadata,
)

__all__ = [
    "Channel",
    "DeviceRecord",
    "MetadataCache",
    "MetadataError",
    "MetadataRecord",
    "MetadataResolver",
    "SearchOrder",
    "get_metadata",
    "parse_metadata",
]
