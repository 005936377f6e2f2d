# This file is part of instancemd. See LICENSE file for license information.
"""OpenStack meta_data.json document model and parser.

Assumes the "2012-08-10" meta_data.json format:
https://docs.openstack.org/nova/latest/user/config-drive.html

Only the fields below are consumed, the rest of the document is ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from instancemd import util
from instancemd.sources.errors import DecodeError, MissingIdentifierError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceRecord:
    """A single entry of the 'devices' list.

    There are multiple device types; a single structure covers them all.
    """

    type: str
    bus: Optional[str] = None
    serial: Optional[str] = None
    address: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        obj = {"type": self.type}
        for key in ("bus", "serial", "address"):
            value = getattr(self, key)
            if value is not None:
                obj[key] = value
        return obj


@dataclass(frozen=True)
class MetadataRecord:
    uuid: str
    hostname: str = ""
    availability_zone: str = ""
    devices: Tuple[DeviceRecord, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "hostname": self.hostname,
            "availability_zone": self.availability_zone,
            "devices": [d.as_dict() for d in self.devices],
        }


def _get_str(obj: dict, key: str, where: str, optional=False):
    value = obj.get(key)
    if value is None:
        return None if optional else ""
    if not isinstance(value, str):
        raise DecodeError(
            "%s%s must be a string, got %s"
            % (where, key, type(value).__name__)
        )
    return value


def _parse_device(index: int, raw) -> DeviceRecord:
    where = "devices[%d]." % index
    if not isinstance(raw, dict):
        raise DecodeError(
            "devices[%d] must be an object, got %s"
            % (index, type(raw).__name__)
        )
    if "type" not in raw:
        raise DecodeError("%stype is required" % where)
    return DeviceRecord(
        type=_get_str(raw, "type", where),
        bus=_get_str(raw, "bus", where, optional=True),
        serial=_get_str(raw, "serial", where, optional=True),
        address=_get_str(raw, "address", where, optional=True),
    )


def parse_metadata(stream) -> MetadataRecord:
    """Parse a meta_data.json document into a MetadataRecord.

    :param stream: file object, bytes or str holding one JSON object.
    :raises DecodeError: on malformed JSON or unexpected document shape.
    :raises MissingIdentifierError: when uuid is absent or empty.
    """
    if hasattr(stream, "read"):
        stream = stream.read()

    try:
        data = util.load_json(stream)
    except (TypeError, ValueError) as e:
        # UnicodeDecodeError and json.JSONDecodeError are ValueErrors
        raise DecodeError(str(e)) from e

    raw_devices = data.get("devices")
    if raw_devices is None:
        raw_devices = []
    elif not isinstance(raw_devices, list):
        raise DecodeError(
            "devices must be a list, got %s" % type(raw_devices).__name__
        )

    md = MetadataRecord(
        uuid=_get_str(data, "uuid", ""),
        hostname=_get_str(data, "hostname", ""),
        availability_zone=_get_str(data, "availability_zone", ""),
        devices=tuple(
            _parse_device(i, raw) for i, raw in enumerate(raw_devices)
        ),
    )
    if not md.uuid:
        raise MissingIdentifierError()

    LOG.debug("Parsed metadata for instance %s", md.uuid)
    return md
