# This file is part of instancemd. See LICENSE file for license information.

from typing import Any, Dict, Optional

from instancemd import settings, version


class MetadataError(Exception):
    def __init__(
        self,
        reason: str,
        *,
        supporting_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason

        if supporting_data:
            self.supporting_data = dict(supporting_data)
        else:
            self.supporting_data = {}

    def as_description(self, *, delimiter: str = "|") -> str:
        data = [
            f"reason={self.reason}",
            f"agent=instance-metadata/{version.version_string()}",
        ]
        data += [f"{k}={v}" for k, v in self.supporting_data.items()]
        return f"METADATA_ERROR: {delimiter.join(data)}"

    def __eq__(self, other) -> bool:
        return (
            type(self) is type(other)
            and self.reason == other.reason
            and self.supporting_data == other.supporting_data
        )

    __hash__ = Exception.__hash__

    def __str__(self) -> str:
        return self.reason

    def __repr__(self) -> str:
        return self.as_description()


class ParseError(MetadataError):
    pass


class DecodeError(ParseError):
    def __init__(self, detail: str) -> None:
        super().__init__("error decoding metadata: %s" % detail)
        self.supporting_data["detail"] = detail


class MissingIdentifierError(ParseError):
    def __init__(self) -> None:
        super().__init__("invalid OpenStack metadata, got empty uuid")


class RetrievalError(MetadataError):
    pass


class DeviceNotFoundError(RetrievalError):
    def __init__(self, label: str, cause: Optional[Exception] = None) -> None:
        if cause is not None:
            reason = "unable to run blkid for label %s: %s" % (label, cause)
        else:
            reason = "no device found with label %s" % label
        super().__init__(reason)
        self.supporting_data["label"] = label


class MountError(RetrievalError):
    def __init__(self, device: str, cause: Exception) -> None:
        super().__init__(
            "error mounting configdrive %s: %s" % (device, cause)
        )
        self.supporting_data["device"] = device


class ReadError(RetrievalError):
    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(
            "error reading %s on config drive: %s" % (path, cause)
        )
        self.supporting_data["path"] = path


class NetworkError(RetrievalError):
    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__("error fetching %s: %s" % (url, cause))
        self.supporting_data["url"] = url


class HTTPStatusError(RetrievalError):
    def __init__(
        self, url: str, status_code: int, status: Optional[str] = None
    ) -> None:
        status_text = ("%s %s" % (status_code, status or "")).strip()
        super().__init__(
            "unexpected status code when reading metadata from %s: %s"
            % (url, status_text)
        )
        self.status_code = status_code
        self.supporting_data["url"] = url
        self.supporting_data["status_code"] = status_code


class ResolutionError(MetadataError):
    pass


class UnknownChannelError(ResolutionError, ValueError):
    def __init__(self, channel: str) -> None:
        super().__init__(
            "%s is not a valid metadata search order option. "
            "Supported options are %s and %s"
            % (
                channel,
                settings.CONFIG_DRIVE_ID,
                settings.METADATA_SERVICE_ID,
            )
        )
        self.supporting_data["channel"] = channel
