# This file is part of instancemd. See LICENSE file for license information.
"""Read instance metadata from an OpenStack config drive.

The config drive is an iso9660 (or, deprecated, vfat) block device labelled
"config-2":
https://docs.openstack.org/nova/latest/user/config-drive.html
"""

import contextlib
import logging
import os
from typing import Callable, Optional

from instancemd import settings, util
from instancemd.sources.errors import (
    DeviceNotFoundError,
    MountError,
    ReadError,
)
from instancemd.sources.metadata import MetadataRecord, parse_metadata
from instancemd.subp import ProcessExecutionError

LOG = logging.getLogger(__name__)


def get_config_drive_path(version: str) -> str:
    return settings.CONFIG_DRIVE_PATH_TEMPLATE.format(version=version)


class ConfigDriveRetriever:
    """Mount the config drive read-only and parse its meta_data.json.

    The temporary mount point and the mount are released on every exit
    path, in reverse order of acquisition, before the document is parsed.
    """

    def __init__(
        self,
        *,
        label: str = settings.CONFIG_DRIVE_LABEL,
        by_label_dir: str = settings.DEV_BY_LABEL_DIR,
        fstypes=settings.CONFIG_DRIVE_FSTYPES,
        find_device: Optional[Callable[[str], Optional[str]]] = None,
        mount: Optional[Callable] = None,
        unmount: Optional[Callable[[str], None]] = None,
    ):
        self.label = label
        self.by_label_dir = by_label_dir
        self.fstypes = tuple(fstypes)
        self._find_device = find_device
        self._mount = mount
        self._unmount = unmount

    def __repr__(self):
        return "%s(label=%r)" % (self.__class__.__name__, self.label)

    def find_device(self) -> str:
        """Return the device path of the config drive.

        :raises DeviceNotFoundError: if no device carries the label.
        """
        dev = os.path.join(self.by_label_dir, self.label)
        if os.path.exists(dev):
            return dev

        find_device = self._find_device or util.find_device_by_label
        try:
            device = find_device(self.label)
        except ProcessExecutionError as e:
            raise DeviceNotFoundError(self.label, e) from e
        if not device:
            raise DeviceNotFoundError(self.label)
        return device

    def _mount_readonly(self, device: str, mountpoint: str):
        mount = self._mount or util.mount
        failure_reason = None
        for mtype in self.fstypes:
            try:
                mount(device, mountpoint, mtype, ("ro",))
                return
            except ProcessExecutionError as e:
                LOG.debug(
                    "Failed to mount device: '%s' with type: '%s': %s",
                    device,
                    mtype,
                    e,
                )
                failure_reason = e
        raise MountError(device, failure_reason)

    def _release_mount(self, mountpoint: str):
        unmount = self._unmount or util.unmount
        try:
            unmount(mountpoint)
        except ProcessExecutionError as e:
            LOG.warning("Failed to unmount %s: %s", mountpoint, e)

    def retrieve(self, version: str) -> MetadataRecord:
        """Read and parse meta_data.json of the given schema version.

        :raises DeviceNotFoundError, MountError, ReadError: on retrieval
            failures.
        :raises ParseError: on an invalid document.
        """
        device = self.find_device()

        with contextlib.ExitStack() as stack:
            try:
                mntdir = stack.enter_context(
                    util.tempdir(rmtree=False, prefix="configdrive")
                )
            except OSError as e:
                raise MountError(device, e) from e
            LOG.debug(
                "Attempting to mount configdrive %s on %s", device, mntdir
            )
            self._mount_readonly(device, mntdir)
            stack.callback(self._release_mount, mntdir)
            LOG.debug("Configdrive mounted on %s", mntdir)

            config_drive_path = get_config_drive_path(version)
            try:
                with open(os.path.join(mntdir, config_drive_path), "rb") as f:
                    data = f.read()
            except OSError as e:
                raise ReadError(config_drive_path, e) from e

        return parse_metadata(data)
