# This file is part of instancemd. See LICENSE file for license information.

import contextlib
import copy as obj_copy
import json
import logging
import os
import shutil
import tempfile
from typing import Dict, List, Optional

import yaml

from instancemd import subp

LOG = logging.getLogger(__name__)


def decode_binary(blob, encoding="utf-8"):
    # Converts a binary type into a text type using given encoding.
    if isinstance(blob, str):
        return blob
    return blob.decode(encoding)


def load_json(text, root_types=(dict,)):
    decoded = json.loads(decode_binary(text))
    if not isinstance(decoded, tuple(root_types)):
        expected_types = ", ".join([str(t) for t in root_types])
        raise TypeError(
            "(%s) root types expected, got %s instead"
            % (expected_types, type(decoded))
        )
    return decoded


def mergemanydict(srcs, reverse=False) -> dict:
    """Merge dicts, the first dict in the list wins on conflicting keys.

    Nested dicts are merged recursively.
    """
    if reverse:
        srcs = reversed(srcs)
    merged_cfg: dict = {}
    for cfg in srcs:
        if cfg:
            merged_cfg = _merge_dict(merged_cfg, cfg)
    return merged_cfg


def _merge_dict(base: dict, override: dict) -> dict:
    # keys already in base win
    merged = obj_copy.deepcopy(base)
    for key, value in override.items():
        if key not in merged:
            merged[key] = obj_copy.deepcopy(value)
        elif isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _merge_dict(merged[key], value)
    return merged


def read_conf(fname) -> Dict:
    """Read a YAML configuration file.

    A missing file yields an empty configuration.
    """
    try:
        with open(fname, "r") as stream:
            contents = stream.read()
    except FileNotFoundError:
        LOG.debug("Config file %s not found, using defaults", fname)
        return {}
    cfg = yaml.safe_load(contents)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise TypeError(
            "Config file %s must contain a mapping, got %s"
            % (fname, type(cfg).__name__)
        )
    return cfg


def get_cfg_by_path(yobj, keyp, default=None):
    """Return the value of the item at path C{keyp} in C{yobj}.

    example:
      get_cfg_by_path({'a': {'b': {'num': 4}}}, 'a/b/num') == 4
      get_cfg_by_path({'a': {'b': {'num': 4}}}, 'c/d') == None

    @param yobj: A dictionary.
    @param keyp: A path inside yobj.  it can be a '/' delimited string,
                 or an iterable.
    @param default: The default to return if the path does not exist.
    @return: The value of the item at keyp."
    """
    if isinstance(keyp, str):
        keyp = keyp.split("/")
    cur = yobj
    for tok in keyp:
        if not isinstance(cur, dict) or tok not in cur:
            return default
        cur = cur[tok]
    return cur


@contextlib.contextmanager
def tempdir(rmtree=True, **kwargs):
    """Create a temporary directory, removed when the context exits.

    With rmtree=False only an empty directory is removed, which is what a
    mount point needs: nothing below it may be deleted.
    """
    tdir = tempfile.mkdtemp(**kwargs)
    try:
        yield tdir
    finally:
        if rmtree:
            shutil.rmtree(tdir, ignore_errors=True)
        else:
            try:
                os.rmdir(tdir)
            except OSError as e:
                LOG.warning("Failed removing directory %s: %s", tdir, e)


def generate_blkid_command(label: str, limit: bool = True) -> List[str]:
    """
    Generate the blkid command resolving a filesystem label to a device.

    :param label: The label of the filesystem.
    :param limit: Only report the first matching device.
    :return: A list representing the blkid command.
    """
    if not label:
        raise ValueError("A filesystem label must be specified")

    cmd = ["blkid"]
    if limit:
        cmd.append("-l")
    cmd += ["-t", f"LABEL={label}", "-o", "device"]
    return cmd


def find_device_by_label(label: str) -> Optional[str]:
    """
    Resolve a filesystem label to a device path using blkid.

    :return: The device path, or None when blkid reports no device.
    :raises ProcessExecutionError: when blkid cannot be run or fails.
    """
    out, _err = subp.subp(generate_blkid_command(label))
    device = out.strip()
    if not device:
        return None
    LOG.debug("Device with label '%s' found: %s", label, device)
    return device


def mount(device: str, mountpoint: str, mtype: str, options=("ro",)):
    """
    Mount the device to the mount point.

    :param device: The device to mount.
    :param mountpoint: The mount point directory.
    :param mtype: The filesystem type.
    :param options: Mount options joined into a single -o argument.
    :raises ProcessExecutionError: when mount fails.
    """
    cmd = ["mount"]
    if options:
        cmd += ["-o", ",".join(options)]
    if mtype:
        cmd += ["-t", mtype]
    cmd += [device, mountpoint]
    LOG.debug("running mount command: %s", " ".join(cmd))
    subp.subp(cmd)
    LOG.debug("Mounted %s to %s successfully", device, mountpoint)


def unmount(mountpoint: str):
    """
    Unmount whatever is mounted at the mount point.

    :raises ProcessExecutionError: when umount fails.
    """
    subp.subp(["umount", mountpoint])
    LOG.debug("Unmounted %s", mountpoint)
