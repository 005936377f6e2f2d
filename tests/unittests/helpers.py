# This file is part of instancemd. See LICENSE file for license information.

from contextlib import contextmanager

from instancemd.sources.metadata import DeviceRecord, MetadataRecord

EXAMPLE_METADATA = {
    "uuid": "83679162-1378-4288-a2d4-70e13ec132aa",
    "hostname": "test.novalocal",
    "availability_zone": "nova",
    "name": "test",
    "launch_index": 0,
    "meta": {"role": "webservers"},
    "public_keys": {"mykey": "ssh-rsa AAAA... mykey"},
    "devices": [
        {
            "type": "nic",
            "bus": "pci",
            "address": "0000:00:02.0",
            "mac": "00:00:00:00:00:01",
            "tags": ["nic1"],
        },
        {
            "type": "disk",
            "bus": "virtio",
            "serial": "6df1888b-f373-41cf-b960-3786e60a28ef",
            "address": "0000:00:04.0",
            "path": "/dev/vdb",
            "tags": ["disk1"],
        },
    ],
}

EXAMPLE_RECORD = MetadataRecord(
    uuid="83679162-1378-4288-a2d4-70e13ec132aa",
    hostname="test.novalocal",
    availability_zone="nova",
    devices=(
        DeviceRecord(type="nic", bus="pci", address="0000:00:02.0"),
        DeviceRecord(
            type="disk",
            bus="virtio",
            serial="6df1888b-f373-41cf-b960-3786e60a28ef",
            address="0000:00:04.0",
        ),
    ),
)


@contextmanager
def does_not_raise():
    """Context manager to parametrize tests raising and not raising exceptions

    Note: In python-3.7+, this can be substituted by contextlib.nullcontext
    More info:
    https://docs.pytest.org/en/6.2.x/example/parametrize.html?highlight=does_not_raise#parametrizing-conditional-raising

    Example usage:
    >>> @pytest.mark.parametrize(
    ...     "example_input,expectation",
    ...     [
    ...         (1, does_not_raise()),
    ...         (0, pytest.raises(ZeroDivisionError)),
    ...     ],
    ... )
    ... def test_division(example_input, expectation):
    ...     with expectation:
    ...         assert (0 / example_input) is not None

    """
    yield
