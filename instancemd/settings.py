# This file is part of instancemd. See LICENSE file for license information.

# Default configuration file location
CLOUD_CONFIG = "/etc/instance-metadata/instance-metadata.cfg"

# The "2012-08-10" meta_data.json format.
# https://docs.openstack.org/nova/latest/user/config-drive.html
DEFAULT_METADATA_VERSION = "2012-08-10"

# Link-local address documented in the OpenStack networking guide.
# https://docs.openstack.org/nova/latest/admin/networking-nova.html
METADATA_URL_TEMPLATE = (
    "http://169.254.169.254/openstack/{version}/meta_data.json"
)

# Config drive is an iso9660 or vfat (deprecated) drive labelled "config-2".
CONFIG_DRIVE_LABEL = "config-2"
CONFIG_DRIVE_PATH_TEMPLATE = "openstack/{version}/meta_data.json"
CONFIG_DRIVE_FSTYPES = ("iso9660", "vfat")
DEV_BY_LABEL_DIR = "/dev/disk/by-label"

# Search order identifiers
CONFIG_DRIVE_ID = "configDrive"
METADATA_SERVICE_ID = "metadataService"

CFG_BUILTIN = {
    "metadata": {
        "search_order": "%s,%s" % (CONFIG_DRIVE_ID, METADATA_SERVICE_ID),
        "version": DEFAULT_METADATA_VERSION,
        # None blocks until the metadata service answers
        "url_timeout": None,
    },
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s - %(name)s[%(levelname)s]: %(message)s",
    },
}
