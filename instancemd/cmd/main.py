#!/usr/bin/env python3

# This file is part of instancemd. See LICENSE file for license information.
"""Query OpenStack instance metadata from the config drive or metadata
service."""
import argparse
import json
import logging
import sys

import yaml

from instancemd import log, settings, util, version
from instancemd.sources.config_drive import ConfigDriveRetriever
from instancemd.sources.errors import MetadataError
from instancemd.sources.resolver import MetadataResolver

LOG = logging.getLogger(__name__)
NAME = "instance-metadata"

FIELDS = ("uuid", "hostname", "availability_zone", "devices")


def load_config(path: str) -> dict:
    """Read the config file at path merged over the built-in defaults.

    :raises TypeError: if a section or the search order has the wrong type.
    :raises yaml.YAMLError: if the file is not valid YAML.
    """
    cfg = util.mergemanydict([util.read_conf(path), settings.CFG_BUILTIN])
    for section in ("metadata", "logging"):
        if not isinstance(cfg.get(section), dict):
            raise TypeError(
                "Config section '%s' in %s must be a mapping, got %s"
                % (section, path, type(cfg.get(section)).__name__)
            )
    order = cfg["metadata"].get("search_order")
    if not isinstance(order, (str, list)):
        raise TypeError(
            "Config option 'metadata.search_order' in %s must be a string "
            "or a list, got %s" % (path, type(order).__name__)
        )
    return cfg


def query_metadata(cfg: dict, field: str = None) -> str:
    """
    Resolve metadata and render it for output.

    :param cfg: Merged configuration.
    :param field: Optional single field to print instead of the document.
    :return: The text to print.
    """
    md = MetadataResolver.from_config(cfg).resolve().as_dict()
    if field is None:
        return json.dumps(md, indent=1, sort_keys=True)
    value = md[field]
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=1, sort_keys=True)


def query_device() -> str:
    """Return the device path of the config drive."""
    return ConfigDriveRetriever().find_device()


def handle_args(name, args):
    """
    Handle the parsed command-line arguments.

    :param name: The name of the utility.
    :param args: The parsed arguments.
    :return: Process exit code.
    """
    try:
        cfg = load_config(args.config)
    except (OSError, TypeError, yaml.YAMLError) as e:
        sys.stderr.write("Failed to load config %s: %s\n" % (args.config, e))
        return 1
    if getattr(args, "order", None):
        cfg["metadata"]["search_order"] = args.order
    if getattr(args, "md_version", None):
        cfg["metadata"]["version"] = args.md_version

    log.setup_logging(cfg, debug=args.debug)

    LOG.debug(
        "%s called with the following arguments: {"
        "action: %s, config: %s, order: %s}",
        name,
        args.action,
        args.config,
        cfg["metadata"]["search_order"],
    )

    try:
        if args.action == "query":
            output = query_metadata(cfg, field=args.field)
        elif args.action == "device":
            output = query_device()
        else:
            raise ValueError("Unknown action: %s" % args.action)
    except MetadataError as e:
        LOG.debug("Metadata query failed", exc_info=True)
        sys.stderr.write("%s\n" % e.as_description())
        return 1

    sys.stdout.write("%s\n" % output)
    return 0


def get_parser(parser=None):
    """
    Build or extend an arg parser for the instance-metadata utility.

    :param parser: Optional existing ArgumentParser instance representing the
        subcommand.
    :return: ArgumentParser with proper argument configuration.
    """
    if not parser:
        parser = argparse.ArgumentParser(prog=NAME, description=__doc__)

    parser.add_argument(
        "--config",
        default=settings.CLOUD_CONFIG,
        help="Path to the YAML config file (default: %(default)s)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=False,
        help="Show debug level logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + version.version_string(),
    )

    subparsers = parser.add_subparsers(title="Action", dest="action")
    subparsers.required = True

    query_parser = subparsers.add_parser(
        "query",
        help="Print instance metadata as JSON.",
    )
    query_parser.add_argument(
        "--field",
        choices=FIELDS,
        help="Only print this metadata field",
    )
    query_parser.add_argument(
        "--order",
        help=(
            "Comma separated metadata search order, overrides config. "
            "Supported options are %s and %s"
            % (settings.CONFIG_DRIVE_ID, settings.METADATA_SERVICE_ID)
        ),
    )
    query_parser.add_argument(
        "--md-version",
        dest="md_version",
        help="Metadata schema version, overrides config",
    )

    subparsers.add_parser(
        "device",
        help="Print the config drive device path.",
    )

    return parser


def main(sysv_args=None):
    args = get_parser().parse_args(sysv_args)
    return handle_args(NAME, args)


if __name__ == "__main__":
    sys.exit(main())
