# This file is part of instancemd. See LICENSE file for license information.
"""Read instance metadata from the OpenStack metadata service."""

import logging
from typing import Optional

import requests

from instancemd import settings, url_helper
from instancemd.sources.errors import HTTPStatusError, NetworkError
from instancemd.sources.metadata import MetadataRecord, parse_metadata

LOG = logging.getLogger(__name__)


def get_metadata_url(version: str) -> str:
    return settings.METADATA_URL_TEMPLATE.format(version=version)


class MetadataServiceRetriever:
    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session

    def __repr__(self):
        return "%s(timeout=%r)" % (self.__class__.__name__, self.timeout)

    def retrieve(self, version: str) -> MetadataRecord:
        """Fetch and parse meta_data.json of the given schema version.

        :raises NetworkError: on transport failure.
        :raises HTTPStatusError: on any status other than 200.
        :raises ParseError: on an invalid document.
        """
        metadata_url = get_metadata_url(version)
        LOG.debug("Attempting to fetch metadata from %s", metadata_url)
        try:
            response = url_helper.readurl(
                metadata_url,
                timeout=self.timeout,
                check_status=False,
                session=self.session,
            )
        except url_helper.UrlError as e:
            raise NetworkError(metadata_url, e.cause) from e

        if not response.ok():
            raise HTTPStatusError(metadata_url, response.code, response.reason)

        return parse_metadata(response.contents)
