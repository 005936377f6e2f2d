# This file is part of instancemd. See LICENSE file for license information.

import logging
from http.client import OK
from typing import Dict, Optional

import requests

from instancemd import version

LOG = logging.getLogger(__name__)


class UrlError(IOError):
    def __init__(self, cause, code=None, headers=None, url=None):
        IOError.__init__(self, str(cause))
        self.cause = cause
        self.code = code
        self.headers = headers
        if self.headers is None:
            self.headers = {}
        self.url = url


class UrlResponse:
    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def contents(self) -> bytes:
        if self._response.content is None:
            return b""
        return self._response.content

    @property
    def url(self) -> str:
        return self._response.url

    @property
    def code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason

    @property
    def headers(self):
        return self._response.headers

    def ok(self, *args, **kwargs) -> bool:
        return self.code == OK

    def __str__(self):
        return self.contents.decode("utf-8", errors="replace")


def default_user_agent() -> str:
    return "instance-metadata/%s" % version.version_string()


def readurl(
    url,
    *,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    check_status: bool = True,
    session: Optional[requests.Session] = None,
) -> UrlResponse:
    """Fetch a url with a single GET request.

    :param url: Url to fetch.
    :param timeout: Seconds to wait for the server, None waits forever.
    :param headers: Optional extra request headers.
    :param check_status: Raise UrlError on any non-2xx status.
    :param session: Optional requests.Session to issue the request with.
    :raises UrlError: on transport failure, or on bad status when
        check_status is set.
    """
    req_headers = {"User-Agent": default_user_agent()}
    if headers:
        req_headers.update(headers)

    LOG.debug("Reading from %s (timeout=%s)", url, timeout)
    requester = session if session is not None else requests
    try:
        with requester.get(url, headers=req_headers, timeout=timeout) as r:
            # reading content releases the connection
            response = UrlResponse(r)
            code = response.code
            if check_status:
                r.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise UrlError(
            e,
            code=e.response.status_code,
            headers=e.response.headers,
            url=url,
        ) from e
    except requests.exceptions.RequestException as e:
        raise UrlError(e, url=url) from e

    LOG.debug(
        "Read from %s (%s, %sb)", url, code, len(response.contents)
    )
    return response

