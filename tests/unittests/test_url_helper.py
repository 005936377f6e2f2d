# This file is part of instancemd. See LICENSE file for license information.

import pytest
import requests
import responses

from instancemd import url_helper, version

URL = "http://169.254.169.254/openstack/latest/meta_data.json"


class TestReadUrl:
    @responses.activate
    def test_ok(self):
        responses.add(responses.GET, URL, body=b'{"uuid": "a"}')

        response = url_helper.readurl(URL)

        assert response.ok()
        assert 200 == response.code
        assert b'{"uuid": "a"}' == response.contents
        assert '{"uuid": "a"}' == str(response)
        assert URL == response.url

    @responses.activate
    def test_headers(self):
        responses.add(responses.GET, URL, body=b"{}")

        url_helper.readurl(URL, headers={"X-Test": "1"})

        headers = responses.calls[0].request.headers
        assert "1" == headers["X-Test"]
        assert (
            "instance-metadata/%s" % version.version_string()
            == headers["User-Agent"]
        )

    @responses.activate
    def test_check_status(self):
        responses.add(responses.GET, URL, status=404)

        with pytest.raises(url_helper.UrlError) as exc_info:
            url_helper.readurl(URL)

        assert 404 == exc_info.value.code
        assert URL == exc_info.value.url

    @responses.activate
    def test_no_check_status(self):
        responses.add(responses.GET, URL, status=500)

        response = url_helper.readurl(URL, check_status=False)

        assert not response.ok()
        assert 500 == response.code
        assert "Internal Server Error" == response.reason

    @responses.activate
    def test_transport_error(self):
        responses.add(
            responses.GET, URL, body=requests.ConnectTimeout("timed out")
        )

        with pytest.raises(url_helper.UrlError) as exc_info:
            url_helper.readurl(URL, timeout=1)

        assert exc_info.value.code is None
        assert isinstance(exc_info.value.cause, requests.ConnectTimeout)
        assert {} == exc_info.value.headers
