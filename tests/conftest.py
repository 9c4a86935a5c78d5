import os

import httpx
import pytest

# Keep a developer's real gateway credentials out of the test run.
for _name in ("SMSGW_BASE_URL", "SMSGW_SERVICE_ID", "SMSGW_USERNAME", "SMSGW_PASSWORD", "SMSGW_TIMEOUT_SECONDS"):
    os.environ.pop(_name, None)

from smsgw.config.settings import get_settings
from smsgw.messaging.sms import SmsGatewayClient

DUMMY_URL = "https://www.dummy-address.com"


class FakeGateway:
    """Records every request and answers with a canned response."""

    def __init__(self, status_code=200, body=b'{"batchReference":"123abc","messageStatus":[]}', exc=None):
        self.status_code = status_code
        self.body = body
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if callable(self.body):
            return httpx.Response(self.status_code, content=self.body(request))
        return httpx.Response(self.status_code, content=self.body)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_client():
    clients = []

    def _make(gw, service_id=0, username="", password=""):
        http = httpx.Client(transport=httpx.MockTransport(gw))
        client = SmsGatewayClient(DUMMY_URL, service_id, username, password, http_client=http)
        clients.append(http)
        return client

    yield _make
    for http in clients:
        http.close()
