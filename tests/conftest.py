import json

import httpx
import pytest
from loguru import logger

from tonmanage.crypto import key_pair_from_seed
from tonmanage.provider import HttpProvider

ENDPOINT = "https://toncenter.test/api/v2/"


class FakeToncenter:
    """Records requests and answers them from a method -> result table."""

    def __init__(self):
        self.results = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.url.path.rsplit('/', 1)[-1]
        result = self.results.get(method)
        if result is None:
            return httpx.Response(404, json={'ok': False, 'error': f'unknown method {method}', 'code': 404})
        if callable(result):
            result = result(request)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json={'ok': True, 'result': result})

    def bodies(self, method: str) -> list:
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith(method)]


@pytest.fixture
def toncenter():
    return FakeToncenter()


@pytest.fixture
def provider(toncenter):
    client = httpx.Client(transport=httpx.MockTransport(toncenter))
    with HttpProvider(ENDPOINT, api_key='secret', client=client) as provider:
        yield provider


@pytest.fixture
def key_pair():
    return key_pair_from_seed(bytes(range(32)))


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record['message']), level='DEBUG')
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fees_result():
    return {
        '@type': 'query.fees',
        'source_fees': {
            '@type': 'fees',
            'in_fwd_fee': 1000000,
            'storage_fee': 0,
            'gas_fee': 3000000,
            'fwd_fee': 0,
        },
        'destination_fees': [],
    }
