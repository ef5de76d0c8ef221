from base64 import b64decode

import httpx
import pytest

from tonmanage.boc import Cell, begin_cell
from tonmanage.exceptions import GetMethodError, RemoteError
from tonmanage.provider import MAINNET_ENDPOINT, TESTNET_ENDPOINT, HttpProvider, decode_stack, default_endpoint

ADDRESS = 'EQDcym0-0e5Uqhhx6hSisfCo6SsPClIUojVAkFi0A2YFGKxq'


def test_default_endpoint():
    assert default_endpoint() == MAINNET_ENDPOINT
    assert default_endpoint(True) == TESTNET_ENDPOINT


def test_send_boc(provider, toncenter):
    toncenter.results['sendBoc'] = {'@type': 'ok'}
    cell = begin_cell().store_uint(42, 8).end_cell()

    assert provider.send_boc(cell.to_boc(False)) == {'@type': 'ok'}

    request = toncenter.requests[0]
    assert request.method == 'POST'
    assert request.headers['X-API-Key'] == 'secret'
    boc = b64decode(toncenter.bodies('sendBoc')[0]['boc'])
    assert Cell.one_from_boc(boc).hash() == cell.hash()


def test_estimate_fee(provider, toncenter, fees_result):
    toncenter.results['estimateFee'] = fees_result
    body = begin_cell().store_uint(1, 32).end_cell()

    assert provider.estimate_fee(ADDRESS, body) == fees_result

    sent = toncenter.bodies('estimateFee')[0]
    assert sent['address'] == ADDRESS
    assert sent['init_code'] == ''
    assert sent['ignore_chksig'] is True
    assert Cell.one_from_boc(b64decode(sent['body'])).hash() == body.hash()


def test_error_envelope(provider, toncenter):
    toncenter.results['sendBoc'] = httpx.Response(
        500, json={'ok': False, 'error': 'Failed to unpack account state', 'code': 500})

    with pytest.raises(RemoteError) as e:
        provider.send_boc(b'')
    assert e.value.code == 500
    assert e.value.message == 'Failed to unpack account state'


def test_non_json_response(provider, toncenter):
    toncenter.results['getAddressBalance'] = httpx.Response(502, text='Bad Gateway')
    with pytest.raises(httpx.HTTPStatusError):
        provider.get_balance(ADDRESS)


def test_call_decodes_numbers(provider, toncenter):
    toncenter.results['runGetMethod'] = {
        'exit_code': 0,
        'stack': [['num', '0x2a'], ['num', '-0x1'], ['cell', {'bytes': ''}]],
    }
    assert provider.call(ADDRESS, 'seqno') == [42, -1, {'bytes': ''}]
    assert toncenter.bodies('runGetMethod')[0] == {'address': ADDRESS, 'method': 'seqno', 'stack': []}


def test_call_exit_code(provider, toncenter):
    toncenter.results['runGetMethod'] = {'exit_code': -13, 'stack': []}
    with pytest.raises(GetMethodError) as e:
        provider.call(ADDRESS, 'seqno')
    assert e.value.exit_code == -13
    assert isinstance(e.value, RemoteError)


def test_get_requests(provider, toncenter):
    toncenter.results['getAddressBalance'] = '1500000000'
    toncenter.results['getAddressInformation'] = {'balance': '1500000000', 'state': 'active'}
    toncenter.results['getTransactions'] = []

    assert provider.get_balance(ADDRESS) == 1500000000
    assert provider.get_address_info(ADDRESS)['state'] == 'active'
    assert provider.get_transactions(ADDRESS, limit=5) == []

    last = toncenter.requests[-1]
    assert last.method == 'GET'
    assert last.url.params['address'] == ADDRESS
    assert last.url.params['limit'] == '5'


def test_decode_stack():
    assert decode_stack([]) == []
    assert decode_stack([['num', '0x0']]) == [0]


def test_endpoint_gets_trailing_slash():
    provider = HttpProvider('https://example.test/api/v2', client=httpx.Client(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={'ok': True, 'result': '7'}))))
    assert provider.endpoint == 'https://example.test/api/v2/'
    assert provider.get_balance(ADDRESS) == 7
    provider.close()
