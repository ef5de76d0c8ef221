from base64 import b64encode
from typing import Optional

import httpx
from loguru import logger

from .boc import Cell
from .exceptions import GetMethodError, RemoteError

MAINNET_ENDPOINT = "https://toncenter.com/api/v2/"
TESTNET_ENDPOINT = "https://testnet.toncenter.com/api/v2/"


def default_endpoint(testnet: bool = False) -> str:
    return TESTNET_ENDPOINT if testnet else MAINNET_ENDPOINT


def _encode_boc(src) -> str:
    if isinstance(src, Cell):
        src = src.to_boc(False)
    return b64encode(src).decode()


def decode_stack(stack: list) -> list:
    """Turn toncenter's ``[type, value]`` stack entries into python values.

    Numbers come back as hex strings and are decoded to ints, everything else
    is passed through untouched.
    """
    result = []
    for entry in stack:
        kind, value = entry[0], entry[1]
        if kind == 'num':
            result.append(int(value, 16))
        else:
            result.append(value)
    return result


class HttpProvider:
    """Thin client for the toncenter v2 HTTP API."""

    def __init__(self, endpoint: str = MAINNET_ENDPOINT, api_key: Optional[str] = None, timeout: float = 10,
                 client: Optional[httpx.Client] = None):
        if not endpoint.endswith('/'):
            endpoint += '/'
        self.endpoint = endpoint
        headers = {'X-API-Key': api_key} if api_key else {}
        self.client = client or httpx.Client(timeout=timeout)
        self.client.headers.update(headers)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @staticmethod
    def _unwrap(response: httpx.Response):
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise RemoteError(response.status_code, "response is not a JSON document")

        if not payload.get('ok'):
            raise RemoteError(payload.get('code', response.status_code), payload.get('error'))
        return payload['result']

    def _get(self, method: str, **params):
        logger.debug(f"GET {method} {params}")
        return self._unwrap(self.client.get(self.endpoint + method, params=params))

    def _post(self, method: str, body: dict):
        logger.debug(f"POST {method}")
        return self._unwrap(self.client.post(self.endpoint + method, json=body))

    def estimate_fee(self, address, body, init_code=None, init_data=None, ignore_chksig: bool = True) -> dict:
        return self._post('estimateFee', {
            'address': str(address),
            'body': _encode_boc(body),
            'init_code': _encode_boc(init_code) if init_code is not None else '',
            'init_data': _encode_boc(init_data) if init_data is not None else '',
            'ignore_chksig': ignore_chksig,
        })

    def send_boc(self, src) -> dict:
        return self._post('sendBoc', {'boc': _encode_boc(src)})

    def call(self, address, method: str, params=None) -> list:
        result = self._post('runGetMethod', {
            'address': str(address),
            'method': method,
            'stack': params or [],
        })
        if result['exit_code'] != 0:
            raise GetMethodError(method, result['exit_code'])
        return decode_stack(result['stack'])

    def get_address_info(self, address) -> dict:
        return self._get('getAddressInformation', address=str(address))

    def get_balance(self, address) -> int:
        return int(self._get('getAddressBalance', address=str(address)))

    def get_transactions(self, address, limit: int = 20) -> list:
        return self._get('getTransactions', address=str(address), limit=limit)
