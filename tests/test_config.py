from decimal import Decimal

import pytest

from tonmanage.config import Config
from tonmanage.exceptions import ConfigError
from tonmanage.provider import MAINNET_ENDPOINT, TESTNET_ENDPOINT

COLLECTOR = 'EQDcym0-0e5Uqhhx6hSisfCo6SsPClIUojVAkFi0A2YFGKxq'


def test_defaults():
    config = Config.from_env({})
    assert config.app_env == 'production'
    assert not config.development
    assert config.endpoint == MAINNET_ENDPOINT
    assert config.api_key is None
    assert config.timeout == 10
    assert config.wallet_version == 'v2r1'
    assert config.mnemonic_file == 'mnemonic.json'
    assert config.bridge.collector_address is None
    assert config.bridge.fees == (Decimal(0), Decimal(0), 0)
    assert config.log_level == 'INFO'


def test_development_and_testnet():
    config = Config.from_env({'APP_ENV': 'development', 'TESTNET': 'true', 'TONCENTER_API_KEY': 'key'})
    assert config.development
    assert config.log_level == 'DEBUG'
    assert config.endpoint == TESTNET_ENDPOINT
    assert config.api_key == 'key'


def test_explicit_endpoint_wins():
    config = Config.from_env({'TESTNET': '1', 'TONCENTER_ENDPOINT': 'http://localhost:8081/'})
    assert config.endpoint == 'http://localhost:8081/'


def test_bridge_settings():
    config = Config.from_env({
        'BRIDGE_COLLECTOR_ADDRESS': COLLECTOR,
        'BRIDGE_FLAT_REWARD': '0.5',
        'BRIDGE_NETWORK_FEE': '1',
        'BRIDGE_FEE_FACTOR': '25',
        'WALLET_VERSION': 'V2R2',
    })
    assert config.bridge.collector_address == COLLECTOR
    assert config.bridge.fees == (Decimal('0.5'), Decimal(1), 25)
    assert config.wallet_version == 'v2r2'


@pytest.mark.parametrize('environ', [
    {'APP_ENV': 'staging'},
    {'TESTNET': 'maybe'},
    {'TONCENTER_TIMEOUT': 'soon'},
    {'TONCENTER_TIMEOUT': '0'},
    {'WALLET_VERSION': 'v4r2'},
    {'BRIDGE_COLLECTOR_ADDRESS': 'nope'},
    {'BRIDGE_FLAT_REWARD': 'lots'},
    {'BRIDGE_NETWORK_FEE': '-1'},
    {'BRIDGE_FEE_FACTOR': '16384'},
    {'BRIDGE_FEE_FACTOR': 'x'},
])
def test_invalid_values(environ):
    with pytest.raises(ConfigError):
        Config.from_env(environ)
