import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from .address import Address
from .exceptions import ConfigError, InvalidAddress
from .provider import default_endpoint

WALLET_VERSIONS = ('v2r1', 'v2r2')
MAX_FEE_FACTOR = (1 << 14) - 1


def _bool(environ: Mapping[str, str], name: str, default: str = "false") -> bool:
    value = environ.get(name, default).strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{name} should be a boolean, got {value!r}")


def _decimal(environ: Mapping[str, str], name: str) -> Decimal:
    value = environ.get(name, "0")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ConfigError(f"{name} should be a decimal amount, got {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise ConfigError(f"{name} should be a non-negative amount, got {value!r}")
    return amount


def _int(environ: Mapping[str, str], name: str, default: str) -> int:
    value = environ.get(name, default)
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} should be an integer, got {value!r}") from None


@dataclass(frozen=True)
class BridgeConfig:
    collector_address: Optional[str] = None
    flat_reward: Decimal = Decimal(0)
    network_fee: Decimal = Decimal(0)
    fee_factor: int = 0

    @property
    def fees(self):
        return self.flat_reward, self.network_fee, self.fee_factor


@dataclass(frozen=True)
class Config:
    app_env: str = "production"
    testnet: bool = False
    endpoint: str = default_endpoint()
    api_key: Optional[str] = None
    timeout: float = 10
    wallet_version: str = "v2r1"
    mnemonic_file: str = "mnemonic.json"
    bridge: BridgeConfig = BridgeConfig()
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def development(self) -> bool:
        return self.app_env == "development"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        if environ is None:
            environ = os.environ

        app_env = environ.get("APP_ENV", "production")
        if app_env not in ("production", "development"):
            raise ConfigError(f"APP_ENV should be production or development, got {app_env!r}")

        testnet = _bool(environ, "TESTNET")

        timeout = environ.get("TONCENTER_TIMEOUT", "10")
        try:
            timeout = float(timeout)
        except ValueError:
            raise ConfigError(f"TONCENTER_TIMEOUT should be a number, got {timeout!r}") from None
        if timeout <= 0:
            raise ConfigError("TONCENTER_TIMEOUT should be positive")

        wallet_version = environ.get("WALLET_VERSION", "v2r1").lower()
        if wallet_version not in WALLET_VERSIONS:
            raise ConfigError(f"WALLET_VERSION should be one of {', '.join(WALLET_VERSIONS)}, got {wallet_version!r}")

        collector_address = environ.get("BRIDGE_COLLECTOR_ADDRESS") or None
        if collector_address is not None:
            try:
                Address(collector_address)
            except InvalidAddress as e:
                raise ConfigError(f"BRIDGE_COLLECTOR_ADDRESS is invalid: {e}") from e

        fee_factor = _int(environ, "BRIDGE_FEE_FACTOR", "0")
        if not 0 <= fee_factor <= MAX_FEE_FACTOR:
            raise ConfigError(f"BRIDGE_FEE_FACTOR should be in range 0..{MAX_FEE_FACTOR}, got {fee_factor}")

        bridge = BridgeConfig(
            collector_address=collector_address,
            flat_reward=_decimal(environ, "BRIDGE_FLAT_REWARD"),
            network_fee=_decimal(environ, "BRIDGE_NETWORK_FEE"),
            fee_factor=fee_factor,
        )

        return cls(
            app_env=app_env,
            testnet=testnet,
            endpoint=environ.get("TONCENTER_ENDPOINT") or default_endpoint(testnet),
            api_key=environ.get("TONCENTER_API_KEY") or None,
            timeout=timeout,
            wallet_version=wallet_version,
            mnemonic_file=environ.get("MNEMONIC_FILE", "mnemonic.json"),
            bridge=bridge,
            log_level=environ.get("LOG_LEVEL", "DEBUG" if app_env == "development" else "INFO").upper(),
            log_file=environ.get("LOG_FILE") or None,
        )
