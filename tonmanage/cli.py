import argparse
from decimal import Decimal, InvalidOperation

import httpx
from dotenv import load_dotenv
from loguru import logger

from .config import Config
from .contract import ContractKind
from .exceptions import TonManageError
from .keystore import MnemonicStore
from .log import setup_logger
from .managers import BridgeManager, ContractManager, WalletManager
from .provider import HttpProvider


def _amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    return amount


def _flag(value: str) -> bool:
    try:
        return bool(int(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 0 or 1, got {value!r}") from None


def wallet_manager(config: Config, provider) -> WalletManager:
    return WalletManager(provider, MnemonicStore(config.mnemonic_file), config.wallet_version)


def bridge_manager(config: Config, provider) -> BridgeManager:
    return BridgeManager(
        provider, MnemonicStore(config.mnemonic_file), config.bridge.collector_address, config.bridge.fees)


def contract_manager(kind: ContractKind):
    def factory(config: Config, provider) -> ContractManager:
        return ContractManager(provider, MnemonicStore(config.mnemonic_file), kind)
    return factory


def _add_command(subparsers, name: str, alias: str, help: str, manager, handler):
    parser = subparsers.add_parser(name, aliases=[alias], help=help)
    parser.set_defaults(manager=manager, handler=handler)
    return parser


def _add_wallet_commands(subparsers):
    parser = _add_command(subparsers, 'walletcreate', 'wc', "Create wallet and save its mnemonic", wallet_manager,
                          lambda args, manager: manager.create(args.wc))
    parser.add_argument('wc', nargs='?', type=int, default=0, help="Workchain id. Defaults to 0")

    parser = _add_command(subparsers, 'walletdeploy', 'wd', "Deploy wallet", wallet_manager,
                          lambda args, manager: manager.deploy(args.address, args.secret_key))
    parser.add_argument('address', help="Wallet bounceable address")
    parser.add_argument('--secret-key', default="", help="Hex encoded secret key used instead of the mnemonic")

    parser = _add_command(subparsers, 'walletinfo', 'wi', "Get wallet information", wallet_manager,
                          lambda args, manager: manager.info(args.address))
    parser.add_argument('address', help="Wallet address")

    parser = _add_command(subparsers, 'wallettransfer', 'wt', "Transfer toncoins", wallet_manager,
                          lambda args, manager: manager.transfer(
                              args.sender, args.recipient, args.amount, args.memo, args.stateinit,
                              args.secret_key))
    parser.add_argument('sender', help="Sender wallet address")
    parser.add_argument('recipient', help="Recipient wallet address")
    parser.add_argument('amount', type=_amount, help="Amount to transfer in TON")
    parser.add_argument('stateinit', nargs='?', type=_flag, default=False,
                        help="1 if the recipient should be non-bounceable for a state-init transfer")
    parser.add_argument('memo', nargs='?', default="", help="Transaction memo")
    parser.add_argument('--secret-key', default="", help="Hex encoded secret key used instead of the mnemonic")


def _add_bridge_commands(subparsers):
    parser = _add_command(subparsers, 'bridgeprepare', 'bp', "Prepare bridge and save its mnemonic", bridge_manager,
                          lambda args, manager: manager.prepare(args.wc))
    parser.add_argument('wc', nargs='?', type=int, default=0, help="Workchain id. Defaults to 0")

    parser = _add_command(subparsers, 'bridgedeploy', 'bd', "Deploy bridge", bridge_manager,
                          lambda args, manager: manager.deploy(args.address))
    parser.add_argument('address', help="Bridge bounceable address")

    parser = _add_command(subparsers, 'bridgeinfo', 'bi', "Get bridge information", bridge_manager,
                          lambda args, manager: manager.info(args.address))
    parser.add_argument('address', help="Bridge address")

    parser = _add_command(subparsers, 'bridgechangecollector', 'bcc', "Change bridge collector", bridge_manager,
                          lambda args, manager: manager.change_collector(args.address, args.collector))
    parser.add_argument('address', help="Bridge address")
    parser.add_argument('collector', help="New collector address")

    parser = _add_command(subparsers, 'bridgechangefees', 'bcf', "Change bridge fees", bridge_manager,
                          lambda args, manager: manager.change_fees(
                              args.address, args.flat_reward, args.network_fee, args.factor))
    parser.add_argument('address', help="Bridge address")
    parser.add_argument('flat_reward', type=_amount, help="Flat reward in TON")
    parser.add_argument('network_fee', type=_amount, help="Network fee in TON")
    parser.add_argument('factor', type=int, help="Fee factor")

    parser = _add_command(subparsers, 'bridgewithdrawreward', 'bwr', "Withdraw bridge reward", bridge_manager,
                          lambda args, manager: manager.withdraw_reward(args.address, args.beneficiary))
    parser.add_argument('address', help="Bridge address")
    parser.add_argument('beneficiary', help="Beneficiary address")

    parser = _add_command(subparsers, 'bridgeevents', 'be', "Print bridge swap events", bridge_manager,
                          lambda args, manager: manager.log_events(args.address))
    parser.add_argument('address', help="Bridge address")


def _add_contract_commands(subparsers, kind: ContractKind):
    name = kind.value
    factory = contract_manager(kind)

    parser = _add_command(subparsers, f'{name}prepare', f'{name[0]}p', f"Prepare {name} and save its mnemonic", factory,
                          lambda args, manager: manager.prepare(args.wc))
    parser.add_argument('wc', nargs='?', type=int, default=0, help="Workchain id. Defaults to 0")

    parser = _add_command(subparsers, f'{name}deploy', f'{name[0]}d', f"Deploy {name}", factory,
                          lambda args, manager: manager.deploy(args.address))
    parser.add_argument('address', help=f"{name.capitalize()} bounceable address")

    parser = _add_command(subparsers, f'{name}info', f'{name[0]}i', f"Get {name} information", factory,
                          lambda args, manager: manager.info(args.address))
    parser.add_argument('address', help=f"{name.capitalize()} address")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tonmanage', description="Manage TON wallets and contracts")
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')
    subparsers.required = True

    _add_wallet_commands(subparsers)
    _add_bridge_commands(subparsers)
    _add_contract_commands(subparsers, ContractKind.LOTTERY)
    _add_contract_commands(subparsers, ContractKind.EXAMPLE)
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env()
    except TonManageError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logger(config.log_level, config.log_file, config.development)

    with HttpProvider(config.endpoint, config.api_key, config.timeout) as provider:
        try:
            args.handler(args, args.manager(config, provider))
        except (TonManageError, httpx.HTTPError) as e:
            if config.development:
                logger.exception(e)
            else:
                logger.error(f"{type(e).__name__}: {e}")
            return 1
    return 0
