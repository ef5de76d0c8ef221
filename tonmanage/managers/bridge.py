import binascii
from base64 import b64decode
from decimal import Decimal
from typing import List, Optional, Tuple

from loguru import logger
from tonsdk.utils import to_nano

from ..address import Address
from ..contract import (
    BRIDGE,
    BridgeData,
    ChangeCollector,
    ChangeFees,
    Contract,
    WithdrawReward,
)
from ..exceptions import ContractError, InvalidAddress
from .base import BaseManager

LOG_MESSAGE_LENGTH = 28  # 20-byte ethereum address + 8-byte amount
ETH_ADDRESS_LENGTH = 20


class BridgeManager(BaseManager):
    def __init__(self, provider, store, collector_address: Optional[str] = None,
                 fees: Tuple[Decimal, Decimal, int] = (Decimal(0), Decimal(0), 0)):
        super().__init__(provider, store)
        self.collector_address = collector_address
        self.fees = fees

    def _initial_options(self) -> dict:
        if not self.collector_address:
            raise ContractError("Bridge collector address is not configured")

        flat_reward, network_fee, fee_factor = self.fees
        return {
            'collector_address': Address(self.collector_address),
            'flat_reward': to_nano(flat_reward, 'ton'),
            'network_fee': to_nano(network_fee, 'ton'),
            'fee_factor': int(fee_factor),
        }

    def contract(self, **kwargs) -> Contract:
        return Contract(BRIDGE, self.provider, **kwargs)

    def get_bridge_data(self, bridge: Contract) -> BridgeData:
        return BridgeData.from_stack(bridge.call('get_bridge_data'))

    def prepare(self, wc: int = 0) -> Address:
        logger.info("Prepare bridge:")

        mnemonic, key_pair = self.new_key_pair()
        bridge = self.contract(public_key=key_pair.public_key, wc=wc, **self._initial_options())
        return self.prepare_deploy(bridge, mnemonic, key_pair, "Bridge")

    def deploy(self, address: str) -> dict:
        logger.info("Deploy bridge:")

        bridge_address = self.parse_deploy_address(address)
        key_pair = self.load_key_pair(address)
        bridge = self.contract(public_key=key_pair.public_key, wc=bridge_address.wc, **self._initial_options())
        if bridge.address != bridge_address:
            raise ContractError(
                f"Configured collector and fees produce {bridge.address.to_string(True, True, True)}, not {address}")
        return self.send_deploy(bridge, key_pair, "Bridge")

    def info(self, address: str) -> BridgeData:
        logger.info("Get bridge info:")

        bridge_address = Address(address)
        bridge = self.contract(address=bridge_address)

        address_info = self.provider.get_address_info(address)
        self.print_address_info(bridge_address, address_info)

        data = self.get_bridge_data(bridge)
        logger.info(f"Sequence number: {data.seqno}")
        logger.info(f"Public key: {data.public_key:064x}")
        logger.info(f"Total locked: {self.format_amount(data.total_locked)}")
        logger.info(f"Collector address: {data.collector_address.to_string(False)}")
        logger.info(f"Flat reward: {self.format_amount(data.flat_reward)}")
        logger.info(f"Network fee: {self.format_amount(data.network_fee)}")
        logger.info(f"Factor: {data.factor}")
        return data

    def _send(self, address: str, operation, success: str) -> dict:
        bridge = self.contract(address=Address(address))
        key_pair = self.load_key_pair(address)

        seqno = self.get_bridge_data(bridge).seqno
        request = bridge.send_operation(operation, key_pair.secret_key, seqno)
        self.print_fees(request.estimate_fee())

        response = request.send()
        self.print_response(response, success)
        return response

    def change_collector(self, address: str, new_collector: str) -> dict:
        logger.info("Change bridge collector:")

        if not Address.is_valid(new_collector):
            raise InvalidAddress("Invalid collector address")
        return self._send(
            address, ChangeCollector(Address(new_collector)), "Bridge collector was changed successfully")

    def change_fees(self, address: str, flat_reward: Decimal = Decimal(0), network_fee: Decimal = Decimal(0),
                    factor: int = 0) -> dict:
        logger.info("Change bridge fees:")

        operation = ChangeFees(
            flat_reward=to_nano(flat_reward, 'ton'),
            network_fee=to_nano(network_fee, 'ton'),
            factor=factor,
        )
        return self._send(address, operation, "Bridge fees were changed successfully")

    def withdraw_reward(self, address: str, beneficiary: str) -> dict:
        logger.info("Withdraw bridge reward:")

        if not Address.is_valid(beneficiary):
            raise InvalidAddress("Invalid beneficiary address")
        return self._send(
            address, WithdrawReward(Address(beneficiary)), "Bridge reward was withdrawn successfully")

    @staticmethod
    def find_log_message(messages: list) -> Optional[dict]:
        for message in messages:
            if message.get('destination') == '':
                return message
        return None

    def log_events(self, address: str) -> List[dict]:
        logger.info("Get log events:")

        if not Address.is_valid(address):
            raise InvalidAddress("Invalid contract address")

        events = []
        for transaction in self.provider.get_transactions(address):
            log_message = self.find_log_message(transaction.get('out_msgs', []))
            if log_message is None:
                continue

            try:
                message_bytes = b64decode(log_message.get('message', '').rstrip('\n'), validate=True)
            except binascii.Error:
                logger.debug(f"Skipping log message that is not base64: {log_message.get('message')!r}")
                continue
            if len(message_bytes) != LOG_MESSAGE_LENGTH:
                continue

            source = transaction.get('in_msg', {}).get('source')
            if not Address.is_valid(source):
                logger.debug(f"Skipping log message without a valid sender: {source!r}")
                continue
            sender = Address(source)

            transaction_id = transaction['transaction_id']
            event = {
                'type': 'SwapTonToEth',
                'receiver': '0x' + message_bytes[:ETH_ADDRESS_LENGTH].hex(),
                'amount': str(int.from_bytes(message_bytes[ETH_ADDRESS_LENGTH:], 'big')),
                'tx': {
                    'address': {
                        'workchain': sender.wc,
                        'address_hash': '0x' + sender.hash_part.hex(),
                    },
                    'tx_hash': '0x' + b64decode(transaction_id['hash']).hex(),
                    'lt': transaction_id['lt'],
                },
            }
            logger.info(event)
            events.append(event)
        return events
