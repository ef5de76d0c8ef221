from decimal import Decimal

from loguru import logger
from tonsdk.utils import to_nano

from ..address import Address
from ..contract import Contract, SendMode, Transfer, get_contract_spec
from ..exceptions import ContractError, InsufficientBalance, InvalidAddress, TonManageError
from .base import BaseManager


class WalletManager(BaseManager):
    def __init__(self, provider, store, version: str):
        super().__init__(provider, store)
        self.version = version
        self.spec = get_contract_spec(version)

    def contract(self, **kwargs) -> Contract:
        return Contract(self.spec, self.provider, **kwargs)

    def create(self, wc: int = 0) -> Address:
        logger.info("Create wallet:")
        logger.info(f"Wallet version: {self.version}")

        mnemonic, key_pair = self.new_key_pair()
        wallet = self.contract(public_key=key_pair.public_key, wc=wc)
        return self.prepare_deploy(wallet, mnemonic, key_pair, "Wallet")

    def deploy(self, address: str, secret_key: str = "") -> dict:
        logger.info("Deploy wallet:")

        wallet_address = self.parse_deploy_address(address)
        key_pair = self.load_key_pair(address, secret_key)
        wallet = self.contract(public_key=key_pair.public_key, wc=wallet_address.wc)
        return self.send_deploy(wallet, key_pair, "Wallet")

    def info(self, address: str):
        logger.info("Get wallet information:")

        wallet_address = Address(address)
        wallet = self.contract(address=wallet_address)

        address_info = self.provider.get_address_info(address)
        self.print_address_info(wallet_address, address_info)
        seqno = self.resolve_seqno(wallet)
        logger.info(f"Sequence number: {seqno}")
        return address_info

    def transfer(self, sender: str, recipient: str, amount: Decimal, memo: str = "", state_init: bool = False,
                 secret_key: str = "") -> dict:
        logger.info("Transfer TON between wallets:")

        if not Address.is_valid(sender):
            raise InvalidAddress("Invalid sender address")
        sender_address = Address(sender)

        recipient_address = Address(recipient)
        if not recipient_address.is_user_friendly:
            raise InvalidAddress("Recipient address should be in user friendly format")
        if state_init and recipient_address.is_bounceable:
            raise InvalidAddress("Recipient address should be non-bounceable for state-init operation")
        if not state_init and not recipient_address.is_bounceable:
            raise InvalidAddress("Recipient address should be bounceable for a non state-init operation")

        if amount < 0:
            raise TonManageError("Amount should be positive")

        key_pair = self.load_key_pair(sender, secret_key)
        wallet = self.contract(public_key=key_pair.public_key, wc=sender_address.wc)
        if wallet.address != sender_address:
            raise ContractError(
                f"Key pair belongs to {wallet.address.to_string(True, True, True)}, not to sender {sender}")

        amount_nano = to_nano(amount, 'ton')
        sender_balance = self.provider.get_balance(sender)
        if amount_nano > sender_balance:
            raise InsufficientBalance(
                f"Transfer amount {self.format_amount(amount_nano)} "
                f"exceeds balance {self.format_amount(sender_balance)}")

        seqno = self.resolve_seqno(wallet)
        logger.debug(f"Wallet seqno: {seqno}")

        request = wallet.send_operation(
            Transfer(
                to_address=recipient_address,
                amount=amount_nano,
                payload=memo,
                send_mode=SendMode.SENDER_PAYS_FORWARD_FEES | SendMode.IGNORE_ERRORS,
            ),
            key_pair.secret_key,
            seqno,
        )
        self.print_fees(request.estimate_fee())

        response = request.send()
        self.print_response(
            response,
            f"{self.format_amount(amount_nano)} were transferred successfully, "
            + (f"memo: {memo}" if memo else "no memo"))
        return response
