from typing import List, Tuple

from loguru import logger
from tonsdk.utils import from_nano

from ..address import Address
from ..contract import Contract
from ..crypto import KeyPair, generate_mnemonic, key_pair_from_mnemonic, key_pair_from_secret_key
from ..exceptions import InvalidAddress, KeyStoreError, RemoteError
from ..keystore import MnemonicStore
from ..provider import HttpProvider

UNINITIALIZED = 'uninitialized'


class BaseManager:
    def __init__(self, provider: HttpProvider, store: MnemonicStore):
        self.provider = provider
        self.store = store

    @staticmethod
    def format_amount(amount: int) -> str:
        return f"{from_nano(int(amount), 'ton')} TON"

    @staticmethod
    def get_transaction_fees(fees: dict) -> dict:
        gas_fee = int(fees['gas_fee'])
        in_fwd_fee = int(fees['in_fwd_fee'])
        fwd_fee = int(fees['fwd_fee'])
        storage_fee = int(fees['storage_fee'])
        return {
            'gas_fee': gas_fee,
            'in_fwd_fee': in_fwd_fee,
            'fwd_fee': fwd_fee,
            'storage_fee': storage_fee,
            'total_fee': gas_fee + in_fwd_fee + fwd_fee + storage_fee,
        }

    def print_fees(self, response: dict) -> dict:
        if response.get('@type') != 'query.fees':
            raise RemoteError(response.get('code'), response.get('message'))

        fees = self.get_transaction_fees(response['source_fees'])
        logger.info("Fees:")
        logger.info(f"- Gas fee:        {self.format_amount(fees['gas_fee'])}")
        logger.info(f"- In-Forward fee: {self.format_amount(fees['in_fwd_fee'])}")
        logger.info(f"- Forward fee:    {self.format_amount(fees['fwd_fee'])}")
        logger.info(f"- Storage fee:    {self.format_amount(fees['storage_fee'])}")
        logger.info(f"- Total fee:      {self.format_amount(fees['total_fee'])}")
        return fees

    @staticmethod
    def print_response(response: dict, success: str):
        if response.get('@type') != 'ok':
            raise RemoteError(response.get('code'), response.get('message'))
        logger.info(success)

    def print_address_info(self, address: Address, info: dict = None):
        logger.info(f"- Raw address: {address.to_string(False)}")
        logger.info(f"- Non-bounceable address (for init):     {address.to_string(True, True, False)}")
        logger.info(f"- Bounceable address (for later access): {address.to_string(True, True, True)}")
        if info is not None:
            logger.info(f"- Balance: {self.format_amount(info.get('balance', 0))}")
            logger.info(f"- State: {info.get('state')}")

    @staticmethod
    def parse_deploy_address(address: str) -> Address:
        contract_address = Address(address)
        if not contract_address.is_user_friendly:
            raise InvalidAddress("Contract address should be in user friendly format")
        if not contract_address.is_bounceable:
            raise InvalidAddress("Contract address should be bounceable")
        return contract_address

    @staticmethod
    def new_key_pair() -> Tuple[List[str], KeyPair]:
        mnemonic = generate_mnemonic()
        return mnemonic, key_pair_from_mnemonic(mnemonic)

    def load_key_pair(self, address: str, secret_key_hex: str = "") -> KeyPair:
        if secret_key_hex:
            try:
                secret_key = bytes.fromhex(secret_key_hex)
                return key_pair_from_secret_key(secret_key)
            except ValueError as e:
                raise KeyStoreError(f"Invalid secret key: {e}") from e
        return key_pair_from_mnemonic(self.store.load(address))

    def resolve_seqno(self, contract: Contract) -> int:
        try:
            return contract.get_seqno()
        except RemoteError as e:
            info = self.provider.get_address_info(contract.address.to_string(True, True, True))
            if info.get('state') == UNINITIALIZED:
                logger.debug(f"Account is not initialized, seqno get method failed with: {e}")
                return 0
            raise

    def prepare_deploy(self, contract: Contract, mnemonic: List[str], key_pair: KeyPair, kind: str) -> Address:
        """Price the deploy message, remember the mnemonic and say where to send funds."""
        address = contract.address
        fees = self.print_fees(contract.deploy(key_pair.secret_key).estimate_fee())

        self.store.save(address.to_string(True, True, True), mnemonic)

        logger.info(f"{kind} is ready to be deployed")
        logger.info(
            f"Send at least {self.format_amount(fees['total_fee'])} to {address.to_string(True, True, False)}")
        return address

    def send_deploy(self, contract: Contract, key_pair: KeyPair, kind: str) -> dict:
        request = contract.deploy(key_pair.secret_key)
        self.print_fees(request.estimate_fee())

        response = request.send()
        self.print_response(response, f"{kind} was deployed successfully")
        return response
