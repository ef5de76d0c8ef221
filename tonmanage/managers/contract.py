from loguru import logger

from ..address import Address
from ..contract import Contract, get_contract_spec
from ..exceptions import RemoteError
from .base import BaseManager


class ContractManager(BaseManager):
    """Prepare, deploy and inspect contracts whose only operation is deploy."""

    def __init__(self, provider, store, kind):
        super().__init__(provider, store)
        self.spec = get_contract_spec(kind)
        self.name = self.spec.kind.value.capitalize()

    def contract(self, **kwargs) -> Contract:
        return Contract(self.spec, self.provider, **kwargs)

    def prepare(self, wc: int = 0) -> Address:
        logger.info(f"Prepare {self.spec.kind.value}:")

        mnemonic, key_pair = self.new_key_pair()
        contract = self.contract(public_key=key_pair.public_key, wc=wc)
        return self.prepare_deploy(contract, mnemonic, key_pair, self.name)

    def deploy(self, address: str) -> dict:
        logger.info(f"Deploy {self.spec.kind.value}:")

        contract_address = self.parse_deploy_address(address)
        key_pair = self.load_key_pair(address)
        contract = self.contract(public_key=key_pair.public_key, wc=contract_address.wc)
        return self.send_deploy(contract, key_pair, self.name)

    def info(self, address: str) -> dict:
        logger.info(f"Get {self.spec.kind.value} info:")

        contract_address = Address(address)
        contract = self.contract(address=contract_address)

        balance = self.provider.get_balance(address)
        self.print_address_info(contract_address)
        logger.info(f"- Balance: {self.format_amount(balance)}")

        result = {'balance': balance, 'seqno': self.resolve_seqno(contract)}
        logger.info(f"- Sequence number: {result['seqno']}")

        for getter in self.spec.getters:
            if getter == 'seqno':
                continue
            try:
                value = contract.get_value(getter)
            except RemoteError as e:
                logger.debug(f"{getter} failed: {e}")
                value = None
            result[getter] = value
            logger.info(f"- {getter}: {self._format_getter(getter, value)}")
        return result

    def _format_getter(self, getter: str, value) -> str:
        if value is None:
            return "unknown"
        if getter == 'get_public_key':
            return f"{value:064x}"
        if getter == 'balance':
            return self.format_amount(value)
        return str(value)
