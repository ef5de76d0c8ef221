from typing import Optional

from loguru import logger

from ..address import Address
from ..boc import Cell
from ..crypto import SIGNATURE_LENGTH, key_pair_from_secret_key, sign
from ..exceptions import ContractError, GetMethodError, MissingPublicKey, UnsupportedOperation
from ._operations import Deploy
from ._spec import ContractSpec


def create_state_init_cell(code: Cell, data: Cell) -> Cell:
    state_init = Cell()
    state_init.bits.write_bit_array([0, 0, 1, 1, 0])  # split_depth, special, code, data, library
    state_init.refs.append(code)
    state_init.refs.append(data)
    return state_init


def derive_address(wc: int, code: Cell, data: Cell) -> Address:
    return Address.from_parts(wc, create_state_init_cell(code, data).hash())


def create_external_message_header(dest, src=None, import_fee: int = 0) -> Cell:
    message = Cell()
    message.bits.write_uint(2, 2)  # ext_in_msg_info
    message.bits.write_address(Address(src) if src else None)
    message.bits.write_address(Address(dest))
    message.bits.write_coins(import_fee)
    return message


def create_internal_message_header(dest, grams: int = 0, ihr_disabled: bool = True, bounce: Optional[bool] = None,
                                   bounced: bool = False, src=None, ihr_fees: int = 0, fwd_fees: int = 0,
                                   created_lt: int = 0, created_at: int = 0) -> Cell:
    dest = Address(dest)
    message = Cell()
    message.bits.write_bit(0)  # int_msg_info
    message.bits.write_bit(ihr_disabled)
    message.bits.write_bit(dest.is_bounceable if bounce is None else bounce)
    message.bits.write_bit(bounced)
    message.bits.write_address(Address(src) if src else None)
    message.bits.write_address(dest)
    message.bits.write_coins(grams)
    message.bits.write_bit(0)  # no extra currencies
    message.bits.write_coins(ihr_fees)
    message.bits.write_coins(fwd_fees)
    message.bits.write_uint(created_lt, 64)
    message.bits.write_uint(created_at, 32)
    return message


def create_common_msg_info(header: Cell, state_init: Optional[Cell] = None, body: Optional[Cell] = None) -> Cell:
    common_msg_info = Cell()
    common_msg_info.write_cell(header)

    if state_init is not None:
        common_msg_info.bits.write_bit(1)
        if (common_msg_info.bits.get_free_bits() - 1 >= state_init.bits.get_used_bits()
                and len(common_msg_info.refs) + len(state_init.refs) <= 4):
            common_msg_info.bits.write_bit(0)
            common_msg_info.write_cell(state_init)
        else:
            common_msg_info.bits.write_bit(1)
            common_msg_info.refs.append(state_init)
    else:
        common_msg_info.bits.write_bit(0)

    if body is not None:
        if (common_msg_info.bits.get_free_bits() - 1 >= body.bits.get_used_bits()
                and len(common_msg_info.refs) + len(body.refs) <= 4):
            common_msg_info.bits.write_bit(0)
            common_msg_info.write_cell(body)
        else:
            common_msg_info.bits.write_bit(1)
            common_msg_info.refs.append(body)
    else:
        common_msg_info.bits.write_bit(0)

    return common_msg_info


class MethodRequest:
    """A signed external message ready to be priced or submitted."""

    def __init__(self, contract: 'Contract', build):
        self.contract = contract
        self._build = build

    def message(self, dummy_signature: bool = False) -> dict:
        return self._build(dummy_signature)

    def get_query(self) -> Cell:
        return self.message()['message']

    def estimate_fee(self) -> dict:
        query = self.message(dummy_signature=True)
        return self.contract.get_provider().estimate_fee(
            query['address'],
            query['body'],
            init_code=query['code'],
            init_data=query['data'],
            ignore_chksig=True,
        )

    def send(self) -> dict:
        query = self.message()
        return self.contract.get_provider().send_boc(query['message'].to_boc(False))


class Contract:
    create_external_message_header = staticmethod(create_external_message_header)
    create_internal_message_header = staticmethod(create_internal_message_header)
    create_common_msg_info = staticmethod(create_common_msg_info)

    def __init__(self, spec: ContractSpec, provider=None, **kwargs):
        self.spec = spec
        self.provider = provider
        self.options = kwargs
        self._address = Address(kwargs['address']) if kwargs.get('address') is not None else None
        if self.options.get('wc') is None:
            self.options['wc'] = self._address.wc if self._address is not None else 0

    def __repr__(self):
        return f"<Contract {self.spec.kind.value} wc={self.options['wc']}>"

    @property
    def public_key(self) -> Optional[bytes]:
        return self.options.get('public_key')

    @property
    def address(self) -> Address:
        if self._address is None:
            self._address = self.create_state_init()['address']
        return self._address

    def get_provider(self):
        if self.provider is None:
            raise ContractError(f"{self.spec.kind.value} contract has no provider")
        return self.provider

    def create_code_cell(self) -> Cell:
        return self.spec.create_code_cell()

    def create_data_cell(self) -> Cell:
        if not self.public_key:
            raise MissingPublicKey(f"Cannot build {self.spec.kind.value} data cell without a public key")
        return self.spec.build_data(self.options)

    def create_signing_message(self, seqno: int, operation=Deploy()) -> Cell:
        if not self.spec.supports(operation):
            raise UnsupportedOperation(
                f"{type(operation).__name__} is not supported by {self.spec.kind.value} contract")
        return self.spec.build_signing_message(seqno, operation, self.options)

    def create_state_init(self) -> dict:
        code_cell = self.create_code_cell()
        data_cell = self.create_data_cell()
        state_init = create_state_init_cell(code_cell, data_cell)
        address = Address.from_parts(self.options['wc'], state_init.hash())
        return {
            "code": code_cell,
            "data": data_cell,
            "address": address,
            "state_init": state_init,
        }

    def _ensure_public_key(self, secret_key: bytes):
        if not self.public_key:
            self.options['public_key'] = key_pair_from_secret_key(secret_key).public_key
            logger.debug(f"Public key derived from secret key: {self.public_key.hex()}")

    @staticmethod
    def _sign(signing_message: Cell, secret_key: bytes, dummy_signature: bool) -> bytes:
        if dummy_signature:
            return bytes(SIGNATURE_LENGTH)
        return sign(signing_message.hash(), secret_key)

    def create_init_external_message(self, secret_key: bytes, dummy_signature: bool = False) -> dict:
        self._ensure_public_key(secret_key)

        signing_message = self.create_signing_message(0, Deploy())
        signature = self._sign(signing_message, secret_key, dummy_signature)

        body = Cell()
        body.bits.write_bytes(signature)
        body.write_cell(signing_message)

        deploy = self.create_state_init()
        header = create_external_message_header(deploy['address'])
        message = create_common_msg_info(header, deploy['state_init'], body)

        return {
            "address": deploy['address'],
            "message": message,
            "body": body,
            "signature": signature,
            "signing_message": signing_message,
            "state_init": deploy['state_init'],
            "code": deploy['code'],
            "data": deploy['data'],
        }

    def create_external_message(self, signing_message: Cell, secret_key: bytes, seqno: int,
                                dummy_signature: bool = False) -> dict:
        signature = self._sign(signing_message, secret_key, dummy_signature)

        body = Cell()
        body.bits.write_bytes(signature)
        body.write_cell(signing_message)

        state_init = code = data = None
        if seqno == 0:
            self._ensure_public_key(secret_key)
            deploy = self.create_state_init()
            state_init = deploy['state_init']
            code = deploy['code']
            data = deploy['data']

        self_address = self.address
        header = create_external_message_header(self_address)
        message = create_common_msg_info(header, state_init, body)

        return {
            "address": self_address,
            "message": message,
            "body": body,
            "signature": signature,
            "signing_message": signing_message,
            "state_init": state_init,
            "code": code,
            "data": data,
        }

    def deploy(self, secret_key: bytes) -> MethodRequest:
        return MethodRequest(self, lambda dummy: self.create_init_external_message(secret_key, dummy))

    def send_operation(self, operation, secret_key: bytes, seqno: int) -> MethodRequest:
        signing_message = self.create_signing_message(seqno, operation)
        return MethodRequest(
            self, lambda dummy: self.create_external_message(signing_message, secret_key, seqno, dummy))

    def call(self, method: str, params=None) -> list:
        return self.get_provider().call(self.address.to_string(True, True, True), method, params or [])

    def get_value(self, method: str):
        stack = self.call(method)
        if not stack:
            raise GetMethodError(method, 0, f"get method {method} returned an empty stack")
        return stack[0]

    def get_seqno(self) -> int:
        return self.get_value('seqno')
