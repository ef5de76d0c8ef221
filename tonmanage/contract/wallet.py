import time

from ..boc import Cell
from ._base import create_common_msg_info, create_internal_message_header
from ._operations import Deploy, Transfer
from ._spec import ContractKind, ContractSpec

WALLET_V2R1_CODE = (
    'B5EE9C72410101010044000084FF0020DDA4F260810200D71820D70B1FED44D0D31FD3FFD15112BAF2A122F9015410'
    '44F910F2A2F80001D31F3120D74A96D307D402FB00DED1A4C8CB1FCBFFC9ED5441FDF089'
)
WALLET_V2R2_CODE = (
    'B5EE9C7241010101530000A2FF0020DD2082014C97BA9730ED44D0D70B1FE0A4F260810200D71820D70B1FED44D0D31F'
    'D3FFD15112BAF2A122F901541044F910F2A2F80001D31F3120D74A96D307D402FB00DED1A4C8CB1FCBFFC9ED54BC3C3B91'
)

NO_EXPIRATION = 0xFFFFFFFF
MESSAGE_TTL = 60


def create_data_cell(options: dict) -> Cell:
    cell = Cell()
    cell.bits.write_uint(0, 32)  # seqno
    cell.bits.write_bytes(options['public_key'])
    return cell


def create_payload_cell(payload) -> Cell:
    if isinstance(payload, Cell):
        return payload

    cell = Cell()
    if isinstance(payload, str):
        if payload:
            cell.bits.write_uint(0, 32)  # text comment
            cell.bits.write_string(payload)
    elif payload:
        cell.bits.write_bytes(payload)
    return cell


def create_transfer_order(transfer: Transfer) -> Cell:
    header = create_internal_message_header(transfer.to_address, transfer.amount)
    return create_common_msg_info(header, transfer.state_init, create_payload_cell(transfer.payload))


def create_signing_message(seqno: int, operation, options: dict) -> Cell:
    message = Cell()
    message.bits.write_uint(seqno, 32)
    if seqno == 0:
        message.bits.write_uint(NO_EXPIRATION, 32)
    else:
        valid_until = getattr(operation, 'valid_until', None)
        message.bits.write_uint(valid_until or int(time.time()) + MESSAGE_TTL, 32)

    if isinstance(operation, Transfer):
        message.bits.write_uint8(operation.send_mode)
        message.refs.append(create_transfer_order(operation))
    return message


WALLET_V2R1 = ContractSpec(
    kind=ContractKind.WALLET_V2R1,
    code=WALLET_V2R1_CODE,
    build_data=create_data_cell,
    build_signing_message=create_signing_message,
    operations=(Deploy, Transfer),
    getters=('seqno',),
)

WALLET_V2R2 = ContractSpec(
    kind=ContractKind.WALLET_V2R2,
    code=WALLET_V2R2_CODE,
    build_data=create_data_cell,
    build_signing_message=create_signing_message,
    operations=(Deploy, Transfer),
    getters=('seqno',),
)
