from ..boc import Cell
from ._operations import Deploy
from ._spec import ContractKind, ContractSpec

LOTTERY_CODE = (
    'B5EE9C7241010C0100F8000114FF00F4A413F4BCF2C80B01020120020302014804050394F220C7009130E08308D718'
    '20D31FDB3C51A8BAF2A10AF9015410B6F910F2A206D30621C0018EA131383881012027D749BAF2A3F80006D21FD3FF'
    '3004A40810375E324144DB3CED54E30E080B090202CE06070105A12D810A00034308002D5708100C4C8CB0814CA071'
    '2CBFF01FA02CB6AC973FB008002CED44D0D31FD3FFD31FD31FFA00FA00D21FD3FFF404D1025801C0028F23FA003020'
    '82101DCD6500A0DB3CBCF264F800546990F00304A4081037405613DB3CED54925F0AE20A0B0008F8276F1000340'
    '8C8CB1F17CBFF15CB1F13CB1F01FA0201FA02CA1FCBFFF400C9FBBDFD1B'
)


def create_data_cell(options: dict) -> Cell:
    cell = Cell()
    cell.bits.write_uint(0, 32)  # seqno
    cell.bits.write_bytes(options['public_key'])
    return cell


def create_signing_message(seqno: int, operation, options: dict) -> Cell:
    cell = Cell()
    cell.bits.write_uint(seqno, 32)
    return cell


LOTTERY = ContractSpec(
    kind=ContractKind.LOTTERY,
    code=LOTTERY_CODE,
    build_data=create_data_cell,
    build_signing_message=create_signing_message,
    operations=(Deploy,),
    getters=('seqno', 'balance'),
)
