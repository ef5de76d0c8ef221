from typing import NamedTuple

from ..address import Address
from ..boc import Cell
from ..exceptions import ContractError, GetMethodError
from ._operations import BridgeOp, ChangeCollector, ChangeFees, Deploy, WithdrawReward
from ._spec import ContractKind, ContractSpec

BRIDGE_CODE = (
    'B5EE9C72410108010063000114FF00F4A413F4BCF2C80B01020120020302014804050244F28308D71820D31FDB3C52'
    '43BAF2A104F901541054F910F2A2F800D31F5BA402DB3C06070004D0300109A1A973B679060014ED44D0D31FD3FFFA'
    '00D1001802C8CB1FCBFF01FA02C9ED5453758FFE'
)

FEE_FACTOR_BITS = 14


class BridgeData(NamedTuple):
    seqno: int
    public_key: int
    total_locked: int
    collector_address: Address
    flat_reward: int
    network_fee: int
    factor: int

    @classmethod
    def from_stack(cls, stack: list) -> 'BridgeData':
        if len(stack) < 8:
            raise GetMethodError('get_bridge_data', 0, f"get_bridge_data returned {len(stack)} of 8 stack entries")
        seqno, public_key, total_locked, wc, addr, flat_reward, network_fee, factor = stack[:8]
        return cls(
            seqno=seqno,
            public_key=public_key,
            total_locked=total_locked,
            collector_address=Address.from_parts(wc, addr.to_bytes(32, 'big')),
            flat_reward=flat_reward,
            network_fee=network_fee,
            factor=factor,
        )


def create_data_cell(options: dict) -> Cell:
    if options.get('collector_address') is None:
        raise ContractError("Cannot build bridge data cell without a collector address")

    cell = Cell()
    cell.bits.write_uint(0, 32)  # seqno
    cell.bits.write_bytes(options['public_key'])
    cell.bits.write_coins(0)  # total_locked
    cell.bits.write_address(options['collector_address'])
    cell.bits.write_coins(options.get('flat_reward', 0))
    cell.bits.write_coins(options.get('network_fee', 0))
    cell.bits.write_uint(options.get('fee_factor', 0), FEE_FACTOR_BITS)
    return cell


def create_signing_message(seqno: int, operation, options: dict) -> Cell:
    cell = Cell()
    cell.bits.write_uint(seqno, 32)

    if isinstance(operation, Deploy):
        cell.bits.write_uint(BridgeOp.DEPLOY, 32)
    elif isinstance(operation, ChangeCollector):
        cell.bits.write_uint(BridgeOp.CHANGE_COLLECTOR, 32)
        cell.bits.write_address(operation.collector_address)
    elif isinstance(operation, ChangeFees):
        cell.bits.write_uint(BridgeOp.CHANGE_FEES, 32)
        cell.bits.write_coins(operation.flat_reward)
        cell.bits.write_coins(operation.network_fee)
        cell.bits.write_uint(operation.factor, FEE_FACTOR_BITS)
    elif isinstance(operation, WithdrawReward):
        cell.bits.write_uint(BridgeOp.WITHDRAW_REWARD, 32)
        cell.bits.write_address(operation.beneficiary)
    return cell


BRIDGE = ContractSpec(
    kind=ContractKind.BRIDGE,
    code=BRIDGE_CODE,
    build_data=create_data_cell,
    build_signing_message=create_signing_message,
    operations=(Deploy, ChangeCollector, ChangeFees, WithdrawReward),
    getters=('get_bridge_data',),
)
