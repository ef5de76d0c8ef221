from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

from ..address import Address
from ..boc import Cell


class BridgeOp(IntEnum):
    DEPLOY = 0
    CHANGE_COLLECTOR = 1
    CHANGE_FEES = 2
    WITHDRAW_REWARD = 3


class SendMode(IntEnum):
    ORDINARY = 0
    SENDER_PAYS_FORWARD_FEES = 1
    IGNORE_ERRORS = 2
    DESTROY_ON_ZERO_BALANCE = 32
    CARRY_REMAINING_INBOUND = 64
    CARRY_ALL_BALANCE = 128


@dataclass(frozen=True)
class Deploy:
    pass


@dataclass(frozen=True)
class Transfer:
    to_address: Address
    amount: int
    payload: Union[str, bytes, Cell, None] = None
    send_mode: int = SendMode.SENDER_PAYS_FORWARD_FEES | SendMode.IGNORE_ERRORS
    state_init: Optional[Cell] = None
    valid_until: Optional[int] = None


@dataclass(frozen=True)
class ChangeCollector:
    collector_address: Address


@dataclass(frozen=True)
class ChangeFees:
    flat_reward: int
    network_fee: int
    factor: int


@dataclass(frozen=True)
class WithdrawReward:
    beneficiary: Address


Operation = Union[Deploy, Transfer, ChangeCollector, ChangeFees, WithdrawReward]
