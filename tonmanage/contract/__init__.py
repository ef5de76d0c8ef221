from ._base import (
    Contract,
    MethodRequest,
    create_common_msg_info,
    create_external_message_header,
    create_internal_message_header,
    create_state_init_cell,
    derive_address,
)
from ._operations import (
    BridgeOp,
    ChangeCollector,
    ChangeFees,
    Deploy,
    Operation,
    SendMode,
    Transfer,
    WithdrawReward,
)
from ._spec import ContractKind, ContractSpec
from .bridge import BRIDGE, BridgeData
from .example import EXAMPLE
from .lottery import LOTTERY
from .wallet import WALLET_V2R1, WALLET_V2R2

SPECS = {spec.kind: spec for spec in (WALLET_V2R1, WALLET_V2R2, BRIDGE, LOTTERY, EXAMPLE)}


def get_contract_spec(kind) -> ContractSpec:
    return SPECS[ContractKind(kind)]


__all__ = [
    'BRIDGE',
    'BridgeData',
    'BridgeOp',
    'ChangeCollector',
    'ChangeFees',
    'Contract',
    'ContractKind',
    'ContractSpec',
    'Deploy',
    'EXAMPLE',
    'LOTTERY',
    'MethodRequest',
    'Operation',
    'SPECS',
    'SendMode',
    'Transfer',
    'WALLET_V2R1',
    'WALLET_V2R2',
    'WithdrawReward',
    'create_common_msg_info',
    'create_external_message_header',
    'create_internal_message_header',
    'create_state_init_cell',
    'derive_address',
    'get_contract_spec',
]
