from .address import Address
from .boc import Builder, Cell, Slice, begin_cell
from .contract import Contract, ContractKind, derive_address, get_contract_spec
from .exceptions import TonManageError

__version__ = '0.1.0'
