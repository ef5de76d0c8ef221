from ._bit_string import BitString
from ._builder import Builder, begin_cell
from ._cell import Cell, deserialize_boc, parse_boc_header
from ._slice import Slice

__all__ = [
    'BitString',
    'Builder',
    'begin_cell',
    'Cell',
    'Slice',
    'deserialize_boc',
    'parse_boc_header',
]
