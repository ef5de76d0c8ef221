from typing import Optional

from ..exceptions import TooManyReferences
from ._bit_string import BitString
from ._cell import MAX_BITS, MAX_REFS, Cell


class Builder:
    def __init__(self):
        self.bits = BitString(MAX_BITS)
        self.refs = []

    def __repr__(self):
        return f"<Builder refs_num: {len(self.refs)}, x{{{self.bits.to_fift_hex()}}}>"

    def store_cell(self, src: Cell):
        src.check_refs()
        if len(self.refs) + len(src.refs) > MAX_REFS:
            raise TooManyReferences(
                f"Cannot store {len(src.refs)} references into a builder with {len(self.refs)}")
        self.bits.write_bit_string(src.bits)
        self.refs.extend(src.refs)
        return self

    def store_ref(self, src: Cell):
        if len(self.refs) >= MAX_REFS:
            raise TooManyReferences(f"Builder already holds {MAX_REFS} references")
        self.refs.append(src)
        return self

    def store_maybe_ref(self, src: Optional[Cell]):
        if src is None:
            self.bits.write_bit(0)
        else:
            if len(self.refs) >= MAX_REFS:
                raise TooManyReferences(f"Builder already holds {MAX_REFS} references")
            self.bits.write_bit(1)
            self.refs.append(src)
        return self

    def store_bit(self, value):
        self.bits.write_bit(value)
        return self

    def store_bit_array(self, value):
        self.bits.write_bit_array(value)
        return self

    def store_uint(self, value: int, bit_length: int):
        self.bits.write_uint(value, bit_length)
        return self

    def store_uint8(self, value: int):
        self.bits.write_uint8(value)
        return self

    def store_int(self, value: int, bit_length: int):
        self.bits.write_int(value, bit_length)
        return self

    def store_string(self, value: str):
        self.bits.write_string(value)
        return self

    def store_bytes(self, value: bytes):
        self.bits.write_bytes(value)
        return self

    def store_bit_string(self, value: BitString):
        self.bits.write_bit_string(value)
        return self

    def store_address(self, value):
        self.bits.write_address(value)
        return self

    def store_coins(self, value: int):
        self.bits.write_coins(value)
        return self

    store_grams = store_coins

    def end_cell(self) -> Cell:
        cell = Cell()
        cell.bits = self.bits.copy()
        cell.refs = list(self.refs)
        return cell


def begin_cell() -> Builder:
    return Builder()
