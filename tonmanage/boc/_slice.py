from typing import Optional

from ..address import Address
from ..exceptions import CellError, CellUnderflow


class Slice:
    """Read cursor over a cell's bits and references."""

    def __init__(self, cell):
        self.bits = cell.bits.copy()
        self.refs = list(cell.refs)
        self.length = cell.bits.cursor
        self.read_cursor = 0
        self.ref_cursor = 0

    def __repr__(self):
        return f"<Slice bits: {self.read_cursor}/{self.length}, refs: {self.ref_cursor}/{len(self.refs)}>"

    def get_free_bits(self) -> int:
        return self.length - self.read_cursor

    def get_free_refs(self) -> int:
        return len(self.refs) - self.ref_cursor

    def _check(self, bits: int):
        if bits < 0 or self.read_cursor + bits > self.length:
            raise CellUnderflow(f"Cannot read {bits} bits: {self.get_free_bits()} left")

    def read_bit(self) -> int:
        self._check(1)
        bit = self.bits.get(self.read_cursor)
        self.read_cursor += 1
        return bit

    def read_bits(self, bit_length: int) -> list:
        self._check(bit_length)
        return [self.read_bit() for _ in range(bit_length)]

    def read_uint(self, bit_length: int) -> int:
        self._check(bit_length)
        value = 0
        for _ in range(bit_length):
            value = (value << 1) | self.read_bit()
        return value

    def read_int(self, bit_length: int) -> int:
        if bit_length == 0:
            return 0
        value = self.read_uint(bit_length)
        if value >= 1 << (bit_length - 1):
            value -= 1 << bit_length
        return value

    def read_uint8(self) -> int:
        return self.read_uint(8)

    def read_bytes(self, length: int) -> bytes:
        self._check(length * 8)
        return bytes(self.read_uint8() for _ in range(length))

    def read_string(self, length: Optional[int] = None) -> str:
        if length is None:
            length = self.get_free_bits() // 8
        return self.read_bytes(length).decode('utf-8')

    def read_coins(self) -> int:
        length = self.read_uint(4)
        return self.read_uint(length * 8)

    read_grams = read_coins

    def read_address(self) -> Optional[Address]:
        tag = self.read_uint(2)
        if tag == 0:
            return None
        if tag != 2:
            raise CellError(f"Unsupported address tag: {tag}")
        if self.read_bit():
            raise CellError("Anycast addresses are not supported")
        wc = self.read_int(8)
        return Address.from_parts(wc, self.read_bytes(32))

    def read_ref(self):
        if self.ref_cursor >= len(self.refs):
            raise CellUnderflow("No references left")
        ref = self.refs[self.ref_cursor]
        self.ref_cursor += 1
        return ref
