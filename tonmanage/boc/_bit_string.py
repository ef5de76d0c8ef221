import math

from ..address import Address
from ..exceptions import BocError, CapacityExceeded, OutOfCapacity


class BitString:
    def __init__(self, length: int = 1023):
        self.array = bytearray(math.ceil(length / 8))
        self.cursor = 0
        self.length = length

    def __repr__(self):
        return f"<BitString {self.cursor}/{self.length} x{{{self.to_fift_hex()}}}>"

    def __len__(self):
        return self.cursor

    def get_free_bits(self) -> int:
        return self.length - self.cursor

    def get_used_bits(self) -> int:
        return self.cursor

    def get_used_bytes(self) -> int:
        return math.ceil(self.cursor / 8)

    def get(self, n: int) -> int:
        return (self.array[n // 8] >> (7 - n % 8)) & 1

    def on(self, n: int):
        self.array[n // 8] |= 1 << (7 - n % 8)

    def off(self, n: int):
        self.array[n // 8] &= ~(1 << (7 - n % 8))

    def reserve(self, bits: int):
        if self.cursor + bits > self.length:
            raise CapacityExceeded(
                f"Cannot write {bits} bits: {self.get_free_bits()} of {self.length} bits are free")

    def write_bit(self, b):
        self.reserve(1)
        if b:
            self.on(self.cursor)
        else:
            self.off(self.cursor)
        self.cursor += 1

    def write_bit_array(self, ba):
        self.reserve(len(ba))
        for b in ba:
            self.write_bit(b)

    def write_uint(self, number: int, bit_length: int):
        if bit_length < 0 or number < 0 or number >= 1 << bit_length:
            raise OutOfCapacity(f"uint{bit_length} cannot hold {number}")
        self.reserve(bit_length)
        for i in range(bit_length - 1, -1, -1):
            self.write_bit((number >> i) & 1)

    def write_int(self, number: int, bit_length: int):
        if bit_length == 0:
            if number != 0:
                raise OutOfCapacity(f"int0 cannot hold {number}")
            return
        bound = 1 << (bit_length - 1)
        if not -bound <= number < bound:
            raise OutOfCapacity(f"int{bit_length} cannot hold {number}")
        # two's complement
        self.write_uint(number & ((1 << bit_length) - 1), bit_length)

    def write_uint8(self, ui8: int):
        self.write_uint(ui8, 8)

    def write_bytes(self, data: bytes):
        self.reserve(len(data) * 8)
        for b in data:
            self.write_uint8(b)

    def write_string(self, value: str):
        self.write_bytes(value.encode('utf-8'))

    def write_coins(self, amount: int):
        """Write a VarUInteger 16: byte length nibble, then the amount."""
        if amount < 0:
            raise OutOfCapacity(f"Coin amount cannot be negative: {amount}")
        length = math.ceil(amount.bit_length() / 8)
        if length > 15:
            raise OutOfCapacity(f"Coin amount does not fit into 15 bytes: {amount}")
        self.reserve(4 + length * 8)
        self.write_uint(length, 4)
        if length:
            self.write_uint(amount, length * 8)

    write_grams = write_coins

    def write_address(self, address):
        if address is None:
            self.write_uint(0, 2)
            return

        address = Address(address)
        self.reserve(2 + 1 + 8 + 256)
        self.write_uint(2, 2)  # addr_std
        self.write_uint(0, 1)  # no anycast
        self.write_int(address.wc, 8)
        self.write_bytes(address.hash_part)

    def write_bit_string(self, another: 'BitString'):
        self.reserve(another.cursor)
        for i in range(another.cursor):
            self.write_bit(another.get(i))

    def copy(self) -> 'BitString':
        result = BitString(self.length)
        result.array = bytearray(self.array)
        result.cursor = self.cursor
        return result

    def get_top_upped_array(self) -> bytes:
        """Used bytes, with an incomplete last byte closed by a 1 bit and zeros."""
        data = bytearray(self.array[:self.get_used_bytes()])
        rem = self.cursor % 8
        if rem:
            data[-1] &= (0xFF << (8 - rem)) & 0xFF
            data[-1] |= 1 << (7 - rem)
        return bytes(data)

    def set_top_upped_array(self, array: bytes, fulfilled_bytes: bool = True):
        if len(array) > math.ceil(self.length / 8):
            raise CapacityExceeded(f"{len(array)} bytes do not fit into {self.length} bits")
        self.array = bytearray(math.ceil(self.length / 8))
        self.array[:len(array)] = array
        self.cursor = len(array) * 8

        if not fulfilled_bytes and array:
            for _ in range(7):
                self.cursor -= 1
                if self.get(self.cursor):
                    self.off(self.cursor)
                    break
            else:
                raise BocError(f"Incorrect top-upped array: {bytes(array).hex()}")

        if self.cursor > self.length:
            raise CapacityExceeded(f"{self.cursor} bits do not fit into {self.length} bits")

    def to_fift_hex(self) -> str:
        nibbles = self.get_top_upped_array().hex().upper()[:math.ceil(self.cursor / 4)]
        return nibbles if self.cursor % 4 == 0 else nibbles + '_'
