import base64
import binascii
import string
from typing import Optional, Union

from tonsdk.utils import crc16

from .exceptions import InvalidAddress

BOUNCEABLE_TAG = 0x11
NON_BOUNCEABLE_TAG = 0x51
TEST_FLAG = 0x80


def parse_friendly_address(src: str) -> dict:
    if len(src) != 48:
        raise InvalidAddress(f"User-friendly address should contain strictly 48 characters: {src}")

    try:
        if '-' in src or '_' in src:
            data = base64.urlsafe_b64decode(src)
        else:
            data = base64.b64decode(src, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidAddress(f"Address is not valid base64: {src}") from e

    if len(data) != 36:
        raise InvalidAddress(f"Unknown address type: byte length is not equal to 36: {src}")

    addr, checksum = data[:34], data[34:]
    if bytes(crc16(addr)) != checksum:
        raise InvalidAddress(f"Wrong crc16 hashsum: {src}")

    tag = addr[0]
    is_test_only = False
    if tag & TEST_FLAG:
        is_test_only = True
        tag ^= TEST_FLAG
    if tag not in (BOUNCEABLE_TAG, NON_BOUNCEABLE_TAG):
        raise InvalidAddress(f"Unknown address tag: {src}")

    workchain = addr[1] - 256 if addr[1] > 127 else addr[1]

    return {
        'is_test_only': is_test_only,
        'is_bounceable': tag == BOUNCEABLE_TAG,
        'workchain': workchain,
        'hash_part': bytes(addr[2:34]),
        'is_url_safe': '-' in src or '_' in src,
    }


def parse_raw_address(src: str) -> dict:
    if src.count(':') != 1:
        raise InvalidAddress(f"Invalid address: {src}")

    wc, hex_part = src.split(':')
    try:
        workchain = int(wc)
    except ValueError as e:
        raise InvalidAddress(f"Invalid address workchain: {src}") from e
    if not -128 <= workchain <= 127:
        raise InvalidAddress(f"Invalid address workchain: {src}")

    if len(hex_part) != 64 or not all(c in string.hexdigits for c in hex_part):
        raise InvalidAddress(f"Invalid address hex: {src}")
    return {'workchain': workchain, 'hash_part': bytes.fromhex(hex_part)}


class Address:
    """Account address: a workchain id and a 256-bit hash part.

    Flags parsed from the user-friendly form only affect how the address is
    printed back; equality compares workchain and hash part.
    """

    def __init__(self, any_form: Union[str, 'Address']):
        if isinstance(any_form, Address):
            self.wc = any_form.wc
            self.hash_part = any_form.hash_part
            self.is_test_only = any_form.is_test_only
            self.is_user_friendly = any_form.is_user_friendly
            self.is_bounceable = any_form.is_bounceable
            self.is_url_safe = any_form.is_url_safe
            return

        if not isinstance(any_form, str):
            raise InvalidAddress(f"Invalid address: {any_form!r}")

        if ':' in any_form:
            parsed = parse_raw_address(any_form)
            self.wc = parsed['workchain']
            self.hash_part = parsed['hash_part']
            self.is_test_only = False
            self.is_user_friendly = False
            self.is_bounceable = False
            self.is_url_safe = False
        else:
            parsed = parse_friendly_address(any_form)
            self.wc = parsed['workchain']
            self.hash_part = parsed['hash_part']
            self.is_test_only = parsed['is_test_only']
            self.is_user_friendly = True
            self.is_bounceable = parsed['is_bounceable']
            self.is_url_safe = parsed['is_url_safe']

    @classmethod
    def parse(cls, src: Union[str, 'Address']) -> 'Address':
        return cls(src)

    @classmethod
    def from_parts(cls, wc: int, hash_part: bytes) -> 'Address':
        if len(hash_part) != 32:
            raise InvalidAddress(f"Hash part should be 32 bytes, got {len(hash_part)}")
        return cls(f"{wc}:{bytes(hash_part).hex()}")

    @staticmethod
    def is_valid(src) -> bool:
        try:
            Address(src)
            return True
        except InvalidAddress:
            return False

    def to_string(self, is_user_friendly: Optional[bool] = None, is_url_safe: Optional[bool] = None,
                  is_bounceable: Optional[bool] = None, is_test_only: Optional[bool] = None) -> str:
        if is_user_friendly is None:
            is_user_friendly = self.is_user_friendly
        if is_url_safe is None:
            is_url_safe = self.is_url_safe
        if is_bounceable is None:
            is_bounceable = self.is_bounceable
        if is_test_only is None:
            is_test_only = self.is_test_only

        if not is_user_friendly:
            return f"{self.wc}:{self.hash_part.hex()}"

        tag = BOUNCEABLE_TAG if is_bounceable else NON_BOUNCEABLE_TAG
        if is_test_only:
            tag |= TEST_FLAG

        addr = bytes([tag, self.wc & 0xFF]) + self.hash_part
        addr_with_checksum = addr + bytes(crc16(addr))

        if is_url_safe:
            return base64.urlsafe_b64encode(addr_with_checksum).decode()
        return base64.b64encode(addr_with_checksum).decode()

    def __eq__(self, other):
        if not isinstance(other, Address):
            return NotImplemented
        return self.wc == other.wc and self.hash_part == other.hash_part

    def __hash__(self):
        return hash((self.wc, self.hash_part))

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return f"<Address {self.to_string(False)}>"
