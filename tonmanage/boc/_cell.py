import hashlib
import math
from typing import List, Union

from tonsdk.utils import crc32c

from ..exceptions import BocError, TooManyReferences
from ._bit_string import BitString

REACH_BOC_MAGIC_PREFIX = bytes.fromhex('B5EE9C72')
LEAN_BOC_MAGIC_PREFIX = bytes.fromhex('68FF65F3')
LEAN_BOC_MAGIC_PREFIX_CRC = bytes.fromhex('ACC3A728')

MAX_REFS = 4
MAX_BITS = 1023


class Cell:
    def __init__(self):
        self.bits = BitString(MAX_BITS)
        self.refs: List['Cell'] = []
        self.is_exotic = False

    def __repr__(self):
        return f"<Cell refs_num: {len(self.refs)}, x{{{self.bits.to_fift_hex()}}}>"

    def check_refs(self):
        if len(self.refs) > MAX_REFS:
            raise TooManyReferences(f"Cell has {len(self.refs)} references, at most {MAX_REFS} allowed")

    def write_cell(self, another_cell: 'Cell'):
        another_cell.check_refs()
        if len(self.refs) + len(another_cell.refs) > MAX_REFS:
            raise TooManyReferences(
                f"Cannot append {len(another_cell.refs)} references to a cell with {len(self.refs)}")
        self.bits.write_bit_string(another_cell.bits)
        self.refs.extend(another_cell.refs)

    def get_max_level(self) -> int:
        return 0

    def get_max_depth(self) -> int:
        if not self.refs:
            return 0
        return 1 + max(ref.get_max_depth() for ref in self.refs)

    def get_refs_descriptor(self) -> bytes:
        self.check_refs()
        return bytes([len(self.refs) + self.is_exotic * 8 + self.get_max_level() * 32])

    def get_bits_descriptor(self) -> bytes:
        length = self.bits.cursor
        return bytes([math.ceil(length / 8) + math.floor(length / 8)])

    def get_data_with_descriptors(self) -> bytes:
        return self.get_refs_descriptor() + self.get_bits_descriptor() + self.bits.get_top_upped_array()

    def get_repr(self) -> bytes:
        repr_array = [self.get_data_with_descriptors()]
        for ref in self.refs:
            repr_array.append(ref.get_max_depth().to_bytes(2, 'big'))
        for ref in self.refs:
            repr_array.append(ref.hash())
        return b''.join(repr_array)

    def hash(self) -> bytes:
        return hashlib.sha256(self.get_repr()).digest()

    bytes_hash = hash

    def hex_hash(self) -> str:
        return self.hash().hex()

    def begin_parse(self):
        from ._slice import Slice
        return Slice(self)

    def serialize_for_boc(self, cells_index: dict, ref_size: int) -> bytes:
        repr_array = [self.get_data_with_descriptors()]
        for ref in self.refs:
            repr_array.append(cells_index[ref.hash()].to_bytes(ref_size, 'big'))
        return b''.join(repr_array)

    def tree_walk(self):
        return tree_walk(self, [], {})

    def to_boc(self, has_idx: bool = True, hash_crc32: bool = True, has_cache_bits: bool = False,
               flags: int = 0) -> bytes:
        topological_order, cells_index = self.tree_walk()
        cells_num = len(topological_order)

        s_bytes = max(math.ceil(cells_num.bit_length() / 8), 1)
        serialized_cells = [cell.serialize_for_boc(cells_index, s_bytes) for _, cell in topological_order]
        full_size = sum(len(c) for c in serialized_cells)
        offset_bytes = max(math.ceil(full_size.bit_length() / 8), 1)

        serialization = BitString((1023 + 32 * 4 + 32 * 3) * cells_num + 8 * (32 + offset_bytes * cells_num))
        serialization.write_bytes(REACH_BOC_MAGIC_PREFIX)
        serialization.write_bit_array([has_idx, hash_crc32, has_cache_bits])
        serialization.write_uint(flags, 2)
        serialization.write_uint(s_bytes, 3)
        serialization.write_uint8(offset_bytes)
        serialization.write_uint(cells_num, s_bytes * 8)
        serialization.write_uint(1, s_bytes * 8)  # one root
        serialization.write_uint(0, s_bytes * 8)  # complete BOCs only
        serialization.write_uint(full_size, offset_bytes * 8)
        serialization.write_uint(0, s_bytes * 8)  # root index
        if has_idx:
            offset = 0
            for cell_bytes in serialized_cells:
                offset += len(cell_bytes)
                serialization.write_uint(offset, offset_bytes * 8)
        for cell_bytes in serialized_cells:
            serialization.write_bytes(cell_bytes)

        result = serialization.get_top_upped_array()
        if hash_crc32:
            result += bytes(crc32c(result))
        return result

    @classmethod
    def from_boc(cls, serialized_boc: Union[str, bytes]) -> List['Cell']:
        return deserialize_boc(serialized_boc)

    @classmethod
    def one_from_boc(cls, serialized_boc: Union[str, bytes]) -> 'Cell':
        cells = deserialize_boc(serialized_boc)
        if len(cells) != 1:
            raise BocError(f"Expected 1 root cell, got {len(cells)}")
        return cells[0]


def move_to_end(index_hashmap: dict, topological_order: list, target: bytes):
    target_index = index_hashmap[target]
    for _hash in index_hashmap:
        if index_hashmap[_hash] > target_index:
            index_hashmap[_hash] -= 1
    index_hashmap[target] = len(topological_order) - 1
    data = topological_order.pop(target_index)
    topological_order.append(data)
    for sub_cell in data[1].refs:
        move_to_end(index_hashmap, topological_order, sub_cell.hash())


def tree_walk(cell: Cell, topological_order: list, index_hashmap: dict, parent_hash: bytes = None):
    """Order cells root first, every cell before the cells it references.

    Identical sub-trees share one entry.
    """
    cell_hash = cell.hash()
    if cell_hash in index_hashmap:
        if parent_hash is not None and index_hashmap[parent_hash] > index_hashmap[cell_hash]:
            move_to_end(index_hashmap, topological_order, cell_hash)
        return topological_order, index_hashmap

    index_hashmap[cell_hash] = len(topological_order)
    topological_order.append((cell_hash, cell))
    for sub_cell in cell.refs:
        tree_walk(sub_cell, topological_order, index_hashmap, cell_hash)
    return topological_order, index_hashmap


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def read(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise BocError("Not enough bytes for BOC")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def read_int(self, n: int) -> int:
        return int.from_bytes(self.read(n), 'big')


def parse_boc_header(serialized_boc: bytes) -> dict:
    if len(serialized_boc) < 5:
        raise BocError("Not enough bytes for magic prefix")

    reader = _Reader(serialized_boc)
    prefix = reader.read(4)
    if prefix == REACH_BOC_MAGIC_PREFIX:
        flags_byte = reader.read_int(1)
        has_idx = bool(flags_byte & 128)
        hash_crc32 = bool(flags_byte & 64)
        has_cache_bits = bool(flags_byte & 32)
        flags = (flags_byte >> 3) & 3
        size_bytes = flags_byte & 7
    elif prefix in (LEAN_BOC_MAGIC_PREFIX, LEAN_BOC_MAGIC_PREFIX_CRC):
        has_idx = True
        hash_crc32 = prefix == LEAN_BOC_MAGIC_PREFIX_CRC
        has_cache_bits = False
        flags = 0
        size_bytes = reader.read_int(1)
    else:
        raise BocError(f"Unknown BOC magic prefix: {prefix.hex()}")

    if not 1 <= size_bytes <= 4:
        raise BocError(f"Invalid reference size: {size_bytes}")

    offset_bytes = reader.read_int(1)
    if not 1 <= offset_bytes <= 8:
        raise BocError(f"Invalid offset size: {offset_bytes}")

    cells_num = reader.read_int(size_bytes)
    roots_num = reader.read_int(size_bytes)
    absent_num = reader.read_int(size_bytes)
    tot_cells_size = reader.read_int(offset_bytes)
    if roots_num < 1 or roots_num > cells_num or absent_num:
        raise BocError("Unsupported BOC: wrong root or absent cell count")

    root_list = [reader.read_int(size_bytes) for _ in range(roots_num)]
    index = None
    if has_idx:
        index = [reader.read_int(offset_bytes) for _ in range(cells_num)]
    cells_data = reader.read(tot_cells_size)

    if hash_crc32:
        crc = reader.read(4)
        if bytes(crc32c(serialized_boc[:reader.pos - 4])) != crc:
            raise BocError("CRC32C mismatch")

    if reader.pos != len(serialized_boc):
        raise BocError("Trailing bytes after BOC")

    return {
        'has_idx': has_idx,
        'hash_crc32': hash_crc32,
        'has_cache_bits': has_cache_bits,
        'flags': flags,
        'size_bytes': size_bytes,
        'off_bytes': offset_bytes,
        'cells_num': cells_num,
        'roots_num': roots_num,
        'absent_num': absent_num,
        'tot_cells_size': tot_cells_size,
        'root_list': root_list,
        'index': index,
        'cells_data': cells_data,
    }


def deserialize_cell_data(cell_data: bytes, reference_index_size: int):
    if len(cell_data) < 2:
        raise BocError("Not enough bytes to encode cell descriptors")

    d1, d2 = cell_data[0], cell_data[1]
    cell_data = cell_data[2:]
    is_exotic = bool(d1 & 8)
    has_hashes = bool(d1 & 16)
    level = d1 >> 5
    ref_num = d1 % 8
    if is_exotic or level:
        raise BocError("Exotic cells are not supported")
    if ref_num > MAX_REFS:
        raise BocError(f"Cell has {ref_num} references")
    if has_hashes:
        # level 0: one hash and one depth
        if len(cell_data) < 32 + 2:
            raise BocError("Not enough bytes for cell hashes")
        cell_data = cell_data[32 + 2:]

    data_bytes_size = math.ceil(d2 / 2)
    fulfilled_bytes = d2 % 2 == 0
    if len(cell_data) < data_bytes_size + reference_index_size * ref_num:
        raise BocError("Not enough bytes to encode cell data")

    cell = Cell()
    cell.bits.set_top_upped_array(cell_data[:data_bytes_size], fulfilled_bytes)
    cell_data = cell_data[data_bytes_size:]

    refs = []
    for _ in range(ref_num):
        refs.append(int.from_bytes(cell_data[:reference_index_size], 'big'))
        cell_data = cell_data[reference_index_size:]

    return cell, refs, cell_data


def deserialize_boc(serialized_boc: Union[str, bytes]) -> List[Cell]:
    if isinstance(serialized_boc, str):
        serialized_boc = bytes.fromhex(serialized_boc)

    header = parse_boc_header(bytes(serialized_boc))
    cells_data = header['cells_data']
    cells = []
    cell_refs = []
    for _ in range(header['cells_num']):
        cell, refs, cells_data = deserialize_cell_data(cells_data, header['size_bytes'])
        cells.append(cell)
        cell_refs.append(refs)

    for i in reversed(range(header['cells_num'])):
        for r in cell_refs[i]:
            if r <= i:
                raise BocError("Topological order is broken")
            if r >= header['cells_num']:
                raise BocError(f"Reference index {r} out of range")
            cells[i].refs.append(cells[r])

    return [cells[r] for r in header['root_list']]
