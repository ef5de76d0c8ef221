import random

import pytest

from tonmanage.address import Address
from tonmanage.boc import BitString, Builder, Cell, begin_cell, deserialize_boc, parse_boc_header
from tonmanage.contract.bridge import BRIDGE_CODE
from tonmanage.contract.lottery import LOTTERY_CODE
from tonmanage.contract.wallet import WALLET_V2R1_CODE
from tonmanage.exceptions import BocError, CapacityExceeded, CellUnderflow, TooManyReferences

EMPTY_CELL_HASH = '96a296d224f285c67bee93c30f8a309157f0daa35dc5b87e410b78630a09cfc7'
WALLET_V2R1_CODE_HASH = 'a0cfc2c48aee16a271f2cfc0b7382d81756cecb1017d077faaab3bb602f6868c'


def test_empty_cell_hash():
    assert Cell().hex_hash() == EMPTY_CELL_HASH


def test_descriptors():
    cell = Cell()
    cell.bits.write_uint(5, 3)
    assert cell.get_bits_descriptor() == b'\x01'
    cell.bits.write_uint(0, 5)
    assert cell.get_bits_descriptor() == b'\x02'

    cell.refs.append(Cell())
    assert cell.get_refs_descriptor() == b'\x01'
    assert cell.get_max_depth() == 1


def test_equal_content_equal_hash():
    first = begin_cell().store_uint(7, 32).store_ref(Cell()).end_cell()
    second = begin_cell().store_uint(7, 32).store_ref(Cell()).end_cell()
    third = begin_cell().store_uint(7, 33).store_ref(Cell()).end_cell()
    assert first.hash() == second.hash()
    assert first.hash() != third.hash()


def test_wallet_code_round_trip():
    code = Cell.one_from_boc(WALLET_V2R1_CODE)
    assert code.hex_hash() == WALLET_V2R1_CODE_HASH
    assert code.to_boc(False) == bytes.fromhex(WALLET_V2R1_CODE)


@pytest.mark.parametrize('boc', [BRIDGE_CODE, LOTTERY_CODE])
def test_multi_cell_round_trip(boc):
    code = Cell.one_from_boc(boc)
    assert len(code.refs) > 0
    restored = Cell.one_from_boc(code.to_boc())
    assert restored.hash() == code.hash()


def test_boc_header_flags():
    header = parse_boc_header(bytes.fromhex(WALLET_V2R1_CODE))
    assert not header['has_idx']
    assert header['hash_crc32']
    assert header['cells_num'] == 1
    assert header['root_list'] == [0]

    header = parse_boc_header(Cell.one_from_boc(BRIDGE_CODE).to_boc(True, True))
    assert header['has_idx']
    assert header['index'][-1] == header['tot_cells_size']


def test_shared_subtree_is_stored_once():
    leaf = begin_cell().store_uint(1, 8).end_cell()
    root = begin_cell().store_ref(leaf).store_ref(begin_cell().store_uint(1, 8).end_cell()).end_cell()

    boc = root.to_boc(False)
    assert parse_boc_header(boc)['cells_num'] == 2
    restored = Cell.one_from_boc(boc)
    assert restored.refs[0] is restored.refs[1]
    assert restored.hash() == root.hash()


def test_crc_mismatch():
    boc = bytearray(bytes.fromhex(WALLET_V2R1_CODE))
    boc[-1] ^= 0xFF
    with pytest.raises(BocError):
        deserialize_boc(bytes(boc))


def test_unknown_magic():
    with pytest.raises(BocError):
        deserialize_boc(b'\x00\x01\x02\x03\x04\x05')


def test_truncated_boc():
    with pytest.raises(BocError):
        deserialize_boc(bytes.fromhex(WALLET_V2R1_CODE)[:20])


def test_one_from_boc_needs_a_single_root():
    cell = Cell.one_from_boc(Cell().to_boc())
    assert cell.bits.get_used_bits() == 0


def test_cell_capacity():
    cell = Cell()
    cell.bits.write_uint(0, 1023)
    with pytest.raises(CapacityExceeded):
        cell.bits.write_bit(0)


def test_too_many_references():
    builder = Builder()
    for _ in range(4):
        builder.store_ref(Cell())
    with pytest.raises(TooManyReferences):
        builder.store_ref(Cell())


def test_write_cell_checks_references():
    target = Cell()
    target.refs.extend([Cell(), Cell(), Cell()])
    source = Cell()
    source.refs.extend([Cell(), Cell()])
    with pytest.raises(TooManyReferences):
        target.write_cell(source)


def test_builder_and_slice():
    address = Address('EQDcym0-0e5Uqhhx6hSisfCo6SsPClIUojVAkFi0A2YFGKxq')
    cell = (
        begin_cell()
        .store_uint(12345, 32)
        .store_int(-7, 16)
        .store_coins(10 ** 12)
        .store_address(address)
        .store_address(None)
        .store_maybe_ref(Cell())
        .store_string('memo')
        .end_cell()
    )

    s = cell.begin_parse()
    assert s.read_uint(32) == 12345
    assert s.read_int(16) == -7
    assert s.read_coins() == 10 ** 12
    assert s.read_address() == address
    assert s.read_address() is None
    assert s.read_bit() == 1
    assert s.read_ref().hash() == Cell().hash()
    assert s.read_string() == 'memo'
    with pytest.raises(CellUnderflow):
        s.read_bit()
    with pytest.raises(CellUnderflow):
        s.read_ref()


def test_maybe_ref_on_full_builder_keeps_no_reference():
    builder = begin_cell().store_uint(0, 1023)
    with pytest.raises(CapacityExceeded):
        builder.store_maybe_ref(Cell())
    assert builder.refs == []


@pytest.mark.parametrize('bits', [1016, 1017, 1022, 1023])
def test_full_size_cell_round_trip(bits):
    cell = begin_cell().store_uint(0, bits).end_cell()
    restored = Cell.one_from_boc(cell.to_boc())
    assert restored.bits.get_used_bits() == bits
    assert restored.hash() == cell.hash()


def test_oversized_cell_data_is_rejected():
    bits = BitString()
    with pytest.raises(CapacityExceeded):
        bits.set_top_upped_array(b'\xff' * 129)
    with pytest.raises(CapacityExceeded):
        bits.set_top_upped_array(b'\xff' * 128)


def random_tree(rng, depth):
    builder = Builder()
    size = 1023 if rng.random() < 0.3 else rng.randint(0, 1023)
    builder.store_uint(rng.getrandbits(size) if size else 0, size)
    if depth < 4:
        for _ in range(rng.randint(0, 4 if depth < 2 else 2)):
            builder.store_ref(random_tree(rng, depth + 1))
    return builder.end_cell()


def assert_same_tree(restored, original):
    assert restored.bits.get_used_bits() == original.bits.get_used_bits()
    assert restored.hash() == original.hash()
    assert len(restored.refs) == len(original.refs)
    for restored_ref, original_ref in zip(restored.refs, original.refs):
        assert_same_tree(restored_ref, original_ref)


@pytest.mark.parametrize('seed', range(8))
@pytest.mark.parametrize('has_idx', [False, True])
def test_generated_tree_round_trip(seed, has_idx):
    original = random_tree(random.Random(seed), 0)
    assert_same_tree(Cell.one_from_boc(original.to_boc(has_idx)), original)


def test_shared_full_cells_round_trip():
    full = begin_cell().store_uint((1 << 1023) - 1, 1023).end_cell()
    middle = begin_cell().store_ref(full).store_ref(full).end_cell()
    root = begin_cell().store_uint(1, 1).store_ref(middle).store_ref(full).end_cell()
    assert_same_tree(Cell.one_from_boc(root.to_boc()), root)
