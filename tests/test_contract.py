import pytest
from nacl.signing import VerifyKey

from tonmanage.address import Address
from tonmanage.boc import Cell
from tonmanage.contract import (
    BRIDGE,
    EXAMPLE,
    LOTTERY,
    SPECS,
    WALLET_V2R1,
    WALLET_V2R2,
    Contract,
    ContractKind,
    Deploy,
    Transfer,
    create_common_msg_info,
    create_external_message_header,
    create_state_init_cell,
    derive_address,
    get_contract_spec,
)
from tonmanage.exceptions import ContractError, MissingPublicKey, UnsupportedOperation

PUBLIC_KEY = b'\x01' * 32
DATA_HASH = '83caf776828356e5cffd001d4ad694b6f726bec2499659869fbfd5aaf6b8326e'
ADDRESS = '0:3a7aaa4ab9921e00afb3a7e637d44140d830d20fe5bba2f87dda8fa2ce9c962e'
RECIPIENT = 'EQDcym0-0e5Uqhhx6hSisfCo6SsPClIUojVAkFi0A2YFGKxq'


def test_wallet_data_cell():
    wallet = Contract(WALLET_V2R1, public_key=PUBLIC_KEY)
    assert wallet.create_data_cell().hex_hash() == DATA_HASH


def test_wallet_address():
    wallet = Contract(WALLET_V2R1, public_key=PUBLIC_KEY)
    assert wallet.address.to_string(False) == ADDRESS
    assert wallet.address.to_string(True, True, True) == 'EQA6eqpKuZIeAK-zp-Y31EFA2DDSD-W7ovh92o-izpyWLh1V'

    state_init = wallet.create_state_init()
    assert state_init['state_init'].hash() == wallet.address.hash_part
    assert derive_address(0, state_init['code'], state_init['data']) == wallet.address


def test_address_depends_on_workchain_and_code():
    v2r1 = Contract(WALLET_V2R1, public_key=PUBLIC_KEY)
    masterchain = Contract(WALLET_V2R1, public_key=PUBLIC_KEY, wc=-1)
    v2r2 = Contract(WALLET_V2R2, public_key=PUBLIC_KEY)

    assert masterchain.address.wc == -1
    assert masterchain.address.hash_part == v2r1.address.hash_part
    assert v2r2.address != v2r1.address


def test_address_is_memoized():
    wallet = Contract(WALLET_V2R1, public_key=PUBLIC_KEY)
    assert wallet.address is wallet.address


def test_explicit_address_sets_workchain():
    contract = Contract(EXAMPLE, address='-1:' + ADDRESS[2:])
    assert contract.options['wc'] == -1
    assert contract.address == Address('-1:' + ADDRESS[2:])


def test_state_init_layout():
    state_init = create_state_init_cell(Cell(), Cell())
    assert state_init.bits.to_fift_hex() == '34_'
    assert len(state_init.refs) == 2


def test_missing_public_key():
    wallet = Contract(WALLET_V2R1)
    with pytest.raises(MissingPublicKey):
        wallet.create_data_cell()
    with pytest.raises(MissingPublicKey):
        wallet.address


def test_missing_provider():
    with pytest.raises(ContractError):
        Contract(LOTTERY, public_key=PUBLIC_KEY).get_seqno()


def test_unsupported_operation():
    lottery = Contract(LOTTERY, public_key=PUBLIC_KEY)
    with pytest.raises(UnsupportedOperation):
        lottery.create_signing_message(1, Transfer(Address(RECIPIENT), 1))


def test_specs_registry():
    assert set(SPECS) == set(ContractKind)
    assert get_contract_spec('v2r2') is WALLET_V2R2
    assert get_contract_spec(ContractKind.BRIDGE) is BRIDGE
    with pytest.raises(ValueError):
        get_contract_spec('v4r2')


@pytest.mark.parametrize('spec', [WALLET_V2R1, WALLET_V2R2, BRIDGE, LOTTERY, EXAMPLE])
def test_code_cells_parse(spec):
    assert spec.create_code_cell().bits.get_used_bits() > 0


def test_external_message_header():
    header = create_external_message_header(ADDRESS)
    assert header.bits.get_used_bits() == 2 + 2 + 267 + 4
    s = header.begin_parse()
    assert s.read_uint(2) == 2
    assert s.read_address() is None
    assert s.read_address() == Address(ADDRESS)
    assert s.read_coins() == 0


def test_common_msg_info_moves_large_body_to_ref():
    header = create_external_message_header(ADDRESS)
    body = Cell()
    body.bits.write_uint(0, 1000)

    message = create_common_msg_info(header, None, body)
    assert message.bits.get_used_bits() == 275 + 1 + 1
    assert message.refs == [body]


def test_init_external_message(key_pair):
    wallet = Contract(WALLET_V2R1, public_key=key_pair.public_key)
    query = wallet.create_init_external_message(key_pair.secret_key)

    assert query['address'] == wallet.address
    assert query['signing_message'].bits.to_fift_hex() == '00000000FFFFFFFF'
    VerifyKey(key_pair.public_key).verify(query['signing_message'].hash(), query['signature'])

    body = query['body']
    assert body.bits.get_used_bits() == 512 + 64
    assert body.begin_parse().read_bytes(64) == query['signature']

    message = query['message']
    assert message.bits.get_used_bits() == 275 + 1 + 1 + 5 + 1 + 576
    assert message.refs == [query['code'], query['data']]


def test_init_external_message_derives_public_key(key_pair):
    wallet = Contract(WALLET_V2R1)
    query = wallet.create_init_external_message(key_pair.secret_key)
    assert wallet.public_key == key_pair.public_key
    assert query['address'] == Contract(WALLET_V2R1, public_key=key_pair.public_key).address


def test_dummy_signature_keeps_layout(key_pair):
    wallet = Contract(WALLET_V2R1, public_key=key_pair.public_key)
    request = wallet.deploy(key_pair.secret_key)

    real = request.message()
    dummy = request.message(dummy_signature=True)
    assert dummy['signature'] == bytes(64)
    assert real['signature'] != dummy['signature']
    assert dummy['message'].bits.get_used_bits() == real['message'].bits.get_used_bits()
    assert dummy['signing_message'].hash() == real['signing_message'].hash()
    assert request.get_query().hash() == real['message'].hash()


def test_external_message_state_init_only_at_seqno_zero(key_pair):
    lottery = Contract(LOTTERY, public_key=key_pair.public_key)

    first = lottery.create_external_message(lottery.create_signing_message(0), key_pair.secret_key, 0)
    assert first['state_init'] is not None
    assert first['code'] is not None

    later = lottery.create_external_message(lottery.create_signing_message(4), key_pair.secret_key, 4)
    assert later['state_init'] is None
    assert later['data'] is None
    assert later['message'].refs == []
    assert later['signing_message'].bits.to_fift_hex() == '00000004'


def test_send_operation_signs_signing_message(key_pair):
    example = Contract(EXAMPLE, public_key=key_pair.public_key)
    query = example.send_operation(Deploy(), key_pair.secret_key, 7).message()
    VerifyKey(key_pair.public_key).verify(query['signing_message'].hash(), query['signature'])
    assert query['address'] == example.address
