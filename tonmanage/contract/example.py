from ._operations import Deploy
from ._spec import ContractKind, ContractSpec
from .lottery import create_data_cell, create_signing_message

EXAMPLE_CODE = (
    'B5EE9C72410108010072000114FF00F4A413F4BCF2C80B0102012002030201480405006EF28308D71820D31FED44D0'
    'D31FD3FFD15131BAF2A103F901541042F910F2A2F8005120D74A96D307D402FB00DED1A4C8CB1FCBFFC9ED540004D0'
    '3002014806070017BB39CED44D0D31F31D70BFF80011B8C97ED44D0D70B1F8E93924A9'
)

EXAMPLE = ContractSpec(
    kind=ContractKind.EXAMPLE,
    code=EXAMPLE_CODE,
    build_data=create_data_cell,
    build_signing_message=create_signing_message,
    operations=(Deploy,),
    getters=('seqno', 'get_public_key'),
)
