from types import SimpleNamespace
from typing import Callable, Dict, Tuple

import pytest
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import ContractLogicError

from polycall.multicall.constants import (AGGREGATE3_SELECTOR, AGGREGATE_SELECTOR, ERROR_SELECTOR,
                                          MULTICALL3_ADDRESS, TRY_AGGREGATE_SELECTOR)

WETH = Web3.to_checksum_address('0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2')
BROKEN = Web3.to_checksum_address('0x000000000000000000000000000000000000dEaD')
ALICE = Web3.to_checksum_address('0x1111111111111111111111111111111111111111')
BOB = Web3.to_checksum_address('0x2222222222222222222222222222222222222222')
BLOCK_NUMBER = 19_000_000

ERC20_ABI = [
    {'type': 'function', 'name': 'name', 'stateMutability': 'view', 'inputs': [],
     'outputs': [{'name': '', 'type': 'string', 'internalType': 'string'}]},
    {'type': 'function', 'name': 'symbol', 'stateMutability': 'view', 'inputs': [],
     'outputs': [{'name': '', 'type': 'string', 'internalType': 'string'}]},
    {'type': 'function', 'name': 'decimals', 'stateMutability': 'view', 'inputs': [],
     'outputs': [{'name': '', 'type': 'uint8', 'internalType': 'uint8'}]},
    {'type': 'function', 'name': 'totalSupply', 'stateMutability': 'view', 'inputs': [],
     'outputs': [{'name': '', 'type': 'uint256', 'internalType': 'uint256'}]},
    {'type': 'function', 'name': 'balanceOf', 'stateMutability': 'view',
     'inputs': [{'name': 'owner', 'type': 'address', 'internalType': 'address'}],
     'outputs': [{'name': '', 'type': 'uint256', 'internalType': 'uint256'}]},
    {'type': 'function', 'name': 'transfer', 'stateMutability': 'nonpayable',
     'inputs': [{'name': 'to', 'type': 'address', 'internalType': 'address'},
                {'name': 'amount', 'type': 'uint256', 'internalType': 'uint256'}],
     'outputs': [{'name': '', 'type': 'bool', 'internalType': 'bool'}]},
]


def error_payload(reason: str) -> bytes:
    return ERROR_SELECTOR + encode(('string',), (reason,))


class FakeChain:
    """
    An in-memory node: answers eth_call for Multicall3 and for the contracts registered on it.
    Inner handlers return (success, return_data).
    """

    def __init__(self, chain_id: int = 1):
        self.chain_id = chain_id
        self.sent = []
        self._handlers: Dict[Tuple[str, bytes], Callable[[bytes], Tuple[bool, bytes]]] = {}
        self.on(MULTICALL3_ADDRESS, 'getChainId()', lambda _: (True, encode(('uint256',), (self.chain_id,))))
        self.on(MULTICALL3_ADDRESS, 'getBlockNumber()', lambda _: (True, encode(('uint256',), (BLOCK_NUMBER,))))
        self.returns(MULTICALL3_ADDRESS, 'getEthBalance(address)', ('uint256',), 10 ** 18)

    def on(self, address: str, signature: str, handler):
        selector = function_signature_to_4byte_selector(signature)
        self._handlers[(Web3.to_checksum_address(address), selector)] = handler

    def returns(self, address: str, signature: str, output_types, *values):
        self.on(address, signature, lambda _: (True, encode(output_types, values)))

    def reverts(self, address: str, signature: str, reason: str):
        self.on(address, signature, lambda _: (False, error_payload(reason)))

    def execute_inner(self, target: str, data: bytes) -> Tuple[bool, bytes]:
        handler = self._handlers.get((Web3.to_checksum_address(target), bytes(data[:4])))
        if handler is None:
            # calls to accounts without code succeed with no return data
            return True, b''
        return handler(bytes(data[4:]))

    def execute(self, tx) -> HexBytes:
        self.sent.append(tx)
        data = HexBytes(tx['data'])
        selector, payload = bytes(data[:4]), bytes(data[4:])
        if selector == AGGREGATE_SELECTOR:
            calls = decode(('(address,bytes)[]',), payload)[0]
            results = [self.execute_inner(*call) for call in calls]
            self._abort_on_failure(results, [False] * len(results), 'Multicall3: call failed')
            return HexBytes(encode(('uint256', 'bytes[]'), (BLOCK_NUMBER, [r for _, r in results])))
        if selector == TRY_AGGREGATE_SELECTOR:
            require_success, calls = decode(('bool', '(address,bytes)[]'), payload)
            results = [self.execute_inner(*call) for call in calls]
            self._abort_on_failure(results, [not require_success] * len(results), 'Multicall3: call failed')
            return HexBytes(encode(('(bool,bytes)[]',), (results,)))
        if selector == AGGREGATE3_SELECTOR:
            calls = decode(('(address,bool,bytes)[]',), payload)[0]
            results = [self.execute_inner(target, call_data) for target, _, call_data in calls]
            self._abort_on_failure(results, [allow for _, allow, _ in calls], 'Multicall3: call failed')
            return HexBytes(encode(('(bool,bytes)[]',), (results,)))
        success, return_data = self.execute_inner(tx['to'], data)
        self._abort_on_failure([(success, return_data)], [False], 'execution reverted')
        return HexBytes(return_data)

    @staticmethod
    def _abort_on_failure(results, tolerated, reason):
        for (success, _), allow in zip(results, tolerated):
            if not success and not allow:
                raise ContractLogicError(f'execution reverted: {reason}',
                                         data=HexBytes(error_payload(reason)).to_0x_hex())


class FakeEth:
    def __init__(self, chain: FakeChain, reported_chain_id: int = None):
        self._chain = chain
        self._reported_chain_id = reported_chain_id

    @property
    def chain_id(self) -> int:
        return self._reported_chain_id if self._reported_chain_id is not None else self._chain.chain_id

    def call(self, transaction, block_identifier=None, state_override=None, ccip_read_enabled=None):
        return self._chain.execute(transaction)

    def contract(self, address=None, abi=None):
        return Web3().eth.contract(address=address, abi=abi)


class FakeAsyncEth(FakeEth):
    @property
    def chain_id(self):
        async def chain_id():
            return FakeEth.chain_id.fget(self)
        return chain_id()

    async def call(self, transaction, block_identifier=None, state_override=None, ccip_read_enabled=None):
        return self._chain.execute(transaction)


def fake_web3(chain: FakeChain, reported_chain_id: int = None):
    return SimpleNamespace(eth=FakeEth(chain, reported_chain_id))


def fake_async_web3(chain: FakeChain, reported_chain_id: int = None):
    return SimpleNamespace(eth=FakeAsyncEth(chain, reported_chain_id))


@pytest.fixture
def chain():
    chain = FakeChain(chain_id=1)
    chain.returns(WETH, 'name()', ('string',), 'Wrapped Ether')
    chain.returns(WETH, 'symbol()', ('string',), 'WETH')
    chain.returns(WETH, 'decimals()', ('uint8',), 18)
    chain.returns(WETH, 'totalSupply()', ('uint256',), 3_000_000 * 10 ** 18)
    chain.on(WETH, 'balanceOf(address)',
             lambda args: (True, encode(('uint256',), ({ALICE: 5, BOB: 7}.get(
                 Web3.to_checksum_address(decode(('address',), args)[0]), 0),))))
    chain.reverts(BROKEN, 'name()', 'not implemented')
    return chain


@pytest.fixture
def w3(chain):
    return fake_web3(chain)


@pytest.fixture
def weth():
    return Web3().eth.contract(address=WETH, abi=ERC20_ABI)


@pytest.fixture
def broken():
    return Web3().eth.contract(address=BROKEN, abi=ERC20_ABI)
