"""NAME
    Multicall

DESCRIPTION
    A multicall for use with pure Web3 library.
    It uses Multicall3 smart contract by default,
    whose address is looked up from the chain id of the provider,
    but also can use any custom aggregator smart contract
    that implements "aggregate", "tryAggregate" or "aggregate3".

"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple, Union

from eth_abi import encode
from eth_typing import ChecksumAddress
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import ContractLogicError
from web3.types import BlockIdentifier, StateOverride, TxParams

from . import registry
from .call import Call, Outcome
from .constants import AGGREGATOR_VIEWS
from .errors import BatchLockedError, BatchRevertError, ConfigurationError, NetworkMismatchError
from .hooks import RequestHook
from .version import Version

logger = logging.getLogger(__name__)


def revert_data(error: ContractLogicError) -> Optional[HexBytes]:
    data = error.data
    if isinstance(data, dict):
        data = data.get('data')
    if isinstance(data, (str, bytes)) and data:
        try:
            return HexBytes(data)
        except ValueError:
            return None
    return None


class BaseMulticall:
    """
    NAME
        BaseMulticall

    DESCRIPTION
        The batch shared by Multicall and AsyncMulticall:
        an ordered list of calls bound to one chain and one aggregator address,
        plus the version used to encode and decode them.
        Only one dispatch of a batch runs at a time, across threads as well;
        a second one, or any change to the batch, raises BatchLockedError until it ends.

    ATTRIBUTES
        chain_id: int
            The network this batch was built against. Never changes.

        address: ChecksumAddress
            The aggregator contract address.

        version: Version
            Encoding used by the next dispatch.

        block_identifier: BlockIdentifier
            Default block for dispatches.

    """

    def __init__(self):
        self.w3 = None
        self.chain_id: Optional[int] = None
        self.address: Optional[ChecksumAddress] = None
        self.block_identifier: Optional[BlockIdentifier] = None
        self._version = Version.V3
        self._calls: List[Call] = []
        self._dispatching = False
        self._lock = threading.Lock()

    def _bind(self, w3, chain_id: int, address: Optional[str], version, block_identifier):
        self.w3 = w3
        self.chain_id = chain_id
        self.address = Web3.to_checksum_address(address) if address else registry.resolve(chain_id)
        self.version = version
        self.block_identifier = block_identifier

    @property
    def calls(self) -> Tuple[Call, ...]:
        return tuple(self._calls)

    def __len__(self):
        return len(self._calls)

    @property
    def version(self) -> Version:
        return self._version

    @version.setter
    def version(self, value: Union[Version, int, str]):
        version = Version.parse(value)
        with self._lock:
            self._check_unlocked()
            self._version = version

    def set_version(self, value: Union[Version, int, str]):
        self.version = value

    def _check_unlocked(self):
        if self._dispatching:
            raise BatchLockedError('The batch cannot change while it is being dispatched')

    def add_call(self, call: Union[Call, ContractFunction], allow_failure: bool = False):
        """
        Appends a call to the batch.

        Parameters:
            call: Call or ContractFunction
                a prepared Call, or a web3 contract function bound with its arguments,
                e.g. ``token.functions.balanceOf(owner)``

            allow_failure: bool
                used only when ``call`` is a ContractFunction;
                a Call carries its own flag
        """
        if not isinstance(call, Call):
            call = Call.from_contract_function(call, allow_failure)
        with self._lock:
            self._check_unlocked()
            self._calls.append(call)

    def with_call(self, call: Union[Call, ContractFunction], allow_failure: bool = False):
        self.add_call(call, allow_failure)
        return self

    def clear_calls(self):
        with self._lock:
            self._check_unlocked()
            self._calls.clear()

    def aggregator_call(self, name: str, *args, allow_failure: bool = False) -> Call:
        """Builds a call to one of the helper views of the aggregator contract itself."""
        if self.address is None:
            raise ConfigurationError('The aggregator address is not known yet; set the multicall up first')
        try:
            input_types, output_types = AGGREGATOR_VIEWS[name]
        except KeyError:
            raise ConfigurationError(f'The aggregator has no helper view named {name!r}') from None
        selector = function_signature_to_4byte_selector(f'{name}({",".join(input_types)})')
        return Call(self.address, selector + encode(input_types, args), allow_failure, output_types)

    def add_get_chain_id(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getChainId', allow_failure=allow_failure))

    def with_get_chain_id(self, allow_failure: bool = False):
        self.add_get_chain_id(allow_failure)
        return self

    def add_get_block_number(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getBlockNumber', allow_failure=allow_failure))

    def add_get_block_hash(self, block_number: int, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getBlockHash', block_number, allow_failure=allow_failure))

    def add_get_last_block_hash(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getLastBlockHash', allow_failure=allow_failure))

    def add_get_current_block_timestamp(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getCurrentBlockTimestamp', allow_failure=allow_failure))

    def add_get_current_block_gas_limit(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getCurrentBlockGasLimit', allow_failure=allow_failure))

    def add_get_current_block_coinbase(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getCurrentBlockCoinbase', allow_failure=allow_failure))

    def add_get_current_block_difficulty(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getCurrentBlockDifficulty', allow_failure=allow_failure))

    def add_get_basefee(self, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getBasefee', allow_failure=allow_failure))

    def add_get_eth_balance(self, address: str, allow_failure: bool = False):
        self.add_call(self.aggregator_call('getEthBalance', Web3.to_checksum_address(address),
                                           allow_failure=allow_failure))

    def build_transaction(self) -> TxParams:
        """The eth_call request aggregating the current calls with the current version."""
        return self._build_transaction(self.calls, self.version)

    def decode(self, raw: bytes) -> List[Outcome]:
        """Splits the raw return data of the aggregated call into one outcome per current call."""
        return self.version.decode(self.calls, raw)

    def _build_transaction(self, calls: Tuple[Call, ...], version: Version) -> TxParams:
        if version is Version.V1 and any(call.allow_failure for call in calls):
            logger.warning('aggregate cannot tolerate failing calls; '
                           'allow_failure is ignored for %d of %d calls',
                           sum(call.allow_failure for call in calls), len(calls))
        return {'to': self.address, 'data': version.encode(calls).to_0x_hex()}

    def _begin(self) -> Tuple[Tuple[Call, ...], Version]:
        with self._lock:
            self._check_unlocked()
            self._dispatching = True
        return self.calls, self._version

    def _check_network(self, active_chain_id: int):
        if active_chain_id != self.chain_id:
            raise NetworkMismatchError(self.chain_id, active_chain_id)

    def _call_kwargs(self, block_identifier, state_override, ccip_read_enabled) -> Dict[str, Any]:
        return dict(
            block_identifier=block_identifier if block_identifier is not None else self.block_identifier,
            state_override=state_override,
            ccip_read_enabled=ccip_read_enabled,
        )

    @staticmethod
    def _request(tx: TxParams, request_hook: Optional[RequestHook]) -> TxParams:
        return request_hook(dict(tx)) if request_hook else tx

    @staticmethod
    def _batch_revert(version: Version, error: ContractLogicError) -> BatchRevertError:
        return BatchRevertError(f'{version.function_name} reverted: {error}', revert_data(error))


class Multicall(BaseMulticall):
    """
    NAME
        Multicall

    DESCRIPTION
       The main multicall class.

    ATTRIBUTES
        w3: Web3 class instance

        chain_id: int
            The chain the batch is bound to.
            If omitted, it is read from the provider.

        address: str
            An address of custom aggregator smart contract.
            If omitted, it is looked up in the deployment registry.

        version: Version or int
            The aggregator interface to use, 3 by default.

        block_identifier: BlockIdentifier
            Default block for every dispatch.

    """

    def __init__(
            self,
            w3: Web3,
            chain_id: Optional[int] = None,
            address: Optional[str] = None,
            version: Union[Version, int, str] = Version.V3,
            block_identifier: Optional[BlockIdentifier] = None,
    ):
        super().__init__()
        if chain_id is None:
            chain_id = w3.eth.chain_id
        self._bind(w3, chain_id, address, version, block_identifier)

    def new_batch(self) -> 'Multicall':
        """An empty batch with the same network, address and version."""
        return Multicall(self.w3, self.chain_id, self.address, self.version, self.block_identifier)

    def call(
            self,
            block_identifier: Optional[BlockIdentifier] = None,
            request_hook: Optional[RequestHook] = None,
            state_override: Optional[StateOverride] = None,
            ccip_read_enabled: Optional[bool] = None,
    ) -> List[Outcome]:
        """
        Executes all calls of the batch in one eth_call.

        Parameters:
            block_identifier: BlockIdentifier
                block identifier for web3 call, the batch default if omitted

            request_hook: callable
                receives the outgoing request and returns the one to send,
                for providers expecting another request shape

            state_override: StateOverride
                state override for web3 call

            ccip_read_enabled: bool
                boolean flag that enables or disables CCIP Read support for web3 calls

        Returns:
            list of outcomes, one per call, in insertion order
        """
        calls, version = self._begin()
        try:
            if not calls:
                return []
            self._check_network(self.w3.eth.chain_id)
            tx = self._request(self._build_transaction(calls, version), request_hook)
            logger.debug('Sending %s with %d calls to %s on chain %d',
                         version.function_name, len(calls), self.address, self.chain_id)
            try:
                raw = self.w3.eth.call(tx, **self._call_kwargs(block_identifier, state_override, ccip_read_enabled))
            except ContractLogicError as e:
                raise self._batch_revert(version, e) from e
            return version.decode(calls, raw)
        finally:
            self._dispatching = False
