"""NAME
    AsyncMulticall

DESCRIPTION
    A multicall for use with AsyncWeb3.
    Same batch as Multicall; only the network round trips are awaited.

"""

import logging
from typing import List, Optional, Union

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError
from web3.types import BlockIdentifier, StateOverride

from .call import Outcome
from .hooks import RequestHook
from .multicall import BaseMulticall
from .version import Version

logger = logging.getLogger(__name__)


class AsyncMulticall(BaseMulticall):
    """
    NAME
        AsyncMulticall

    DESCRIPTION
       The main multicall class for asyncio code.
       Call ``setup`` (or use ``create``) before adding calls.

    """

    async def setup(
            self,
            w3: AsyncWeb3,
            chain_id: Optional[int] = None,
            address: Optional[str] = None,
            version: Union[Version, int, str] = Version.V3,
            block_identifier: Optional[BlockIdentifier] = None,
    ):
        if chain_id is None:
            chain_id = await w3.eth.chain_id
        self._bind(w3, chain_id, address, version, block_identifier)

    @classmethod
    async def create(cls, w3: AsyncWeb3, **kwargs) -> 'AsyncMulticall':
        mc = cls()
        await mc.setup(w3, **kwargs)
        return mc

    def new_batch(self) -> 'AsyncMulticall':
        mc = AsyncMulticall()
        mc._bind(self.w3, self.chain_id, self.address, self.version, self.block_identifier)
        return mc

    async def call(
            self,
            block_identifier: Optional[BlockIdentifier] = None,
            request_hook: Optional[RequestHook] = None,
            state_override: Optional[StateOverride] = None,
            ccip_read_enabled: Optional[bool] = None,
    ) -> List[Outcome]:
        """
        Executes all calls of the batch in one eth_call.
        See Multicall.call for the parameters.
        The batch is locked until the request completes, fails or is cancelled.
        """
        calls, version = self._begin()
        try:
            if not calls:
                return []
            self._check_network(await self.w3.eth.chain_id)
            tx = self._request(self._build_transaction(calls, version), request_hook)
            logger.debug('Sending %s with %d calls to %s on chain %d',
                         version.function_name, len(calls), self.address, self.chain_id)
            try:
                raw = await self.w3.eth.call(
                    tx, **self._call_kwargs(block_identifier, state_override, ccip_read_enabled))
            except ContractLogicError as e:
                raise self._batch_revert(version, e) from e
            return version.decode(calls, raw)
        finally:
            self._dispatching = False
