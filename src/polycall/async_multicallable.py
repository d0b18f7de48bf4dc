import asyncio
from typing import Any, List, Optional

from web3 import AsyncWeb3
from web3.types import BlockIdentifier

from .multicall import AsyncMulticall, Call, Outcome
from .multicallable import unwrap_outcomes
from .utils import split, bar


class AsyncMulticallable:
    """Asyncio counterpart of Multicallable; the buckets are dispatched concurrently."""

    class Function:
        class FCall:
            def __init__(self, function: 'AsyncMulticallable.Function', params: list):
                self.function = function
                self.params = params

            async def _dispatch(self, bucket: List[Call], block_identifier, progress) -> List[Outcome]:
                mc = self.function.parent._multicall.new_batch()
                for call in bucket:
                    mc.add_call(call)
                outcomes = await mc.call(block_identifier=block_identifier)
                progress()
                return outcomes

            async def detailed_call(self, n: int = 1, allow_failure: bool = False, progress_bar: bool = False,
                                    block_identifier: Optional[BlockIdentifier] = None) -> List[Outcome]:
                parent = self.function.parent
                calls = [Call.from_function(parent._target, self.function.name, args, allow_failure=allow_failure)
                         for args in self.params]
                buckets = [bucket for bucket in split(calls, n) if bucket]
                done = 0

                def progress():
                    nonlocal done
                    done += 1
                    if progress_bar:
                        print(f'\r    {bar(done / len(buckets) * 100)} {done}/{len(buckets)} buckets    ', end='')

                if progress_bar:
                    print(f'\r    {bar(0)} {0}/{len(buckets)} buckets    ', end='')

                tasks = [asyncio.ensure_future(self._dispatch(bucket, block_identifier, progress))
                         for bucket in buckets]
                try:
                    batch_results = await asyncio.gather(*tasks)
                except BaseException:
                    # one failed bucket fails the call; the others are not left running
                    for task in tasks:
                        task.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    raise

                if progress_bar:
                    print()

                return [outcome for outcomes in batch_results for outcome in outcomes]

            async def call(self, n: int = 1, allow_failure: bool = False, progress_bar: bool = False,
                           block_identifier: Optional[BlockIdentifier] = None) -> List[Any]:
                outcomes = await self.detailed_call(n, allow_failure, progress_bar, block_identifier)
                return unwrap_outcomes(outcomes, allow_failure)

        def __init__(self, name: str, parent: 'AsyncMulticallable'):
            self.name = name
            self.parent = parent

        def __call__(self, params: list) -> FCall:
            return self.FCall(self, params)

    def __init__(self):
        self._multicall = None
        self._target = None
        self._functions = {}

    async def setup(self, target_address: str, target_abi, w3: AsyncWeb3 = None, multicall: AsyncMulticall = None):
        if w3 is None and multicall is None:
            raise TypeError("setup() missing 1 required argument: 'w3' or 'multicall' (at least one required)")
        self._multicall = multicall if multicall is not None else await AsyncMulticall.create(w3)
        w3 = self._multicall.w3
        self._target = w3.eth.contract(AsyncWeb3.to_checksum_address(target_address), abi=target_abi)
        self._functions = {}
        self._setup_functions()

    def __getattr__(self, function_name: str) -> 'AsyncMulticallable.Function':
        if function_name.startswith('_') or function_name not in self._functions:
            raise AttributeError(f"The function '{function_name}' was not found in this contract's abi.")
        return self._functions[function_name]

    def _setup_functions(self):
        for func in filter(lambda x: x.get('stateMutability') in ('view', 'pure'), self._target.abi):
            function = AsyncMulticallable.Function(func['name'], self)
            self._functions[func['name']] = function
            setattr(self, func['name'], function)
