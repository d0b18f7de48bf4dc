from typing import Any, List, Optional

from web3 import Web3
from web3.types import BlockIdentifier

from .multicall import Call, Multicall, Outcome
from .utils import split, bar


class Multicallable:
    """
    Every view/pure function of ``target_abi`` becomes an attribute taking a list of argument tuples:

        token = Multicallable(token_address, erc20_abi, w3)
        balances = token.balanceOf([(alice,), (bob,)]).call()

    Each of the ``n`` buckets is one aggregated eth_call.
    """

    class Function:
        class FCall:
            def __init__(self, function: 'Multicallable.Function', params: list):
                self.function = function
                self.params = params

            def detailed_call(self, n: int = 1, allow_failure: bool = False, progress_bar: bool = False,
                              block_identifier: Optional[BlockIdentifier] = None) -> List[Outcome]:
                parent = self.function.parent
                calls = [Call.from_function(parent._target, self.function.name, args, allow_failure=allow_failure)
                         for args in self.params]
                outcomes = []
                for i, bucket in enumerate(split(calls, n)):
                    if progress_bar:
                        print(f'\r    {bar(i / n * 100)} {i}/{n} buckets    ', end='')
                    if not bucket:
                        continue
                    mc = parent._multicall.new_batch()
                    for call in bucket:
                        mc.add_call(call)
                    outcomes.extend(mc.call(block_identifier=block_identifier))
                if progress_bar:
                    print(f'\r    {bar(100)} {n}/{n} buckets    ')
                return outcomes

            def call(self, n: int = 1, allow_failure: bool = False, progress_bar: bool = False,
                     block_identifier: Optional[BlockIdentifier] = None) -> List[Any]:
                """Decoded values; with ``allow_failure`` failed slots keep their Outcome instead."""
                outcomes = self.detailed_call(n, allow_failure, progress_bar, block_identifier)
                return unwrap_outcomes(outcomes, allow_failure)

        def __init__(self, name: str, parent: 'Multicallable'):
            self.name = name
            self.parent = parent

        def __call__(self, params: list) -> FCall:
            return self.FCall(self, params)

    def __init__(self, target_address: str, target_abi, w3: Web3 = None, multicall: Multicall = None):
        if w3 is None and multicall is None:
            raise TypeError("__init__() missing 1 required argument: 'w3' or 'multicall' (at least one required)")
        self._multicall = multicall if multicall is not None else Multicall(w3)
        w3 = self._multicall.w3
        self._target = w3.eth.contract(Web3.to_checksum_address(target_address), abi=target_abi)
        self._functions = {}
        self._setup_functions()

    def __getattr__(self, function_name: str) -> 'Multicallable.Function':
        if function_name.startswith('_') or function_name not in self._functions:
            raise AttributeError(f"The function '{function_name}' was not found in this contract's abi.")
        return self._functions[function_name]

    def _setup_functions(self):
        for func in filter(lambda x: x.get('stateMutability') in ('view', 'pure'), self._target.abi):
            function = Multicallable.Function(func['name'], self)
            self._functions[func['name']] = function
            setattr(self, func['name'], function)


def unwrap_outcomes(outcomes: List[Outcome], allow_failure: bool) -> List[Any]:
    if allow_failure:
        return [outcome.value if outcome.success else outcome for outcome in outcomes]
    return [outcome.unwrap() for outcome in outcomes]
