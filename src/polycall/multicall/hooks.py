"""Request hooks: reshape the outgoing eth_call request without touching the aggregated call data.

Some JSON-RPC endpoints (Tron's among them) read the call data from a field
other than the one the client sends. A hook receives a copy of the request
and returns the request to send.
"""

from typing import Callable

from web3.types import TxParams

RequestHook = Callable[[TxParams], TxParams]


def rename_call_data_field(source: str = 'data', target: str = 'input') -> RequestHook:
    def hook(tx: TxParams) -> TxParams:
        if source in tx:
            tx = dict(tx)
            tx[target] = tx.pop(source)
        return tx
    return hook


def chain_hooks(*hooks: RequestHook) -> RequestHook:
    def hook(tx: TxParams) -> TxParams:
        for h in hooks:
            tx = h(tx)
        return tx
    return hook
