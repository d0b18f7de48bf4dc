from typing import Optional, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from .constants import ERROR_SELECTOR, PANIC_SELECTOR


def revert_reason(data: Optional[bytes]) -> str:
    """Renders a revert payload as text: Error(string), Panic(uint256) or its printable bytes."""
    if not data:
        return ''
    data = bytes(data)
    try:
        if data[:4] == ERROR_SELECTOR:
            return decode(('string',), data[4:])[0]
        if data[:4] == PANIC_SELECTOR:
            return f'Panic({hex(decode(("uint256",), data[4:])[0])})'
    except (DecodingError, UnicodeDecodeError):
        pass
    return ''.join(chr(c) for c in data if chr(c).isprintable())


class MulticallError(Exception):
    pass


class ConfigurationError(MulticallError):
    pass


class NotDeployedError(ConfigurationError):
    def __init__(self, chain_id: int):
        super().__init__(f'No known multicall deployment on chain {chain_id}; pass an explicit address.')
        self.chain_id = chain_id


class NetworkMismatchError(MulticallError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f'Batch is bound to chain {expected} but the provider reports chain {actual}.')
        self.expected = expected
        self.actual = actual


class BatchLockedError(MulticallError):
    pass


class BatchRevertError(MulticallError):
    def __init__(self, message: str, data: Optional[bytes] = None):
        super().__init__(message)
        self.data = data

    @property
    def reason(self) -> str:
        return revert_reason(self.data)


class AggregateDecodeError(MulticallError):
    pass


class DecodeError(MulticallError):
    def __init__(self, return_data: bytes, output_types: Sequence[str]):
        super().__init__(f'Could not decode {bytes(return_data).hex() or "empty return data"} '
                         f'as ({",".join(output_types)})')
        self.return_data = return_data
        self.output_types = tuple(output_types)


class CallRevertedError(MulticallError):
    def __init__(self, return_data: bytes):
        self.return_data = return_data
        super().__init__(revert_reason(return_data) or 'Call reverted')
