"""NAME
    version

DESCRIPTION
    The three interface revisions of the aggregator contract.
    Each version is a pure pair of functions:
    calls -> call data of the aggregated call, and
    raw return data of the aggregated call -> one outcome per call.

        V1  aggregate((address,bytes)[])         any revert reverts everything
        V2  tryAggregate(bool,(address,bytes)[]) one batch-wide require-success flag
        V3  aggregate3((address,bool,bytes)[])   allow_failure per call

"""

from enum import IntEnum
from typing import List, Optional, Sequence, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes

from .call import Call, CallFailure, Outcome
from .constants import (AGGREGATE3_SELECTOR, AGGREGATE3_SIGNATURE, AGGREGATE_SELECTOR, AGGREGATE_SIGNATURE,
                        CALL3_TYPE, CALL_TYPE, RESULT_TYPE, TRY_AGGREGATE_SELECTOR, TRY_AGGREGATE_SIGNATURE)
from .errors import AggregateDecodeError, ConfigurationError


class Version(IntEnum):
    V1 = 1
    V2 = 2
    V3 = 3

    @classmethod
    def parse(cls, value: Union['Version', int, str]) -> 'Version':
        if isinstance(value, bool):
            raise ConfigurationError(f'Unsupported multicall version {value!r}')
        if isinstance(value, str):
            value = value.strip().lower()
            if value.startswith('v'):
                value = value[1:]
            if not value.isdigit():
                raise ConfigurationError(f'Unsupported multicall version {value!r}')
            value = int(value)
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f'Unsupported multicall version {value!r}; expected 1, 2 or 3') from None

    @property
    def function_name(self) -> str:
        return ('aggregate', 'tryAggregate', 'aggregate3')[self - 1]

    @property
    def signature(self) -> str:
        return (AGGREGATE_SIGNATURE, TRY_AGGREGATE_SIGNATURE, AGGREGATE3_SIGNATURE)[self - 1]

    @staticmethod
    def require_success(calls: Sequence[Call]) -> bool:
        """Batch-wide flag for tryAggregate: True only if no call tolerates failure."""
        return not any(call.allow_failure for call in calls)

    def encode(self, calls: Sequence[Call], require_success: Optional[bool] = None) -> HexBytes:
        if self is Version.V1:
            return HexBytes(AGGREGATE_SELECTOR + encode((f'{CALL_TYPE}[]',), ([c.as_tuple() for c in calls],)))
        if self is Version.V2:
            if require_success is None:
                require_success = self.require_success(calls)
            return HexBytes(TRY_AGGREGATE_SELECTOR + encode(('bool', f'{CALL_TYPE}[]'),
                                                            (require_success, [c.as_tuple() for c in calls])))
        return HexBytes(AGGREGATE3_SELECTOR + encode((f'{CALL3_TYPE}[]',), ([c.as_call3() for c in calls],)))

    def decode(self, calls: Sequence[Call], raw: bytes) -> List[Outcome]:
        try:
            if self is Version.V1:
                _block_number, return_data = decode(('uint256', 'bytes[]'), raw)
                results = [(True, data) for data in return_data]
            else:
                results = decode((f'{RESULT_TYPE}[]',), raw)[0]
        except (DecodingError, ValueError) as e:
            raise AggregateDecodeError(
                f'Could not decode {self.function_name} response of {len(bytes(raw))} bytes') from e

        if len(results) != len(calls):
            raise AggregateDecodeError(
                f'{self.function_name} returned {len(results)} results for {len(calls)} calls')

        return [call.decode(data) if success else CallFailure(HexBytes(data))
                for call, (success, data) in zip(calls, results)]
