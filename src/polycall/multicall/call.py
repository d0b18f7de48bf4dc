from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple, Union

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import Contract, ContractFunction
from web3.utils import get_abi_element

from .errors import CallRevertedError, DecodeError, revert_reason
from ..utils import get_output_types


class Call:
    """
    NAME
        Call

    DESCRIPTION
        One read-only call waiting to be aggregated.

    ATTRIBUTES
        target: ChecksumAddress
            The contract the aggregator calls.

        call_data: HexBytes
            Selector and encoded arguments. Never modified once built.

        allow_failure: bool
            Whether a revert of this call may be tolerated.
            Only "aggregate3" can honor it per call.

        output_types: tuple(str) or None
            ABI types of the return data. None keeps the raw bytes.

    """

    __slots__ = ('target', 'call_data', 'allow_failure', 'output_types')

    def __init__(
            self,
            target: str,
            call_data: Union[bytes, str],
            allow_failure: bool = False,
            output_types: Optional[Sequence[str]] = None,
    ):
        self.target: ChecksumAddress = Web3.to_checksum_address(target)
        self.call_data = HexBytes(call_data)
        self.allow_failure = bool(allow_failure)
        self.output_types = tuple(output_types) if output_types is not None else None

    @classmethod
    def from_function(
            cls,
            contract: Contract,
            fn_name: str,
            args: Optional[Union[list, tuple]] = None,
            kwargs: Optional[dict] = None,
            allow_failure: bool = False,
    ) -> 'Call':
        if args is None:
            args = []
        if kwargs is None:
            kwargs = {}
        if args and not isinstance(args, (list, tuple)):
            args = [args]
        call_data = contract.encode_abi(abi_element_identifier=fn_name, args=args, kwargs=kwargs)
        abi = get_abi_element(contract.abi, fn_name, *args, abi_codec=contract.w3.codec, **kwargs)
        return cls(contract.address, call_data, allow_failure, get_output_types(abi))

    @classmethod
    def from_contract_function(cls, function: ContractFunction, allow_failure: bool = False) -> 'Call':
        return cls(function.address, function._encode_transaction_data(), allow_failure,
                   get_output_types(function.abi))

    def decode(self, data: bytes) -> 'Outcome':
        """Decodes this call's slice of a successful aggregated response."""
        if self.output_types is None:
            return Success(HexBytes(data))
        if self.output_types and not data:
            return DecodeFailure(HexBytes(data), DecodeError(data, self.output_types))
        try:
            decoded_output = decode(self.output_types, data)
        except (DecodingError, ValueError) as e:
            error = DecodeError(data, self.output_types)
            error.__cause__ = e
            return DecodeFailure(HexBytes(data), error)
        if len(self.output_types) == 1:
            decoded_output = decoded_output[0]
        return Success(decoded_output)

    def as_tuple(self) -> Tuple[ChecksumAddress, bytes]:
        return self.target, bytes(self.call_data)

    def as_call3(self) -> Tuple[ChecksumAddress, bool, bytes]:
        return self.target, self.allow_failure, bytes(self.call_data)

    def __repr__(self):
        return (f'Call(target={self.target!r}, call_data={self.call_data.to_0x_hex()!r}, '
                f'allow_failure={self.allow_failure}, output_types={self.output_types!r})')


class Outcome:
    """Result of one aggregated call. ``success`` tells a decoded value from a failure."""

    success = False

    def unwrap(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Success(Outcome):
    value: Any
    success = True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class CallFailure(Outcome):
    """The contract reverted; ``return_data`` holds the revert payload."""
    return_data: HexBytes

    @property
    def reason(self) -> str:
        return revert_reason(self.return_data)

    def unwrap(self) -> Any:
        raise CallRevertedError(self.return_data)


@dataclass(frozen=True)
class DecodeFailure(Outcome):
    """The call succeeded but its return data does not match ``output_types``."""
    return_data: HexBytes
    error: DecodeError = field(compare=False)

    def unwrap(self) -> Any:
        raise self.error
