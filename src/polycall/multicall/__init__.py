from .async_multicall import AsyncMulticall
from .call import Call, CallFailure, DecodeFailure, Outcome, Success
from .errors import (AggregateDecodeError, BatchLockedError, BatchRevertError, CallRevertedError, ConfigurationError,
                     DecodeError, MulticallError, NetworkMismatchError, NotDeployedError)
from .hooks import chain_hooks, rename_call_data_field
from .multicall import Multicall
from .registry import Deployment, SUPPORTED_CHAIN_IDS, get_deployment, is_supported, resolve
from .version import Version
