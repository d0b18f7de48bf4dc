# polycall - Batch read-only contract calls through a multicall aggregator

__license__ = "MIT"
__version__ = "1.0.0"
__status__ = "Production"

from .multicall import (AsyncMulticall, Call, CallFailure, DecodeFailure, Multicall, Outcome, Success, Version,
                        rename_call_data_field)
from .multicall.errors import (AggregateDecodeError, BatchLockedError, BatchRevertError, CallRevertedError,
                               ConfigurationError, DecodeError, MulticallError, NetworkMismatchError, NotDeployedError)
from .multicallable import Multicallable
from .async_multicallable import AsyncMulticallable
