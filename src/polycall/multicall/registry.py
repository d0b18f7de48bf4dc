"""NAME
    registry

DESCRIPTION
    Known deployments of the aggregator contract, keyed by chain id.
    Multicall3 implements the "aggregate", "tryAggregate" and "aggregate3"
    interfaces at once, so one address serves every version on a network.
    Deployment blocks follow https://www.multicall3.com/deployments

"""

from types import MappingProxyType
from typing import NamedTuple

from eth_typing import ChecksumAddress
from web3 import Web3

from .constants import MULTICALL3_ADDRESS
from .errors import NotDeployedError


class Deployment(NamedTuple):
    address: ChecksumAddress
    block: int
    name: str


def _multicall3(block: int, name: str, address: str = MULTICALL3_ADDRESS) -> Deployment:
    return Deployment(Web3.to_checksum_address(address), block, name)


DEPLOYMENTS = MappingProxyType({
    1: _multicall3(14353601, 'mainnet'),
    5: _multicall3(6507670, 'goerli'),
    10: _multicall3(4286263, 'optimism'),
    56: _multicall3(15921452, 'bsc'),
    100: _multicall3(21022491, 'gnosis'),
    137: _multicall3(25770160, 'polygon'),
    250: _multicall3(33001987, 'fantom'),
    324: _multicall3(3908235, 'zksync', '0xF9cda624FBC7e059355ce98a31693d299FACd963'),
    1101: _multicall3(57746, 'polygon_zkevm'),
    8453: _multicall3(5022, 'base'),
    17000: _multicall3(77, 'holesky'),
    42161: _multicall3(7654707, 'arbitrum'),
    42170: _multicall3(1746963, 'arbitrum_nova'),
    43114: _multicall3(11907934, 'avalanche'),
    59144: _multicall3(42, 'linea'),
    81457: _multicall3(88189, 'blast'),
    534352: _multicall3(14, 'scroll'),
    11155111: _multicall3(751532, 'sepolia'),
})

SUPPORTED_CHAIN_IDS = frozenset(DEPLOYMENTS)


def get_deployment(chain_id: int) -> Deployment:
    try:
        return DEPLOYMENTS[chain_id]
    except KeyError:
        raise NotDeployedError(chain_id) from None


def resolve(chain_id: int) -> ChecksumAddress:
    """Returns the aggregator address on ``chain_id`` or raises NotDeployedError."""
    return get_deployment(chain_id).address


def is_supported(chain_id: int) -> bool:
    return chain_id in DEPLOYMENTS
