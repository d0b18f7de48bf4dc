from eth_utils import function_signature_to_4byte_selector

MULTICALL3_ADDRESS = '0xcA11bde05977b3631167028862bE2a173976CA11'

CALL_TYPE = '(address,bytes)'
CALL3_TYPE = '(address,bool,bytes)'
RESULT_TYPE = '(bool,bytes)'

AGGREGATE_SIGNATURE = f'aggregate({CALL_TYPE}[])'
TRY_AGGREGATE_SIGNATURE = f'tryAggregate(bool,{CALL_TYPE}[])'
AGGREGATE3_SIGNATURE = f'aggregate3({CALL3_TYPE}[])'

AGGREGATE_SELECTOR = function_signature_to_4byte_selector(AGGREGATE_SIGNATURE)
TRY_AGGREGATE_SELECTOR = function_signature_to_4byte_selector(TRY_AGGREGATE_SIGNATURE)
AGGREGATE3_SELECTOR = function_signature_to_4byte_selector(AGGREGATE3_SIGNATURE)

# Revert payload prefixes emitted by solidity
ERROR_SELECTOR = function_signature_to_4byte_selector('Error(string)')
PANIC_SELECTOR = function_signature_to_4byte_selector('Panic(uint256)')

# Helper views exposed by the aggregator itself: name -> (input types, output types)
AGGREGATOR_VIEWS = {
    'getChainId': ((), ('uint256',)),
    'getBlockNumber': ((), ('uint256',)),
    'getBlockHash': (('uint256',), ('bytes32',)),
    'getLastBlockHash': ((), ('bytes32',)),
    'getCurrentBlockTimestamp': ((), ('uint256',)),
    'getCurrentBlockGasLimit': ((), ('uint256',)),
    'getCurrentBlockCoinbase': ((), ('address',)),
    'getCurrentBlockDifficulty': ((), ('uint256',)),
    'getBasefee': ((), ('uint256',)),
    'getEthBalance': (('address',), ('uint256',)),
}
