from typing import List, Sequence, Tuple, TypeVar

T = TypeVar('T')

PINK = (249, 38, 114)
GREY = (58, 58, 58)
GREEN = (114, 156, 31)


def _color(rgb: Tuple[int, int, int]) -> str:
    return '\033[38;2;%d;%d;%dm' % rgb


def bar(percentage: float, size: int = 40) -> str:
    percentage = int(percentage)
    hori_char = '━'
    reset_color = '\033[39m'
    if percentage >= 100:
        return f'{_color(GREEN)}{hori_char * size}{reset_color}'
    filled = hori_char * (size * percentage // 100)
    not_filled = hori_char * (size - len(filled) - 1)
    return f'{_color(PINK)}{filled}╸{_color(GREY)}{not_filled}{reset_color}'


def split(a: Sequence[T], n: int) -> List[Sequence[T]]:
    """Splits ``a`` into ``n`` contiguous buckets whose sizes differ by at most one."""
    if n < 1:
        raise ValueError(f'Cannot split into {n} buckets')
    k, m = divmod(len(a), n)
    return [a[i * k + min(i, m):(i + 1) * k + min(i + 1, m)] for i in range(n)]


def get_type(schema: dict) -> str:
    """ABI type string of one input/output entry, with tuples expanded to their components."""
    if schema['type'].startswith('tuple'):
        postfix = schema['type'][len('tuple'):]
        return '(' + ','.join(get_type(x) for x in schema['components']) + ')' + postfix
    return schema['type']


def get_output_types(abi_element: dict) -> Tuple[str, ...]:
    return tuple(get_type(schema) for schema in abi_element.get('outputs', ()))
