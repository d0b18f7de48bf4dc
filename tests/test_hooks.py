from polycall.multicall import chain_hooks, rename_call_data_field


def test_rename_call_data_field():
    tx = {'to': '0xabc', 'data': '0x1234'}
    renamed = rename_call_data_field()(tx)
    assert renamed == {'to': '0xabc', 'input': '0x1234'}
    assert tx == {'to': '0xabc', 'data': '0x1234'}


def test_rename_back_and_missing_field():
    hook = rename_call_data_field('input', 'data')
    assert hook({'input': '0x01'}) == {'data': '0x01'}
    assert hook({'to': '0xabc'}) == {'to': '0xabc'}


def test_chain_hooks_apply_in_order():
    def add_from(tx):
        return dict(tx, **{'from': '0xdef'})

    hook = chain_hooks(rename_call_data_field(), add_from)
    assert hook({'data': '0x01'}) == {'input': '0x01', 'from': '0xdef'}
