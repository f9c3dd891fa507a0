import pytest

from veremin.util import print_json_if_possible, resolve_object


def test_print_json_if_possible(capsys):
    print_json_if_possible({'note': 0.5})
    print_json_if_possible({'not json': object})
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == '{"note": 0.5}'
    assert lines[2].startswith("{'not json'")


def test_resolve_object():
    assert resolve_object('a', object_map={'a': len}) is len
    assert resolve_object(len, object_map={}, expected_type=type(len)) is len
    with pytest.raises(ValueError):
        resolve_object('b', object_map={'a': len})
    with pytest.raises(TypeError):
        resolve_object(3, object_map={}, expected_type=str)
