import pytest

from everything_mcp.mcp.classifier import Malformed, Notification, Request, classify
from everything_mcp.mcp.protocol import INVALID_REQUEST, PARSE_ERROR


def test_request_with_id_and_params():
    msg = classify(b'{"jsonrpc":"2.0","id":1,"method":"ping","params":{"a":1}}')
    assert msg == Request(id=1, method="ping", params={"a": 1})


def test_missing_params_become_empty_object():
    msg = classify('{"jsonrpc":"2.0","id":"abc","method":"tools/list"}')
    assert isinstance(msg, Request)
    assert msg.params == {}

    msg = classify('{"jsonrpc":"2.0","id":2,"method":"tools/list","params":null}')
    assert msg.params == {}


def test_absent_or_null_id_is_notification():
    for line in (
        '{"jsonrpc":"2.0","method":"notifications/initialized","params":{}}',
        '{"jsonrpc":"2.0","id":null,"method":"notifications/initialized"}',
        '{"jsonrpc":"2.0","method":"no/such/method"}',
    ):
        msg = classify(line)
        assert isinstance(msg, Notification), line


def test_notification_by_id_not_by_method_name():
    msg = classify('{"jsonrpc":"2.0","id":5,"method":"notifications/initialized"}')
    assert isinstance(msg, Request)
    assert msg.id == 5


def test_falsy_ids_are_still_requests():
    assert isinstance(classify('{"id":0,"method":"ping"}'), Request)
    assert isinstance(classify('{"id":"","method":"ping"}'), Request)


def test_unparseable_line_is_parse_error_without_id():
    msg = classify(b"not json")
    assert isinstance(msg, Malformed)
    assert msg.code == PARSE_ERROR
    assert not msg.replyable


def test_invalid_utf8_is_parse_error():
    msg = classify(b'{"id":1,"method":"\xff\xfe"}')
    assert isinstance(msg, Malformed)
    assert msg.code == PARSE_ERROR


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_constants_are_parse_errors(constant):
    msg = classify(f'{{"jsonrpc":"2.0","id":1,"method":"ping","params":{{"n":{constant}}}}}')
    assert isinstance(msg, Malformed)
    assert msg.code == PARSE_ERROR
    assert not msg.replyable

    msg = classify(f'{{"jsonrpc":"2.0","id":{constant},"method":"ping"}}')
    assert isinstance(msg, Malformed)
    assert not msg.replyable


def test_non_object_is_invalid_request():
    for line in ("[1,2,3]", "42", '"ping"', "null"):
        msg = classify(line)
        assert isinstance(msg, Malformed), line
        assert msg.code == INVALID_REQUEST
        assert not msg.replyable


def test_missing_method_keeps_recovered_id():
    msg = classify('{"jsonrpc":"2.0","id":9,"params":{}}')
    assert isinstance(msg, Malformed)
    assert msg.code == INVALID_REQUEST
    assert msg.id == 9
    assert msg.replyable


def test_non_string_method_is_malformed():
    msg = classify('{"jsonrpc":"2.0","id":"a","method":7}')
    assert isinstance(msg, Malformed)
    assert msg.id == "a"


def test_missing_method_without_id_is_not_replyable():
    msg = classify('{"jsonrpc":"2.0","params":{}}')
    assert isinstance(msg, Malformed)
    assert not msg.replyable
