"""Tests for telling tool calls apart from plain answers."""

from bizhub.tools.tool_call_parser import parse_tool_invocation


def test_plain_text_is_not_a_tool_call() -> None:
    assert parse_tool_invocation("Luigi's is open until 10pm.") is None


def test_bare_tool_call() -> None:
    call = parse_tool_invocation('{"tool": "setTheme", "params": {"theme": "dark"}}')
    assert call is not None
    assert call.tool == "setTheme"
    assert call.params == {"theme": "dark"}
    assert call.user_message is None


def test_fenced_tool_call_with_response() -> None:
    """Code fences are stripped and the optional response is kept."""
    text = (
        '```json\n'
        '{"tool": "navigate", "params": {"url": "index.html"}, "response": "Going home!"}\n```'
    )
    call = parse_tool_invocation(text)
    assert call is not None
    assert call.tool == "navigate"
    assert call.user_message == "Going home!"


def test_json_without_tool_field() -> None:
    """Valid JSON that is not a tool call is an ordinary answer."""
    assert parse_tool_invocation('{"answer": "42"}') is None
    assert parse_tool_invocation('{"tool": ""}') is None


def test_broken_json() -> None:
    assert parse_tool_invocation('{"tool": "navigate", "params": {') is None
    assert parse_tool_invocation('{"tool": navigate}') is None


def test_json_array_is_not_a_tool_call() -> None:
    assert parse_tool_invocation('[{"tool": "navigate"}]') is None


def test_text_around_json_is_not_a_tool_call() -> None:
    """Only a reply that is entirely one object counts."""
    assert parse_tool_invocation('Sure! {"tool": "scroll", "params": {"position": "top"}}') is None


def test_params_are_stringified() -> None:
    """Non-string param values are coerced; null params mean no params."""
    call = parse_tool_invocation('{"tool": "x", "params": {"n": 5, "flag": true, "skip": null}}')
    assert call is not None
    assert call.params == {"n": "5", "flag": "true"}

    call = parse_tool_invocation('{"tool": "x", "params": null}')
    assert call is not None
    assert call.params == {}


def test_non_string_tool_name_is_kept_as_text() -> None:
    """A numeric tool name still counts as a call; dispatch will report it unknown."""
    call = parse_tool_invocation('{"tool": 7}')
    assert call is not None
    assert call.tool == "7"


def test_malformed_side_fields_do_not_hide_the_call() -> None:
    call = parse_tool_invocation(
        '{"tool": "setTheme", "params": {"theme": "dark"}, "response": 42}'
    )
    assert call is not None
    assert call.params == {"theme": "dark"}
    assert call.user_message is None

    call = parse_tool_invocation('{"tool": "findBusiness", "params": ["pizza"]}')
    assert call is not None
    assert call.params == {}
