"""Tests for response decoding and error mapping."""

import pytest

from etcd_keyspace import (
    Directory,
    EtcdError,
    KeyExistsError,
    KeyNotFoundError,
    Leaf,
    RequestBuilder,
)
from etcd_keyspace.core.responses import (
    decode_body,
    parse_node,
    raise_for_error,
    unwrap_node,
)


class TestDecodeBody:
    """Raw bodies become mappings."""

    def test_decodes_bytes(self):
        """Test decoding a bytes body."""
        assert decode_body(b'{"action": "get"}') == {"action": "get"}

    def test_decodes_text(self):
        """Test decoding a text body."""
        assert decode_body('{"action": "get"}') == {"action": "get"}

    def test_empty_body(self):
        """Test decoding an empty body."""
        assert decode_body(b"") == {}

    def test_invalid_json_raises(self):
        """Test that invalid JSON raises EtcdError."""
        with pytest.raises(EtcdError) as excinfo:
            decode_body(b"404 page not found")
        assert "Invalid JSON" in excinfo.value.message

    def test_invalid_utf8_raises_etcd_error(self):
        """Test that an undecodable byte body raises EtcdError, not UnicodeDecodeError."""
        with pytest.raises(EtcdError) as excinfo:
            decode_body(b"\xff\xfe not json")
        assert excinfo.value.error_code == 0
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_non_mapping_raises(self):
        """Test that a non-mapping body raises EtcdError."""
        with pytest.raises(EtcdError):
            decode_body(b"[1, 2]")


class TestRaiseForError:
    """Service error codes become typed exceptions."""

    BODY = {"errorCode": 100, "message": "Key not found", "cause": "/foo", "index": 9}

    def test_success_body_passes(self):
        """Test that a success body does not raise."""
        raise_for_error({"action": "get", "node": {"key": "/foo"}})

    def test_default_is_generic_error(self):
        """Test the default error class."""
        with pytest.raises(EtcdError) as excinfo:
            raise_for_error(self.BODY)
        assert type(excinfo.value) is EtcdError

    @pytest.mark.parametrize("error_class", [KeyNotFoundError, KeyExistsError])
    def test_specific_error_carries_service_fields(self, error_class):
        """Test that errors carry the service fields."""
        with pytest.raises(error_class) as excinfo:
            raise_for_error(self.BODY, error_class)
        error = excinfo.value
        assert error.message == "Key not found"
        assert error.error_code == 100
        assert error.cause == "/foo"
        assert error.index == 9
        assert str(error) == "[100] Key not found (/foo)"


class TestParseNode:
    """Node mappings become tagged node objects."""

    def test_leaf(self):
        """Test parsing a leaf."""
        node = parse_node(
            {"key": "/a", "value": "1", "modifiedIndex": 4, "createdIndex": 3, "ttl": 5}
        )
        assert isinstance(node, Leaf)
        assert node.dir is False
        assert node.value == "1"
        assert node.created_index == 3
        assert node.modified_index == 4
        assert node.ttl == 5

    def test_directory_with_children(self):
        """Test parsing a directory with children."""
        node = parse_node(
            {
                "key": "/",
                "dir": True,
                "nodes": [
                    {"key": "/a", "value": "1"},
                    {"key": "/b", "dir": True},
                ],
            }
        )
        assert isinstance(node, Directory)
        assert node.dir is True
        assert [child.key for child in node.nodes] == ["/a", "/b"]
        assert isinstance(node.nodes[1], Directory)
        assert node.nodes[1].nodes == []

    def test_to_dict_uses_wire_names(self):
        """Test rendering back to wire names."""
        data = {
            "key": "/b",
            "dir": True,
            "createdIndex": 2,
            "modifiedIndex": 2,
            "nodes": [{"key": "/b/c", "value": "2", "createdIndex": 2, "modifiedIndex": 2}],
        }
        assert parse_node(data).to_dict() == data

    def test_leaf_without_value(self):
        """Test that a leaf with no value field keeps value None."""
        node = parse_node({"key": "/a"})
        assert isinstance(node, Leaf)
        assert node.value is None
        assert node.to_dict() == {"key": "/a"}

    def test_leaf_with_empty_value(self):
        """Test that an empty string value is kept as-is."""
        node = parse_node({"key": "/a", "value": ""})
        assert node.value == ""
        assert node.to_dict() == {"key": "/a", "value": ""}

    def test_unwrap_node(self):
        """Test unwrapping the node field."""
        node = unwrap_node({"action": "get", "node": {"key": "/a", "value": "1"}})
        assert node == Leaf(key="/a", value="1")


def test_set_request_and_response_agree_on_value():
    """A set request's form value comes back as the node value."""
    request = RequestBuilder().set("/config/name", "etcd", ttl=30)
    body = b'{"action": "set", "node": {"key": "/config/name", "value": "etcd", "ttl": 30}}'

    node = unwrap_node(decode_body(body))

    assert isinstance(node, Leaf)
    assert node.value == request.data["value"]
    assert node.ttl == request.data["ttl"]
