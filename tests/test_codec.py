"""Codec: downstream envelopes, acks and inbound parsing."""

import json

import pytest
from pydantic import ValidationError

from gcm_ccs.codec import MessageCodec, create_message, decode, encode_ack, encode_downstream, parse_message
from gcm_ccs.errors import DecodeError, EncodeError
from gcm_ccs.models.messages import (
    AckMessage,
    ControlMessage,
    DownstreamMessage,
    NackMessage,
    UnknownMessage,
    UpstreamMessage,
)


class TestEncodeDownstream:
    def test_all_optionals_round_trip(self):
        envelope = DownstreamMessage(
            to="device-1",
            message_id="m-1",
            data={"k": "v"},
            collapse_key="sample",
            time_to_live=10000,
            delay_while_idle=True,
        )
        wire = decode(encode_downstream(envelope))
        assert wire == {
            "to": "device-1",
            "message_id": "m-1",
            "data": {"k": "v"},
            "collapse_key": "sample",
            "time_to_live": 10000,
            "delay_while_idle": True,
        }

    def test_absent_optionals_are_omitted(self):
        wire = json.loads(encode_downstream(DownstreamMessage(to="device-1", message_id="m-1")))
        assert set(wire) == {"to", "message_id", "data"}
        assert wire["data"] == {}

    def test_delay_while_idle_false_is_omitted(self):
        wire = json.loads(encode_downstream(DownstreamMessage(to="d", message_id="m", delay_while_idle=False)))
        assert "delay_while_idle" not in wire

    def test_zero_ttl_is_emitted(self):
        wire = json.loads(encode_downstream(DownstreamMessage(to="d", message_id="m", time_to_live=0)))
        assert wire["time_to_live"] == 0

    def test_no_nulls_on_the_wire(self):
        text = encode_downstream(DownstreamMessage(to="d", message_id="m"))
        assert "null" not in text

    @pytest.mark.parametrize("fields", [{"message_id": "m"}, {"to": "d"}, {"to": "", "message_id": "m"}])
    def test_missing_required_field(self, fields):
        with pytest.raises(EncodeError):
            encode_downstream(DownstreamMessage(**fields))

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValidationError):
            DownstreamMessage(to="d", message_id="m", time_to_live=-1)

    def test_create_message(self):
        wire = json.loads(create_message("d", "m", {"a": "b"}, collapse_key="ck", time_to_live=5, delay_while_idle=True))
        assert wire["collapse_key"] == "ck"
        assert wire["time_to_live"] == 5
        assert wire["delay_while_idle"] is True


class TestEncodeAck:
    def test_ack_shape(self):
        assert json.loads(encode_ack("D1", "M1")) == {"message_type": "ack", "to": "D1", "message_id": "M1"}

    def test_ack_requires_fields(self):
        with pytest.raises(EncodeError):
            encode_ack(None, "M1")
        with pytest.raises(EncodeError):
            encode_ack("D1", None)


class TestDecode:
    def test_malformed_json(self):
        with pytest.raises(DecodeError) as exc:
            decode("{not json")
        assert exc.value.payload == "{not json"

    def test_non_object(self):
        with pytest.raises(DecodeError):
            decode("[1, 2]")

    def test_custom_json_capability(self):
        calls = []

        def dumps(obj):
            calls.append(obj)
            return json.dumps(obj)

        codec = MessageCodec(dumps=dumps)
        codec.encode_ack("D1", "M1")
        assert calls == [{"message_type": "ack", "to": "D1", "message_id": "M1"}]


class TestParseMessage:
    def test_upstream_without_message_type(self):
        raw = {"from": "D1", "category": "app.x", "message_id": "M1", "data": {"k": "v"}}
        message = parse_message(raw)
        assert isinstance(message, UpstreamMessage)
        assert message.from_ == "D1"
        assert message.category == "app.x"
        assert message.data == {"k": "v"}
        assert message.raw == raw

    def test_explicit_null_message_type_is_upstream(self):
        assert isinstance(parse_message({"message_type": None, "from": "D1"}), UpstreamMessage)

    def test_receipts_and_control(self):
        assert isinstance(parse_message({"message_type": "ack", "from": "D1", "message_id": "M1"}), AckMessage)
        nack = parse_message({"message_type": "nack", "from": "D1", "message_id": "M1", "error": "BAD_REGISTRATION"})
        assert isinstance(nack, NackMessage)
        assert nack.error == "BAD_REGISTRATION"
        control = parse_message({"message_type": "control", "control_type": "CONNECTION_DRAINING"})
        assert isinstance(control, ControlMessage)
        assert control.control_type == "CONNECTION_DRAINING"

    def test_unknown_message_type(self):
        message = parse_message({"message_type": "receipt", "from": "D1"})
        assert isinstance(message, UnknownMessage)
        assert message.message_type == "receipt"

    def test_missing_fields_read_as_none(self):
        message = parse_message({"message_type": "ack"})
        assert message.from_ is None
        assert message.message_id is None
        upstream = parse_message({})
        assert upstream.data is None

    def test_impossible_field_type(self):
        with pytest.raises(DecodeError):
            parse_message({"from": "D1", "data": ["not", "a", "map"]})
