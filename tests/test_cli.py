from typer.testing import CliRunner

from client.chat_cli import app, handle_line
from client.ws_client import WsClient
from wire.consts import MsgType, Scope
from wire.frame import Frame
from wire.messages import ChatMessage

runner = CliRunner()


def test_frame_command_prints_encoding():
    result = runner.invoke(app, ["frame", "--to", "50", "--msg-type", "chat", "--scope", "client"])
    assert result.exit_code == 0
    assert "01 00 00 00 03 01 01 00 00 00 32" in result.output


def test_frame_command_codepoint_encoding():
    result = runner.invoke(app, ["frame", "--to", "2", "--encoding", "codepoint"])
    assert result.exit_code == 0
    assert "00 00 00 32" in result.output


def test_frame_command_rejects_bad_recipient():
    result = runner.invoke(app, ["frame", "--to", "notify"])
    assert result.exit_code == 1


def test_handle_line_commands(transport):
    client = WsClient({"url": "ws://localhost:8080", "secret": "s"}, transport=transport)
    transport.open()
    client.login("5")

    assert handle_line(client, "/tell 6 hi there") is True
    assert handle_line(client, "/group 9 team") is True
    assert handle_line(client, "/all everyone") is True
    assert handle_line(client, "/tell notify hi") is True
    assert handle_line(client, "/tell 6") is True
    assert handle_line(client, "/bogus") is True
    assert handle_line(client, "/quit") is False

    frames = [Frame.from_bytes(d) for d in transport.sent[1:]]
    assert [(f.scope, f.header.to) for f in frames] == [
        (Scope.CLIENT, 6),
        (Scope.GROUP, 9),
        (Scope.BROADCAST, 0),
    ]
    assert all(f.msg_type == MsgType.CHAT for f in frames)
    assert ChatMessage.decode(frames[0].payload).text == "hi there"
