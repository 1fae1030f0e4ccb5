import json
from collections import OrderedDict

import pytest

from wa_mgt.sticker_bot import main as main_module


def test_load_client_calls_factory():
    assert isinstance(main_module.load_client("collections:OrderedDict"), OrderedDict)


@pytest.mark.parametrize("path", ["collections", ":OrderedDict", "collections:"])
def test_load_client_rejects_bad_paths(path):
    with pytest.raises(ValueError):
        main_module.load_client(path)


def test_main_requires_a_client(monkeypatch, tmp_path):
    monkeypatch.setenv("WA_STICKER_BOT_CONFIG", str(tmp_path / "absent.json"))
    monkeypatch.delenv("WA_STICKER_BOT_CLIENT", raising=False)
    with pytest.raises(SystemExit):
        main_module.main()


class ScriptedClient:
    """Returns one batch per poll, then interrupts the loop."""

    def __init__(self, batches):
        self.batches = list(batches)
        self.polls = 0
        self.sent = []

    def get_own_id(self):
        return "6289999999999@s.whatsapp.net"

    def poll_events(self):
        self.polls += 1
        if not self.batches:
            raise KeyboardInterrupt
        return self.batches.pop(0)

    def send_message(self, chat, payload):
        self.sent.append((chat, payload))


GOOD = {
    "type": "message",
    "id": "M2",
    "chat": "6282222222222@s.whatsapp.net",
    "sender": "6282222222222@s.whatsapp.net",
    "message": {"conversation": "hi"},
}


def test_poll_once_skips_events_that_blow_up(bot, caplog):
    adapter = main_module.WhatsAppAdapter(ScriptedClient([["not-a-dict", GOOD]]))
    assert main_module.poll_once(adapter, bot) == 1
    assert "bad event" in caplog.text


def test_main_keeps_polling_after_a_bad_event(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"client_factory": "scripted:client", "health": {"enabled": False}}),
        encoding="utf-8",
    )
    bad = dict(GOOD, id="M1", timestamp="n/a", message=["broken"])
    client = ScriptedClient([["not-a-dict", bad], [GOOD]])

    monkeypatch.setenv("WA_STICKER_BOT_CONFIG", str(config_path))
    monkeypatch.setattr(main_module, "load_client", lambda path: client)
    monkeypatch.setattr(main_module.time, "sleep", lambda seconds: None)

    main_module.main()

    assert client.polls == 3
    assert {chat for chat, _ in client.sent} == {GOOD["chat"]}
