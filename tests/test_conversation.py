"""Tests for ata/conversation.py — conversation record, save and load."""

from __future__ import annotations

import json
import threading

import pytest

from ata.conversation import Conversation


class TestConversation:
    def test_records_in_order(self) -> None:
        convo = Conversation()
        convo.add_user("hi")
        convo.add_assistant("hello")
        assert convo.snapshot() == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
        assert len(convo) == 2

    def test_snapshot_is_a_copy(self) -> None:
        convo = Conversation()
        convo.add_user("hi")
        convo.snapshot()[0]["content"] = "changed"
        assert convo.snapshot()[0]["content"] == "hi"

    def test_rejects_unknown_role(self) -> None:
        with pytest.raises(ValueError, match="Unknown message role"):
            Conversation([{"role": "robot", "content": "beep"}])

    def test_concurrent_appends(self) -> None:
        convo = Conversation()

        def worker() -> None:
            for _ in range(200):
                convo.add_user("x")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(convo) == 800


class TestSaveLoad:
    def test_save_uses_timestamp_name(self, tmp_path) -> None:
        convo = Conversation()
        convo.add_user("hi")
        path = convo.save(tmp_path, now=1700000000.7)
        assert path == tmp_path / "conversation-1700000000.json"
        assert json.loads(path.read_text()) == [{"role": "user", "content": "hi"}]

    def test_save_replaces_same_name(self, tmp_path) -> None:
        first = Conversation([{"role": "user", "content": "a"}])
        second = Conversation([{"role": "user", "content": "b"}])
        first.save(tmp_path, now=1)
        path = second.save(tmp_path, now=1)
        assert json.loads(path.read_text())[0]["content"] == "b"

    def test_save_defaults_to_working_directory(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        path = Conversation().save(now=5)
        assert path.resolve() == (tmp_path / "conversation-5.json").resolve()

    def test_load_saved_file(self, tmp_path) -> None:
        convo = Conversation()
        convo.add_user("ünïcode")
        convo.add_assistant("ok")
        loaded = Conversation.load(convo.save(tmp_path, now=2))
        assert loaded.snapshot() == convo.snapshot()

    def test_load_rejects_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="not a conversation file"):
            Conversation.load(path)

    def test_load_rejects_wrong_shape(self, tmp_path) -> None:
        path = tmp_path / "shape.json"
        path.write_text('{"role": "user"}')
        with pytest.raises(ValueError, match="expected a list"):
            Conversation.load(path)
