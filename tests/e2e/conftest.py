from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import api_server
from config.settings import settings
from invitations import NotificationResult
from services.sessions import SessionRegistry


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent = []

    def send_invitation(self, candidate_email, candidate_name, interview_link):
        self.sent.append((candidate_email, candidate_name, interview_link))
        return NotificationResult(delivered=True)


@pytest.fixture
def notifier(monkeypatch):
    recorder = RecordingNotifier()
    monkeypatch.setattr(api_server, "_notifier", lambda: recorder)
    return recorder


@pytest.fixture
def client(monkeypatch, clock, notifier):
    registry = SessionRegistry.for_database(lambda: Path(settings.DB_PATH), timer_factory=clock)
    monkeypatch.setattr(api_server.app.state, "sessions", registry)
    return TestClient(api_server.app)
