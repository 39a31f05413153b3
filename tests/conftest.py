import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield Path(db_path)
    finally:
        td.cleanup()


class ManualTimer:  # Stand-in for threading.Timer fired explicitly by tests
    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled and not self.fired:
            self.fired = True
            self.function()


class ManualClock:  # Timer factory recording every timer it creates
    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, function)
        self.timers.append(timer)
        return timer

    def live(self) -> List[ManualTimer]:
        return [timer for timer in self.timers if timer.started and not timer.cancelled and not timer.fired]

    def fire_all(self) -> int:
        fired = 0
        for timer in self.live():
            timer.fire()
            fired += 1
        return fired


@pytest.fixture
def clock():
    return ManualClock()
