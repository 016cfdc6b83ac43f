from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from unit_support import FakeChangeFeed, FakeGateway, RecordingCuePlayer, RecordingNotifier


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def cue_player() -> RecordingCuePlayer:
    return RecordingCuePlayer()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def change_feed() -> FakeChangeFeed:
    return FakeChangeFeed()
