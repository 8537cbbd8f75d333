"""Shared fixtures for reel pipeline tests."""
from pathlib import Path
from typing import List, Optional

import pytest

from reelgen.config import settings
from reelgen.models.highlight import Highlight
from reelgen.pipeline import bumpers, fallback, renderer, runner, timeline
from reelgen.utils.ffmpeg import FFmpegError


class FakeFFmpeg:
    """Stands in for run_ffmpeg: records calls and writes the output file."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail_on: Optional[str] = None
        self.available = True

    async def run(self, args, description):
        self.calls.append((list(args), description))
        if self.fail_on and self.fail_on in description:
            # ffmpeg may leave a partial file behind before dying
            Path(args[-1]).write_bytes(b"partial")
            raise FFmpegError(f"FFmpeg {description} failed with code 1: simulated")
        Path(args[-1]).write_bytes(b"media")

    async def probe(self):
        return self.available

    @property
    def descriptions(self) -> List[str]:
        return [desc for _, desc in self.calls]


@pytest.fixture
def work_dirs(tmp_path, monkeypatch):
    """Point temp and output directories at a per-test location."""
    temp_dir = tmp_path / "temp"
    output_dir = tmp_path / "output"
    temp_dir.mkdir()
    output_dir.mkdir()
    monkeypatch.setattr(settings, "temp_dir", temp_dir)
    monkeypatch.setattr(settings, "output_dir", output_dir)
    return temp_dir, output_dir


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    fake = FakeFFmpeg()
    for module in (renderer, bumpers, timeline, fallback):
        monkeypatch.setattr(module, "run_ffmpeg", fake.run)
    monkeypatch.setattr(runner, "probe_ffmpeg", fake.probe)
    return fake


@pytest.fixture
def recording(tmp_path):
    path = tmp_path / "meeting.mp4"
    path.write_bytes(b"recording")
    return path


@pytest.fixture
def make_highlight():
    counter = iter(range(1000))

    def _make(**kwargs):
        data = {"id": f"h{next(counter)}", "timestamp": 0, "type": "discussion"}
        data.update(kwargs)
        return Highlight.model_validate(data)

    return _make
