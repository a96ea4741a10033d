import subprocess
from pathlib import Path

import pytest

from shrinkpass.config.settings import EncodeSettings
from shrinkpass.domain.media import MediaProbe

ORIGINAL_BYTES = b"original video bytes"
ENCODED_BYTES = b"encoded"


@pytest.fixture
def settings(tmp_path):
    return EncodeSettings(passlog_dir=tmp_path / "passlogs", write_reports=False)


@pytest.fixture
def video_dir(tmp_path):
    directory = tmp_path / "videos"
    directory.mkdir()
    return directory


@pytest.fixture
def make_video(video_dir):
    def _make(relative: str, content: bytes = ORIGINAL_BYTES) -> Path:
        path = video_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def fake_probe(monkeypatch):
    """Makes every file report the given duration/audio without calling ffprobe."""

    def _set(duration: float = 60.0, has_audio: bool = True):
        def from_path(cls, path, ffprobe_cmd="ffprobe"):
            return cls(duration=duration, has_audio=has_audio)

        monkeypatch.setattr(MediaProbe, "from_path", classmethod(from_path))

    _set()
    return _set


class FakeFFmpeg:
    """
    Stands in for `run_cmd`. Records commands and imitates ffmpeg's side effects:
    pass 1 writes pass-log files, pass 2 writes the output file.
    """

    def __init__(self):
        self.calls = []
        self.fail_on_pass = None
        self.return_code = 1
        self.interrupt_on_pass = None
        self.exit_on_pass = None

    @staticmethod
    def pass_number(cmd):
        if "-pass" in cmd:
            return int(cmd[cmd.index("-pass") + 1])
        params = cmd[cmd.index("-x265-params") + 1]
        return int(params.split(":")[0].split("=")[1])

    def __call__(self, cmd, src_file_for_log=Path(), show_cmd=False):
        self.calls.append(cmd)
        pass_number = self.pass_number(cmd)

        if "-passlogfile" in cmd:
            base = cmd[cmd.index("-passlogfile") + 1]
            Path(f"{base}-0.log").write_text("stats")
            Path(f"{base}-0.log.mbtree").write_text("mbtree")
        else:
            stats = cmd[cmd.index("-x265-params") + 1].split("stats=", 1)[1]
            Path(stats).write_text("stats")
            Path(f"{stats}.cutree").write_text("cutree")

        if pass_number == 2:
            Path(cmd[-1]).write_bytes(ENCODED_BYTES)

        if self.interrupt_on_pass == pass_number:
            raise KeyboardInterrupt
        if self.exit_on_pass == pass_number:
            # What the SIGTERM handler in cli.py raises.
            raise SystemExit(143)
        if self.fail_on_pass == pass_number:
            return subprocess.CompletedProcess(cmd, self.return_code, "", "Conversion failed!")
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    fake = FakeFFmpeg()
    monkeypatch.setattr("shrinkpass.services.encoder_base.run_cmd", fake)
    return fake
