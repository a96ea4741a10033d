"""
Probe adapter tests (ffprobe is faked)
"""

from pathlib import Path

import ffmpeg
import pytest

from shrinkpass.domain import media
from shrinkpass.domain.media import MediaProbe, get_duration, has_audio_stream, parse_duration


class TestParseDuration:
    def test_plain_seconds(self):
        assert parse_duration("12.5") == pytest.approx(12.5)

    def test_timecode(self):
        assert parse_duration("01:00:00.500") == pytest.approx(3600.5)
        assert parse_duration("2:03.25") == pytest.approx(123.25)

    def test_garbage(self):
        assert parse_duration("N/A") == 0.0

    def test_non_finite(self):
        assert parse_duration("nan") == 0.0
        assert parse_duration("inf") == 0.0
        assert parse_duration("-inf") == 0.0


class TestGetDuration:
    def test_reads_format_duration(self, monkeypatch):
        captured = {}

        def fake_probe(filename, cmd="ffprobe", **kwargs):
            captured["filename"] = filename
            captured["cmd"] = cmd
            return {"format": {"duration": "61.250000"}, "streams": []}

        monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
        assert get_duration(Path("clip.mp4"), "/opt/ff/ffprobe") == pytest.approx(61.25)
        assert captured == {"filename": "clip.mp4", "cmd": "/opt/ff/ffprobe"}

    def test_falls_back_to_stream_duration(self, monkeypatch):
        monkeypatch.setattr(
            media.ffmpeg,
            "probe",
            lambda filename, cmd="ffprobe", **kwargs: {
                "format": {},
                "streams": [{"codec_type": "video", "duration": "N/A"}, {"codec_type": "audio", "duration": "9.5"}],
            },
        )
        assert get_duration(Path("clip.mp4")) == pytest.approx(9.5)

    def test_missing_duration_is_zero(self, monkeypatch):
        monkeypatch.setattr(media.ffmpeg, "probe", lambda filename, cmd="ffprobe", **kwargs: {"format": {}, "streams": []})
        assert get_duration(Path("clip.mp4")) == 0.0

    def test_unreadable_file_is_zero(self, monkeypatch):
        def fake_probe(filename, cmd="ffprobe", **kwargs):
            raise ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")

        monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
        assert get_duration(Path("broken.mp4")) == 0.0

    def test_missing_ffprobe_is_zero(self, monkeypatch):
        def fake_probe(filename, cmd="ffprobe", **kwargs):
            raise FileNotFoundError(cmd)

        monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
        assert get_duration(Path("clip.mp4")) == 0.0


class TestHasAudioStream:
    def test_selects_first_audio_stream(self, monkeypatch):
        captured = {}

        def fake_probe(filename, cmd="ffprobe", **kwargs):
            captured.update(kwargs)
            return {"streams": [{"index": 1, "codec_type": "audio"}]}

        monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
        assert has_audio_stream(Path("clip.mp4")) is True
        assert captured == {"select_streams": "a:0"}

    def test_no_audio(self, monkeypatch):
        monkeypatch.setattr(media.ffmpeg, "probe", lambda filename, cmd="ffprobe", **kwargs: {"streams": []})
        assert has_audio_stream(Path("clip.mp4")) is False

    def test_unreadable_file_has_no_audio(self, monkeypatch):
        def fake_probe(filename, cmd="ffprobe", **kwargs):
            raise ffmpeg.Error("ffprobe", b"", b"moov atom not found")

        monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
        assert has_audio_stream(Path("broken.mp4")) is False


def test_media_probe_from_path(monkeypatch):
    def fake_probe(filename, cmd="ffprobe", **kwargs):
        if kwargs.get("select_streams") == "a:0":
            return {"streams": []}
        return {"format": {"duration": "30"}, "streams": [{"codec_type": "video"}]}

    monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
    assert MediaProbe.from_path(Path("silent.mp4")) == MediaProbe(duration=30.0, has_audio=False)


def test_nan_format_duration_is_zero(monkeypatch):
    monkeypatch.setattr(
        media.ffmpeg, "probe", lambda filename, cmd="ffprobe", **kwargs: {"format": {"duration": "nan"}, "streams": []}
    )
    assert get_duration(Path("clip.mp4")) == 0.0
