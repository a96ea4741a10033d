"""
Batch driver tests (ffprobe and ffmpeg are faked)
"""

import pytest

from shrinkpass.config.settings import EncodeSettings
from shrinkpass.domain import media
from shrinkpass.domain.media import MediaProbe
from shrinkpass.pipeline.video_pipeline import (
    OUTCOME_DONE,
    OUTCOME_FAILED,
    OUTCOME_SKIPPED,
    ShrinkPipeline,
)

from .conftest import ENCODED_BYTES, ORIGINAL_BYTES


def test_batch_encodes_candidates_and_skips_prefix(make_video, video_dir, settings, fake_probe, fake_ffmpeg):
    skipped = make_video("2x_demo.mp4")
    first = make_video("a.mp4")
    second = make_video("sub/b.MP4")
    other = make_video("readme.txt")

    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 0

    assert pipeline.outcomes[OUTCOME_DONE] == 2
    assert pipeline.outcomes[OUTCOME_SKIPPED] == 1
    assert first.read_bytes() == ENCODED_BYTES
    assert second.read_bytes() == ENCODED_BYTES
    assert skipped.read_bytes() == ORIGINAL_BYTES
    assert other.read_bytes() == ORIGINAL_BYTES

    # The skipped file never reaches ffmpeg.
    assert len(fake_ffmpeg.calls) == 4
    assert not any(str(skipped) in arg for cmd in fake_ffmpeg.calls for arg in cmd)


def test_failure_does_not_stop_batch(make_video, video_dir, settings, fake_probe, fake_ffmpeg):
    first = make_video("a.mp4")
    second = make_video("b.mp4")
    fake_ffmpeg.fail_on_pass = 1

    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 1

    assert pipeline.outcomes[OUTCOME_FAILED] == 2
    assert pipeline.failed_files == [first.resolve(), second.resolve()]
    assert len(fake_ffmpeg.calls) == 2
    assert first.read_bytes() == ORIGINAL_BYTES
    assert second.read_bytes() == ORIGINAL_BYTES


def test_unreadable_files_are_skips_not_failures(make_video, video_dir, settings, fake_probe, fake_ffmpeg):
    make_video("broken.mp4")
    fake_probe(duration=0.0, has_audio=False)

    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 0
    assert pipeline.outcomes[OUTCOME_SKIPPED] == 1
    assert fake_ffmpeg.calls == []


def test_empty_skip_prefix_processes_everything(make_video, video_dir, tmp_path, fake_probe, fake_ffmpeg):
    settings = EncodeSettings(skip_prefix="", passlog_dir=tmp_path / "logs", write_reports=False)
    demo = make_video("2x_demo.mp4")

    assert ShrinkPipeline(video_dir, settings).run() == 0
    assert demo.read_bytes() == ENCODED_BYTES


def test_reports_written_into_target_dir(make_video, video_dir, tmp_path, fake_probe, fake_ffmpeg):
    settings = EncodeSettings(passlog_dir=tmp_path / "logs")
    make_video("a.mp4")

    ShrinkPipeline(video_dir, settings).run()
    assert (video_dir / "shrinkpass_log.yaml").is_file()
    assert not (video_dir / "shrinkpass_error.txt").exists()


def test_empty_directory(video_dir, settings, fake_ffmpeg):
    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 0
    assert sum(pipeline.outcomes.values()) == 0


def test_missing_directory(tmp_path, settings):
    with pytest.raises(FileNotFoundError):
        ShrinkPipeline(tmp_path / "missing", settings).run()


def test_unexpected_error_does_not_stop_batch(make_video, video_dir, settings, fake_ffmpeg, monkeypatch):
    bad = make_video("a_bad.mp4")
    good = make_video("b_good.mp4")

    def from_path(cls, path, ffprobe_cmd="ffprobe"):
        if path.name == "a_bad.mp4":
            raise RuntimeError("probe crashed")
        return cls(duration=60.0, has_audio=True)

    monkeypatch.setattr(MediaProbe, "from_path", classmethod(from_path))

    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 1

    assert pipeline.failed_files == [bad.resolve()]
    assert pipeline.outcomes[OUTCOME_DONE] == 1
    assert bad.read_bytes() == ORIGINAL_BYTES
    assert good.read_bytes() == ENCODED_BYTES


def test_nan_duration_is_skipped_and_batch_continues(make_video, video_dir, settings, fake_ffmpeg, monkeypatch):
    bad = make_video("a_bad.mp4")
    good = make_video("b_good.mp4")

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        if kwargs.get("select_streams") == "a:0":
            return {"streams": [{"codec_type": "audio"}]}
        duration = "nan" if filename.endswith("a_bad.mp4") else "60"
        return {"format": {"duration": duration}, "streams": []}

    monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)

    pipeline = ShrinkPipeline(video_dir, settings)
    assert pipeline.run() == 0

    assert pipeline.outcomes[OUTCOME_SKIPPED] == 1
    assert pipeline.outcomes[OUTCOME_DONE] == 1
    assert bad.read_bytes() == ORIGINAL_BYTES
    assert good.read_bytes() == ENCODED_BYTES
