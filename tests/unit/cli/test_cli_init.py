"""Tests for the weatherboard command line entry point."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from weatherboard.cli import load_snapshot, main
from weatherboard.display.epaper.utils.image_processing import PackedFrameBuffer
from weatherboard.exceptions import ConfigurationError


def snapshot_dict(samples: int = 8, with_article: bool = False) -> dict:
    forecast = [
        {
            "timestamp": f"2024-05-06T{hour:02d}:00:00+02:00",
            "temperature": 10 + hour % 5,
            "precipitation": 0.3 * (hour % 3),
            "condition": "dry",
        }
        for hour in range(samples)
    ]
    data = {
        "current": {
            "timestamp": "2024-05-06T05:00:00+02:00",
            "temperature": 12.5,
            "condition": "fog",
            "relative_humidity": 90,
            "wind_speed": 3.2,
        },
        "forecast": forecast,
    }
    if with_article:
        data["article"] = {
            "title": "Headline",
            "summary": "Summary text",
            "image_url": "https://example.com/a.jpg",
        }
    return data


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep the CLI away from real env vars, config files and logging state."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("WEATHERBOARD_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(
        "weatherboard.config.settings.WeatherboardSettings._find_config_file",
        lambda self: None,
    )
    package_logger = logging.getLogger("weatherboard")
    saved = (package_logger.level, list(package_logger.handlers))
    yield
    package_logger.setLevel(saved[0])
    package_logger.handlers[:] = saved[1]


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_dict()), encoding="utf-8")
    return path


class TestLoadSnapshot:
    """Test suite for load_snapshot."""

    def test_load_snapshot_when_valid_then_display_data(self, snapshot_file: Path) -> None:
        """Test a valid snapshot is parsed."""
        data = load_snapshot(snapshot_file)

        assert len(data.forecast) == 8
        assert data.current.temperature == 12.5

    def test_load_snapshot_when_missing_then_configuration_error(self, tmp_path: Path) -> None:
        """Test a missing file is reported as a configuration problem."""
        with pytest.raises(ConfigurationError, match="Cannot read snapshot"):
            load_snapshot(tmp_path / "absent.json")

    def test_load_snapshot_when_invalid_then_configuration_error(self, tmp_path: Path) -> None:
        """Test a snapshot that fails validation is rejected."""
        path = tmp_path / "bad.json"
        path.write_text('{"current": {}}', encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid snapshot"):
            load_snapshot(path)


class TestMain:
    """Test suite for main."""

    def test_main_when_render_succeeds_then_frame_written(
        self, snapshot_file: Path, tmp_path: Path
    ) -> None:
        """Test the frame buffer is written and exit code is 0."""
        output = tmp_path / "out" / "frame.bin"

        exit_code = main(
            ["render", str(snapshot_file), "-o", str(output), "--now", "2024-05-06T03:10:00+02:00"]
        )

        assert exit_code == 0
        frame = PackedFrameBuffer.from_bytes(output.read_bytes(), 800, 480)
        assert len(frame) == 96000

    def test_main_when_png_requested_then_preview_written(
        self, snapshot_file: Path, tmp_path: Path
    ) -> None:
        """Test --png saves a preview next to the frame buffer."""
        output = tmp_path / "frame.bin"
        preview = tmp_path / "preview.png"

        exit_code = main(["render", str(snapshot_file), "-o", str(output), "--png", str(preview)])

        assert exit_code == 0
        assert preview.exists()

    def test_main_when_no_teaser_then_article_ignored(self, tmp_path: Path) -> None:
        """Test --no-teaser skips the image download entirely."""
        path = tmp_path / "with_article.json"
        path.write_text(json.dumps(snapshot_dict(with_article=True)), encoding="utf-8")
        output = tmp_path / "frame.bin"

        with patch("weatherboard.sources.image_fetcher.HttpImageFetcher.fetch") as fetch:
            exit_code = main(["render", str(path), "-o", str(output), "--no-teaser"])

        assert exit_code == 0
        fetch.assert_not_called()

    def test_main_when_forecast_too_short_then_exit_code_one(self, tmp_path: Path) -> None:
        """Test render failures map to exit code 1 and write nothing."""
        path = tmp_path / "short.json"
        path.write_text(json.dumps(snapshot_dict(samples=2)), encoding="utf-8")
        output = tmp_path / "frame.bin"

        exit_code = main(["render", str(path), "-o", str(output)])

        assert exit_code == 1
        assert not output.exists()

    def test_main_when_snapshot_invalid_then_exit_code_two(self, tmp_path: Path) -> None:
        """Test bad input maps to exit code 2."""
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")

        exit_code = main(["render", str(path), "-o", str(tmp_path / "frame.bin")])

        assert exit_code == 2

    def test_main_when_config_file_missing_then_exit_code_two(
        self, snapshot_file: Path, tmp_path: Path
    ) -> None:
        """Test a missing --config file aborts before rendering."""
        exit_code = main(
            [
                "--config",
                str(tmp_path / "absent.yaml"),
                "render",
                str(snapshot_file),
                "-o",
                str(tmp_path / "frame.bin"),
            ]
        )

        assert exit_code == 2

    def test_main_when_render_finishes_then_image_fetcher_closed(
        self, snapshot_file: Path, tmp_path: Path
    ) -> None:
        """Test the renderer's HTTP client is released after the command."""
        with patch("weatherboard.sources.image_fetcher.HttpImageFetcher.close") as close:
            exit_code = main(["render", str(snapshot_file), "-o", str(tmp_path / "frame.bin")])

        assert exit_code == 0
        close.assert_called_once()

    def test_main_when_render_fails_then_image_fetcher_still_closed(self, tmp_path: Path) -> None:
        """Test the HTTP client is released when the render aborts."""
        path = tmp_path / "short.json"
        path.write_text(json.dumps(snapshot_dict(samples=2)), encoding="utf-8")

        with patch("weatherboard.sources.image_fetcher.HttpImageFetcher.close") as close:
            exit_code = main(["render", str(path), "-o", str(tmp_path / "frame.bin")])

        assert exit_code == 1
        close.assert_called_once()
