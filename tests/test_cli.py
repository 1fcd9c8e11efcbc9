"""
Tests for the panowarp command line
"""

from pathlib import Path

import numpy as np
import pytest

from panowarp.cli.batch_process import main
from panowarp.models.color_adjustments import ColorAdjustments
from panowarp.models.image import Image
from panowarp.repositories.image_repository import ImageRepository
from panowarp.services.image_service import ImageService


@pytest.fixture
def image_service():
    return ImageService()


class TestAdjustCommand:
    """panowarp adjust"""

    def test_single_file(self, image_service, flat_rgb_image, tmp_path):
        src = image_service.save(flat_rgb_image, tmp_path / "input.png")
        out = tmp_path / "output_brightness.png"

        assert main(["adjust", str(src), "--brightness", "20", "-o", str(out)]) == 0
        result = image_service.load(out)
        assert result.pixel(0, 0) == (30, 40, 50)
        assert result.pixel(2, 1) == (220, 30, 30)

    def test_default_output_name(self, image_service, flat_rgb_image, tmp_path):
        src = image_service.save(flat_rgb_image, tmp_path / "input.png")
        assert main(["adjust", str(src), "--invert"]) == 0
        result = image_service.load(tmp_path / "input_edited.png")
        assert result.pixel(0, 0) == (245, 235, 225)

    def test_directory(self, image_service, flat_rgb_image, tmp_path):
        src_dir = tmp_path / "in"
        src_dir.mkdir()
        image_service.save(flat_rgb_image, src_dir / "a.png")
        image_service.save(flat_rgb_image, src_dir / "b.png")
        out_dir = tmp_path / "out"

        assert main(["adjust", str(src_dir), "--grayscale", "--blur", "1", "-o", str(out_dir)]) == 0
        written = sorted(p.name for p in out_dir.iterdir())
        assert written == ["a_edited.png", "b_edited.png"]
        gray = image_service.load(out_dir / "a_edited.png").pixels
        assert np.array_equal(gray[:, :, 0], gray[:, :, 2])

    def test_directory_is_streamed(self, image_service, flat_rgb_image, tmp_path, monkeypatch):
        """Each image is saved before the next one is loaded"""
        src_dir = tmp_path / "in"
        src_dir.mkdir()
        image_service.save(flat_rgb_image, src_dir / "a.png")
        image_service.save(flat_rgb_image, src_dir / "b.png")

        events = []
        load, save = ImageRepository.load, ImageRepository.save

        def recording_load(path):
            events.append(("load", Path(path).name))
            return load(path)

        def recording_save(self, image, path=None, quality=None):
            events.append(("save", Path(path).name))
            return save(self, image, path, quality)

        monkeypatch.setattr(ImageRepository, "load", staticmethod(recording_load))
        monkeypatch.setattr(ImageRepository, "save", recording_save)

        assert main(["adjust", str(src_dir), "--brightness", "5", "-o", str(tmp_path / "out")]) == 0
        assert events == [("load", "a.png"), ("save", "a_edited.png"),
                          ("load", "b.png"), ("save", "b_edited.png")]

    def test_neutral_settings_skip_tone_chain(self, image_service, flat_rgb_image, tmp_path, monkeypatch):
        src = image_service.save(flat_rgb_image, tmp_path / "input.png")
        monkeypatch.setattr(ColorAdjustments, "apply",
                            lambda *a, **kw: pytest.fail("tone chain should not run"))
        assert main(["adjust", str(src), "--invert"]) == 0
        assert (tmp_path / "input_edited.png").exists()

    def test_nothing_requested_fails(self, image_service, flat_rgb_image, tmp_path):
        src = image_service.save(flat_rgb_image, tmp_path / "input.png")
        assert main(["adjust", str(src)]) == 1
        assert sorted(p.name for p in tmp_path.iterdir()) == ["input.png"]

    def test_missing_input_fails(self, tmp_path):
        assert main(["adjust", str(tmp_path / "missing.png")]) == 1


class TestProjectCommand:
    """panowarp project"""

    def test_project(self, image_service, rng, tmp_path):
        pano = image_service.save(
            Image(rng.integers(0, 256, size=(100, 120, 3), dtype=np.uint8)), tmp_path / "pano.png")
        mask = image_service.save(Image(np.full((100, 120, 3), 255, dtype=np.uint8)),
                                  tmp_path / "mask.png")
        out_dir = tmp_path / "projected"

        assert main(["project", str(pano), "--mask", str(mask), "-o", str(out_dir)]) == 0
        outputs = list(out_dir.iterdir())
        assert len(outputs) == 1

    def test_mask_mismatch_fails(self, image_service, rng, tmp_path):
        pano = image_service.save(
            Image(rng.integers(0, 256, size=(100, 120, 3), dtype=np.uint8)), tmp_path / "pano.png")
        mask = image_service.save(Image(np.zeros((100, 100, 3), dtype=np.uint8)),
                                  tmp_path / "mask.png")
        assert main(["project", str(pano), "--mask", str(mask), "-o", str(tmp_path / "o")]) == 1
