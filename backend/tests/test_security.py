"""Tests for security validation gates — inputs, outputs, pixel cap, PII stripping."""

import os

import pytest

from security import (
    ALLOWED_EXTENSIONS,
    MAX_INPUT_SIZE,
    MAX_PIXELS,
    strip_pii,
    validate_dimensions,
    validate_input,
    validate_output_path,
)


class TestInput:
    def test_valid_png_accepted(self, tmp_path):
        f = tmp_path / "base.png"
        f.write_bytes(b"\x00" * 1024)
        assert validate_input(str(f)) == []

    @pytest.mark.parametrize("ext", [".jpg", ".JPEG", ".webp"])
    def test_other_image_types_accepted(self, tmp_path, ext):
        f = tmp_path / f"img{ext}"
        f.write_bytes(b"\x00")
        assert validate_input(str(f)) == []

    def test_txt_rejected(self, tmp_path):
        f = tmp_path / "notes.txt"
        f.write_bytes(b"hi")
        errors = validate_input(str(f))
        assert any("not allowed" in e for e in errors)

    def test_nonexistent_rejected(self, tmp_path):
        errors = validate_input(str(tmp_path / "missing.png"))
        assert any("not found" in e.lower() for e in errors)

    def test_directory_rejected(self, tmp_path):
        d = tmp_path / "dir.png"
        d.mkdir()
        assert any("not found" in e.lower() for e in validate_input(str(d)))

    def test_symlink_rejected(self, tmp_path):
        target = tmp_path / "real.png"
        target.write_bytes(b"\x00")
        link = tmp_path / "link.png"
        link.symlink_to(target)
        assert any("Symlink" in e for e in validate_input(str(link)))

    def test_oversize_rejected(self, tmp_path):
        f = tmp_path / "huge.png"
        with open(f, "wb") as fh:
            fh.seek(MAX_INPUT_SIZE + 1)
            fh.write(b"\x00")
        assert any("too large" in e for e in validate_input(str(f)))

    def test_allowed_extensions_are_lowercase(self):
        assert all(e == e.lower() and e.startswith(".") for e in ALLOWED_EXTENSIONS)


class TestOutput:
    def test_valid_output_accepted(self, tmp_path):
        assert validate_output_path(str(tmp_path / "out.jpg")) == []

    def test_bad_extension_rejected(self, tmp_path):
        errors = validate_output_path(str(tmp_path / "out.exe"))
        assert any("not allowed" in e for e in errors)

    def test_missing_parent_rejected(self, tmp_path):
        errors = validate_output_path(str(tmp_path / "nope" / "out.png"))
        assert any("does not exist" in e for e in errors)

    def test_system_directory_rejected(self):
        errors = validate_output_path("/etc/out.png")
        assert any("system directory" in e for e in errors)

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can write anywhere")
    def test_unwritable_parent_rejected(self, tmp_path):
        ro = tmp_path / "ro"
        ro.mkdir()
        ro.chmod(0o500)
        try:
            errors = validate_output_path(str(ro / "out.png"))
            assert any("not writable" in e for e in errors)
        finally:
            ro.chmod(0o700)


class TestDimensions:
    def test_normal_size_ok(self):
        assert validate_dimensions(1920, 1080) == []

    def test_over_cap_rejected(self):
        assert validate_dimensions(MAX_PIXELS, 2)

    def test_negative_rejected(self):
        assert validate_dimensions(-1, 10)


class TestPII:
    @pytest.mark.skipif(len(os.path.expanduser("~")) <= 1, reason="home is /")
    def test_home_path_stripped(self):
        home = os.path.expanduser("~")
        event = {"message": f"failed to open {home}/pics/base.png", "extra": {}}
        cleaned = strip_pii(event, {})
        assert home not in cleaned["message"]

    def test_user_paths_redacted(self):
        event = {"message": "open /home/alice/x.png and /Users/bob/y.png"}
        cleaned = strip_pii(event, {})
        assert "alice" not in cleaned["message"]
        assert "bob" not in cleaned["message"]

    def test_sensitive_keys_redacted(self):
        event = {
            "extra": {"sentry_dsn": "https://abc@example", "width": 10},
            "contexts": {"pipeline": {"api_token": "t0k3n", "stage": "sort"}},
        }
        cleaned = strip_pii(event, {})
        assert cleaned["extra"]["sentry_dsn"] == "<REDACTED>"
        assert cleaned["extra"]["width"] == 10
        assert cleaned["contexts"]["pipeline"]["api_token"] == "<REDACTED>"
        assert cleaned["contexts"]["pipeline"]["stage"] == "sort"


class TestPixelCap:
    def test_cap_below_pillow_bomb_limit(self):
        from PIL import Image

        assert MAX_PIXELS <= Image.MAX_IMAGE_PIXELS

    def test_cap_boundary(self):
        assert validate_dimensions(MAX_PIXELS, 1) == []
        assert validate_dimensions(MAX_PIXELS + 1, 1)
