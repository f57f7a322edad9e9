"""
Tests for the dc42 command-line tool.

These run the click commands in an isolated filesystem against images
assembled by the conftest helpers.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from dc42.cli.dc42 import main, sanitize_name
from dc42.cli.errors import ExitCode
from dc42.config import ExtractConfig

from conftest import GCR_400K_SIZE, build_header, build_image


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def image_bytes(gcr400k_data: bytes, sample_tag_bytes: bytes) -> bytes:
    return build_image(
        gcr400k_data, sample_tag_bytes, name=b"MacWrite 4.5", encoding=0x00, disk_format=0x02
    )


# =============================================================================
# Name Sanitizing
# =============================================================================

class TestSanitizeName:
    """Tests for turning image names into file names."""

    def test_plain_name_unchanged(self):
        assert sanitize_name("MacWrite 4.5", "fallback") == "MacWrite 4.5"

    def test_invalid_characters_replaced(self):
        assert sanitize_name('a/b\\c:d*e?f"g<h>i|j', "x") == "a_b_c_d_e_f_g_h_i_j"

    def test_control_characters_replaced(self):
        assert sanitize_name("Disk\x00\x1f1", "x") == "Disk__1"

    @pytest.mark.parametrize("name", ["", "   ", ".", ".."])
    def test_empty_uses_fallback(self, name):
        assert sanitize_name(name, "disk") == "disk"


# =============================================================================
# Configuration
# =============================================================================

class TestExtractConfig:
    """Tests for extraction defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for var in ("DC42_OUTPUT_DIR", "DC42_INCLUDE_TAGS", "DC42_VERIFY"):
            monkeypatch.delenv(var, raising=False)
        config = ExtractConfig.from_env()
        assert config.output_dir is None
        assert not config.include_tags
        assert not config.verify

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DC42_OUTPUT_DIR", "/tmp/disks")
        monkeypatch.setenv("DC42_INCLUDE_TAGS", "yes")
        monkeypatch.setenv("DC42_VERIFY", "0")
        config = ExtractConfig.from_env()
        assert config.output_dir == Path("/tmp/disks")
        assert config.include_tags
        assert not config.verify

    def test_resolve_output_dir_default(self):
        assert ExtractConfig().resolve_output_dir(Path("in/disk.image")) == Path("disk")

    def test_resolve_output_dir_explicit(self):
        config = ExtractConfig(output_dir=Path("out"))
        assert config.resolve_output_dir(Path("disk.image")) == Path("out")


# =============================================================================
# Extract Command
# =============================================================================

class TestExtractCommand:
    """Tests for dc42 extract."""

    def test_extract_data_only(self, runner, image_bytes, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["extract", "disk.image", "-o", "out"])

            assert result.exit_code == 0, result.output
            assert Path("out/MacWrite 4.5.dsk").read_bytes() == gcr400k_data
            assert not Path("out/MacWrite 4.5.tags").exists()
            assert "Image Name:    MacWrite 4.5" in result.output
            assert "GCR 400K" in result.output
            assert "Extraction complete" in result.output

    def test_extract_with_tags(self, runner, image_bytes, sample_tag_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(
                main, ["extract", "disk.image", "-o", "out", "--include-tags"]
            )

            assert result.exit_code == 0, result.output
            assert Path("out/MacWrite 4.5.tags").read_bytes() == sample_tag_bytes
            assert "Wrote tags" in result.output

    def test_include_tags_without_tag_data(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(build_image(gcr400k_data, encoding=0x00))
            result = runner.invoke(
                main, ["extract", "disk.image", "-o", "out", "--include-tags"]
            )

            assert result.exit_code == 0, result.output
            assert list(Path("out").iterdir()) == [Path("out/Test Disk.dsk")]

    def test_default_output_dir(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["extract", "disk.image"])

            assert result.exit_code == 0, result.output
            assert Path("disk/MacWrite 4.5.dsk").exists()

    def test_output_dir_from_env(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(
                main,
                ["extract", "disk.image"],
                env={"DC42_OUTPUT_DIR": "envout", "DC42_INCLUDE_TAGS": "1"},
            )

            assert result.exit_code == 0, result.output
            assert Path("envout/MacWrite 4.5.dsk").exists()
            assert Path("envout/MacWrite 4.5.tags").exists()

    def test_option_overrides_env(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(
                main,
                ["extract", "disk.image", "-o", "out", "--no-include-tags"],
                env={"DC42_INCLUDE_TAGS": "true"},
            )

            assert result.exit_code == 0, result.output
            assert not Path("out/MacWrite 4.5.tags").exists()

    def test_sanitized_file_name(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(
                build_image(gcr400k_data, name=b"Tools: 1/2", encoding=0x00)
            )
            result = runner.invoke(main, ["extract", "disk.image", "-o", "out"])

            assert result.exit_code == 0, result.output
            assert Path("out/Tools_ 1_2.dsk").exists()

    def test_empty_name_uses_input_stem(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("blank.image").write_bytes(build_image(gcr400k_data, name=b"", encoding=0x00))
            result = runner.invoke(main, ["extract", "blank.image", "-o", "out"])

            assert result.exit_code == 0, result.output
            assert Path("out/blank.dsk").exists()

    def test_failed_tag_write_leaves_no_data_file(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            Path("out/MacWrite 4.5.tags.part").mkdir(parents=True)
            result = runner.invoke(
                main, ["extract", "disk.image", "-o", "out", "--include-tags"]
            )

            assert result.exit_code != 0
            assert not Path("out/MacWrite 4.5.dsk").exists()
            assert not Path("out/MacWrite 4.5.dsk.part").exists()
            assert not Path("out/MacWrite 4.5.tags").exists()
            assert "Wrote data" not in result.output

    def test_no_part_files_after_success(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(
                main, ["extract", "disk.image", "-o", "out", "--include-tags"]
            )

            assert result.exit_code == 0, result.output
            assert sorted(p.name for p in Path("out").iterdir()) == [
                "MacWrite 4.5.dsk",
                "MacWrite 4.5.tags",
            ]

    def test_non_ascii_name_is_sanitized(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(
                build_image(gcr400k_data, name=b"Caf\x8e Disk", encoding=0x00)
            )
            result = runner.invoke(main, ["extract", "disk.image", "-o", "out"])

            assert result.exit_code == 0, result.output
            assert "Image Name:    Caf? Disk" in result.output
            assert Path("out/Caf_ Disk.dsk").exists()

    def test_verify_reports_valid(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["extract", "disk.image", "-o", "out", "--verify"])

            assert result.exit_code == 0, result.output
            assert "Data checksum valid" in result.output
            assert "Tag checksum valid" in result.output

    def test_verify_mismatch_still_extracts(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(
                build_image(gcr400k_data, encoding=0x00, data_checksum=0x12345678)
            )
            result = runner.invoke(main, ["extract", "disk.image", "-o", "out", "--verify"])

            assert result.exit_code == 0, result.output
            assert "Data checksum MISMATCH: expected 0x12345678" in result.output
            assert Path("out/Test Disk.dsk").exists()

    def test_invalid_image_writes_nothing(self, runner):
        with runner.isolated_filesystem():
            Path("bad.image").write_bytes(build_header(magic=0x0200) + bytes(GCR_400K_SIZE))
            result = runner.invoke(main, ["extract", "bad.image", "-o", "out"])

            assert result.exit_code == ExitCode.READ_ERROR
            assert "magic number 0x0200" in result.output
            assert not Path("out").exists()

    def test_truncated_image_writes_nothing(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("short.image").write_bytes(image_bytes[:5000])
            result = runner.invoke(main, ["extract", "short.image"])

            assert result.exit_code == ExitCode.READ_ERROR
            assert "truncated data block" in result.output
            assert not Path("short").exists()

    def test_missing_input(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["extract", "nope.image"])
            assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Info, Verify and Tags Commands
# =============================================================================

class TestInfoCommand:
    """Tests for dc42 info."""

    def test_info(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["info", "disk.image"])

            assert result.exit_code == 0, result.output
            assert "MacWrite 4.5" in result.output
            assert "Macintosh 400K" in result.output
            assert "Sectors:       800" in result.output
            assert "409600 bytes" in result.output

    def test_info_unsupported_encoding(self, runner):
        with runner.isolated_filesystem():
            Path("twiggy.image").write_bytes(build_header(encoding=0x54))
            result = runner.invoke(main, ["info", "twiggy.image"])

            assert result.exit_code == ExitCode.READ_ERROR
            assert "TWIGGY" in result.output


class TestVerifyCommand:
    """Tests for dc42 verify."""

    def test_verify_passes(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["verify", "disk.image"])

            assert result.exit_code == 0, result.output
            assert "Verification PASSED" in result.output

    def test_verify_tag_mismatch(self, runner, gcr400k_data, sample_tag_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(
                build_image(gcr400k_data, sample_tag_bytes, encoding=0x00, tag_checksum=7)
            )
            result = runner.invoke(main, ["verify", "disk.image"])

            assert result.exit_code == ExitCode.CHECKSUM_MISMATCH
            assert "Tag checksum MISMATCH: expected 0x00000007" in result.output


class TestTagsCommand:
    """Tests for dc42 tags."""

    def test_lists_records(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["tags", "disk.image"])

            assert result.exit_code == 0, result.output
            assert "2000-01-01 00:00:00" in result.output
            assert "1904-01-01 00:00:00" in result.output
            assert "0x0100" in result.output

    def test_limit(self, runner, image_bytes):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(image_bytes)
            result = runner.invoke(main, ["tags", "-n", "1", "disk.image"])

            assert result.exit_code == 0, result.output
            assert "2000-01-01" in result.output
            assert "1904-01-01" not in result.output

    def test_no_tag_data(self, runner, gcr400k_data):
        with runner.isolated_filesystem():
            Path("disk.image").write_bytes(build_image(gcr400k_data, encoding=0x00))
            result = runner.invoke(main, ["tags", "disk.image"])

            assert result.exit_code == 0
            assert "no tag data" in result.output


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output
