"""Tests for the hdr-bake command line interface"""

import pytest
import numpy as np
from PIL import Image

from hdrbake.cli import build_parser, main
from tone import DisplayTransform


class TestArgumentParsing:
    """Test positional arguments mirroring `input output [colorspace] [resize]`"""

    def test_defaults(self):
        """Colorspace defaults to sRGB and resize to 1"""
        args = build_parser().parse_args(['in.exr', 'out.png'])
        assert args.colorspace is DisplayTransform.SRGB
        assert args.resize == 1.0
        assert args.rounding == 'truncate'

    def test_positional_colorspace_and_resize(self):
        """Optional positionals parse into typed values"""
        args = build_parser().parse_args(['in.exr', 'out.png', '3', '2'])
        assert args.colorspace is DisplayTransform.ACES_SRGB
        assert args.resize == 2.0

    @pytest.mark.parametrize('colorspace', ['6', '-1', 'aces', '--3', '²'])
    def test_invalid_colorspace_exits(self, colorspace):
        """Out-of-range selectors are usage errors"""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(['in.exr', 'out.png', colorspace])
        assert exc.value.code == 2

    @pytest.mark.parametrize('resize', ['0', '-2', 'half', 'inf', 'nan'])
    def test_invalid_resize_exits(self, resize):
        """Non-positive or non-numeric factors are usage errors"""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(['in.exr', 'out.png', '1', resize])
        assert exc.value.code == 2

    def test_missing_paths(self):
        """Input and output are required for a bake"""
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2


class TestMain:
    """Test CLI runs and exit codes"""

    def test_bake(self, linear_tiff, temp_dir, capsys):
        """Successful bake exits 0 and writes the preview"""
        out = temp_dir / "cli.png"
        assert main([str(linear_tiff), str(out), '3', '2']) == 0
        assert out.exists()
        with Image.open(out) as im:
            assert im.size == (32, 16)
            assert np.all(np.asarray(im)[..., 3] == 255)
        stdout = capsys.readouterr().out
        assert "✅" in stdout

    def test_quiet(self, linear_tiff, temp_dir, capsys):
        """--quiet suppresses progress output"""
        assert main([str(linear_tiff), str(temp_dir / "q.png"), '--quiet']) == 0
        assert capsys.readouterr().out == ""

    def test_verbose(self, linear_tiff, temp_dir, capsys):
        """--verbose reports the selected transform"""
        assert main([str(linear_tiff), str(temp_dir / "v.png"), '2', '-v']) == 0
        stdout = capsys.readouterr().out
        assert "Colorspace: Rec. 709 (2)" in stdout

    def test_rounding_flag(self, grey_tiff, temp_dir):
        """--round nearest switches the quantizer"""
        out = temp_dir / "grey.png"
        assert main([str(grey_tiff), str(out), '1', '--round', 'nearest', '-q']) == 0
        with Image.open(out) as im:
            assert np.all(np.asarray(im)[..., :3] == 118)

    def test_missing_input(self, temp_dir, capsys):
        """Decode failures exit non-zero with a message on stderr"""
        assert main([str(temp_dir / "missing.exr"), str(temp_dir / "out.png")]) == 1
        err = capsys.readouterr().err
        assert "❌" in err
        assert "Input image not found" in err

    def test_write_failure(self, linear_tiff, temp_dir, capsys):
        """Write failures exit non-zero"""
        blocking_file = temp_dir / "blocking_file"
        blocking_file.write_text("block")
        assert main([str(linear_tiff), str(blocking_file / "out.png"), '-q']) == 1
        assert "Failed to write" in capsys.readouterr().err

    def test_runaway_enlargement(self, linear_tiff, temp_dir, capsys):
        """Oversized enlargements are reported as bake failures"""
        assert main([str(linear_tiff), str(temp_dir / "huge.png"), '1', '0.0001', '-q']) == 1
        err = capsys.readouterr().err
        assert "❌" in err
        assert "pixel limit" in err

    def test_list_transforms(self, capsys):
        """Selector table lists all six transforms"""
        assert main(['--list-transforms']) == 0
        stdout = capsys.readouterr().out
        for mode in DisplayTransform:
            assert f"= {int(mode)}" in stdout
            assert mode.label in stdout

    def test_check_deps(self, capsys):
        """Dependency check passes in the test environment"""
        assert main(['--check-deps']) == 0
        assert "OpenCV" in capsys.readouterr().out
