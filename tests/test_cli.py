"""
Command line tests.
"""

import json

from gridslicer.cli import build_parser, main


class TestParser:
    """Argument parsing"""

    def test_defaults_from_settings(self):
        args = build_parser().parse_args(["analyze", "sheet.png"])

        assert args.tolerance == 5
        assert args.min_gap_x == 50
        assert args.aggressiveness == 30
        assert not args.no_archive


class TestAnalyzeCommand:
    """gridslicer analyze"""

    def test_writes_bundle(self, tmp_path, sheet_png, capsys):
        image = tmp_path / "sheet.png"
        image.write_bytes(sheet_png)
        output = tmp_path / "out"

        assert main(["analyze", str(image), "-o", str(output), "--workers", "1"]) == 0

        assert (output / "components.tar").is_file()
        document = json.loads((output / "components.json").read_text())
        assert document["grid"]["rows"] == 3
        assert "widget-2-2" in capsys.readouterr().out

    def test_no_archive(self, tmp_path, sheet_png):
        image = tmp_path / "sheet.png"
        image.write_bytes(sheet_png)

        main(["analyze", str(image), "-o", str(tmp_path / "out"), "--no-archive"])

        assert not (tmp_path / "out" / "components.tar").exists()
        assert (tmp_path / "out" / "components.css").is_file()

    def test_trace_events(self, tmp_path, sheet_png, capsys):
        image = tmp_path / "sheet.png"
        image.write_bytes(sheet_png)

        main(["analyze", str(image), "-o", str(tmp_path / "out"), "--trace"])

        lines = capsys.readouterr().err.splitlines()
        events = [json.loads(line)["event"] for line in lines if line.startswith("{")]
        assert events[0] == "grid-detected"
        assert events[-1] == "analysis-complete"

    def test_missing_image(self, tmp_path):
        assert main(["analyze", str(tmp_path / "missing.png")]) == 1

    def test_unreadable_image(self, tmp_path):
        image = tmp_path / "sheet.png"
        image.write_bytes(b"not an image")

        assert main(["analyze", str(image), "-o", str(tmp_path / "out")]) == 1
