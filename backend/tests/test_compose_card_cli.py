import pytest
from PIL import Image

from scripts.compose_card import build_parser, main


def test_cli_writes_card(tmp_path):
    Image.new("RGB", (800, 600), (0, 0, 120)).save(tmp_path / "bg.png")
    Image.new("RGB", (300, 500), (120, 0, 0)).save(tmp_path / "art.png")
    out = tmp_path / "out" / "card.png"
    code = main(
        [
            "--background", str(tmp_path / "bg.png"),
            "--illustration", str(tmp_path / "art.png"),
            "--out", str(out),
            "--variant", "landscape-flat",
            "--text", "title=Dragon",
            "--glow", "none",
        ]
    )
    assert code == 0
    assert Image.open(out).size == (1024, 768)


def test_cli_reports_bad_images(tmp_path):
    (tmp_path / "bg.png").write_bytes(b"")
    Image.new("RGB", (30, 30)).save(tmp_path / "art.png")
    code = main(["--background", str(tmp_path / "bg.png"), "--illustration", str(tmp_path / "art.png"), "--out", str(tmp_path / "x.png")])
    assert code == 1


def test_cli_reports_unreadable_files(tmp_path):
    Image.new("RGB", (30, 30)).save(tmp_path / "art.png")
    missing = tmp_path / "missing.png"
    with pytest.raises(SystemExit) as excinfo:
        main(["--background", str(missing), "--illustration", str(tmp_path / "art.png"), "--out", str(tmp_path / "x.png")])
    message = str(excinfo.value)
    assert message.startswith("Could not read image file")
    assert str(missing) in message
    assert "card image" not in message


def test_cli_rejects_out_of_range_inset(tmp_path):
    with pytest.raises(SystemExit):
        main(["--background", "a.png", "--illustration", "b.png", "--out", "c.png", "--inset", "40"])


def test_parser_rejects_unknown_enum_values():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--illustration", "a", "--out", "b", "--variant", "diagonal"])
