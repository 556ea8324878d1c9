import zipfile

import pytest

from makerchip.cli import main


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    assert "--qr-enabled" in capsys.readouterr().out


def test_missing_output(capsys):
    assert main([]) == 1
    assert "missing output file" in capsys.readouterr().err


def test_unsupported_extension(tmp_path, capsys):
    assert main([str(tmp_path / "chip.stl")]) == 1
    err = capsys.readouterr().err
    assert "must have one of these extensions: .glb, .3mf" in err
    assert "Got: .stl" in err


def test_list_patterns(capsys):
    assert main(["--list-patterns"]) == 0
    lines = capsys.readouterr().out.split()
    assert lines[0] == "makerChipV1" and lines[-1] == "makerChipV20"
    assert len(lines) == 20


def test_writes_3mf(tmp_path, capsys):
    out = tmp_path / "chip.3mf"
    assert main([str(out), "-r", "25", "-m", "makerChipV5", "--qr-enabled", "--qr-content", "Hello"]) == 0
    assert zipfile.is_zipfile(out)
    assert f"✓ Generated {out}" in capsys.readouterr().out


def test_writes_glb(tmp_path):
    out = tmp_path / "nested" / "chip.glb"
    assert main([str(out), "-a", "printable", "-H", "2"]) == 0
    assert out.read_bytes()[:4] == b"glTF"


def test_image_file_not_found_warns(tmp_path, capsys):
    out = tmp_path / "chip.glb"
    code = main([str(out), "--image-enabled", "--image-file", str(tmp_path / "missing.png")])
    assert code == 0
    assert "Warning: Image file not found" in capsys.readouterr().err


def test_image_file_is_embedded(tmp_path, capsys):
    logo = tmp_path / "logo.svg"
    logo.write_text('<svg xmlns="http://www.w3.org/2000/svg"><rect width="20" height="10"/></svg>')
    out = tmp_path / "chip.3mf"
    assert main([str(out), "--image-enabled", "--image-file", str(logo)]) == 0
    assert f"Loaded image: {logo}" in capsys.readouterr().out
    with zipfile.ZipFile(out) as zf:
        config = zf.read("Metadata/model_settings.config").decode("utf-8")
    assert config.count("<part ") == 4


def test_generation_error_exits_one(tmp_path, capsys):
    assert main([str(tmp_path / "chip.glb"), "-m", "makerChipV0"]) == 1
    assert "Error: Unknown shape: makerChipV0." in capsys.readouterr().err
