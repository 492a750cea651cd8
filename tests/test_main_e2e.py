import sys

import pytest


def test_compress_and_decompress_file_roundtrip(sample_file, m, capsys):
    comp_path = m.compressed_name(str(sample_file))
    m.compress_file(str(sample_file), comp_path)
    out = capsys.readouterr().out
    assert "Compressing ..." in out and "compressed bytes" in out

    dest = m.decompressed_name(comp_path)
    m.decompress_file(comp_path, dest, quiet=True)
    assert capsys.readouterr().out == ""
    with open(dest, "rb") as f:
        assert f.read() == sample_file.read_bytes()


def test_main_compress_then_decompress(sample_file, m, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["shrinkit", "c", str(sample_file), "-q"])
    m.main()
    comp = sample_file.parent / (sample_file.name + ".huf")
    assert comp.exists()

    monkeypatch.setattr(sys, "argv", ["shrinkit", "d", str(comp), "-q"])
    m.main()
    restored = sample_file.parent / ("unhuf." + sample_file.name)
    assert restored.read_bytes() == sample_file.read_bytes()


def test_main_refuses_to_overwrite(sample_file, m, monkeypatch, capsys):
    out = sample_file.parent / "exists.huf"
    out.write_bytes(b"keep")
    monkeypatch.setattr(
        sys, "argv", ["shrinkit", "compress", str(sample_file), "-o", str(out)]
    )
    with pytest.raises(SystemExit):
        m.main()
    assert "[!]" in capsys.readouterr().out
    assert out.read_bytes() == b"keep"

    monkeypatch.setattr(
        sys, "argv",
        ["shrinkit", "compress", str(sample_file), "-o", str(out), "-f", "-q"],
    )
    m.main()
    assert out.read_bytes() != b"keep"


def test_main_reports_errors(tmp_path, m, monkeypatch, capsys):
    bad = tmp_path / "bad.huf"
    bad.write_bytes(b"BAD!")
    monkeypatch.setattr(sys, "argv", ["shrinkit", "d", str(bad)])
    with pytest.raises(SystemExit):
        m.main()
    assert "[!] Unable to decompress" in capsys.readouterr().out

    single = tmp_path / "single.txt"
    single.write_bytes(b"aaaa")
    monkeypatch.setattr(sys, "argv", ["shrinkit", "c", str(single)])
    with pytest.raises(SystemExit):
        m.main()
    assert "two distinct" in capsys.readouterr().out


def test_shell_compresses_and_quits(sample_file, m, monkeypatch, capsys):
    answers = iter(["c", str(sample_file), "d", str(sample_file) + ".huf", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    m.shell()
    restored = sample_file.parent / ("unhuf." + sample_file.name)
    assert restored.read_bytes() == sample_file.read_bytes()
    assert "Your options are:" in capsys.readouterr().out


def test_shell_overwrite_declined(sample_file, m, monkeypatch):
    existing = sample_file.parent / (sample_file.name + ".huf")
    existing.write_bytes(b"keep")
    answers = iter(["C", str(sample_file), "n", "Q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    m.shell()
    assert existing.read_bytes() == b"keep"
