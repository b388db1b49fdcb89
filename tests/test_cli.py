import json
from decimal import Decimal

import pytest

from tipulator import cli
from tipulator.tip_core import DollarRoundingMode


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TIP_PRESETS_PATH", raising=False)
    return tmp_path


def test_run_cli_palindrome_json(capsys):
    exit_code = cli.run_cli(["--bill", "100", "--tip", "20", "--palindrome", "--json"])
    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total"] == "120.21"
    assert data["tip"] == "20.21"
    assert data["palindrome"] is True
    assert data["palindrome_adjustment"] == "0.21"
    assert data["dollar_rounding"] == "none"


def test_run_cli_round_up_text(capsys):
    exit_code = cli.run_cli(["--bill", "50", "--tip", "15", "--round", "up"])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Tip (15%): $8.00" in out
    assert "Dollar rounding adjustment: +$0.50" in out
    assert "Total with tip: $58.00" in out


def test_run_cli_palindrome_ignores_round(capsys):
    exit_code = cli.run_cli(["--bill", "50", "--tip", "15", "--round", "up", "--palindrome", "--json"])
    assert exit_code == 0
    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["total"] == "57.75"
    assert data["dollar_rounding_adjustment"] == "0.00"
    assert "ignored" in captured.err


def test_run_cli_preset_and_people_csv(capsys):
    exit_code = cli.run_cli(["--bill", "1,000", "--preset", "3", "--people", "4", "--csv"])
    assert exit_code == 0
    header, row = capsys.readouterr().out.strip().splitlines()
    assert header.startswith("currency,bill,tip_percent")
    assert row == "USD,1000.00,20.00,200.00,no,0.00,none,0.00,1200.00,4,300.00"


def test_run_cli_rejects_bad_preset_slot():
    with pytest.raises(SystemExit):
        cli.run_cli(["--bill", "10", "--preset", "5"])


def test_run_cli_rejects_tip_and_preset_together():
    with pytest.raises(SystemExit):
        cli.run_cli(["--bill", "10", "--preset", "1", "--tip", "12"])


def test_run_cli_unparsable_bill_warns(capsys):
    exit_code = cli.run_cli(["--bill", "abc", "--json"])
    assert exit_code == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out)["total"] == "0.00"
    assert "reads as zero" in captured.err


def test_run_cli_set_preset_persists(tmp_path, capsys):
    presets_file = tmp_path / "presets.json"
    exit_code = cli.run_cli(["--presets-file", str(presets_file), "--set-preset", "1=12", "--set-preset", "9=5"])
    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Presets: [1] 12%  [2] 18%  [3] 20%  [4] 22%" in captured.out
    assert "Ignored preset edit 9=5" in captured.err
    assert json.loads(presets_file.read_text()) == {"preset_percentages": [12, 18, 20, 22]}

    cli.run_cli(["--presets-file", str(presets_file), "--bill", "100", "--preset", "1", "--json"])
    assert json.loads(capsys.readouterr().out)["tip"] == "12.00"


def test_run_cli_request_message(capsys):
    exit_code = cli.run_cli(["--bill", "90", "--tip", "20", "--people", "3", "--request"])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Please send me $36.00" in out
    assert "- Split 3 ways" in out


def test_run_cli_generates_qr(monkeypatch, tmp_path, capsys):
    calls = {}

    def fake_generate_qr_codes(**kwargs):
        calls.update(kwargs)
        out_dir = kwargs["directory"]
        out_dir.mkdir(parents=True, exist_ok=True)
        file_path = out_dir / "qr_person_1.png"
        file_path.write_text("fake")
        return [file_path]

    monkeypatch.setattr(cli, "generate_qr_codes", fake_generate_qr_codes)
    exit_code = cli.run_cli(
        ["--bill", "100", "--tip", "18", "--people", "2", "--qr", "--qr-app", "cashapp", "--qr-dir", str(tmp_path / "codes")]
    )
    assert exit_code == 0
    assert "Saved 1 QR code(s)" in capsys.readouterr().out
    assert calls["provider"] == "cashapp"
    assert calls["per_person"] == [Decimal("59"), Decimal("59")]


def test_run_cli_copy_failure_reported(monkeypatch, capsys):
    monkeypatch.setattr(cli, "copy_to_clipboard", lambda text: False)
    assert cli.run_cli(["--bill", "10", "--copy"]) == 0
    assert "Could not copy" in capsys.readouterr().err


def test_run_cli_interactive(monkeypatch, capsys):
    answers = iter(["abc", "100", "3", "2", "p", "n"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert cli.run_cli(["--interactive"]) == 0
    out = capsys.readouterr().out
    assert "reads as $0.00" in out
    assert "Palindrome adjustment: +$0.21" in out
    assert "Each of 2 people pays: $60.11" in out


def test_run_cli_interactive_eof(monkeypatch, capsys):
    def raise_eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", raise_eof)
    assert cli.run_cli([]) == 0
    assert "Goodbye" in capsys.readouterr().out


def test_load_config_json_and_env(isolated_cwd):
    (isolated_cwd / "tipconfig.json").write_text(
        json.dumps({"default_tip_percent": "20", "default_people": 3, "rounding": "down", "currency": "eur"})
    )
    (isolated_cwd / ".env").write_text("# defaults\nTIP_PALINDROME=yes\nTIP_DEFAULT_PEOPLE=zero\nOTHER=1\n")
    cfg = cli.load_config()
    assert cfg.default_tip_percent == Decimal("20.00")
    assert cfg.default_people == 3
    assert cfg.rounding is DollarRoundingMode.DOWN
    assert cfg.palindrome is True
    assert cfg.currency == "EUR"


def test_load_config_bad_json_falls_back(isolated_cwd):
    (isolated_cwd / "tipconfig.json").write_text("{nope")
    cfg = cli.load_config()
    assert cfg == cli.AppConfig()


def test_build_engine_with_fractional_default():
    from tipulator.presets import MemoryPresetStore

    engine = cli.build_engine(cli.AppConfig(default_tip_percent=Decimal("18.5")), MemoryPresetStore())
    assert engine.selected_preset is None
    assert engine.effective_percentage == Decimal("18.5")


def test_run_cli_oversized_bill(capsys):
    exit_code = cli.run_cli(["--bill", "9" * 5000, "--palindrome", "--json"])
    assert exit_code == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out)["total"] == "0.00"
    assert "reads as zero" in captured.err
