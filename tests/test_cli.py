import json
import os
import sys

# Ensure the repository's src/ is importable
sys.path.insert(0, os.path.abspath("src"))

from helpy_receipts.cli import main as cli_main
from helpy_receipts.orchestrator import TranscriptionError


def test_parse_prints_json(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    code = cli_main.main(["parse", "--text", "FairPrice Supermarket\nTotal: $5.70\n15/01/2024"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["merchant"] == "FairPrice Supermarket"
    assert out["total"] == 5.7
    assert out["date"] == "2024-01-15"
    assert out["category"] == "Food & Daily Needs"


def test_parse_uses_known_merchants(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "known_merchants.json").write_text(json.dumps(["Starbucks"]), encoding="utf-8")
    text_file = tmp_path / "ocr.txt"
    text_file.write_text("Strabucks\nTotal: $4.50", encoding="utf-8")

    assert cli_main.main(["parse", "--text-file", str(text_file)]) == 0
    assert json.loads(capsys.readouterr().out)["merchant"] == "Starbucks"


def test_parse_accepts_merchant_flags(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    code = cli_main.main(["parse", "--text", "Strabucks\nTotal: $4.50", "--merchant", "Starbucks"])
    assert code == 0
    assert json.loads(capsys.readouterr().out)["merchant"] == "Starbucks"


def test_parse_missing_text_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert cli_main.main(["parse", "--text-file", str(tmp_path / "nope.txt")]) == 2


def test_transcribe_without_api_key(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ALIBABA_CLOUD_API_KEY", raising=False)
    monkeypatch.delenv("DASHSCOPE_API_KEY", raising=False)
    assert cli_main.main(["transcribe", "--image", "receipt.jpg"]) == 2


def test_scan_reports_ocr_failure(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ALIBABA_CLOUD_API_KEY", "sk-test")

    def _fail(*args, **kwargs):
        raise TranscriptionError("boom")

    monkeypatch.setattr(cli_main, "process_receipt", _fail)
    assert cli_main.main(["scan", "--image", "receipt.jpg"]) == 1
