from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import cognitive_core.audit_bank as audit_bank
from cognitive_core.types import AnswerValue
from tests.conftest import build_synthetic_bank, make_question


def test_shipped_catalog_is_clean():
    summary = audit_bank.audit_items(audit_bank.load_bank())
    assert summary["warnings"] == []
    assert summary["totals"] == {"questions": 30, "points": 100}


def test_synthetic_bank_is_clean(synthetic_bank):
    summary = audit_bank.audit_items(synthetic_bank)
    assert summary["warnings"] == []
    assert summary["coverage"]["memory"]["by_difficulty"] == {1: 2, 2: 2, 3: 1}


def test_audit_flags_points_and_empty_categories(tmp_path):
    bank = build_synthetic_bank(categories=["memory"], per_category=4)

    summary = audit_bank.audit_items(bank)
    joined = "\n".join(summary["warnings"])
    assert "memory points sum to 16 (expected 20)" in joined
    assert "language has no questions" in joined

    outfile = tmp_path / "bank_audit.json"
    text = audit_bank.write_summary(summary, path=outfile)
    assert outfile.read_text(encoding="utf-8").strip() == text


def test_audit_flags_bad_items(synthetic_bank):
    bad = [
        replace(synthetic_bank[0], correct_answer=AnswerValue.scalar("Z")),
        replace(synthetic_bank[1], id=synthetic_bank[0].id),
        replace(synthetic_bank[2], type="essay", difficulty=5),
        make_question(id="x1", category="smell", points=0),
    ]
    summary = audit_bank.audit_items(bad + synthetic_bank[3:])
    joined = "\n".join(summary["warnings"])
    assert "memory-1 answer not among options: Z" in joined
    assert "duplicate question id memory-1 (2x)" in joined
    assert "unknown type 'essay'" in joined
    assert "outside 1..3" in joined
    assert "x1 has unknown category 'smell'" in joined


def test_main_returns_warning_exit(monkeypatch, capsys):
    bank = build_synthetic_bank(categories=["attention"])
    monkeypatch.setattr(audit_bank, "load_bank", lambda: bank)

    exit_code = audit_bank.main([])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "attention" in captured.out
    assert Path("/tmp/bank_audit.json").exists()
