from __future__ import annotations

import subprocess
import sys
from pathlib import Path

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "tools" / "depcheck.py"


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(SCRIPT_PATH), *args],
        capture_output=True,
        text=True,
        check=False,
    )


def test_depcheck_fails_on_forbidden_domain_import(tmp_path: Path) -> None:
    domain_dir = tmp_path / "domain"
    domain_dir.mkdir(parents=True, exist_ok=True)

    violating_file = domain_dir / "model.py"
    violating_file.write_text("import sqlalchemy\n", encoding="utf-8")

    result = _run("--layer", "domain", "--path", str(domain_dir))

    combined_output = f"{result.stdout}\n{result.stderr}"
    assert result.returncode != 0
    assert "sqlalchemy" in combined_output
    assert str(violating_file) in combined_output


def test_depcheck_flags_application_reaching_into_infrastructure(tmp_path: Path) -> None:
    violating_file = tmp_path / "use_case.py"
    violating_file.write_text(
        "from canteen.infrastructure.db.session import get_engine\n",
        encoding="utf-8",
    )

    result = _run("--layer", "application", "--path", str(violating_file))

    assert result.returncode != 0
    assert "[application] -> canteen.infrastructure.db.session" in result.stdout


def test_depcheck_allows_pydantic_in_application(tmp_path: Path) -> None:
    clean_file = tmp_path / "dto.py"
    clean_file.write_text("from pydantic import BaseModel\n", encoding="utf-8")

    result = _run("--layer", "application", "--path", str(clean_file))

    assert result.returncode == 0


def test_depcheck_passes_on_package() -> None:
    result = _run()
    assert result.returncode == 0, result.stdout
