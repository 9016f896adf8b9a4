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


def test_depcheck_fails_on_forbidden_import(tmp_path: Path) -> None:
    domain_dir = tmp_path / "domain"
    domain_dir.mkdir(parents=True, exist_ok=True)

    violating_file = domain_dir / "model.py"
    violating_file.write_text("import sqlalchemy\n", encoding="utf-8")

    result = _run("--layer", "domain", "--path", str(domain_dir))

    combined_output = f"{result.stdout}\n{result.stderr}"
    assert result.returncode != 0
    assert "sqlalchemy" in combined_output
    assert str(violating_file) in combined_output


def test_application_layer_may_not_reach_infrastructure(tmp_path: Path) -> None:
    use_case = tmp_path / "use_case.py"
    use_case.write_text(
        "from floorops.infrastructure.db.unit_of_work import SqlAlchemyUnitOfWork\n",
        encoding="utf-8",
    )

    application = _run("--layer", "application", "--path", str(use_case))

    assert application.returncode == 1
    assert f"{use_case}:1 -> floorops.infrastructure.db.unit_of_work" in application.stdout


def test_application_layer_may_use_pydantic(tmp_path: Path) -> None:
    dto = tmp_path / "dto.py"
    dto.write_text("from pydantic import BaseModel\n", encoding="utf-8")

    assert _run("--layer", "application", "--path", str(dto)).returncode == 0
    assert _run("--layer", "domain", "--path", str(dto)).returncode == 1


def test_source_tree_passes() -> None:
    result = _run()

    assert result.returncode == 0, result.stdout
    assert "depcheck passed" in result.stdout
