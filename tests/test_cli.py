import json
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "actflow_diagrams.py"


def _write_workflow(base: Path, payload: dict) -> Path:
    path = base / "workflow.json"
    path.write_text(json.dumps(payload, indent=2), "utf-8")
    return path


def _run(*args: str, check: bool = True) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        check=check,
        capture_output=True,
        text=True,
    )


def test_cli_writes_one_file_per_dimension(tmp_path: Path) -> None:
    workflow = _write_workflow(
        tmp_path,
        {
            "dimensions": ["channel"],
            "actions": {
                "Order::create": {"start": True, "next": "Order::check"},
                "Order::check": [
                    {"next": "{true: Order::pay, false: Order::create}", "dims": {"channel": "web"}},
                    {"next": "Order::pay", "dims": {"channel": "shop"}},
                ],
                "Order::pay": {},
            },
        },
    )
    out_dir = tmp_path / "out"

    result = _run(str(workflow), "--out-dir", str(out_dir), "--seed", "1")

    assert "diagram written to" in result.stdout
    web = (out_dir / "activity web.uml").read_text("utf-8")
    shop = (out_dir / "activity shop.uml").read_text("utf-8")
    assert "repeat while (r = false)" in web
    assert "channel: shop" in shop
    assert shop.endswith("stop\n@enduml\n")


def test_cli_reports_failed_dimension(tmp_path: Path) -> None:
    workflow = _write_workflow(
        tmp_path,
        {"actions": {"a": {"start": True, "next": "b"}, "b": {"next": "a"}}},
    )

    result = _run(str(workflow), "--stdout", check=False)

    assert result.returncode == 1
    assert "unresolvable cycle" in result.stderr


def test_cli_rejects_missing_workflow(tmp_path: Path) -> None:
    result = _run(str(tmp_path / "absent.json"), check=False)

    assert result.returncode != 0
    assert "missing input file" in result.stderr


def test_cli_quiet_hides_warnings(tmp_path: Path) -> None:
    workflow = _write_workflow(
        tmp_path,
        {"actions": {"a": {"start": True, "next": "missing"}}},
    )

    loud = _run(str(workflow), "--stdout")
    quiet = _run(str(workflow), "--stdout", "--quiet")

    assert "unknown action missing" in loud.stderr
    assert quiet.stderr == ""
    assert quiet.stdout == loud.stdout
