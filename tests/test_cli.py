from __future__ import annotations

import json
import os
from pathlib import Path
import subprocess
import sys

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def _run(args: list[str], tmp_path: Path, *, stdin: str | None = None, **extra_env: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("TECHSERVE_")}
    env["PYTHONDONTWRITEBYTECODE"] = "1"
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env["TECHSERVE_BACKEND"] = "local"
    env["TECHSERVE_STORE_PATH"] = str(tmp_path / "orders.json")
    env.update(extra_env)
    return subprocess.run(
        [sys.executable, "-m", "techserve.cli", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=tmp_path,
        input=stdin,
    )


def test_check_exit_codes(tmp_path: Path) -> None:
    assert _run(["check", "email", "amina@example.com"], tmp_path).returncode == 0
    assert _run(["check", "email", "amina@example"], tmp_path).returncode == 1
    assert _run(["check", "phone", "0712 345 678"], tmp_path).returncode == 0
    assert _run(["check", "phone", "0812345678"], tmp_path).returncode == 1


def test_catalog_lists_systems(tmp_path: Path) -> None:
    result = _run(["catalog"], tmp_path)
    assert result.returncode == 0
    assert "Ubuntu" in result.stdout
    assert "KSh 150" in result.stdout


def test_invalid_settings_exit_nonzero(tmp_path: Path) -> None:
    result = _run(["catalog"], tmp_path, TECHSERVE_TIMEOUT_S="soon")
    assert result.returncode == 1
    assert "TECHSERVE_TIMEOUT_S" in result.stdout


def test_track_validates_contact(tmp_path: Path) -> None:
    result = _run(["track", "--email", "amina@", "--phone", "0712345678"], tmp_path)
    assert result.returncode == 1


def test_track_lists_stored_orders(tmp_path: Path) -> None:
    document = {
        "orders": [
            {
                "id": 1,
                "order_number": "TS-1234567890",
                "installation_type": "full",
                "customer_name": "Amina Njeri",
                "customer_email": "amina@example.com",
                "customer_phone": "0712345678",
                "customer_address": "Nairobi",
                "status": "in_progress",
                "created_at": "2024-06-01T10:00:00+00:00",
                "updated_at": "2024-06-02T10:00:00+00:00",
                "os_selections": [{"os_id": 3, "os_name": "Ubuntu", "version_id": 7, "version_name": "22.04 LTS"}],
                "addons": [],
            }
        ],
        "next_id": 2,
    }
    (tmp_path / "orders.json").write_text(json.dumps(document), encoding="utf-8")
    result = _run(["track", "--email", "amina@example.com", "--phone", "0712-345-678"], tmp_path)
    assert result.returncode == 0
    assert "TS-1234567890" in result.stdout
    assert "Ubuntu (22.04 LTS)" in result.stdout


def test_order_wizard_end_to_end(tmp_path: Path) -> None:
    answers = [
        "full",
        "3",
        "1",
        "Amina Njeri",
        "amina@example.com",
        "0712 345 678",
        "12 Moi Avenue, Nairobi",
        "y",
        "n",
        "submit",
        "n",
    ]
    result = _run(["order"], tmp_path, stdin="\n".join(answers) + "\n")
    assert result.returncode == 0, result.stdout + result.stderr

    document = json.loads((tmp_path / "orders.json").read_text(encoding="utf-8"))
    (order,) = document["orders"]
    assert order["customer_phone"] == "0712345678"
    assert order["os_selections"][0]["version_name"] == "22.04 LTS"
    assert order["addons"] == [{"addon_type": "additional_drivers", "price": 30}]
    assert order["order_number"] in result.stdout


def test_status_by_order_number(tmp_path: Path) -> None:
    assert _run(["status", "TS-12"], tmp_path).returncode == 1
    missing = _run(["status", "TS-0000000000"], tmp_path)
    assert missing.returncode == 1
    assert "Order not found" in missing.stdout
