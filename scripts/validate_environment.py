#!/usr/bin/env python3
"""Validate local demand pacing environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from importlib.metadata import version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from demand_pacing.domain.models import PacingInput
from demand_pacing.repository.snapshot_repository import SnapshotRepository
from demand_pacing.services.market_service import MarketIntelligenceService
from demand_pacing.services.pacing_service import calculate_pacing_status
from demand_pacing.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="demand-pacing-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "demand_pacing_validation.db",
        )
        repository = SnapshotRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Synthetic snapshot seeding
        try:
            repository.seed_synthetic_data()
            seeded = repository.count_observations(validation_settings.synthetic_city)
            expected = validation_settings.synthetic_seed_days * (
                validation_settings.pace_horizon_days + 1
            )
            if seeded != expected:
                raise RuntimeError(f"expected {expected} rows, got {seeded}")
            ok, line = _print_result("Synthetic snapshots", True, f": {seeded} rows")
        except Exception as exc:
            ok, line = _print_result("Synthetic snapshots", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        market_service = MarketIntelligenceService(
            repository=repository,
            settings=validation_settings,
        )

        # CHECK 5: Forward view scoring
        try:
            rows = market_service.get_forward_view(
                validation_settings.synthetic_city,
                today=date.today(),
            )
            scores = [row["market_demand_score"] for row in rows]
            if not rows or any(s is not None and not 0 <= s <= 100 for s in scores):
                raise RuntimeError("forward view empty or scores out of [0,100]")
            ok, line = _print_result("Forward view scoring", True, f": {len(rows)} checkins")
        except Exception as exc:
            ok, line = _print_result("Forward view scoring", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Market outlook
        try:
            outlook = market_service.get_market_outlook(validation_settings.synthetic_city)
            if outlook.state.value != "ok":
                raise RuntimeError(f"outlook state {outlook.state.value}")
            ok, line = _print_result(
                "Market outlook",
                True,
                f": {outlook.status.value} {outlook.metric}",
            )
        except Exception as exc:
            ok, line = _print_result("Market outlook", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 7: Pacing status
        try:
            today = date.today()
            result = calculate_pacing_status(
                PacingInput(
                    target_rev=0.0,
                    actual_rev=0.0,
                    capacity_count=0.0,
                    total_sold_room_nights=0.0,
                    year=today.year,
                    month_index=today.month - 1,
                ),
                today=today,
            )
            if result.status_text != "No Target":
                raise RuntimeError(f"unexpected status {result.status_text}")
            ok, line = _print_result("Pacing status", True)
        except Exception as exc:
            ok, line = _print_result("Pacing status", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Demand Pacing Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
