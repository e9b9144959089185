"""
Unit tests for the one-shot voucher jobs command.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from hostex_bridge.jobs import main, parse_args
from hostex_bridge.odoo_api.errors import OdooAuthError
from hostex_bridge.services.loyalty_voucher_sync import LoyaltySyncSummary
from hostex_bridge.services.startup import StartupJobsResult
from hostex_bridge.services.voucher_cleanup import CleanupSummary


@pytest.fixture
def properties_file(tmp_path: Path) -> str:
    path = tmp_path / "properties.json"
    path.write_text('{"1": {"thirdparty_account_id": "42"}}', encoding="utf-8")
    return str(path)


@pytest.mark.unit
def test_parse_args_flags(properties_file: str) -> None:
    """Test the properties path and greenlist opt-out are parsed."""
    args = parse_args(["--properties", properties_file, "--skip-empty-greenlist"])

    assert args.properties == properties_file
    assert args.skip_empty_greenlist is True
    assert args.log_level is None


@pytest.mark.unit
@patch("hostex_bridge.jobs.setup_logging")
@patch("hostex_bridge.jobs.run_startup_jobs")
@patch("hostex_bridge.jobs.build_odoo_client")
@patch("hostex_bridge.jobs.build_hostex_client")
def test_main_returns_zero_when_both_jobs_succeed(
    mock_hostex: Mock,
    mock_odoo: Mock,
    mock_run: Mock,
    _mock_logging: Mock,
    properties_file: str,
) -> None:
    """Test a clean run exits 0 and forwards the opt-out flag."""
    mock_run.return_value = StartupJobsResult(
        cleanup=CleanupSummary(), loyalty_sync=LoyaltySyncSummary()
    )

    exit_code = main(
        ["--properties", properties_file, "--skip-empty-greenlist", "--log-level", "debug"]
    )

    assert exit_code == 0
    _mock_logging.assert_called_once_with("debug")
    hostex, odoo, registry = mock_run.call_args.args
    assert hostex is mock_hostex.return_value
    assert odoo is mock_odoo.return_value
    assert registry.get_all_property_ids() == [1]
    assert mock_run.call_args.kwargs == {"skip_empty_greenlist": True}
    mock_hostex.return_value.close.assert_called_once()


@pytest.mark.unit
@patch("hostex_bridge.jobs.setup_logging")
@patch("hostex_bridge.jobs.run_startup_jobs")
@patch("hostex_bridge.jobs.build_odoo_client")
@patch("hostex_bridge.jobs.build_hostex_client")
def test_main_without_odoo_exits_nonzero(
    mock_hostex: Mock,
    mock_odoo: Mock,
    mock_run: Mock,
    _mock_logging: Mock,
    properties_file: str,
) -> None:
    """Test missing Odoo settings still run cleanup but report failure."""
    mock_odoo.side_effect = OdooAuthError("Odoo is not configured: missing ODOO_URL")
    mock_run.return_value = StartupJobsResult(cleanup=CleanupSummary(), loyalty_sync=None)

    exit_code = main(["--properties", properties_file])

    assert exit_code == 1
    assert mock_run.call_args.args[1] is None
