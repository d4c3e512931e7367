"""Unit tests for the AxM MCP server entry point."""

import signal
from unittest.mock import MagicMock, patch

import pytest

from axm_mcp.credential_store import CredentialStore
from axm_mcp.operations.devices import list_devices
from axm_mcp.server import AxmConfig, build_deps, create_dispatcher, handle_interrupt, main


class TestDependencies:
    """Tests for the dependency namespace handed to tools and resources."""

    def test_build_deps_wires_operations(self) -> None:
        """Tools receive the real configuration, client and operation functions."""
        deps = build_deps()
        assert deps.resolve_config == AxmConfig.resolve
        assert deps.create_dispatcher is create_dispatcher
        assert deps.list_devices is list_devices
        assert isinstance(deps.store, CredentialStore)
        for name in (
            "get_devices_info",
            "get_apple_care_coverages",
            "list_mdm_servers",
            "get_assigned_mdm",
            "assign_devices",
            "unassign_devices",
            "activity_status",
        ):
            assert callable(getattr(deps, name))

    def test_build_deps_uses_given_store(self) -> None:
        """An explicit store replaces the default one."""
        store = CredentialStore()
        assert build_deps(store).store is store


class TestSignalHandler:
    """Tests for signal handler function."""

    def test_handle_interrupt_calls_sys_exit(self) -> None:
        """Test that handle_interrupt logs and exits cleanly."""
        with (
            patch("axm_mcp.server.logger") as mock_logger,
            pytest.raises(SystemExit) as exc_info,
        ):
            handle_interrupt(2, None)  # SIGINT = 2

        mock_logger.info.assert_called_once_with("Received interrupt signal, shutting down...")
        assert exc_info.value.code == 0

    def test_handle_interrupt_sigterm(self) -> None:
        """Test that handle_interrupt works with SIGTERM."""
        with (
            patch("axm_mcp.server.logger") as mock_logger,
            pytest.raises(SystemExit) as exc_info,
        ):
            handle_interrupt(15, MagicMock())  # SIGTERM = 15, frame is ignored

        mock_logger.info.assert_called_once()
        assert exc_info.value.code == 0


class TestMainFunction:
    """Tests for the main() entry point function."""

    def test_main_registers_signal_handlers_and_runs_app(self) -> None:
        """Test that main() registers signal handlers and starts the app."""
        with (
            patch("axm_mcp.server.signal.signal") as mock_signal,
            patch("axm_mcp.server.app.run") as mock_run,
        ):
            main()

            assert mock_signal.call_count == 2
            mock_signal.assert_any_call(signal.SIGINT, handle_interrupt)
            mock_signal.assert_any_call(signal.SIGTERM, handle_interrupt)
            mock_run.assert_called_once()
