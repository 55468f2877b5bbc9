"""Unit tests for the API process entry point."""

import pytest
from alembic.util import CommandError
from pytest_mock import MockerFixture, MockType

import main


@pytest.fixture
def run_migrations(mocker: MockerFixture) -> MockType:
    return mocker.patch.object(main, "run_migrations", return_value=[])


@pytest.fixture(autouse=True)
def quiet_logging(mocker: MockerFixture) -> MockType:
    return mocker.patch.object(main, "setup_logging")


@pytest.mark.unit
class TestMain:
    """Startup sequence."""

    def test_migrates_then_serves(
        self, mock_uvicorn: MockType, run_migrations: MockType
    ) -> None:
        # Act
        main.main()

        # Assert
        run_migrations.assert_called_once()
        mock_uvicorn.assert_called_once()
        kwargs = mock_uvicorn.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"  # noqa: S104
        assert kwargs["port"] == 3000
        assert kwargs["reload"] is False
        assert kwargs["timeout_graceful_shutdown"] == 30

    def test_debug_uses_reload(
        self,
        monkeypatch: pytest.MonkeyPatch,
        mock_uvicorn: MockType,
        run_migrations: MockType,
    ) -> None:
        monkeypatch.setenv("DEBUG", "true")

        main.main()

        args = mock_uvicorn.call_args.args
        assert args == ("src.api.main:app",)
        assert mock_uvicorn.call_args.kwargs["reload"] is True

    def test_migrations_can_be_skipped(
        self,
        monkeypatch: pytest.MonkeyPatch,
        mock_uvicorn: MockType,
        run_migrations: MockType,
    ) -> None:
        monkeypatch.setenv("MIGRATE_ON_STARTUP", "false")

        main.main()

        run_migrations.assert_not_called()
        mock_uvicorn.assert_called_once()

    def test_migration_failure_exits(
        self, mocker: MockerFixture, mock_uvicorn: MockType
    ) -> None:
        mocker.patch.object(
            main, "run_migrations", side_effect=CommandError("Can't locate revision")
        )

        with pytest.raises(SystemExit) as exc_info:
            main.main()

        assert exc_info.value.code == 1
        mock_uvicorn.assert_not_called()
