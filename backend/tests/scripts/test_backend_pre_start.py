from unittest.mock import MagicMock, patch

from querystore.backend_pre_start import init, logger, main


def test_init_successful_connection() -> None:
    engine_mock = MagicMock()

    session_mock = MagicMock()
    session_mock.exec.return_value = True
    # with Session(engine) as session: binds session to Session(engine).__enter__()
    session_mock.__enter__.return_value = session_mock
    session_mock.__exit__.return_value = None

    with (
        patch("querystore.backend_pre_start.Session", return_value=session_mock),
        patch.object(logger, "info"),
        patch.object(logger, "error"),
        patch.object(logger, "warning"),
    ):
        try:
            init(engine_mock)
            connection_successful = True
        except Exception:
            connection_successful = False

        assert (
            connection_successful
        ), "The database connection should be successful and not raise an exception."

        session_mock.exec.assert_called_once()


def test_main_disposes_registry() -> None:
    registry_mock = MagicMock()

    with (
        patch("querystore.backend_pre_start.build_registry", return_value=registry_mock),
        patch("querystore.backend_pre_start.init") as init_mock,
        patch.object(logger, "info"),
    ):
        main()

    init_mock.assert_called_once_with(registry_mock.store_engine)
    registry_mock.dispose.assert_called_once()
