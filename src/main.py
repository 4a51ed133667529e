import logging
import signal
import sys
import threading
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from pomodoro import MonotonicClock, SessionRecorder, TimerConfig, TimerConfigurationError
from runtime import RuntimeBootstrap, RuntimeEngine, parse_console_line
from server import ServerConfigurationError, UICommand, UIServer, UIServerConfig
from sessions import InMemorySessionRecorder, JsonSessionStore, SessionStoreError


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("focus_timer")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("focus_timer").info(
            "%s received, stopping...", signal.Signals(signum).name
        )
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def start_console_reader(engine: RuntimeEngine) -> threading.Thread:
    """Read control commands from stdin and queue them for the runtime loop."""

    def read_lines() -> None:
        for line in sys.stdin:
            parsed = parse_console_line(line)
            if parsed is None:
                continue
            name, arguments = parsed
            engine.submit_command(UICommand(name=name, arguments=arguments))

    thread = threading.Thread(target=read_lines, daemon=True, name="console-reader")
    thread.start()
    return thread


def build_recorder(store_file: str, logger: logging.Logger) -> SessionRecorder:
    if not store_file:
        logger.info("Session store disabled; sessions are kept in memory.")
        return InMemorySessionRecorder(logger=logging.getLogger("session_store"))
    logger.info("Session store: %s", store_file)
    return JsonSessionStore(store_file, logger=logging.getLogger("session_store"))


def main() -> int:
    """Run the focus timer until interrupted."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
        timer_config = TimerConfig.from_settings(app_config.timer)
        ui_config = UIServerConfig.from_settings(app_config.ui_server)
    except (AppConfigurationError, TimerConfigurationError, ServerConfigurationError) as error:
        logger.error("Configuration error: %s", error)
        return 1

    try:
        recorder = build_recorder(app_config.sessions.store_file, logger)
    except SessionStoreError as error:
        logger.error("Session store error: %s", error)
        return 1

    engine: Optional[RuntimeEngine] = None
    ui_server: Optional[UIServer] = None
    if ui_config.enabled:
        ui_server = UIServer(
            config=ui_config,
            logger=logging.getLogger("ui_server"),
            on_command=lambda command: engine.submit_command(command) if engine else None,
        )
        try:
            ui_server.start()
        except RuntimeError as error:
            logger.error("UI server startup failed: %s", error)
            return 1

    try:
        engine = RuntimeEngine(
            RuntimeBootstrap(
                logger=logger,
                app_config=app_config,
                timer_config=timer_config,
                recorder=recorder,
                clock=MonotonicClock(logger=logging.getLogger("clock")),
                ui_server=ui_server,
            )
        )
    except Exception as error:
        logger.error("Runtime startup failed: %s", error, exc_info=True)
        if ui_server is not None:
            ui_server.stop()
        return 1

    setup_signal_handlers(engine)
    start_console_reader(engine)
    logger.info(
        "Commands: toggle, reset, skip, end_work, full_reset, add <seconds>, tag <name>"
    )
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
