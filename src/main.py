import logging
import signal
from typing import Optional

from app_config import AppConfig, AppConfigurationError, load_app_config, resolve_config_path
from notifications import BannerBackend, LoggingBannerBackend, UIBannerBackend
from profiles import ProfileStore
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.dispatch import AlarmPlayerLike
from runtime.ui import RuntimeUIPublisher
from server import ServerConfigurationError, UIServer, UIServerConfig
from stats import StatsError, StatsStore


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
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def _build_stats_store(app_config: AppConfig, logger: logging.Logger) -> Optional[StatsStore]:
    if not app_config.stats.enabled:
        return None
    stats_store = StatsStore(app_config.stats.file, logger=logging.getLogger("stats"))
    try:
        stats_store.load()
    except StatsError as error:
        logger.warning("Starting with empty stats: %s", error)
    return stats_store


def _build_alarm_player(app_config: AppConfig, logger: logging.Logger) -> Optional[AlarmPlayerLike]:
    if not app_config.audio.enabled:
        return None
    try:
        # PortAudio is only loaded when alarm audio is enabled.
        from audio.output import AlarmPlayer
    except OSError as error:
        logger.error("Alarm audio unavailable: %s", error)
        logger.warning("Continuing without alarm audio.")
        return None
    return AlarmPlayer(
        output_device_index=app_config.audio.output_device,
        sample_rate_hz=app_config.audio.sample_rate_hz,
        logger=logging.getLogger("alarm"),
    )


def _build_banner_backend(app_config: AppConfig, ui_server: Optional[UIServer]) -> BannerBackend:
    if app_config.notifications.backend == "ui" and ui_server is not None:
        return UIBannerBackend(RuntimeUIPublisher(ui_server))
    return LoggingBannerBackend(logging.getLogger("notifications"))


def main() -> int:
    """Run the focus timer runtime."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    profiles = ProfileStore.from_app_config(app_config, logger=logging.getLogger("profiles"))
    if profiles.current_profile() is None:
        logger.error("Active profile %r is not configured", profiles.active_profile_id)
        return 1

    # Optional UI server for status page, websocket updates, and commands
    ui_server: Optional[UIServer] = None
    ui_server_config: Optional[UIServerConfig] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")

    if ui_server_config and ui_server_config.enabled:
        ui_server = UIServer(config=ui_server_config, logger=logging.getLogger("ui_server"))
        try:
            ui_server.start()
        except RuntimeError as error:
            logger.error("UI server startup error: %s", error)
            logger.warning("Continuing without UI server.")
            ui_server = None

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            app_config=app_config,
            profiles=profiles,
            ui_server=ui_server,
            stats_store=_build_stats_store(app_config, logger),
            alarm_player=_build_alarm_player(app_config, logger),
            banner_backend=_build_banner_backend(app_config, ui_server),
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    if ui_server is not None:
        ui_server.set_command_handler(engine.submit_command)

    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
