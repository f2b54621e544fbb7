import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.config import load_config, get_app_data_dir
from core.logging_setup import setup_logging
from core.state import AppState
from player.engine import EngineFacade
from ui.controller import PlaybackController
from ui.main_window import MainWindow

logger = logging.getLogger("coverdeck")


def init_app_state(config) -> AppState:
    app_state = AppState()
    app_state.config = config
    app_state.engine = EngineFacade(app_state.config.mpv)

    try:
        app_state.engine.init()
        app_state.engine_ready = True
    except (OSError, TimeoutError) as e:
        # FileNotFoundError (no mpv binary) is an OSError
        logger.exception("Playback engine failed to start")
        app_state.engine_ready = False
        app_state.queue_notification(f"Failed to start playback engine: {e}", "error")

    return app_state


def main() -> int:
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("coverdeck")

    config = load_config()
    setup_logging(config.log_level, get_app_data_dir())

    app_state = init_app_state(config)
    main_window = MainWindow(app_state)
    controller = PlaybackController(app_state, main_window, app_state.config)

    def _shutdown():
        controller.shutdown()
        if app_state.engine_ready:
            app_state.engine.shutdown()

    qt_app.aboutToQuit.connect(_shutdown)

    main_window.show()
    main_window.show_queued_notifications()
    controller.start()

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
