"""Phase-completion notifications in the terminal."""

from __future__ import annotations

from rich.console import Console

from pomodoro_cli.models.config_models import NotificationConfig
from pomodoro_cli.utils.logger import get_module_logger
from pomodoro_cli.utils.ui.console import get_console

logger = get_module_logger("notifier")


class ConsoleNotifier:
    """Rings the terminal bell and keeps the latest message for display.

    Nothing is shown until ``request_permission`` has granted access, which
    the engine asks for on the first start.
    """

    def __init__(
        self,
        config: NotificationConfig | None = None,
        console: Console | None = None,
    ):
        self.config = config or NotificationConfig()
        self.console = console or get_console()
        self.granted = False
        self.last: tuple[str, str] | None = None

    def request_permission(self) -> bool:
        self.granted = self.config.enabled
        return self.granted

    def notify(self, title: str, body: str) -> None:
        if not self.granted:
            logger.debug("Notification %r suppressed", title)
            return

        self.last = (title, body)
        if self.config.bell:
            self.console.bell()
        logger.info("Notification: %s - %s", title, body)
