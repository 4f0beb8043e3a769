from dataclasses import dataclass
from typing import Callable

import structlog


log = structlog.get_logger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


# Fire-and-forget sinks injected by the presentation layer
NotificationSink = Callable[[Toast], None]
Navigator = Callable[[str], None]


def log_toast(toast: Toast) -> None:
    if toast.is_error:
        log.warning("toast", title=toast.title, description=toast.description)
    else:
        log.info("toast", title=toast.title, description=toast.description)


def log_navigation(path: str) -> None:
    log.info("navigate", path=path)
