"""Bot runtime contract."""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..config.bot_config import BotConfig
from .events import RuntimeEvent

EventSink = Callable[[RuntimeEvent], None]


class BotRuntime(ABC):
    """
    Drives the data stream and trade loop for a session.

    Events are pushed to the bound sink from the runtime's own thread;
    the sink is the only way output leaves the runtime.
    """

    def __init__(self, sink: Optional[EventSink] = None):
        self._sink = sink

    def bind(self, sink: EventSink) -> None:
        """Route emitted events to sink."""
        self._sink = sink

    @abstractmethod
    def start(self, config: BotConfig) -> None:
        """
        Begin streaming with the given configuration.

        Raises:
            RuntimeUnavailableError: the runtime cannot serve this config.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Halt the stream; a no-op when not running."""
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        """True if start() can be called."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass

    def emit(self, event: RuntimeEvent) -> None:
        if self._sink is not None:
            self._sink(event)
