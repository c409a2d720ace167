"""Turn loop: read input, call the webhook, render the reply."""

from __future__ import annotations

import logging
from typing import Sequence

from .. import __version__
from ..models import ConversationContext, TurnRequest
from ..services.transport import Transport, TransportError
from . import renderer
from .formatter import format_reply
from .input_reader import TurnReader
from .spinner import DEFAULT_INTERVAL, ProgressIndicator

logger = logging.getLogger(__name__)


class ChatSession:
    """One conversation with the remote responder.

    The session is the only owner of the conversation context and the only
    caller of the transport. A failed turn keeps its user entry, so the next
    request still carries the unanswered question.
    """

    def __init__(
        self,
        transport: Transport,
        reader: TurnReader,
        *,
        models: Sequence[str] = (),
        indicator: ProgressIndicator | None = None,
        endpoint: str = "",
        width: int = 100,
        close_unterminated: bool = False,
        spinner_interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self._transport = transport
        self._reader = reader
        self._models = list(models)
        self._indicator = indicator or ProgressIndicator(renderer.get_stream(), interval=spinner_interval)
        self._endpoint = endpoint
        self._width = width
        self._close_unterminated = close_unterminated
        self._context = ConversationContext()
        self.model: str | None = None
        self.turns = 0

    @property
    def context(self) -> ConversationContext:
        return self._context

    def select_model(self) -> str | None:
        if not self._models:
            return None
        if len(self._models) == 1:
            self.model = self._models[0]
            return self.model

        renderer.render_model_menu(self._models)
        count = len(self._models)
        while True:
            choice = self._reader.read_choice(f"Choice [1-{count}]: ")
            if choice.isdecimal() and 1 <= int(choice) <= count:
                self.model = self._models[int(choice) - 1]
                renderer.render_model_selected(self.model)
                logger.debug("Selected model %s", self.model)
                return self.model
            renderer.render_invalid_choice(choice, count)

    def _format(self, reply: str) -> str:
        return format_reply(
            reply,
            width=renderer.terminal_width(self._width),
            styled=renderer.is_terminal(),
            close_unterminated=self._close_unterminated,
        )

    def run_turn(self, text: str) -> bool:
        """Send one question; return True when the remote answered."""
        self.turns += 1
        self._context.add_user(text)
        request = TurnRequest(question=text, context=self._context.snapshot(), model=self.model)
        logger.debug("Turn %d: sending %d context entries", self.turns, len(request.context))

        try:
            self._indicator.start()
            try:
                reply = self._transport.send_turn(request)
            finally:
                # The spinner line must be gone before anything else is printed.
                elapsed = self._indicator.stop()
        except TransportError as e:
            logger.warning("Turn %d failed: %s", self.turns, e)
            renderer.render_error(str(e))
            return False

        renderer.render_reply(self._format(reply))
        self._context.add_assistant(reply)
        logger.debug("Turn %d answered in %.1fs (%d chars)", self.turns, elapsed, len(reply))
        return True

    def run(self) -> int:
        """Run the interactive loop until /exit. Returns the exit code.

        Raises InputClosedError when the input stream ends.
        """
        renderer.render_welcome(self._endpoint, __version__)
        self.select_model()
        while True:
            turn = self._reader.read_turn()
            if turn.is_exit:
                renderer.render_goodbye()
                return 0
            if not turn.text.strip():
                continue
            self.run_turn(turn.text)
