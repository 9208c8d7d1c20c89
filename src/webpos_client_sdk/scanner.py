from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Callable, Protocol

from .exceptions import AccessDeniedError

logger = logging.getLogger(__name__)


class ScannerState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"


class ScannerControls(Protocol):
    def stop(self) -> None: ...


DecodeCallback = Callable[[Any, Any, "ScannerControls | None"], None]


class BarcodeDecoder(Protocol):
    """Camera-backed decoder.

    ``decode_from_video_device`` binds the camera stream to ``surface`` and
    returns its controls once the stream is live. ``callback`` is invoked for
    every decoded frame as ``callback(result, error, controls)``; ``result`` is
    ``None`` when the frame held no code.
    """

    def decode_from_video_device(
        self,
        device_id: str | None,
        surface: Any,
        callback: DecodeCallback,
    ) -> ScannerControls: ...


def result_text(result: Any) -> str:
    if isinstance(result, str):
        return result.strip()
    text = getattr(result, "text", None)
    if text is None and callable(getattr(result, "get_text", None)):
        text = result.get_text()
    return str(text if text is not None else result).strip()


@dataclass
class ScannerController:
    """Start/stop lifecycle around a barcode decoder.

    One start yields at most one decoded code: the first decode while the
    stream is live tears it down and everything after that is ignored.
    """

    decoder: BarcodeDecoder
    surface: Any = None
    device_id: str | None = None
    on_decode: Callable[[str], None] | None = None
    on_error: Callable[[AccessDeniedError], None] | None = None
    on_state_change: Callable[[ScannerState], None] | None = None
    state: ScannerState = ScannerState.IDLE
    _controls: ScannerControls | None = field(default=None, repr=False)
    _stopped: ScannerControls | None = field(default=None, repr=False)
    _generation: int = field(default=0, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def is_scanning(self) -> bool:
        return self.state is not ScannerState.IDLE

    def toggle(self) -> bool:
        if self.state is ScannerState.IDLE:
            return self.start()
        return self.stop()

    def start(self) -> bool:
        with self._lock:
            if self.state is not ScannerState.IDLE:
                return False
            self._generation += 1
            generation = self._generation
            self._stopped = None
            self._set_state(ScannerState.STARTING)

        callback = partial(self._handle_frame, generation)
        try:
            controls = self.decoder.decode_from_video_device(self.device_id, self.surface, callback)
        except Exception as exc:
            with self._lock:
                if self._generation == generation:
                    self._set_state(ScannerState.IDLE)
            error = AccessDeniedError(f"Camera is not available: {exc}")
            logger.warning("scanner_access_denied", extra={"error": type(exc).__name__})
            if self.on_error:
                self.on_error(error)
            raise error from exc

        with self._lock:
            current = self._generation == generation and self.state is ScannerState.STARTING
            if current:
                self._controls = controls
                self._set_state(ScannerState.ACTIVE)
                logger.info("scanner_active")
                return True
            already_stopped = self._stopped is controls
        # Stopped or decoded while the stream was still starting.
        if not already_stopped:
            controls.stop()
        return False

    def stop(self) -> bool:
        with self._lock:
            if self.state in {ScannerState.IDLE, ScannerState.STOPPING}:
                return False
            self._generation += 1
            to_stop = self._controls
            self._controls = None
            self._stopped = to_stop
            self._set_state(ScannerState.STOPPING)
        if to_stop is not None:
            to_stop.stop()
        with self._lock:
            self._set_state(ScannerState.IDLE)
        logger.info("scanner_stopped")
        return True

    def _handle_frame(
        self,
        generation: int,
        result: Any,
        error: Any = None,
        controls: ScannerControls | None = None,
    ) -> None:
        if result is None:
            return
        with self._lock:
            if generation != self._generation or self.state not in {
                ScannerState.STARTING,
                ScannerState.ACTIVE,
            }:
                logger.debug("scanner_decode_ignored", extra={"scanner_state": self.state.value})
                return
            self._generation += 1
            to_stop = self._controls or controls
            self._controls = None
            self._stopped = to_stop
            self._set_state(ScannerState.STOPPING)
        if to_stop is not None:
            to_stop.stop()
        with self._lock:
            self._set_state(ScannerState.IDLE)
        code = result_text(result)
        logger.info("scanner_decoded", extra={"code": code})
        if self.on_decode:
            self.on_decode(code)

    def _set_state(self, state: ScannerState) -> None:
        if self.state is state:
            return
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)
