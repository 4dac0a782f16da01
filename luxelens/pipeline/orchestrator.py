"""Validate → normalise → build → send → record, for one invocation at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Optional, Union

from ..errors import InvalidInput, LuxeLensError, MissingInput, PersistenceFailure
from ..history import HistoryRecord, HistoryRecorderProtocol, NullHistoryRecorder
from ..image.gemini.interfaces import GenerationClientProtocol
from ..image.normalizer import EncodedImage, RawImage, normalize_image
from ..logging_utils import RunLogger, create_logger
from ..messages import Messages
from ..modes import CatalogInputs, EditInputs, GenerationInputs, GeneratorMode
from ..prompting import DEFAULT_HISTORY_LABEL, build_request, check_aspect_ratio, missing_fields
from ..session import Session

__all__ = [
    "Failed",
    "Idle",
    "Orchestrator",
    "OrchestratorState",
    "Running",
    "Succeeded",
    "Validating",
]


@dataclass(frozen=True)
class Idle:
    busy: ClassVar[bool] = False


@dataclass(frozen=True)
class Validating:
    busy: ClassVar[bool] = True

    mode: GeneratorMode


@dataclass(frozen=True)
class Running:
    busy: ClassVar[bool] = True

    mode: GeneratorMode


@dataclass(frozen=True)
class Succeeded:
    busy: ClassVar[bool] = False

    mode: GeneratorMode
    result: str


@dataclass(frozen=True)
class Failed:
    busy: ClassVar[bool] = False

    mode: GeneratorMode
    error: BaseException
    message: str


OrchestratorState = Union[Idle, Validating, Running, Succeeded, Failed]

Normalizer = Callable[[Union[RawImage, EncodedImage]], EncodedImage]


class Orchestrator:
    """Drives one generation from validated inputs to a terminal state.

    Callers must not start a new run while :attr:`busy` is true; there is no
    queue, and a re-entrant call raises ``RuntimeError``.
    """

    def __init__(
        self,
        client: GenerationClientProtocol,
        recorder: Optional[HistoryRecorderProtocol] = None,
        *,
        messages: Optional[Messages] = None,
        logger: Optional[RunLogger] = None,
        normalizer: Normalizer = normalize_image,
    ) -> None:
        self.client = client
        self.recorder = recorder or NullHistoryRecorder()
        self.messages = messages or Messages()
        self.logger = logger or create_logger()
        self.normalizer = normalizer
        self._state: OrchestratorState = Idle()

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.busy

    def reset(self) -> None:
        if self.busy:
            raise RuntimeError("cannot reset while a generation is in progress")
        self._state = Idle()

    def run(self, inputs: GenerationInputs, *, session: Optional[Session] = None) -> OrchestratorState:
        if self.busy:
            raise RuntimeError("a generation is already in progress")
        mode = inputs.mode
        self._state = Validating(mode=mode)

        missing = missing_fields(inputs)
        if missing:
            self.logger.log("valid", f"{mode.value}: missing {', '.join(missing)}", level="WARN")
            return self._fail(mode, MissingInput(missing))
        try:
            check_aspect_ratio(inputs)
        except InvalidInput as exc:
            self.logger.log("valid", f"{mode.value}: {exc}", level="WARN")
            return self._fail(mode, exc)

        self._state = Running(mode=mode)
        try:
            normalized = self.logger.timed("norm", "inputs normalised", self._normalize, inputs, level="DEBUG")
            request = self.logger.timed(
                "build",
                lambda req: f"{mode.value} request with {len(req.images)} image(s)",
                build_request,
                normalized,
            )
            result = self.logger.timed("send", f"{mode.value} image received", self.client.generate, request)
        except LuxeLensError as exc:
            return self._fail(mode, exc)
        except Exception as exc:
            self.logger.log("send", f"unexpected {type(exc).__name__}: {exc}", level="ERROR")
            return self._fail(mode, exc)

        self._state = Succeeded(mode=mode, result=result)
        self._record_history(inputs, result, session)
        return self._state

    def _normalize(self, inputs: GenerationInputs) -> GenerationInputs:
        if isinstance(inputs, CatalogInputs):
            return CatalogInputs(
                product=self.normalizer(inputs.product),
                reference=self.normalizer(inputs.reference),
                aspect_ratio=inputs.aspect_ratio,
            )
        if isinstance(inputs, EditInputs):
            return EditInputs(image=self.normalizer(inputs.image), instructions=inputs.instructions)
        return inputs

    def _fail(self, mode: GeneratorMode, error: BaseException) -> Failed:
        self._state = Failed(mode=mode, error=error, message=self.messages.describe(error))
        return self._state

    def _record_history(self, inputs: GenerationInputs, result: str, session: Optional[Session]) -> None:
        if session is None:
            self.logger.log("store", "no session; history skipped", level="DEBUG")
            return
        ratio = inputs.aspect_ratio
        record = HistoryRecord(
            user_id=session.user_id,
            image_url=result,
            mode=inputs.mode.value,
            aspect_ratio=ratio.value if ratio is not None else None,
            prompt=inputs.prompt_text or DEFAULT_HISTORY_LABEL,
        )
        try:
            self.recorder.record(record, session)
        except PersistenceFailure as exc:
            self.logger.log("store", f"history write failed: {exc}", level="WARN")
            return
        except Exception as exc:
            self.logger.log("store", f"history write failed: {type(exc).__name__}: {exc}", level="WARN")
            return
        self.logger.log("store", f"history saved for {session.user_id}", level="DEBUG")
