"""
Scripted editing sessions.

A script is a list of steps, each a mapping with an ``action`` and its
parameters, e.g.::

    - action: select
      anchor: {path: [0, 0], offset: 0}
      focus: {path: [0, 0], offset: 4}
    - action: toggle_mark
      format: bold
    - action: insert_text
      text: "Hello"

The runner applies the steps to an editor in order and records a result for
each one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.editor import Editor
from ..core.errors import EditorError, InvalidValueError
from ..core.range import Point, Range
from ..payloads.transfer import DataTransfer, FileBlob
from ..transforms import collapse, deselect, move, select
from .hotkeys import handle_hotkey
from .inserts import insert_image, insert_link, insert_math_block, set_checked, unwrap_link
from .toggles import toggle_block, toggle_mark


class StepStatus(Enum):
    """Outcome of a script step."""
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScriptStep(BaseModel):
    """One step of a script; parameters beyond ``action`` depend on the action."""

    model_config = ConfigDict(extra="allow")

    action: str

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


@dataclass
class StepResult:
    index: int
    action: str
    status: StepStatus = StepStatus.COMPLETED
    error: Optional[str] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None


@dataclass
class ScriptResult:
    steps: List[StepResult] = field(default_factory=list)
    rolled_back: bool = False

    @property
    def success(self) -> bool:
        return all(step.status == StepStatus.COMPLETED for step in self.steps)

    @property
    def failures(self) -> List[StepResult]:
        return [step for step in self.steps if step.status == StepStatus.FAILED]


def load_script(path: Union[str, Path]) -> List[ScriptStep]:
    """
    Read a YAML or JSON script file.

    Raises:
        InvalidValueError: if the file is not a list of steps
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise InvalidValueError(f"Cannot read script {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("steps")
    if not isinstance(data, list):
        raise InvalidValueError(f"Script {path} must be a list of steps")
    return parse_steps(data)


def parse_steps(data: List[Any]) -> List[ScriptStep]:
    try:
        return [ScriptStep.model_validate(item) for item in data]
    except ValidationError as e:
        raise InvalidValueError(f"Invalid script step: {e}") from e


def _point(data: Any) -> Point:
    if isinstance(data, dict):
        return Point(path=tuple(data["path"]), offset=int(data.get("offset", 0)))
    if isinstance(data, (list, tuple)) and data:
        return Point(path=tuple(data[:-1]), offset=int(data[-1]))
    raise ValueError(f"Invalid point: {data!r}")


class ScriptRunner:
    """
    Applies script steps to an editor.

    With ``atomic=True`` the first failing step stops the script and the
    document is rolled back to its state before the script started.
    """

    def __init__(self, editor: Editor, base_dir: Optional[Path] = None):
        self.editor = editor
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.logger = logging.getLogger(__name__)

        self.total_steps = 0
        self.successful_steps = 0
        self.failed_steps = 0

        self._handlers: Dict[str, Callable[[Dict[str, Any]], Optional[Awaitable[None]]]] = {
            "select": self._select,
            "deselect": lambda p: deselect(self.editor),
            "collapse": lambda p: collapse(self.editor, edge=p.get("edge", "anchor")),
            "move": self._move,
            "insert_text": lambda p: self.editor.insert_text(str(p["text"])),
            "insert_break": lambda p: self.editor.insert_break(),
            "delete_backward": lambda p: self.editor.delete_backward(p.get("unit", "character")),
            "delete_forward": lambda p: self.editor.delete_forward(p.get("unit", "character")),
            "toggle_mark": lambda p: toggle_mark(self.editor, p["format"]),
            "toggle_block": lambda p: toggle_block(self.editor, p["format"]),
            "hotkey": self._hotkey,
            "insert_link": lambda p: insert_link(self.editor, p["url"]),
            "unwrap_link": lambda p: unwrap_link(self.editor),
            "insert_image": lambda p: insert_image(self.editor, p["url"]),
            "insert_math_block": lambda p: insert_math_block(self.editor, p.get("source")),
            "set_checked": lambda p: set_checked(self.editor, tuple(p["path"]), bool(p.get("checked", True))),
            "paste": lambda p: self.editor.insert_data(DataTransfer.from_text(str(p["text"]))),
            "drop_files": self._drop_files,
        }

    @property
    def actions(self) -> List[str]:
        return sorted(self._handlers)

    async def run(self, steps: List[Union[ScriptStep, Dict[str, Any]]], atomic: bool = False) -> ScriptResult:
        """
        Run ``steps`` in order.

        Args:
            steps: Parsed steps or plain mappings
            atomic: Stop at the first failure and roll the document back

        Returns:
            Result with one entry per step
        """
        parsed = [s if isinstance(s, ScriptStep) else ScriptStep.model_validate(s) for s in steps]
        result = ScriptResult()

        if not atomic:
            for index, step in enumerate(parsed):
                result.steps.append(await self._run_step(index, step))
            return result

        try:
            with self.editor.atomic():
                for index, step in enumerate(parsed):
                    step_result = await self._run_step(index, step)
                    result.steps.append(step_result)
                    if step_result.status == StepStatus.FAILED:
                        raise EditorError(f"Step {index} ({step.action}) failed: {step_result.error}")
        except EditorError as e:
            self.logger.warning(f"Script rolled back: {e}")
            result.rolled_back = True
            for index in range(len(result.steps), len(parsed)):
                result.steps.append(StepResult(index=index, action=parsed[index].action, status=StepStatus.SKIPPED))

        return result

    async def _run_step(self, index: int, step: ScriptStep) -> StepResult:
        self.total_steps += 1
        step_result = StepResult(index=index, action=step.action, start_time=time.time())

        handler = self._handlers.get(step.action)
        try:
            if handler is None:
                raise ValueError(f"Unknown action {step.action!r}")
            self.logger.info(f"Running step {index}: {step.action} {step.params}")
            outcome = handler(step.params)
            if outcome is not None:
                await outcome
            self.successful_steps += 1
        except (EditorError, KeyError, ValueError, TypeError, OSError) as e:
            self.failed_steps += 1
            step_result.status = StepStatus.FAILED
            step_result.error = f"{type(e).__name__}: {e}"
            self.logger.error(f"Step {index} ({step.action}) failed: {e}")
        finally:
            step_result.end_time = time.time()

        return step_result

    def _select(self, params: Dict[str, Any]) -> None:
        if "at" in params:
            select(self.editor, tuple(params["at"]))
            return
        if "point" in params:
            select(self.editor, _point(params["point"]))
            return
        anchor = _point(params["anchor"])
        focus = _point(params["focus"]) if "focus" in params else anchor
        select(self.editor, Range(anchor=anchor, focus=focus))

    def _move(self, params: Dict[str, Any]) -> None:
        move(
            self.editor,
            distance=int(params.get("distance", 1)),
            unit=params.get("unit", "offset"),
            reverse=bool(params.get("reverse", False)),
            edge=params.get("edge"),
        )

    def _hotkey(self, params: Dict[str, Any]) -> None:
        chord = params["chord"]
        if not handle_hotkey(self.editor, chord):
            raise ValueError(f"Unbound hotkey {chord!r}")

    async def _drop_files(self, params: Dict[str, Any]) -> None:
        blobs = [FileBlob.from_path(self._resolve(name)) for name in params["files"]]
        missing = [str(blob.path) for blob in blobs if not blob.path.exists()]
        if missing:
            raise FileNotFoundError(f"Dropped files not found: {', '.join(missing)}")
        self.editor.insert_data(DataTransfer.from_files(*blobs))
        for plugin in self.editor.plugins:
            reader = getattr(plugin, "reader", None)
            if reader is not None:
                await reader.wait_all()

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        return path if path.is_absolute() else self.base_dir / path

    def get_execution_stats(self) -> Dict[str, Any]:
        success_rate = (self.successful_steps / max(1, self.total_steps)) * 100
        return {
            'total_steps': self.total_steps,
            'successful_steps': self.successful_steps,
            'failed_steps': self.failed_steps,
            'success_rate': round(success_rate, 2),
        }
