"""
Draft-row editor for an editable grid.

    IDLE --start_new/start_edit--> DRAFTING --commit--> SAVING
      ^                               |  ^                 |
      +------------cancel-------------+  +--server error---+
      +------------------------server ok-------------------+

Only one draft exists per grid. The draft is a plain dict; `qty`/`rate`
edits recompute `amount` immediately.
"""
from __future__ import annotations

import copy
import dataclasses
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from ...api.client import ApiError, ApiResult
from ...constants import (
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
    MSG_DUPLICATE_LINE,
    MSG_LINE_ADDED,
    MSG_LINE_SAVED,
    MSG_SAVE_LINE_FAILED,
)
from ...utils.validators import calculate_amount, has_duplicate, validate_line

_log = logging.getLogger(__name__)

LINE_KEY_FIELDS = ("main_group_id", "sub_main_group_id", "item_id")

BLANK_LINE = {
    "id_number": 0,
    "main_group_id": None,
    "sub_main_group_id": None,
    "item_id": None,
    "unit_id": None,
    "qty": 0.0,
    "rate": 0.0,
    "amount": 0.0,
}


class EditorState(str, Enum):
    IDLE = "idle"
    DRAFTING = "drafting"
    SAVING = "saving"


def _as_dict(row) -> dict:
    if isinstance(row, dict):
        return copy.deepcopy(row)
    if dataclasses.is_dataclass(row):
        return dataclasses.asdict(row)
    raise TypeError(f"Unsupported row type: {type(row).__name__}")


class DraftRowEditor:
    def __init__(
        self,
        *,
        save: Callable[[dict], ApiResult],
        rows: Callable[[], Iterable[Any]],
        runner,
        notify: Callable[[str, str], None],
        on_saved: Callable[[], None],
        validate: Callable[[dict], list[str]] = validate_line,
        key_fields: Sequence[str] = LINE_KEY_FIELDS,
        id_field: str = "id_number",
        blank: Optional[dict] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._save = save
        self._rows = rows
        self._runner = runner
        self._notify = notify
        self._on_saved = on_saved
        self._validate = validate
        self._key_fields = tuple(key_fields)
        self._id_field = id_field
        self._blank = dict(blank or BLANK_LINE)
        self.on_change = on_change

        self.state = EditorState.IDLE
        self.draft: Optional[dict] = None
        self.mode: Optional[str] = None          # 'new' | 'existing'
        self.editing_id: Any = None

    # ---- queries ---------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is not EditorState.IDLE

    @property
    def is_saving(self) -> bool:
        return self.state is EditorState.SAVING

    @property
    def can_start(self) -> bool:
        return self.state is EditorState.IDLE

    # ---- transitions -----------------------------------------------------

    def start_new(self) -> bool:
        if not self.can_start:
            _log.debug("start_new refused in state %s", self.state.value)
            return False
        self.draft = dict(self._blank)
        self.mode = "new"
        self.editing_id = None
        self.state = EditorState.DRAFTING
        self._changed()
        return True

    def start_edit(self, row) -> bool:
        if not self.can_start:
            _log.debug("start_edit refused in state %s", self.state.value)
            return False
        self.draft = _as_dict(row)
        self.mode = "existing"
        self.editing_id = self.draft.get(self._id_field)
        self.state = EditorState.DRAFTING
        self._changed()
        return True

    def set_field(self, name: str, value) -> None:
        if self.state is not EditorState.DRAFTING or self.draft is None:
            return
        self.draft[name] = value
        if name in ("qty", "rate"):
            self.draft["amount"] = calculate_amount(self.draft.get("qty"), self.draft.get("rate"))
        self._changed()

    def update(self, **fields) -> None:
        for name, value in fields.items():
            self.set_field(name, value)

    def cancel(self) -> bool:
        if self.state is EditorState.SAVING:
            return False
        self._clear()
        return True

    def commit(self) -> bool:
        """
        Validate, duplicate-check and send the draft. Returns True when a save
        request was issued.
        """
        if self.state is not EditorState.DRAFTING or self.draft is None:
            return False

        errors = self._validate(self.draft)
        if errors:
            self._notify(errors[0], SEVERITY_ERROR)
            return False

        exclude = self.editing_id if self.mode == "existing" else None
        if has_duplicate(
            self._rows(), self.draft, self._key_fields,
            id_field=self._id_field, exclude_id=exclude,
        ):
            self._notify(MSG_DUPLICATE_LINE, SEVERITY_ERROR)
            return False

        self.state = EditorState.SAVING
        self._changed()
        snapshot = dict(self.draft)
        self._runner.submit(lambda: self._save(snapshot), self._saved, self._save_failed)
        return True

    # ---- completion ------------------------------------------------------

    def _saved(self, result: ApiResult) -> None:
        if self.state is not EditorState.SAVING:
            return
        if result is not None and result.ok:
            self._notify(MSG_LINE_ADDED if self.mode == "new" else MSG_LINE_SAVED, SEVERITY_SUCCESS)
            self._clear()
            self._on_saved()
            return
        msg = (result.message if result is not None else None) or MSG_SAVE_LINE_FAILED
        _log.info("Line save rejected: %s", msg)
        self._notify(msg, SEVERITY_ERROR)
        self.state = EditorState.DRAFTING
        self._changed()

    def _save_failed(self, exc: BaseException) -> None:
        if self.state is not EditorState.SAVING:
            return
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error while saving line", exc_info=exc)
        self._notify(f"{MSG_SAVE_LINE_FAILED}: {exc}", SEVERITY_ERROR)
        self.state = EditorState.DRAFTING
        self._changed()

    def _clear(self) -> None:
        self.draft = None
        self.mode = None
        self.editing_id = None
        self.state = EditorState.IDLE
        self._changed()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()
