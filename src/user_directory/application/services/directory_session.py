"""Session controller orchestrating load, query state, and remote CRUD."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace

from user_directory.application.dto.user_models import (
    FormView,
    PageView,
    SyncStateView,
    UserView,
)
from user_directory.application.ports.user_collection_port import (
    NetworkError,
    UserCollectionPort,
)
from user_directory.application.services.user_cache import UserCache
from user_directory.domain.form_validator import (
    FormDraft,
    FormValidationError,
    ensure_valid_draft,
)
from user_directory.domain.normalizer import normalize_user_records
from user_directory.domain.query_engine import (
    QueryResult,
    clamp_page,
    query,
    total_pages,
)
from user_directory.domain.query_state import QueryState, SortDirection, SortSpec
from user_directory.domain.session_status import SessionStatus, assert_transition

SleepCallable = Callable[[float], Awaitable[None]]
logger = logging.getLogger(__name__)

MESSAGE_CREATED = "User added"
MESSAGE_UPDATED = "User updated"
MESSAGE_DELETED = "User deleted"
MESSAGE_UPDATE_NOT_APPLIED = "User no longer listed; update not applied"


@dataclass
class _OpenForm:
    editing_user_id: int | None
    draft: FormDraft
    field_errors: dict[str, str] = field(default_factory=dict)


class DirectorySession:
    """Expose query, pagination, and CRUD operations for one presentation instance.

    All state lives on one event loop. A CRUD call made while another is in
    flight is ignored, and results arriving after `close()` are discarded.
    """

    def __init__(
        self,
        *,
        repository: UserCollectionPort,
        cache: UserCache | None = None,
        page_size: int = 10,
        transient_message_seconds: float = 3.0,
        sleep: SleepCallable = asyncio.sleep,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._repository = repository
        self._cache = cache or UserCache()
        self._transient_message_seconds = transient_message_seconds
        self._sleep = sleep

        self._status = SessionStatus.IDLE
        self._alive = True
        self._query_state = QueryState(page_size=page_size)
        self._memo: tuple[tuple[int, QueryState], QueryResult] | None = None
        self._form: _OpenForm | None = None

        self._busy = False
        self._last_error: str | None = None
        self._transient_message: str | None = None
        self._message_generation = 0
        self._clear_tasks: set[asyncio.Task[None]] = set()

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def query_state(self) -> QueryState:
        return self._query_state

    @property
    def cache(self) -> UserCache:
        return self._cache

    def sync_state(self) -> SyncStateView:
        """Return the outcome of the most recent remote call."""

        return SyncStateView(
            busy=self._busy,
            last_error=self._last_error,
            transient_message=self._transient_message,
        )

    def form(self) -> FormView | None:
        """Return the open dialog state, or None when no dialog is open."""

        if self._form is None:
            return None
        draft = self._form.draft
        return FormView(
            editing_user_id=self._form.editing_user_id,
            first_name=draft.first_name,
            last_name=draft.last_name,
            email=draft.email,
            department=draft.department,
            field_errors=dict(self._form.field_errors),
        )

    def view(self) -> PageView:
        """Return the current page, clamping the page number if results shrank."""

        result = self._current_result()
        state = self._query_state
        return PageView(
            items=[UserView.from_user(user) for user in result.items],
            total_count=result.total_count,
            total_pages=total_pages(result.total_count, state.page_size),
            page=state.page,
            page_size=state.page_size,
        )

    async def start(self) -> None:
        """Load the remote collection into the cache."""

        assert_transition(self._status, SessionStatus.LOADING)
        self._status = SessionStatus.LOADING
        logger.info("users_load_started")
        try:
            raw_records = await self._repository.fetch_all()
        except NetworkError as error:
            if not self._alive:
                logger.info("users_load_discarded reason=session closed")
                return
            assert_transition(self._status, SessionStatus.LOAD_FAILED)
            self._status = SessionStatus.LOAD_FAILED
            self._last_error = str(error)
            logger.warning(
                "users_load_failed status=%s error=%s detail=%s",
                error.status_code,
                error,
                error.detail,
            )
            return

        if not self._alive:
            logger.info("users_load_discarded reason=session closed")
            return
        self._cache.replace_all(normalize_user_records(raw_records))
        self._current_result()
        assert_transition(self._status, SessionStatus.READY)
        self._status = SessionStatus.READY
        self._last_error = None
        logger.info("users_loaded count=%s", len(self._cache.snapshot()))

    def close(self) -> None:
        """Mark the session defunct and cancel pending message timers."""

        self._alive = False
        for task in list(self._clear_tasks):
            task.cancel()
        self._clear_tasks.clear()

    def set_search(self, text: str) -> None:
        self._apply_query_state(replace(self._query_state, search_text=text))

    def set_field_filter(self, name: str, value: str) -> None:
        """Set one field filter; unknown field names raise KeyError."""

        self._apply_query_state(self._query_state.with_filter(name, value))

    def clear_filters(self) -> None:
        cleared = self._query_state.without_filters()
        self._apply_query_state(replace(cleared, search_text=self._query_state.search_text))

    def set_sort(self, column: str) -> None:
        """Sort by column, toggling direction when the column is already active."""

        current = self._query_state.sort
        if current.column == column:
            sort = SortSpec(column=column, direction=current.direction.toggled())
        else:
            sort = SortSpec(column=column, direction=SortDirection.ASC)
        self._apply_query_state(replace(self._query_state, sort=sort))

    def set_page(self, page: int) -> None:
        """Move to a page, clamped into the available range."""

        result = self._current_result()
        clamped = clamp_page(
            page,
            total_count=result.total_count,
            page_size=self._query_state.page_size,
        )
        self._apply_query_state(replace(self._query_state, page=clamped))

    def set_page_size(self, page_size: int) -> None:
        """Change page size and return to the first page."""

        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._apply_query_state(replace(self._query_state, page_size=page_size, page=1))

    def open_create(self) -> None:
        self._form = _OpenForm(editing_user_id=None, draft=FormDraft())

    def open_edit(self, user_id: int) -> None:
        """Open the edit dialog preloaded from the cached user."""

        user = self._cache.get(user_id)
        if user is None:
            raise KeyError(user_id)
        self._form = _OpenForm(
            editing_user_id=user.user_id,
            draft=FormDraft(
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                department=user.department,
            ),
        )

    def cancel(self) -> None:
        """Discard the open dialog unless a submission is in flight."""

        if self._busy:
            return
        self._form = None

    async def submit(self, draft: FormDraft) -> bool:
        """Submit the open dialog as a create or an update."""

        if self._form is None:
            raise RuntimeError("no form is open")
        if self._form.editing_user_id is None:
            return await self.submit_create(draft)
        return await self.submit_update(self._form.editing_user_id, draft)

    async def submit_create(self, draft: FormDraft) -> bool:
        """Create a user remotely, then prepend it to the cache."""

        if not self._accepts_submission("create") or not self._validate(draft):
            return False
        with self._busy_scope():
            try:
                created = await self._repository.create(draft)
            except NetworkError as error:
                self._report_failure(error)
                return False
            if not self._alive:
                return False
            user = self._cache.apply_created(draft, created)
            self._current_result()
            self._form = None
            self._set_message(MESSAGE_CREATED)
            logger.info("user_created user_id=%s", user.user_id)
            return True

    async def submit_update(self, user_id: int, draft: FormDraft) -> bool:
        """Update a user remotely, then apply the draft to the cached entry."""

        if not self._accepts_submission("update") or not self._validate(draft):
            return False
        with self._busy_scope():
            try:
                # The response body is informational; the local draft is applied.
                await self._repository.update(user_id, draft)
            except NetworkError as error:
                self._report_failure(error)
                return False
            if not self._alive:
                return False
            updated = self._cache.apply_updated(user_id, draft)
            self._form = None
            if updated is None:
                self._set_message(MESSAGE_UPDATE_NOT_APPLIED)
                logger.warning("user_update_not_applied user_id=%s reason=not cached", user_id)
                return False
            self._current_result()
            self._set_message(MESSAGE_UPDATED)
            logger.info("user_updated user_id=%s", user_id)
            return True

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user remotely, then drop it from the cache."""

        if not self._accepts_submission("delete"):
            return False
        with self._busy_scope():
            try:
                await self._repository.delete(user_id)
            except NetworkError as error:
                self._report_failure(error)
                return False
            if not self._alive:
                return False
            self._cache.apply_deleted(user_id)
            self._current_result()
            self._set_message(MESSAGE_DELETED)
            logger.info("user_deleted user_id=%s", user_id)
            return True

    def _apply_query_state(self, state: QueryState) -> None:
        self._query_state = state
        self._current_result()

    def _current_result(self) -> QueryResult:
        # Clamps `page` into range whenever the filtered count changes.
        key = (self._cache.version, self._query_state)
        if self._memo is not None and self._memo[0] == key:
            return self._memo[1]

        users = self._cache.snapshot()
        result = query(users, self._query_state)
        clamped = clamp_page(
            self._query_state.page,
            total_count=result.total_count,
            page_size=self._query_state.page_size,
        )
        if clamped != self._query_state.page:
            self._query_state = replace(self._query_state, page=clamped)
            result = query(users, self._query_state)
            key = (self._cache.version, self._query_state)
        self._memo = (key, result)
        return result

    def _accepts_submission(self, operation: str) -> bool:
        if not self._alive:
            logger.info("submission_ignored operation=%s reason=session closed", operation)
            return False
        if self._status is not SessionStatus.READY:
            logger.info(
                "submission_ignored operation=%s reason=status %s",
                operation,
                self._status.value,
            )
            return False
        if self._busy:
            logger.info("submission_ignored operation=%s reason=busy", operation)
            return False
        return True

    def _validate(self, draft: FormDraft) -> bool:
        try:
            ensure_valid_draft(draft)
        except FormValidationError as error:
            if self._form is not None:
                self._form = replace(self._form, draft=draft, field_errors=error.field_errors)
            return False
        if self._form is not None:
            self._form = replace(self._form, draft=draft, field_errors={})
        return True

    @contextmanager
    def _busy_scope(self) -> Iterator[None]:
        self._busy = True
        self._last_error = None
        self._set_message(None)
        try:
            yield
        finally:
            self._busy = False
            if self._alive:
                self._schedule_message_clear()

    def _report_failure(self, error: NetworkError) -> None:
        if not self._alive:
            return
        self._last_error = str(error)
        self._set_message(f"API error: {error}")
        logger.warning(
            "user_%s_failed status=%s error=%s detail=%s",
            error.operation,
            error.status_code,
            error,
            error.detail,
        )

    def _set_message(self, message: str | None) -> None:
        self._message_generation += 1
        self._transient_message = message

    def _schedule_message_clear(self) -> None:
        task = asyncio.get_running_loop().create_task(
            self._clear_message_after(self._message_generation)
        )
        self._clear_tasks.add(task)
        task.add_done_callback(self._clear_tasks.discard)

    async def _clear_message_after(self, generation: int) -> None:
        await self._sleep(self._transient_message_seconds)
        if generation == self._message_generation:
            self._transient_message = None
