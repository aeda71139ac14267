from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Hashable, Iterable, Optional, Protocol

from loguru import logger

from services.calendar_range import StrEnum
from services.message_filters import FilterSchema, FilterSet


class KeyedRecord(Protocol):
	@property
	def key(self) -> Hashable: ...


@dataclass(frozen=True)
class Page:
	items: tuple[Any, ...]
	page_number: int
	has_more: bool
	total_records: Optional[int] = None

	def __post_init__(self) -> None:
		object.__setattr__(self, "items", tuple(self.items))
		if self.page_number < 1:
			raise ValueError(f"page_number must be >= 1, got {self.page_number}")


FetchPageFn = Callable[[FilterSet, int, int], Awaitable[Page]]
StateListener = Callable[["ListState"], None]


class ListPhase(StrEnum):
	IDLE = "idle"
	INITIAL_LOADING = "initial_loading"
	REFRESHING = "refreshing"
	LOADING_MORE = "loading_more"
	ERROR = "error"


class FetchFailure(Exception):
	"""A page could not be loaded. str() is safe to show to the user."""

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


@dataclass(frozen=True)
class ListState:
	records: tuple[Any, ...] = ()
	current_page: int = 0
	has_more: bool = False
	phase: ListPhase = ListPhase.IDLE
	last_error: Optional[FetchFailure] = None
	total_records: Optional[int] = None

	@property
	def error_message(self) -> str:
		return self.last_error.message if self.last_error else ""


def merge_records(existing: Iterable[KeyedRecord], incoming: Iterable[KeyedRecord]) -> tuple[Any, ...]:
	"""Append `incoming` after `existing`, skipping any record whose key was already seen."""
	seen: set[Hashable] = set()
	merged: list[Any] = []
	for rec in list(existing) + list(incoming):
		k = rec.key
		if k in seen:
			continue
		seen.add(k)
		merged.append(rec)
	return tuple(merged)


@dataclass(frozen=True)
class _Request:
	phase: ListPhase
	filters: FilterSet
	page_number: int

	@property
	def appends(self) -> bool:
		return self.phase == ListPhase.LOADING_MORE


def _describe_error(ex: BaseException) -> FetchFailure:
	if isinstance(ex, FetchFailure):
		return ex
	text = str(ex).strip()
	return FetchFailure(text or f"{ex.__class__.__name__} while loading messages")


class PagedFilterController:
	"""
	Fetch lifecycle for one filtered, paginated list screen.

	Owns the draft/committed filter pair and the ListState. Every outbound
	fetch is stamped with a generation number; a response is applied only if
	its generation is still the latest when it arrives, otherwise it is dropped
	without touching state. That is the only cancellation there is: the
	request itself still runs to completion.

	All trigger methods are coroutines whose state transition happens before
	their first await, so the phase is visible as soon as the task starts.
	"""

	def __init__(
		self,
		fetch_page: FetchPageFn,
		schema: FilterSchema,
		default_filters: FilterSet,
		*,
		page_size: int = 20,
		name: str = "list",
	) -> None:
		if page_size < 1:
			raise ValueError(f"page_size must be >= 1, got {page_size}")

		self._fetch_page = fetch_page
		self._schema = schema
		self._defaults = schema.validate(default_filters)
		self._page_size = page_size
		self.name = name

		self._draft = self._defaults
		self._committed = self._defaults
		self._state = ListState()
		self._generation = 0
		self._last_request: Optional[_Request] = None
		self._started = False
		self._closed = False
		self._listeners: dict[object, StateListener] = {}

		self._log = logger.bind(component="PagedFilterController", list=name)

	# ------------------------------------------------------------------ read side

	@property
	def state(self) -> ListState:
		return self._state

	@property
	def draft(self) -> FilterSet:
		return self._draft

	@property
	def committed(self) -> FilterSet:
		return self._committed

	@property
	def defaults(self) -> FilterSet:
		return self._defaults

	@property
	def schema(self) -> FilterSchema:
		return self._schema

	@property
	def generation(self) -> int:
		return self._generation

	@property
	def page_size(self) -> int:
		return self._page_size

	@property
	def has_unsaved_changes(self) -> bool:
		return self._draft != self._committed

	@property
	def closed(self) -> bool:
		return self._closed

	def subscribe(self, callback: StateListener) -> Callable[[], None]:
		token = object()
		self._listeners[token] = callback

		def unsubscribe() -> None:
			self._listeners.pop(token, None)

		return unsubscribe

	# ------------------------------------------------------------------ filters

	def set_draft(self, filters: FilterSet) -> None:
		self._draft = self._schema.validate(filters)

	def edit_draft(self, key: str, value: Any) -> FilterSet:
		self._draft = self._draft.with_value(key, value)
		return self._draft

	def discard_draft(self) -> None:
		self._draft = self._committed

	def reset_filters(self, defaults: Optional[FilterSet] = None) -> None:
		"""Put the defaults back into draft and committed. Does not fetch."""
		if defaults is not None:
			self._defaults = self._schema.validate(defaults)
		self._draft = self._defaults
		self._committed = self._defaults
		self._log.info(f"[reset_filters] - filters_reset - list={self.name}")

	def seed_defaults(self, defaults: FilterSet) -> bool:
		"""
		Replace the defaults (e.g. with a server supplied date range) before the
		first fetch. Once anything has been committed or loaded the call only
		updates what Reset restores; returns True when committed was replaced.
		"""
		self._defaults = self._schema.validate(defaults)
		if self._started or self._closed:
			self._log.debug(f"[seed_defaults] - defaults_updated_only - list={self.name}")
			return False
		self._draft = self._defaults
		self._committed = self._defaults
		return True

	async def apply_filters(self, new_filters: Optional[FilterSet] = None) -> None:
		filters = self._schema.validate(new_filters if new_filters is not None else self._draft)
		if self._closed:
			return

		self._draft = filters
		self._committed = filters
		self._started = True
		self._log.info(f"[apply_filters] - filters_committed - list={self.name} params={filters.to_query_params()}")
		await self._issue(_Request(ListPhase.REFRESHING, filters, 1), clear=True)

	# ------------------------------------------------------------------ triggers

	async def load_initial(self) -> None:
		if self._started or self._closed:
			return
		self._started = True
		await self._issue(_Request(ListPhase.INITIAL_LOADING, self._committed, 1))

	async def refresh(self) -> None:
		if self._closed:
			return
		self._started = True
		await self._issue(_Request(ListPhase.REFRESHING, self._committed, 1))

	async def load_more(self) -> None:
		st = self._state
		if self._closed or not st.has_more or st.phase != ListPhase.IDLE:
			return
		await self._issue(_Request(ListPhase.LOADING_MORE, self._committed, st.current_page + 1))

	async def retry(self) -> None:
		if self._closed or self._state.phase != ListPhase.ERROR or self._last_request is None:
			return
		req = self._last_request
		if req.filters != self._committed:
			# filters were reset since the failure: the loaded rows no longer match, start over
			self._log.info(f"[retry] - filters_changed_reloading - list={self.name}")
			await self._issue(_Request(ListPhase.REFRESHING, self._committed, 1), clear=True)
			return
		self._log.info(f"[retry] - retrying - list={self.name} phase={req.phase} page={req.page_number}")
		await self._issue(req)

	def close(self) -> None:
		"""Screen unmount: anything still in flight becomes stale."""
		if self._closed:
			return
		self._closed = True
		self._generation += 1
		self._listeners.clear()
		self._log.debug(f"[close] - controller_closed - list={self.name}")

	# ------------------------------------------------------------------ internals

	async def _issue(self, req: _Request, *, clear: bool = False) -> None:
		self._generation += 1
		gen = self._generation
		self._last_request = req
		if clear:
			self._set_state(ListState(phase=req.phase))
		else:
			self._set_state(replace(self._state, phase=req.phase, last_error=None))
		self._log.debug(f"[_issue] - fetch_start - list={self.name} gen={gen} phase={req.phase} page={req.page_number}")

		try:
			page = await self._fetch_page(req.filters, req.page_number, self._page_size)
		except asyncio.CancelledError:
			raise
		except Exception as ex:
			self._on_fetch_failure(gen, req, ex)
			return

		self._on_fetch_success(gen, req, page)

	def _is_stale(self, gen: int, req: _Request, outcome: str) -> bool:
		if gen == self._generation and not self._closed:
			return False
		self._log.debug(
			f"[_is_stale] - stale_response_discarded - list={self.name} gen={gen} current={self._generation} "
			f"phase={req.phase} page={req.page_number} outcome={outcome}"
		)
		return True

	def _on_fetch_success(self, gen: int, req: _Request, page: Page) -> None:
		if self._is_stale(gen, req, "success"):
			return

		st = self._state
		if req.appends:
			records = merge_records(st.records, page.items)
		else:
			records = merge_records((), page.items)

		self._set_state(
			ListState(
				records=records,
				current_page=req.page_number,
				has_more=bool(page.has_more),
				phase=ListPhase.IDLE,
				last_error=None,
				total_records=page.total_records if page.total_records is not None else st.total_records,
			)
		)
		self._log.debug(
			f"[_on_fetch_success] - page_applied - list={self.name} gen={gen} page={req.page_number} "
			f"received={len(page.items)} total_loaded={len(records)} has_more={page.has_more}"
		)

	def _on_fetch_failure(self, gen: int, req: _Request, ex: BaseException) -> None:
		if self._is_stale(gen, req, "failure"):
			return

		failure = _describe_error(ex)
		self._set_state(replace(self._state, phase=ListPhase.ERROR, last_error=failure))
		self._log.warning(
			f"[_on_fetch_failure] - fetch_failed - list={self.name} gen={gen} phase={req.phase} "
			f"page={req.page_number} err={ex!r}"
		)

	def _set_state(self, new_state: ListState) -> None:
		self._state = new_state
		for cb in list(self._listeners.values()):
			try:
				cb(new_state)
			except Exception:
				self._log.exception(f"[_set_state] - listener_failed - list={self.name}")
