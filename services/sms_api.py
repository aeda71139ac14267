from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from loguru import logger

from services.app_config import ApiConfig
from services.calendar_range import CalendarDate, DateRange
from services.logging_setup import log_timing
from services.message_filters import FilterOption, FilterSet
from services.message_models import RECEIVED_SMS_TABLE, MessageDetails, MessageRecord
from services.paged_list import FetchFailure, Page


GENERIC_ERROR = "Something went wrong. Please try again."
TIMEOUT_ERROR = "Request timed out. Please check your connection and try again."
CONNECTION_ERROR = "Unable to connect to server. Please try again later."
AUTH_REQUIRED = "Authentication required"


class SmsApiError(FetchFailure):
	def __init__(self, message: str, *, status_code: Optional[int] = None, is_network_error: bool = False) -> None:
		super().__init__(message)
		self.status_code = status_code
		self.is_network_error = is_network_error


@dataclass(frozen=True)
class ScreenOptions:
	"""Choice lists and default dates a list screen gets from the server before its first fetch."""

	options: Dict[str, tuple[FilterOption, ...]] = field(default_factory=dict)
	default_range: Optional[DateRange] = None


def _options(raw: Any, *, value_key: str = "value", label_key: str = "label") -> tuple[FilterOption, ...]:
	out: list[FilterOption] = []
	for entry in raw or []:
		if not isinstance(entry, Mapping):
			continue
		value = entry.get(value_key)
		if value is None:
			continue
		out.append(FilterOption(value=str(value), label=str(entry.get(label_key) or value)))
	return tuple(out)


def _parse_range(start: Any, end: Any) -> Optional[DateRange]:
	if not start or not end:
		return None
	try:
		return DateRange.ordered(CalendarDate.parse_iso(start), CalendarDate.parse_iso(end))
	except ValueError:
		logger.warning(f"[_parse_range] - invalid_default_dates_ignored - start={start!r} end={end!r}")
		return None


def _page_from(
	data: Mapping[str, Any],
	requested_page: int,
	parse: Callable[[Mapping[str, Any]], MessageRecord],
) -> Page:
	raw_items = data.get("messages")
	pagination = data.get("pagination")
	if not isinstance(raw_items, list) or not isinstance(pagination, Mapping):
		raise SmsApiError(GENERIC_ERROR)

	items = tuple(parse(r) for r in raw_items if isinstance(r, Mapping))
	try:
		current = int(pagination.get("current_page") or requested_page)
		if "has_more" in pagination:
			has_more = bool(pagination.get("has_more"))
		else:
			has_more = current < int(pagination.get("total_pages") or 0)
		total = pagination.get("total_records")
		total = int(total) if total is not None else None
	except (TypeError, ValueError) as ex:
		logger.warning(f"[_page_from] - invalid_pagination - pagination={pagination!r} err={ex!r}")
		raise SmsApiError(GENERIC_ERROR) from ex

	return Page(
		items=items,
		page_number=requested_page,
		has_more=has_more,
		total_records=total,
	)


class SmsApiClient:
	"""
	Blocking HTTP client for the message list endpoints.

	The fetch_*_page coroutines are the page-fetch collaborators handed to
	PagedFilterController; they push the blocking call off the event loop.
	"""

	def __init__(self, config: ApiConfig, session: Optional[requests.Session] = None) -> None:
		self._config = config
		self._session = session or requests.Session()
		self._log = logger.bind(component="SmsApiClient")

	def close(self) -> None:
		self._session.close()

	# ------------------------------------------------------------------ transport

	def _url(self, endpoint: str) -> str:
		return self._config.base_url.rstrip("/") + "/" + endpoint.lstrip("/")

	def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
		if not self._config.token:
			raise SmsApiError(AUTH_REQUIRED, status_code=401)

		url = self._url(endpoint)
		headers = {
			"Content-Type": "application/json",
			"Accept": "application/json",
			"Authorization": f"Bearer {self._config.token}",
		}

		with log_timing("SmsApiClient._get", endpoint=endpoint, params=params):
			try:
				resp = self._session.get(
					url,
					params=params,
					headers=headers,
					timeout=self._config.timeout_s,
					verify=self._config.verify_ssl,
				)
			except requests.Timeout as ex:
				self._log.warning(f"[_get] - timeout - url={url} err={ex!r}")
				raise SmsApiError(TIMEOUT_ERROR, is_network_error=True) from ex
			except requests.ConnectionError as ex:
				self._log.warning(f"[_get] - connection_failed - url={url} err={ex!r}")
				raise SmsApiError(CONNECTION_ERROR, is_network_error=True) from ex
			except requests.RequestException as ex:
				self._log.warning(f"[_get] - request_failed - url={url} err={ex!r}")
				raise SmsApiError(GENERIC_ERROR) from ex

			try:
				body = resp.json()
			except ValueError as ex:
				self._log.warning(f"[_get] - invalid_json - url={url} status={resp.status_code}")
				raise SmsApiError(GENERIC_ERROR, status_code=resp.status_code) from ex

		if not isinstance(body, Mapping):
			raise SmsApiError(GENERIC_ERROR, status_code=resp.status_code)

		message = str(body.get("message") or "").strip()
		if not resp.ok:
			self._log.warning(f"[_get] - http_error - url={url} status={resp.status_code} message={message!r}")
			raise SmsApiError(message or GENERIC_ERROR, status_code=resp.status_code)

		ok = body.get("success", body.get("status", True))
		if ok is False:
			raise SmsApiError(message or GENERIC_ERROR, status_code=resp.status_code)

		data = body.get("data")
		if data is None:
			raise SmsApiError(message or GENERIC_ERROR, status_code=resp.status_code)
		return data

	# ------------------------------------------------------------------ sent sms

	def get_sent_page_data(self) -> ScreenOptions:
		data = self._get("sent-sms")
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)
		return ScreenOptions(
			options={
				"route": _options(data.get("route_options")),
				"delivery_status": _options(data.get("delivery_options")),
			},
			default_range=_parse_range(data.get("default_start_date"), data.get("default_end_date")),
		)

	def get_sent_messages(self, filters: FilterSet, page: int, per_page: int) -> Page:
		params: Dict[str, Any] = {"page": page, "per_page": per_page}
		params.update(filters.to_query_params())
		data = self._get("sent-sms/messages", params)
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)
		return _page_from(data, page, MessageRecord.from_sent)

	async def fetch_sent_page(self, filters: FilterSet, page: int, per_page: int) -> Page:
		return await asyncio.to_thread(self.get_sent_messages, filters, page, per_page)

	def get_sent_message_details(self, table_name: str, message_id: str) -> MessageDetails:
		# sent ids are only unique within their partition table
		if not table_name:
			raise SmsApiError(GENERIC_ERROR)
		data = self._get(f"sent-sms/{table_name}/{message_id}")
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)
		return MessageDetails.from_sent(data, (table_name, str(message_id)))

	# ------------------------------------------------------------------ received sms

	def get_received_page_data(self) -> ScreenOptions:
		data = self._get("received-sms")
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)

		keyword_options = [FilterOption("all", "All Messages")]
		for entry in data.get("filter_options") or []:
			if not isinstance(entry, Mapping) or entry.get("id") is None:
				continue
			value = str(entry.get("id"))
			if value == "all":
				continue
			label = entry.get("display_name") or entry.get("keyword") or entry.get("number") or value
			keyword_options.append(FilterOption(value=value, label=str(label)))

		return ScreenOptions(options={"filter": tuple(keyword_options)})

	def get_received_messages(self, filters: FilterSet, page: int, per_page: int) -> Page:
		params: Dict[str, Any] = {"page": page, "per_page": per_page}
		params.update(filters.to_query_params())
		data = self._get("received-sms/messages", params)
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)
		return _page_from(data, page, MessageRecord.from_received)

	async def fetch_received_page(self, filters: FilterSet, page: int, per_page: int) -> Page:
		return await asyncio.to_thread(self.get_received_messages, filters, page, per_page)

	def get_received_message_details(self, message_id: str) -> MessageDetails:
		data = self._get(f"received-sms/{message_id}")
		if not isinstance(data, Mapping):
			raise SmsApiError(GENERIC_ERROR)
		return MessageDetails.from_received(data, (RECEIVED_SMS_TABLE, str(message_id)))
