from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from services.calendar_range import StrEnum


RECEIVED_SMS_TABLE = "received_sms"


class StatusCode(StrEnum):
	DELIVERED = "delivered"
	PENDING = "pending"
	FAILED = "failed"
	SCHEDULED = "scheduled"
	UNKNOWN = "unknown"

	@classmethod
	def parse(cls, raw: Any) -> "StatusCode":
		try:
			return cls(str(raw or "").strip().lower())
		except ValueError:
			return cls.UNKNOWN


STATUS_COLORS: dict[StatusCode, str] = {
	StatusCode.DELIVERED: "#16a34a",
	StatusCode.PENDING: "#f59e0b",
	StatusCode.FAILED: "#dc2626",
	StatusCode.SCHEDULED: "#0891b2",
	StatusCode.UNKNOWN: "#64748b",
}

# material icon names
STATUS_ICONS: dict[StatusCode, str] = {
	StatusCode.DELIVERED: "check_circle",
	StatusCode.PENDING: "schedule",
	StatusCode.FAILED: "cancel",
	StatusCode.SCHEDULED: "event",
	StatusCode.UNKNOWN: "help",
}


def status_color(code: StatusCode | str) -> str:
	return STATUS_COLORS[StatusCode.parse(code)]


def status_icon(code: StatusCode | str) -> str:
	return STATUS_ICONS[StatusCode.parse(code)]


RecordKey = tuple[str, str]


@dataclass(frozen=True)
class MessageRecord:
	"""One row of a message list. Identity is (source_table, id); ids repeat across partitions."""

	source_table: str
	id: str
	mobile: str = ""
	preview: str = ""
	body: str = ""
	timestamp: str = ""
	status: str = ""
	status_code: StatusCode = StatusCode.UNKNOWN
	originator: str = ""
	extra: Mapping[str, Any] | None = field(default=None, compare=False, hash=False)

	@property
	def key(self) -> RecordKey:
		return (self.source_table, self.id)

	@classmethod
	def from_sent(cls, raw: Mapping[str, Any]) -> "MessageRecord":
		return cls(
			source_table=str(raw.get("table_name") or ""),
			id=str(raw.get("id")),
			mobile=str(raw.get("mobile") or ""),
			preview=str(raw.get("message_preview") or ""),
			body=str(raw.get("message_full") or raw.get("message_preview") or ""),
			timestamp=str(raw.get("sent_time") or ""),
			status=str(raw.get("status") or ""),
			status_code=StatusCode.parse(raw.get("status_code")),
			originator=str(raw.get("originator") or ""),
			extra={"initiator": raw.get("initiator"), "sent_time_raw": raw.get("sent_time_raw")},
		)

	@classmethod
	def from_received(cls, raw: Mapping[str, Any]) -> "MessageRecord":
		return cls(
			source_table=RECEIVED_SMS_TABLE,
			id=str(raw.get("id")),
			mobile=str(raw.get("sender") or ""),
			preview=str(raw.get("message_preview") or ""),
			body=str(raw.get("message") or raw.get("message_preview") or ""),
			timestamp=str(raw.get("received_at") or ""),
			status=str(raw.get("keyword") or ""),
			originator=str(raw.get("received_to") or ""),
			extra={"network": raw.get("network"), "msisdn_alias": raw.get("msisdn_alias")},
		)


def _detail_fields(raw: Mapping[str, Any], labels: tuple[tuple[str, str], ...]) -> tuple[tuple[str, str], ...]:
	out = []
	for key, label in labels:
		value = raw.get(key)
		if value is None or str(value).strip() == "":
			continue
		out.append((label, str(value)))
	return tuple(out)


_SENT_DETAIL_LABELS = (
	("sender", "Sender"),
	("sent_to", "Sent To"),
	("sent_by", "Sent By"),
	("date_submitted", "Date Submitted"),
	("send_at_time", "Scheduled For"),
	("sent_at_time", "Sent At"),
	("delivery_time", "Delivered At"),
	("delivery_status", "Delivery Status"),
	("message_status", "Message Status"),
	("num_parts", "Parts"),
	("country_code", "Country Code"),
	("recipient_cost", "Recipient Cost"),
	("cost_to_you", "Cost To You"),
)

_RECEIVED_DETAIL_LABELS = (
	("sender", "From"),
	("received_to", "To"),
	("received_at_formatted", "Received"),
	("keyword", "Keyword"),
	("network", "Network"),
	("msisdn_alias", "Alias"),
)


@dataclass(frozen=True)
class MessageDetails:
	"""Full message from the details endpoints. `fields` are (label, value) pairs in display order."""

	key: RecordKey
	body: str = ""
	fields: tuple[tuple[str, str], ...] = ()

	@classmethod
	def from_sent(cls, raw: Mapping[str, Any], key: RecordKey) -> "MessageDetails":
		return cls(key=key, body=str(raw.get("message") or ""), fields=_detail_fields(raw, _SENT_DETAIL_LABELS))

	@classmethod
	def from_received(cls, raw: Mapping[str, Any], key: RecordKey) -> "MessageDetails":
		fields = _detail_fields(raw, _RECEIVED_DETAIL_LABELS)
		if not any(label == "Received" for label, _ in fields) and raw.get("received_at"):
			fields += (("Received", str(raw.get("received_at"))),)

		auto = raw.get("auto_response")
		if isinstance(auto, Mapping):
			if auto.get("sent"):
				reply = str(auto.get("message") or "")
				if auto.get("sent_at"):
					reply = f"{reply} ({auto.get('sent_at')})".strip()
				fields += (("Auto Response", reply or "Sent"),)
			else:
				fields += (("Auto Response", "Not sent"),)
		return cls(key=key, body=str(raw.get("message") or ""), fields=fields)
