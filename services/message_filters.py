from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from services.calendar_range import DateRange


class IncompleteFilterSetError(ValueError):
	pass


@dataclass(frozen=True)
class FilterOption:
	value: str
	label: str


@dataclass(frozen=True)
class FilterField:
	key: str
	label: str
	default: str = ""
	# empty -> free text input
	options: tuple[FilterOption, ...] = ()

	@property
	def is_free_text(self) -> bool:
		return not self.options


@dataclass(frozen=True)
class FilterSet:
	"""Named filter values plus the date range. Immutable; edit via with_value()/with_date_range()."""

	date_range: DateRange
	values: Mapping[str, str] = field(default_factory=dict)

	def __post_init__(self) -> None:
		object.__setattr__(self, "values", MappingProxyType({str(k): str(v) for k, v in dict(self.values).items()}))

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, FilterSet):
			return NotImplemented
		return self.date_range == other.date_range and dict(self.values) == dict(other.values)

	def __hash__(self) -> int:
		return hash((self.date_range, tuple(sorted(self.values.items()))))

	def get(self, key: str, default: str = "") -> str:
		return self.values.get(key, default)

	def keys(self) -> frozenset[str]:
		return frozenset(self.values.keys())

	def with_value(self, key: str, value: Any) -> "FilterSet":
		if key not in self.values:
			raise KeyError(f"unknown filter key: {key}")
		updated = dict(self.values)
		updated[key] = "" if value is None else str(value)
		return replace(self, values=updated)

	def with_date_range(self, rng: DateRange) -> "FilterSet":
		return replace(self, date_range=rng)

	def to_query_params(self) -> dict[str, str]:
		params = {k: v.strip() for k, v in self.values.items() if v and v.strip()}
		params["start_date"] = self.date_range.start.iso()
		params["end_date"] = self.date_range.end.iso()
		return params


@dataclass(frozen=True)
class FilterSchema:
	"""Which filter keys a screen has, their defaults, and their choice lists."""

	fields: tuple[FilterField, ...]

	@property
	def keys(self) -> frozenset[str]:
		return frozenset(f.key for f in self.fields)

	def field(self, key: str) -> FilterField:
		for f in self.fields:
			if f.key == key:
				return f
		raise KeyError(f"unknown filter key: {key}")

	def defaults(self, date_range: DateRange) -> FilterSet:
		return FilterSet(date_range=date_range, values={f.key: f.default for f in self.fields})

	def with_options(self, key: str, options: Iterable[FilterOption]) -> "FilterSchema":
		opts = tuple(options)
		return FilterSchema(fields=tuple(replace(f, options=opts) if f.key == key else f for f in self.fields))

	def validate(self, filters: FilterSet) -> FilterSet:
		missing = self.keys - filters.keys()
		unknown = filters.keys() - self.keys
		if missing or unknown:
			raise IncompleteFilterSetError(
				f"filter set does not match schema: missing={sorted(missing)} unknown={sorted(unknown)}"
			)
		return filters

	def active_keys(self, filters: FilterSet) -> list[str]:
		"""Non-date fields that differ from their default (drives the filter badge)."""
		return [f.key for f in self.fields if filters.get(f.key, f.default) != f.default]


SENT_SMS_SCHEMA = FilterSchema(
	fields=(
		FilterField(
			key="route",
			label="Routes",
			default="all",
			options=(
				FilterOption("all", "All Routes"),
				FilterOption("standard", "Standard Routes"),
				FilterOption("premium", "Premium Routes"),
			),
		),
		FilterField(
			key="delivery_status",
			label="Delivery Status",
			default="all",
			options=(
				FilterOption("all", "All Messages"),
				FilterOption("delivered", "Delivered"),
				FilterOption("failed", "Failed"),
				FilterOption("pending", "Pending"),
				FilterOption("scheduled", "Scheduled"),
			),
		),
		FilterField(key="mobile", label="Mobile Number"),
	)
)

RECEIVED_SMS_SCHEMA = FilterSchema(
	fields=(
		FilterField(
			key="filter",
			label="Keyword / Number",
			default="all",
			options=(FilterOption("all", "All Messages"),),
		),
		FilterField(key="search", label="Search"),
	)
)
