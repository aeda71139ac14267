from __future__ import annotations


BRAND_ORANGE = "#ea6118"

BUTTON_VARIANTS: dict[str, str] = {
	"primary": "color=primary text-color=white unelevated no-caps",
	"accent": "color=orange-9 text-color=white unelevated no-caps",
	"neutral": "outline color=secondary no-caps",
	"flat": "flat no-caps",
}


def button_props(variant: str = "primary") -> str:
	return BUTTON_VARIANTS.get(variant, BUTTON_VARIANTS["primary"])


def button_classes(full: bool = False) -> str:
	base = "h-[40px] px-4 rounded-xl font-semibold"
	return f"{base} w-full" if full else base


def card_classes() -> str:
	return "w-full p-3 rounded-xl border border-slate-200/60 shadow-sm"
