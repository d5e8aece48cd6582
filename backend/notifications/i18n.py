"""Per-recipient notification text. English and Icelandic; Icelandic is the default."""

from typing import Optional

DEFAULT_LANG = "is"

TEXT = {
    "en": {
        "story_class": ("New story", "{author} shared a new story for {class_name}: {title}"),
        "story_org": ("New story", "{author} shared a new story: {title}"),
        "announcement_class": ("New announcement", "{class_name}: {title}"),
        "announcement_org": ("New announcement", "{title}"),
    },
    "is": {
        "story_class": ("Ný saga", "{author} deildi nýrri sögu fyrir {class_name}: {title}"),
        "story_org": ("Ný saga", "{author} deildi nýrri sögu: {title}"),
        "announcement_class": ("Ný tilkynning", "{class_name}: {title}"),
        "announcement_org": ("Ný tilkynning", "{title}"),
    },
}


def choose_language(user_pref: Optional[str], fallback: Optional[str] = None) -> str:
    for cand in (user_pref, fallback, DEFAULT_LANG):
        if not cand:
            continue
        c = cand.lower()
        if c.startswith("en"): return "en"
        if c.startswith("is"): return "is"
    return DEFAULT_LANG


class _Blank(dict):
    def __missing__(self, key):
        return ""


def render(kind: str, lang: str, **context) -> tuple[str, str]:
    mapping = TEXT.get(lang) or TEXT[DEFAULT_LANG]
    title, body = mapping[kind]
    return title, body.format_map(_Blank(context)).strip()
