import re

TOP_AMENITY_COUNT = 3

DEFAULT_AMENITIES = ("Wi-Fi", "Air Conditioning", "Private Bathroom")

# Ordering used when there is no query to match against
PRIORITY_KEYWORDS = (
    "wifi",
    "pool",
    "gym",
    "spa",
    "restaurant",
    "bar",
    "parking",
    "breakfast",
    "concierge",
    "business center",
    "meeting room",
    "air conditioning",
    "balcony",
    "room service",
)

# intent -> (query trigger words, amenity keywords)
INTENT_KEYWORDS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "business": (
        ("business", "work", "meeting", "conference", "corporate", "office"),
        ("business", "meeting", "conference", "wifi", "desk", "workspace", "printer"),
    ),
    "romance": (
        ("romantic", "romance", "honeymoon", "couple", "anniversary"),
        ("spa", "balcony", "room service", "jacuzzi", "hot tub", "bar", "view", "champagne"),
    ),
    "family": (
        ("family", "kids", "children", "child", "baby"),
        ("family", "kid", "children", "child", "playground", "babysitting", "crib", "pool", "kitchen"),
    ),
    "wellness": (
        ("wellness", "spa", "relax", "fitness", "gym", "yoga", "massage"),
        ("spa", "gym", "fitness", "sauna", "massage", "yoga", "wellness", "steam", "pool"),
    ),
    "outdoors": (
        ("beach", "nature", "outdoor", "hiking", "ocean", "sea"),
        ("beach", "garden", "terrace", "pool", "bicycle", "bike", "hiking"),
    ),
    "dining": (
        ("food", "dining", "restaurant", "breakfast", "foodie", "eat"),
        ("restaurant", "breakfast", "bar", "dining", "kitchen", "cafe", "room service"),
    ),
    "accessibility": (
        ("accessible", "wheelchair", "disability", "elderly"),
        ("accessible", "wheelchair", "elevator", "lift"),
    ),
}

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def _squash(text: str) -> str:
    """Lowercase and drop separators so 'Wi-Fi' matches 'wifi'."""
    return _NON_ALNUM_RE.sub("", text.lower())


def parse_amenities(amenities: list[str] | str | None) -> list[str]:
    """Split amenity text into unique names, keeping their original order."""
    if not amenities:
        return []
    if isinstance(amenities, str):
        amenities = [amenities]

    names: list[str] = []
    seen: set[str] = set()
    for entry in amenities:
        if not isinstance(entry, str):
            continue
        for part in entry.split(","):
            name = part.strip()
            key = _squash(name)
            if name and key not in seen:
                seen.add(key)
                names.append(name)
    return names


def detect_intents(user_query: str | None) -> list[str]:
    if not user_query:
        return []
    words = set(re.findall(r"[a-z]+", user_query.lower()))
    return [
        intent
        for intent, (triggers, _) in INTENT_KEYWORDS.items()
        if words.intersection(triggers)
    ]


def _query_score(amenity: str, intents: list[str], query_words: set[str]) -> int:
    key = _squash(amenity)
    score = 0
    for intent in intents:
        score += 2 * sum(1 for kw in INTENT_KEYWORDS[intent][1] if _squash(kw) in key)
    score += 3 * sum(1 for w in query_words if w in key)
    return score


def _priority_pick(names: list[str], taken: list[str], count: int) -> list[str]:
    picked: list[str] = []
    for keyword in PRIORITY_KEYWORDS:
        if len(picked) >= count:
            break
        needle = _squash(keyword)
        for name in names:
            if name not in taken and name not in picked and needle in _squash(name):
                picked.append(name)
                break
    return picked


def select_amenities(
    amenities: list[str] | str | None,
    user_query: str | None = None,
    count: int = TOP_AMENITY_COUNT,
) -> list[str]:
    """Pick ``count`` amenities from the hotel's own list.

    With a query, amenities matching its intents or words rank first. Empty
    slots are filled by the general priority ordering, then by list
    position, then by DEFAULT_AMENITIES when the hotel lists too few.
    """
    names = parse_amenities(amenities)
    selected: list[str] = []

    if user_query and user_query.strip():
        intents = detect_intents(user_query)
        query_words = {w for w in re.findall(r"[a-z]+", user_query.lower()) if len(w) > 3}
        scored = [(_query_score(n, intents, query_words), i, n) for i, n in enumerate(names)]
        ranked = sorted((s for s in scored if s[0] > 0), key=lambda s: (-s[0], s[1]))
        selected = [n for _, _, n in ranked[:count]]

    if len(selected) < count:
        selected += _priority_pick(names, selected, count - len(selected))

    for name in names:
        if len(selected) >= count:
            break
        if name not in selected:
            selected.append(name)

    for default in DEFAULT_AMENITIES:
        if len(selected) >= count:
            break
        if _squash(default) not in {_squash(s) for s in selected}:
            selected.append(default)

    return selected[:count]


def match_hotel_amenities(proposed: list[str] | None, amenities: list[str] | str | None) -> list[str]:
    """Keep only proposed names that exist in the hotel's list, using its spelling."""
    if not proposed:
        return []
    by_key = {_squash(name): name for name in parse_amenities(amenities)}
    matched: list[str] = []
    for name in proposed:
        if not isinstance(name, str):
            continue
        original = by_key.get(_squash(name))
        if original and original not in matched:
            matched.append(original)
    return matched
