from typing import List, Optional


def normalize_option(option: Optional[str]) -> str:
    return (option or "").strip().upper()


def pin_last(items: List[str], pinned: str) -> List[str]:
    """Stable reorder that moves every occurrence of ``pinned`` to the end."""
    return [i for i in items if i != pinned] + [i for i in items if i == pinned]


def dedupe(items) -> list:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
