"""bankengine.snapshot

Helpers for exporting and importing a saved game.

A snapshot is JSON-serializable so it can be autosaved, exported and
imported later. Field names inside gameState/history/news are the
persistence contract (camelCase).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from bankcore.state import (
    GameState,
    HistoryEntry,
    NewsEvent,
    history_from_mapping,
    history_to_dict,
    news_from_mapping,
    news_to_dict,
    state_from_mapping,
    state_to_dict,
)

SNAPSHOT_VERSION = 1


def make_snapshot(state: GameState, history: Sequence[HistoryEntry], news: Sequence[NewsEvent]) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "gameState": state_to_dict(state),
        "history": [history_to_dict(h) for h in history],
        "news": [news_to_dict(n) for n in news],
    }


def dumps_snapshot(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)


def parse_snapshot(obj: Any) -> Tuple[GameState, List[HistoryEntry], List[NewsEvent]]:
    """Decode a snapshot (JSON text or already-parsed mapping).

    Raises ValueError on anything that is not a well-formed snapshot.
    """
    if isinstance(obj, (str, bytes, bytearray)):
        try:
            obj = json.loads(obj)
        except json.JSONDecodeError as e:
            raise ValueError(f"snapshot is not valid JSON: {e}") from e
    if not isinstance(obj, Mapping):
        raise ValueError("snapshot must be a JSON object")

    raw_state = obj.get("gameState")
    if not isinstance(raw_state, Mapping):
        raise ValueError("snapshot has no gameState")
    version = obj.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    try:
        state = state_from_mapping(raw_state)
        history = [history_from_mapping(h) for h in (obj.get("history") or [])]
        news = [news_from_mapping(n) for n in (obj.get("news") or [])]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"malformed snapshot: {e}") from e
    return state, history, news
