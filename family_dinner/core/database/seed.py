"""
Seed population for the topics table.

The seed runs when a database file is created (or recreated after a schema
mismatch), never on an ordinary reopen.
"""

from __future__ import annotations

from typing import List, Tuple

from .entities.topics import Topic

DEFAULT_TOPICS: Tuple[Tuple[str, str], ...] = (
    ("What was the best part of your day?", "Gratitude"),
    ("If you could have any superpower, what would it be?", "Creative"),
    ("What is one goal you want to achieve this week?", "Goals"),
    ("Tell us a funny joke!", "Random"),
)


def default_topics() -> List[Topic]:
    """Fresh, unsaved Topic rows for the seed list."""
    return [Topic(text=text, category=category) for text, category in DEFAULT_TOPICS]
