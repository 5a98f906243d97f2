"""
Sequence diagram parsing and layout.

Actors get evenly spaced vertical lanes in order of declaration; messages
stack downward in text order.
"""

import logging
import re
from typing import Iterator, List, NamedTuple, Optional, Union

from .models import LineStyle, SequenceActor, SequenceDiagram, SequenceMessage

logger = logging.getLogger(__name__)

FIRST_LANE_X = 120.0
LANE_WIDTH = 180.0
FIRST_MESSAGE_Y = 100.0
MESSAGE_STEP = 60.0
BOTTOM_MARGIN = 80.0
VIEW_WIDTH_PER_ACTOR = 200.0
VIEW_MARGIN = 100.0

PARTICIPANT_RE = re.compile(
    r"^\s*(?:participant|actor)\s+(\w+)(?:\s+as\s+(.+))?", re.IGNORECASE
)
MESSAGE_RE = re.compile(r"(\w+)\s*(--?>>?)\s*(\w+)\s*:\s*(.+)")


class ParticipantFact(NamedTuple):
    id: str
    name: str


class MessageFact(NamedTuple):
    source: str
    target: str
    text: str
    dashed: bool


Fact = Union[ParticipantFact, MessageFact]


def classify_line(line: str) -> Optional[Fact]:
    """Turn one line into a participant or message fact, or None."""
    match = PARTICIPANT_RE.match(line)
    if match:
        actor_id = match.group(1)
        name = (match.group(2) or "").strip() or actor_id
        return ParticipantFact(actor_id, name)

    match = MESSAGE_RE.search(line)
    if match:
        source, arrow, target, text = match.groups()
        return MessageFact(source, target, text.strip(), "--" in arrow)

    return None


def iter_facts(diagram: str) -> Iterator[Fact]:
    for line in diagram.split("\n"):
        fact = classify_line(line)
        if fact is not None:
            yield fact


def layout_sequence(diagram: str) -> SequenceDiagram:
    """
    Parse a sequence diagram and assign lanes and message rows.

    All participant declarations are collected before messages are placed,
    so a message may refer to an actor declared further down. Messages
    between unknown actors are dropped.
    """
    facts = list(iter_facts(diagram))

    actors: List[SequenceActor] = []
    lane_of = {}
    for fact in facts:
        if isinstance(fact, ParticipantFact) and fact.id not in lane_of:
            lane_of[fact.id] = len(actors)
            x = FIRST_LANE_X + LANE_WIDTH * len(actors)
            actors.append(SequenceActor(id=fact.id, name=fact.name, x=x))

    messages: List[SequenceMessage] = []
    y = FIRST_MESSAGE_Y
    for fact in facts:
        if not isinstance(fact, MessageFact):
            continue
        if fact.source not in lane_of or fact.target not in lane_of:
            logger.debug("Dropping message %s -> %s", fact.source, fact.target)
            continue
        messages.append(
            SequenceMessage(
                source=lane_of[fact.source],
                target=lane_of[fact.target],
                text=fact.text,
                y=y,
                style=LineStyle.DASHED if fact.dashed else LineStyle.SOLID,
            )
        )
        y += MESSAGE_STEP

    logger.debug("Sequence actors: %s", actors)
    logger.debug("Sequence messages: %s", messages)

    return SequenceDiagram(
        actors=tuple(actors),
        messages=tuple(messages),
        width=len(actors) * VIEW_WIDTH_PER_ACTOR + VIEW_MARGIN,
        height=y + BOTTOM_MARGIN,
    )
