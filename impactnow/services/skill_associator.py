"""
Maintain the event to skill join table.

Skill names that are not in the catalog are skipped instead of failing the
write. The outcome is returned as a ``SkillAssociation`` so callers can
report which names were dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from impactnow.models import EventSkill, Skill

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SkillAssociation:
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def normalize_skill_names(raw: Any) -> list[str] | None:
    """
    Coerce request input into a list of skill names.

    Returns ``None`` when the input does not describe a skill list at all,
    which update flows treat as "leave the existing skills alone".
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return None

    names: list[str] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, str):
            continue
        name = item.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names


def replace_event_skills(
    event_id: int,
    skill_names: Iterable[str],
    session: Session,
    *,
    clear_existing: bool = False,
) -> SkillAssociation:
    """
    Link ``event_id`` to every catalog skill named in ``skill_names``.

    Runs entirely on ``session`` so the caller's transaction covers the
    delete and every insert.
    """
    result = SkillAssociation()

    if clear_existing:
        session.execute(delete(EventSkill).where(EventSkill.event_id == event_id))

    for name in skill_names:
        skill_id = session.scalar(select(Skill.id).where(Skill.name == name))
        if skill_id is None:
            result.skipped.append(name)
            continue
        session.add(EventSkill(event_id=event_id, skill_id=skill_id))
        result.applied.append(name)

    session.flush()

    if result.skipped:
        logger.warning(
            "Event %s: skipped unknown skill names %s", event_id, ", ".join(result.skipped)
        )
    return result
