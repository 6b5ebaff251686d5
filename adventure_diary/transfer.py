"""Whole-dataset export and import.

export_dataset() dumps every table as a list of row dicts (JSON columns
decoded). import_dataset() is its inverse: it empties every table and
inserts the payload's rows with their original ids, all in the caller's
session transaction. Nothing is committed until every row has been added,
so a bad payload leaves the database as it was.
"""

import logging

from adventure_diary import db
from adventure_diary.models import (Adventure, Character, CharacterMagicItem, GlobalNote,
                                    Location, MagicItem, Quest, QuestObjective, Session)
from adventure_diary.schemas import DatasetSchema

logger = logging.getLogger(__name__)

# Parents before children; deletes walk this list backwards
TABLES = [
    ('adventures', Adventure),
    ('sessions', Session),
    ('characters', Character),
    ('locations', Location),
    ('global_notes', GlobalNote),
    ('magic_items', MagicItem),
    ('character_magic_items', CharacterMagicItem),
    ('quests', Quest),
    ('quest_objectives', QuestObjective),
]


def export_dataset():
    payload = {}
    for key, model in TABLES:
        rows = model.query.order_by(model.id).all()
        payload[key] = [row.to_dict() for row in rows]
    return payload


def _add_legacy_npcs(dataset):
    """Older exports carried NPCs as their own list. Their ids came from a
    separate sequence, so an NPC keeps its id only when no character has it."""
    taken = {c.id for c in dataset.characters if c.id is not None}
    renumbered = []
    for record in dataset.npcs:
        fields = record.model_dump(exclude_unset=True)
        fields.setdefault('character_type', 'npc')
        if fields.get('id') is None or fields['id'] in taken:
            fields.pop('id', None)
            renumbered.append(fields)
        else:
            db.session.add(Character(**fields))
    # Rows that keep their id go in first so fresh ids can't land on them
    db.session.flush()
    for fields in renumbered:
        db.session.add(Character(**fields))
    return len(dataset.npcs)


def import_dataset(data):
    """Replace every table with the rows in data (a dict shaped like export_dataset()).

    Raises pydantic.ValidationError for a malformed payload before anything
    is touched. Database errors propagate with the session left dirty; the
    caller rolls back. Returns {table: rows inserted}.
    """
    dataset = DatasetSchema.model_validate(data, context={'create': True})

    for _, model in reversed(TABLES):
        db.session.execute(db.delete(model))

    counts = {}
    for key, model in TABLES:
        records = getattr(dataset, key)
        for record in records:
            db.session.add(model(**record.model_dump(exclude_unset=True)))
        counts[key] = len(records)
        if key == 'characters':
            counts[key] += _add_legacy_npcs(dataset)
        # Flush per table so children see their parents' rows
        db.session.flush()

    db.session.commit()
    logger.info('Imported dataset: %s', ', '.join(f'{k}={v}' for k, v in counts.items()))
    return counts
