import json
import logging
from datetime import datetime, timezone

from sqlalchemy import inspect
from sqlalchemy.types import Text, TypeDecorator

from adventure_diary import db

logger = logging.getLogger(__name__)


def utc_timestamp():
    """Current UTC time in SQLite's CURRENT_TIMESTAMP format.

    Timestamps are TEXT columns (older databases were written that way), so
    rows inserted by the app and rows defaulted by SQLite look the same.
    """
    return datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')


class JSONText(TypeDecorator):
    """A TEXT column holding JSON.

    Writes json.dumps(value) (None stays NULL). Reads decode back to Python;
    text that isn't valid JSON, or decodes to the wrong shape, comes back as
    an empty list/dict instead of raising, so one bad row can't take down a
    whole listing.

    empty is list or dict, the shape this column is supposed to hold.
    null_as_empty makes NULL read as the empty value too (used for tags,
    which clients always expect as a list).
    """
    impl = Text
    cache_ok = True

    def __init__(self, empty=list, null_as_empty=False):
        super().__init__()
        self.empty = empty
        self.null_as_empty = null_as_empty

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return self.empty() if self.null_as_empty else None
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            logger.warning('Unreadable JSON column value %.60r; using empty %s',
                           value, self.empty.__name__)
            return self.empty()
        if not isinstance(decoded, self.empty):
            logger.warning('JSON column value %.60r is not a %s; using empty',
                           value, self.empty.__name__)
            return self.empty()
        return decoded


class SerializerMixin:
    """to_dict() keyed by column name, in column order. Same shape as a
    `SELECT *` returns, with JSON columns already decoded."""

    def to_dict(self):
        data = {}
        for attr in inspect(self).mapper.column_attrs:
            data[attr.columns[0].name] = getattr(self, attr.key)
        return data


class Adventure(SerializerMixin, db.Model):
    __tablename__ = 'adventures'

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.Text, unique=True)
    title = db.Column(db.Text)
    description = db.Column(db.Text)

    def __repr__(self):
        return f'<Adventure {self.slug or self.id}>'


# Every adventure-scoped table uses this FK: deleting an adventure orphans
# its children (adventure_id -> NULL) instead of deleting them.
def adventure_fk():
    return db.Column(db.Integer, db.ForeignKey('adventures.id', ondelete='SET NULL'),
                     nullable=True)


def adventure_backref(name):
    # passive_deletes leaves the SET NULL to SQLite instead of loading children
    return db.backref(name, passive_deletes=True, lazy='dynamic')


class Session(SerializerMixin, db.Model):
    """One play session's log entry."""
    __tablename__ = 'sessions'

    id = db.Column(db.Integer, primary_key=True)
    adventure_id = adventure_fk()
    title = db.Column(db.Text)
    date = db.Column(db.Text)                   # "YYYY-MM-DD", stored as entered
    text = db.Column(db.Text)

    adventure = db.relationship('Adventure', backref=adventure_backref('sessions'))

    def __repr__(self):
        return f'<Session {self.title}>'


class Character(SerializerMixin, db.Model):
    """Player characters and NPCs share this table.

    Older databases kept NPCs in a separate `npcs` table with only
    name/role/description/tags; those columns are still here and the
    convergence steps copy old NPC rows in.
    """
    __tablename__ = 'characters'

    id = db.Column(db.Integer, primary_key=True)
    adventure_id = adventure_fk()
    name = db.Column(db.Text)
    role = db.Column(db.Text)                   # set for NPCs ("blacksmith", "villain")
    description = db.Column(db.Text)
    tags = db.Column(JSONText(list, null_as_empty=True))

    character_type = db.Column(db.Text, default='pc')   # pc / npc / monster
    race = db.Column(db.Text)
    class_ = db.Column('class', db.Text)
    level = db.Column(db.Integer, default=1)
    background = db.Column(db.Text)
    alignment = db.Column(db.Text)
    experience = db.Column(db.Integer, default=0)
    classes = db.Column(JSONText(list))         # multiclass: [{"name": ..., "level": ...}]
    items = db.Column(JSONText(list))

    # Ability scores
    strength = db.Column(db.Integer, default=10)
    dexterity = db.Column(db.Integer, default=10)
    constitution = db.Column(db.Integer, default=10)
    intelligence = db.Column(db.Integer, default=10)
    wisdom = db.Column(db.Integer, default=10)
    charisma = db.Column(db.Integer, default=10)

    # Combat stats
    hit_points = db.Column(db.Integer, default=0)
    max_hit_points = db.Column(db.Integer, default=0)
    armor_class = db.Column(db.Integer, default=10)
    initiative = db.Column(db.Integer, default=0)
    speed = db.Column(db.Integer, default=30)
    proficiency_bonus = db.Column(db.Integer, default=2)

    saving_throws = db.Column(JSONText(dict))
    skills = db.Column(JSONText(dict))
    equipment = db.Column(JSONText(list))
    weapons = db.Column(JSONText(list))
    spells = db.Column(JSONText(list))
    spellcasting_ability = db.Column(db.Text)
    spell_save_dc = db.Column(db.Integer)
    spell_attack_bonus = db.Column(db.Integer)

    personality_traits = db.Column(JSONText(list))
    ideals = db.Column(JSONText(list))
    bonds = db.Column(JSONText(list))
    flaws = db.Column(JSONText(list))
    backstory = db.Column(db.Text)

    adventure = db.relationship('Adventure', backref=adventure_backref('characters'))

    @classmethod
    def npc_clause(cls):
        """Rows the legacy /api/npcs endpoints treat as NPCs."""
        return db.or_(cls.character_type == 'npc',
                      db.func.length(db.func.trim(cls.role)) > 0)

    def __repr__(self):
        return f'<Character {self.name}>'


class Location(SerializerMixin, db.Model):
    __tablename__ = 'locations'

    id = db.Column(db.Integer, primary_key=True)
    adventure_id = adventure_fk()
    name = db.Column(db.Text)
    description = db.Column(db.Text)
    notes = db.Column(db.Text)
    tags = db.Column(JSONText(list, null_as_empty=True))

    adventure = db.relationship('Adventure', backref=adventure_backref('locations'))

    def __repr__(self):
        return f'<Location {self.name}>'


class GlobalNote(SerializerMixin, db.Model):
    """A note that isn't tied to any adventure."""
    __tablename__ = 'global_notes'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.Text)
    text = db.Column(db.Text)
    created_at = db.Column(db.Text, default=utc_timestamp)

    def __repr__(self):
        return f'<GlobalNote {self.title}>'


class MagicItem(SerializerMixin, db.Model):
    """Magic items are global; characters own them through character_magic_items."""
    __tablename__ = 'magic_items'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    rarity = db.Column(db.Text)                 # common / uncommon / rare / very rare / legendary / artifact
    type = db.Column(db.Text)                   # weapon / armor / wondrous item / ...
    description = db.Column(db.Text)
    properties = db.Column(JSONText(dict))
    attunement_required = db.Column(db.Boolean, default=False)

    @property
    def owners(self):
        return [link.character for link in self.owner_links]

    def __repr__(self):
        return f'<MagicItem {self.name}>'


class CharacterMagicItem(SerializerMixin, db.Model):
    """Ownership of a magic item by a character. One row per pair."""
    __tablename__ = 'character_magic_items'

    id = db.Column(db.Integer, primary_key=True)
    character_id = db.Column(db.Integer, db.ForeignKey('characters.id', ondelete='CASCADE'),
                             nullable=False)
    magic_item_id = db.Column(db.Integer, db.ForeignKey('magic_items.id', ondelete='CASCADE'),
                              nullable=False)
    equipped = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.Text, default=utc_timestamp)

    # Duplicate assignment attempts hit this and are ignored (ON CONFLICT DO NOTHING)
    __table_args__ = (db.UniqueConstraint('character_id', 'magic_item_id',
                                          name='uq_character_magic_item'),)

    character = db.relationship(
        'Character',
        backref=db.backref('magic_item_links', cascade='all, delete-orphan',
                           passive_deletes=True))
    magic_item = db.relationship(
        'MagicItem',
        backref=db.backref('owner_links', cascade='all, delete-orphan',
                           passive_deletes=True))

    def __repr__(self):
        return f'<CharacterMagicItem {self.character_id}:{self.magic_item_id}>'


class Quest(SerializerMixin, db.Model):
    __tablename__ = 'quests'

    id = db.Column(db.Integer, primary_key=True)
    adventure_id = adventure_fk()
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.Text, default='active')      # active / completed / failed / on_hold
    priority = db.Column(db.Text, default='medium')    # low / medium / high
    type = db.Column(db.Text, default='main')          # main / side / personal
    due_date = db.Column(db.Text)
    assigned_to = db.Column(db.Text)
    tags = db.Column(JSONText(list, null_as_empty=True))
    created_at = db.Column(db.Text, default=utc_timestamp)
    updated_at = db.Column(db.Text, default=utc_timestamp, onupdate=utc_timestamp)

    adventure = db.relationship('Adventure', backref=adventure_backref('quests'))
    # Objectives go with the quest; SQLite's ON DELETE CASCADE does the work
    objectives = db.relationship('QuestObjective', backref='quest',
                                 cascade='all, delete-orphan', passive_deletes=True,
                                 order_by='QuestObjective.id')

    def __repr__(self):
        return f'<Quest {self.title}>'


class QuestObjective(SerializerMixin, db.Model):
    __tablename__ = 'quest_objectives'

    id = db.Column(db.Integer, primary_key=True)
    quest_id = db.Column(db.Integer, db.ForeignKey('quests.id', ondelete='CASCADE'),
                         nullable=False)
    description = db.Column(db.Text, nullable=False)
    completed = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.Text, default=utc_timestamp)
    updated_at = db.Column(db.Text, default=utc_timestamp, onupdate=utc_timestamp)

    def __repr__(self):
        return f'<QuestObjective {self.id}>'
