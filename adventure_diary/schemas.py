"""Request body schemas.

One schema per entity, every field optional. The same class serves three
purposes:

  create / PUT   Schema.model_validate(body, context={'create': True})
                 -> required fields must be present and non-null
  PATCH          Schema.model_validate(body)
                 -> required fields may be absent but not explicitly null

changes() returns only the keys the client actually sent, so a PATCH that
omits a field leaves the column alone while an explicit null clears it.
Field names match model attribute names (class_ is sent as "class").
"""

from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, model_validator


class EntitySchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    # Columns that may never be NULL from the API's point of view
    required_fields: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='after')
    def _check_required(self, info: ValidationInfo):
        creating = bool(info.context and info.context.get('create'))
        for name in self.required_fields:
            if getattr(self, name) is not None:
                continue
            if creating:
                raise ValueError(f'{name} is required')
            if name in self.model_fields_set:
                raise ValueError(f'{name} may not be null')
        return self

    def changes(self):
        """Field values the client supplied, keyed by model attribute name."""
        return self.model_dump(exclude_unset=True)


class AdventureSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('title',)

    slug: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class SessionSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('title', 'date')

    adventure_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    date: Optional[str] = Field(default=None, min_length=1)
    text: Optional[str] = None


class CharacterSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('name',)

    adventure_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    character_type: Optional[str] = Field(default=None, pattern=r'^(pc|npc|monster)$')
    race: Optional[str] = None
    class_: Optional[str] = Field(default=None, alias='class')
    level: Optional[int] = Field(default=None, ge=1, le=20)
    background: Optional[str] = None
    alignment: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    classes: Optional[List[Dict[str, Any]]] = None
    items: Optional[List[Any]] = None

    strength: Optional[int] = Field(default=None, ge=1, le=30)
    dexterity: Optional[int] = Field(default=None, ge=1, le=30)
    constitution: Optional[int] = Field(default=None, ge=1, le=30)
    intelligence: Optional[int] = Field(default=None, ge=1, le=30)
    wisdom: Optional[int] = Field(default=None, ge=1, le=30)
    charisma: Optional[int] = Field(default=None, ge=1, le=30)

    hit_points: Optional[int] = None
    max_hit_points: Optional[int] = Field(default=None, ge=0)
    armor_class: Optional[int] = Field(default=None, ge=0)
    initiative: Optional[int] = None
    speed: Optional[int] = Field(default=None, ge=0)
    proficiency_bonus: Optional[int] = None

    saving_throws: Optional[Dict[str, Any]] = None
    skills: Optional[Dict[str, Any]] = None
    equipment: Optional[List[Any]] = None
    weapons: Optional[List[Any]] = None
    spells: Optional[List[Any]] = None
    spellcasting_ability: Optional[str] = None
    spell_save_dc: Optional[int] = None
    spell_attack_bonus: Optional[int] = None

    personality_traits: Optional[List[str]] = None
    ideals: Optional[List[str]] = None
    bonds: Optional[List[str]] = None
    flaws: Optional[List[str]] = None
    backstory: Optional[str] = None


class NPCSchema(EntitySchema):
    """The narrow shape the legacy /api/npcs endpoints accept."""
    required_fields: ClassVar[Tuple[str, ...]] = ('name',)

    adventure_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class LocationSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('name',)

    adventure_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class GlobalNoteSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('title',)

    title: Optional[str] = Field(default=None, min_length=1)
    text: Optional[str] = None


class MagicItemSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('name',)

    name: Optional[str] = Field(default=None, min_length=1)
    rarity: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    attunement_required: Optional[bool] = None


class QuestSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('title',)

    adventure_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, pattern=r'^(active|completed|failed|on_hold)$')
    priority: Optional[str] = Field(default=None, pattern=r'^(low|medium|high)$')
    type: Optional[str] = None
    due_date: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None


class QuestObjectiveSchema(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('description',)

    description: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None


class AssignmentSchema(BaseModel):
    """Body of POST /api/magic-items/<id>/assign and /unassign.

    Either a single character_id (older clients send characterId) or a list
    of character_ids for a bulk assignment.
    """
    character_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices('character_id', 'characterId'))
    character_ids: List[int] = Field(default_factory=list)
    equipped: bool = False

    @model_validator(mode='after')
    def _needs_a_character(self):
        if self.character_id is None and not self.character_ids:
            raise ValueError('character_id or character_ids is required')
        return self

    def all_character_ids(self):
        ids = list(self.character_ids)
        if self.character_id is not None:
            ids.insert(0, self.character_id)
        # keep order, drop repeats
        return list(dict.fromkeys(ids))


# --- Import payload ------------------------------------------------------
# Records carry their original ids (and timestamps) so references between
# tables survive an export/import round trip.

class AdventureRecord(AdventureSchema):
    id: Optional[int] = None


class SessionRecord(SessionSchema):
    id: Optional[int] = None


class CharacterRecord(CharacterSchema):
    id: Optional[int] = None


class LocationRecord(LocationSchema):
    id: Optional[int] = None


class GlobalNoteRecord(GlobalNoteSchema):
    id: Optional[int] = None
    created_at: Optional[str] = None


class MagicItemRecord(MagicItemSchema):
    id: Optional[int] = None


class CharacterMagicItemRecord(EntitySchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('character_id', 'magic_item_id')

    id: Optional[int] = None
    character_id: Optional[int] = None
    magic_item_id: Optional[int] = None
    equipped: Optional[bool] = None
    created_at: Optional[str] = None


class QuestRecord(QuestSchema):
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class QuestObjectiveRecord(QuestObjectiveSchema):
    required_fields: ClassVar[Tuple[str, ...]] = ('quest_id', 'description')

    id: Optional[int] = None
    quest_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DatasetSchema(BaseModel):
    """Everything GET /api/export produces. Missing keys mean empty tables.
    `npcs` is what exports from before the characters merge called them."""
    adventures: List[AdventureRecord] = Field(default_factory=list)
    sessions: List[SessionRecord] = Field(default_factory=list)
    characters: List[CharacterRecord] = Field(default_factory=list)
    npcs: List[CharacterRecord] = Field(default_factory=list)
    locations: List[LocationRecord] = Field(default_factory=list)
    global_notes: List[GlobalNoteRecord] = Field(default_factory=list)
    magic_items: List[MagicItemRecord] = Field(default_factory=list)
    character_magic_items: List[CharacterMagicItemRecord] = Field(default_factory=list)
    quests: List[QuestRecord] = Field(default_factory=list)
    quest_objectives: List[QuestObjectiveRecord] = Field(default_factory=list)
