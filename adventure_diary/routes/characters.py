from flask import Blueprint, jsonify, request
from adventure_diary import db
from adventure_diary.crud import (adventure_arg, apply_changes, parse_new, parse_patch,
                                  replace_fields)
from adventure_diary.models import Character, CharacterMagicItem, MagicItem
from adventure_diary.schemas import CharacterSchema

characters_bp = Blueprint('characters', __name__, url_prefix='/api')


def _get_character(character_id):
    return Character.query.filter_by(id=character_id).first_or_404(
        description='Character not found')


def owned_magic_items(character):
    """The character's magic items, each with its equipped flag."""
    rows = (db.session.query(MagicItem, CharacterMagicItem.equipped)
            .join(CharacterMagicItem, CharacterMagicItem.magic_item_id == MagicItem.id)
            .filter(CharacterMagicItem.character_id == character.id)
            .order_by(MagicItem.name)
            .all())
    items = []
    for item, equipped in rows:
        data = item.to_dict()
        data['equipped'] = bool(equipped)
        items.append(data)
    return items


@characters_bp.route('/characters')
def list_characters():
    query = Character.query
    adventure_id = adventure_arg()
    if adventure_id is not None:
        query = query.filter_by(adventure_id=adventure_id)
    character_type = request.args.get('type', '').strip().lower() or None
    if character_type:
        query = query.filter_by(character_type=character_type)
    characters = query.order_by(Character.name, Character.id).all()
    return jsonify([c.to_dict() for c in characters])


@characters_bp.route('/characters/<int:character_id>')
def get_character(character_id):
    character = _get_character(character_id)
    data = character.to_dict()
    data['magic_items'] = owned_magic_items(character)
    return jsonify(data)


@characters_bp.route('/characters/<int:character_id>/magic-items')
def list_character_magic_items(character_id):
    return jsonify(owned_magic_items(_get_character(character_id)))


@characters_bp.route('/characters', methods=['POST'])
def create_character():
    data = parse_new(CharacterSchema)
    character = Character(**data.changes())
    db.session.add(character)
    db.session.commit()
    return jsonify(character.to_dict()), 201


@characters_bp.route('/characters/<int:character_id>', methods=['PUT'])
def replace_character(character_id):
    character = _get_character(character_id)
    replace_fields(character, parse_new(CharacterSchema))
    db.session.commit()
    return jsonify(character.to_dict())


@characters_bp.route('/characters/<int:character_id>', methods=['PATCH'])
def update_character(character_id):
    character = _get_character(character_id)
    apply_changes(character, parse_patch(CharacterSchema))
    db.session.commit()
    return jsonify(character.to_dict())


@characters_bp.route('/characters/<int:character_id>', methods=['DELETE'])
def delete_character(character_id):
    # Magic item links go with the character (ON DELETE CASCADE); the items stay
    character = _get_character(character_id)
    db.session.delete(character)
    db.session.commit()
    return jsonify({'message': 'Character deleted'})
