from flask import Blueprint, jsonify, request
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from adventure_diary import db
from adventure_diary.crud import apply_changes, json_body, parse_new, parse_patch, replace_fields
from adventure_diary.errors import APIError
from adventure_diary.models import CharacterMagicItem, MagicItem, utc_timestamp
from adventure_diary.schemas import AssignmentSchema, MagicItemSchema

magic_items_bp = Blueprint('magic_items', __name__, url_prefix='/api')


def _get_item(item_id):
    return MagicItem.query.filter_by(id=item_id).first_or_404(
        description='Magic item not found')


def _item_dict(item):
    data = item.to_dict()
    data['owners'] = [
        {'id': link.character_id,
         'name': link.character.name if link.character else None,
         'equipped': bool(link.equipped)}
        for link in item.owner_links
    ]
    return data


@magic_items_bp.route('/magic-items')
def list_magic_items():
    query = MagicItem.query

    owner = request.args.get('owner', type=int)
    if owner is not None:
        query = query.join(CharacterMagicItem).filter(CharacterMagicItem.character_id == owner)

    rarity = request.args.get('rarity', '').strip()
    if rarity:
        query = query.filter(MagicItem.rarity == rarity)

    item_type = request.args.get('type', '').strip()
    if item_type:
        query = query.filter(MagicItem.type == item_type)

    items = query.order_by(MagicItem.name, MagicItem.id).all()
    return jsonify([_item_dict(i) for i in items])


@magic_items_bp.route('/magic-items/<int:item_id>')
def get_magic_item(item_id):
    return jsonify(_item_dict(_get_item(item_id)))


@magic_items_bp.route('/magic-items', methods=['POST'])
def create_magic_item():
    data = parse_new(MagicItemSchema)
    item = MagicItem(**data.changes())
    db.session.add(item)
    db.session.commit()
    return jsonify(_item_dict(item)), 201


@magic_items_bp.route('/magic-items/<int:item_id>', methods=['PUT'])
def replace_magic_item(item_id):
    item = _get_item(item_id)
    replace_fields(item, parse_new(MagicItemSchema))
    db.session.commit()
    return jsonify(_item_dict(item))


@magic_items_bp.route('/magic-items/<int:item_id>', methods=['PATCH'])
def update_magic_item(item_id):
    item = _get_item(item_id)
    apply_changes(item, parse_patch(MagicItemSchema))
    db.session.commit()
    return jsonify(_item_dict(item))


@magic_items_bp.route('/magic-items/<int:item_id>', methods=['DELETE'])
def delete_magic_item(item_id):
    item = _get_item(item_id)
    db.session.delete(item)
    db.session.commit()
    return jsonify({'message': 'Magic item deleted'})


@magic_items_bp.route('/magic-items/<int:item_id>/assign', methods=['POST'])
def assign_magic_item(item_id):
    """Give the item to one or more characters.

    Pairs that already exist are left untouched (ON CONFLICT DO NOTHING), so
    repeating an assignment is harmless. All inserts share one transaction:
    an unknown character id fails the foreign key and nothing is assigned.
    """
    item = _get_item(item_id)
    assignment = AssignmentSchema.model_validate(json_body())
    character_ids = assignment.all_character_ids()

    created = 0
    for character_id in character_ids:
        stmt = (sqlite_insert(CharacterMagicItem.__table__)
                .values(character_id=character_id, magic_item_id=item.id,
                        equipped=assignment.equipped, created_at=utc_timestamp())
                .on_conflict_do_nothing())
        result = db.session.execute(stmt)
        created += result.rowcount
    db.session.commit()

    return jsonify({'message': 'Magic item assigned',
                    'assigned': created,
                    'already_assigned': len(character_ids) - created})


@magic_items_bp.route('/magic-items/<int:item_id>/unassign', methods=['POST'])
def unassign_magic_item(item_id):
    item = _get_item(item_id)
    assignment = AssignmentSchema.model_validate(json_body())
    removed = (CharacterMagicItem.query
               .filter(CharacterMagicItem.magic_item_id == item.id,
                       CharacterMagicItem.character_id.in_(assignment.all_character_ids()))
               .delete(synchronize_session=False))
    db.session.commit()
    if not removed:
        raise APIError('Magic item is not assigned to that character', 404)
    return jsonify({'message': 'Magic item unassigned', 'removed': removed})
