"""Legacy /api/npcs endpoints.

NPCs used to live in their own table; they are now characters with
character_type='npc' (or, for rows written by older clients, a non-blank
role). These routes keep the old request/response shape working on top of
the characters table.
"""

from flask import Blueprint, jsonify
from adventure_diary import db
from adventure_diary.crud import adventure_arg, parse_new, replace_fields
from adventure_diary.models import Character
from adventure_diary.schemas import NPCSchema

npcs_bp = Blueprint('npcs', __name__, url_prefix='/api')


def _get_npc(npc_id):
    return Character.query.filter(Character.id == npc_id, Character.npc_clause()).first_or_404(
        description='NPC not found')


@npcs_bp.route('/npcs')
def list_npcs():
    query = Character.query.filter(Character.npc_clause())
    adventure_id = adventure_arg()
    if adventure_id is not None:
        query = query.filter_by(adventure_id=adventure_id)
    npcs = query.order_by(Character.name, Character.id).all()
    return jsonify([n.to_dict() for n in npcs])


@npcs_bp.route('/npcs/<int:npc_id>')
def get_npc(npc_id):
    return jsonify(_get_npc(npc_id).to_dict())


@npcs_bp.route('/npcs', methods=['POST'])
def create_npc():
    data = parse_new(NPCSchema)
    npc = Character(character_type='npc', **data.changes())
    db.session.add(npc)
    db.session.commit()
    return jsonify(npc.to_dict()), 201


@npcs_bp.route('/npcs/<int:npc_id>', methods=['PUT'])
def replace_npc(npc_id):
    # Only the NPC fields are rewritten; any character-sheet columns stay
    npc = _get_npc(npc_id)
    replace_fields(npc, parse_new(NPCSchema))
    db.session.commit()
    return jsonify(npc.to_dict())


@npcs_bp.route('/npcs/<int:npc_id>', methods=['DELETE'])
def delete_npc(npc_id):
    npc = _get_npc(npc_id)
    db.session.delete(npc)
    db.session.commit()
    return jsonify({'message': 'NPC deleted successfully'})
