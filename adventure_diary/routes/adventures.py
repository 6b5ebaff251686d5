from flask import Blueprint, jsonify
from adventure_diary import db
from adventure_diary.crud import apply_changes, parse_new, parse_patch, replace_fields
from adventure_diary.models import Adventure
from adventure_diary.schemas import AdventureSchema

adventures_bp = Blueprint('adventures', __name__, url_prefix='/api')


def _get_adventure(adventure_id):
    return Adventure.query.filter_by(id=adventure_id).first_or_404(
        description='Adventure not found')


def _with_counts(adventure):
    data = adventure.to_dict()
    data['counts'] = {
        'sessions': adventure.sessions.count(),
        'characters': adventure.characters.count(),
        'locations': adventure.locations.count(),
        'quests': adventure.quests.count(),
    }
    return data


@adventures_bp.route('/adventures')
def list_adventures():
    adventures = Adventure.query.order_by(Adventure.id).all()
    return jsonify([a.to_dict() for a in adventures])


@adventures_bp.route('/adventures/<int:adventure_id>')
def get_adventure(adventure_id):
    return jsonify(_with_counts(_get_adventure(adventure_id)))


@adventures_bp.route('/adventures', methods=['POST'])
def create_adventure():
    data = parse_new(AdventureSchema)
    adventure = Adventure(**data.changes())
    db.session.add(adventure)
    db.session.commit()
    return jsonify(adventure.to_dict()), 201


@adventures_bp.route('/adventures/<int:adventure_id>', methods=['PUT'])
def replace_adventure(adventure_id):
    adventure = _get_adventure(adventure_id)
    replace_fields(adventure, parse_new(AdventureSchema))
    db.session.commit()
    return jsonify(adventure.to_dict())


@adventures_bp.route('/adventures/<int:adventure_id>', methods=['PATCH'])
def update_adventure(adventure_id):
    adventure = _get_adventure(adventure_id)
    apply_changes(adventure, parse_patch(AdventureSchema))
    db.session.commit()
    return jsonify(adventure.to_dict())


@adventures_bp.route('/adventures/<int:adventure_id>', methods=['DELETE'])
def delete_adventure(adventure_id):
    # Sessions, characters, locations and quests survive with adventure_id
    # set to NULL (ON DELETE SET NULL), they just become global content.
    adventure = _get_adventure(adventure_id)
    db.session.delete(adventure)
    db.session.commit()
    return jsonify({'message': 'Adventure deleted'})
