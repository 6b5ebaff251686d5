from flask import Blueprint, jsonify
from adventure_diary import db
from adventure_diary.crud import apply_changes, parse_new, parse_patch, replace_fields
from adventure_diary.models import GlobalNote
from adventure_diary.schemas import GlobalNoteSchema

global_notes_bp = Blueprint('global_notes', __name__, url_prefix='/api')


def _get_note(note_id):
    return GlobalNote.query.filter_by(id=note_id).first_or_404(
        description='Note not found')


@global_notes_bp.route('/global_notes')
def list_notes():
    notes = GlobalNote.query.order_by(GlobalNote.created_at.desc(), GlobalNote.id.desc()).all()
    return jsonify([n.to_dict() for n in notes])


@global_notes_bp.route('/global_notes/<int:note_id>')
def get_note(note_id):
    return jsonify(_get_note(note_id).to_dict())


@global_notes_bp.route('/global_notes', methods=['POST'])
def create_note():
    data = parse_new(GlobalNoteSchema)
    note = GlobalNote(**data.changes())
    db.session.add(note)
    db.session.commit()
    return jsonify(note.to_dict()), 201


@global_notes_bp.route('/global_notes/<int:note_id>', methods=['PUT'])
def replace_note(note_id):
    note = _get_note(note_id)
    replace_fields(note, parse_new(GlobalNoteSchema))
    db.session.commit()
    return jsonify(note.to_dict())


@global_notes_bp.route('/global_notes/<int:note_id>', methods=['PATCH'])
def update_note(note_id):
    note = _get_note(note_id)
    apply_changes(note, parse_patch(GlobalNoteSchema))
    db.session.commit()
    return jsonify(note.to_dict())


@global_notes_bp.route('/global_notes/<int:note_id>', methods=['DELETE'])
def delete_note(note_id):
    note = _get_note(note_id)
    db.session.delete(note)
    db.session.commit()
    return jsonify({'message': 'Note deleted'})
