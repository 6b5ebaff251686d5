from flask import Blueprint, jsonify
from adventure_diary import db
from adventure_diary.crud import (adventure_arg, apply_changes, parse_new, parse_patch,
                                  replace_fields)
from adventure_diary.models import Session
from adventure_diary.schemas import SessionSchema

sessions_bp = Blueprint('sessions', __name__, url_prefix='/api')


def _get_session(session_id):
    return Session.query.filter_by(id=session_id).first_or_404(
        description='Session not found')


@sessions_bp.route('/sessions')
def list_sessions():
    query = Session.query
    adventure_id = adventure_arg()
    if adventure_id is not None:
        query = query.filter_by(adventure_id=adventure_id)
    # Most recent play first
    sessions_list = query.order_by(Session.date.desc(), Session.id.desc()).all()
    return jsonify([s.to_dict() for s in sessions_list])


@sessions_bp.route('/sessions/<int:session_id>')
def get_session(session_id):
    return jsonify(_get_session(session_id).to_dict())


@sessions_bp.route('/sessions', methods=['POST'])
def create_session():
    data = parse_new(SessionSchema)
    sess = Session(**data.changes())
    db.session.add(sess)
    db.session.commit()
    return jsonify(sess.to_dict()), 201


@sessions_bp.route('/sessions/<int:session_id>', methods=['PUT'])
def replace_session(session_id):
    sess = _get_session(session_id)
    replace_fields(sess, parse_new(SessionSchema))
    db.session.commit()
    return jsonify(sess.to_dict())


@sessions_bp.route('/sessions/<int:session_id>', methods=['PATCH'])
def update_session(session_id):
    sess = _get_session(session_id)
    apply_changes(sess, parse_patch(SessionSchema))
    db.session.commit()
    return jsonify(sess.to_dict())


@sessions_bp.route('/sessions/<int:session_id>', methods=['DELETE'])
def delete_session(session_id):
    sess = _get_session(session_id)
    db.session.delete(sess)
    db.session.commit()
    return jsonify({'message': 'Session deleted'})
