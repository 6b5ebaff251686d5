from flask import Blueprint, jsonify, request
from adventure_diary import db
from adventure_diary.crud import (adventure_arg, apply_changes, parse_new, parse_patch,
                                  replace_fields)
from adventure_diary.errors import APIError
from adventure_diary.models import Quest, QuestObjective
from adventure_diary.schemas import QuestObjectiveSchema, QuestSchema

quests_bp = Blueprint('quests', __name__, url_prefix='/api')

# Listings put high priority quests first
PRIORITY_ORDER = db.case({'high': 0, 'medium': 1, 'low': 2}, value=Quest.priority, else_=3)


def _get_quest(quest_id):
    return Quest.query.filter_by(id=quest_id).first_or_404(description='Quest not found')


def _get_objective(quest, objective_id):
    objective = QuestObjective.query.filter_by(id=objective_id).first_or_404(
        description='Objective not found')
    if objective.quest_id != quest.id:
        raise APIError('Objective not found', 404)
    return objective


def _quest_dict(quest):
    data = quest.to_dict()
    data['objectives'] = [o.to_dict() for o in quest.objectives]
    return data


@quests_bp.route('/quests')
def list_quests():
    query = Quest.query
    adventure_id = adventure_arg()
    if adventure_id is not None:
        query = query.filter_by(adventure_id=adventure_id)
    for field in ('status', 'priority', 'type'):
        value = request.args.get(field, '').strip()
        if value:
            query = query.filter(getattr(Quest, field) == value)
    quests = query.order_by(PRIORITY_ORDER, Quest.created_at.desc(), Quest.id.desc()).all()
    return jsonify([_quest_dict(q) for q in quests])


@quests_bp.route('/quests/<int:quest_id>')
def get_quest(quest_id):
    return jsonify(_quest_dict(_get_quest(quest_id)))


@quests_bp.route('/quests', methods=['POST'])
def create_quest():
    data = parse_new(QuestSchema)
    quest = Quest(**data.changes())
    db.session.add(quest)
    db.session.commit()
    return jsonify(_quest_dict(quest)), 201


@quests_bp.route('/quests/<int:quest_id>', methods=['PUT'])
def replace_quest(quest_id):
    quest = _get_quest(quest_id)
    replace_fields(quest, parse_new(QuestSchema))
    db.session.commit()
    return jsonify(_quest_dict(quest))


@quests_bp.route('/quests/<int:quest_id>', methods=['PATCH'])
def update_quest(quest_id):
    quest = _get_quest(quest_id)
    apply_changes(quest, parse_patch(QuestSchema))
    db.session.commit()
    return jsonify(_quest_dict(quest))


@quests_bp.route('/quests/<int:quest_id>', methods=['DELETE'])
def delete_quest(quest_id):
    quest = _get_quest(quest_id)
    db.session.delete(quest)
    db.session.commit()
    return jsonify({'message': 'Quest deleted'})


# -- Objectives ---------------------------------------------------------------

@quests_bp.route('/quests/<int:quest_id>/objectives', methods=['POST'])
def create_objective(quest_id):
    quest = _get_quest(quest_id)
    data = parse_new(QuestObjectiveSchema)
    objective = QuestObjective(quest_id=quest.id, **data.changes())
    db.session.add(objective)
    db.session.commit()
    return jsonify(objective.to_dict()), 201


@quests_bp.route('/quests/<int:quest_id>/objectives/<int:objective_id>', methods=['PUT'])
def replace_objective(quest_id, objective_id):
    objective = _get_objective(_get_quest(quest_id), objective_id)
    replace_fields(objective, parse_new(QuestObjectiveSchema))
    db.session.commit()
    return jsonify(objective.to_dict())


@quests_bp.route('/quests/<int:quest_id>/objectives/<int:objective_id>', methods=['PATCH'])
def update_objective(quest_id, objective_id):
    objective = _get_objective(_get_quest(quest_id), objective_id)
    apply_changes(objective, parse_patch(QuestObjectiveSchema))
    db.session.commit()
    return jsonify(objective.to_dict())


@quests_bp.route('/quests/<int:quest_id>/objectives/<int:objective_id>', methods=['DELETE'])
def delete_objective(quest_id, objective_id):
    objective = _get_objective(_get_quest(quest_id), objective_id)
    db.session.delete(objective)
    db.session.commit()
    return jsonify({'message': 'Objective deleted'})
