from flask import Blueprint, jsonify
from adventure_diary import db
from adventure_diary.crud import (adventure_arg, apply_changes, parse_new, parse_patch,
                                  replace_fields)
from adventure_diary.models import Location
from adventure_diary.schemas import LocationSchema

locations_bp = Blueprint('locations', __name__, url_prefix='/api')


def _get_location(location_id):
    return Location.query.filter_by(id=location_id).first_or_404(
        description='Location not found')


@locations_bp.route('/locations')
def list_locations():
    query = Location.query
    adventure_id = adventure_arg()
    if adventure_id is not None:
        query = query.filter_by(adventure_id=adventure_id)
    locations = query.order_by(Location.name, Location.id).all()
    return jsonify([loc.to_dict() for loc in locations])


@locations_bp.route('/locations/<int:location_id>')
def get_location(location_id):
    return jsonify(_get_location(location_id).to_dict())


@locations_bp.route('/locations', methods=['POST'])
def create_location():
    data = parse_new(LocationSchema)
    location = Location(**data.changes())
    db.session.add(location)
    db.session.commit()
    return jsonify(location.to_dict()), 201


@locations_bp.route('/locations/<int:location_id>', methods=['PUT'])
def replace_location(location_id):
    location = _get_location(location_id)
    replace_fields(location, parse_new(LocationSchema))
    db.session.commit()
    return jsonify(location.to_dict())


@locations_bp.route('/locations/<int:location_id>', methods=['PATCH'])
def update_location(location_id):
    location = _get_location(location_id)
    apply_changes(location, parse_patch(LocationSchema))
    db.session.commit()
    return jsonify(location.to_dict())


@locations_bp.route('/locations/<int:location_id>', methods=['DELETE'])
def delete_location(location_id):
    location = _get_location(location_id)
    db.session.delete(location)
    db.session.commit()
    return jsonify({'message': 'Location deleted'})
