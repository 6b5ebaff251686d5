from flask import Blueprint, current_app, jsonify
from adventure_diary import limiter
from adventure_diary.crud import json_body
from adventure_diary.transfer import export_dataset, import_dataset

transfer_bp = Blueprint('transfer', __name__, url_prefix='/api')


@transfer_bp.route('/export')
def export_data():
    return jsonify(export_dataset())


@transfer_bp.route('/import', methods=['POST'])
@limiter.limit(lambda: current_app.config['IMPORT_RATE_LIMIT'])
def import_data():
    """Replace the whole dataset with the posted export."""
    counts = import_dataset(json_body())
    return jsonify({'message': 'Import complete', 'imported': counts})
