from flask import Blueprint, jsonify, request
from adventure_diary import db
from adventure_diary.models import Character, Location, MagicItem, Quest, Session

search_bp = Blueprint('search', __name__, url_prefix='/api')

RESULT_LIMIT = 50

# Columns searched per group. Tags are JSON text; they're matched as text
# (cast first, otherwise the bind value would be JSON-encoded too).
SEARCH_FIELDS = {
    'sessions': (Session, ('title', 'text')),
    'characters': (Character, ('name', 'role', 'description', 'backstory', 'tags')),
    'locations': (Location, ('name', 'description', 'notes', 'tags')),
    'quests': (Quest, ('title', 'description', 'assigned_to', 'tags')),
    'magic_items': (MagicItem, ('name', 'type', 'rarity', 'description')),
}


@search_bp.route('/search')
def search():
    """Case-insensitive substring search across the diary.

    Returns one list per group; NPCs are listed both under characters and
    on their own so the older npcs view keeps working.
    """
    q = request.args.get('q', '').strip()
    results = {group: [] for group in ('sessions', 'characters', 'npcs', 'locations',
                                      'quests', 'magic_items')}
    if not q:
        return jsonify({'query': q, 'results': results})

    # Treat LIKE wildcards in the query as literal characters
    escaped = q.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    pattern = f'%{escaped}%'

    for group, (model, fields) in SEARCH_FIELDS.items():
        clauses = [db.cast(getattr(model, f), db.Text).ilike(pattern, escape='\\')
                   for f in fields]
        query = model.query.filter(db.or_(*clauses))
        if group == 'characters':
            npcs = query.filter(Character.npc_clause()).order_by(Character.name)
            results['npcs'] = [c.to_dict() for c in npcs.limit(RESULT_LIMIT)]
        rows = query.order_by(model.id).limit(RESULT_LIMIT).all()
        results[group] = [row.to_dict() for row in rows]

    return jsonify({'query': q, 'results': results})
