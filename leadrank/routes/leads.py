"""
Lead routes — seed from CSV, list, top-N export.
"""
import logging

from flask import Blueprint, Response, jsonify, request

from leadrank.config import DEFAULT_TOP_N
from leadrank.routes import error_response
from leadrank.services.leads_io import (
    export_top_leads_csv, import_leads_csv, list_leads, load_default_csv,
)

logger = logging.getLogger('routes.leads')

bp = Blueprint('leads', __name__)


@bp.route('/api/seed', methods=['POST'])
def seed():
    """Replace all leads. CSV in the body wins over the bundled file."""
    try:
        content_type = request.content_type or ''
        if 'text/csv' in content_type or 'text/plain' in content_type:
            text = request.get_data(as_text=True)
        else:
            text = load_default_csv()

        count = import_leads_csv(text)
        return jsonify({
            'success': True,
            'message': f'Successfully loaded {count} leads into the database',
            'count': count,
        })
    except Exception as e:
        return error_response(e)


@bp.route('/api/leads')
def leads():
    """All leads ordered by company."""
    try:
        return jsonify(list_leads())
    except Exception as e:
        return error_response(e)


@bp.route('/api/export')
def export():
    """Top-N relevant leads per company as a CSV download."""
    top_n = request.args.get('top_n', DEFAULT_TOP_N, type=int)
    run_id = request.args.get('run_id') or None
    try:
        csv_text, filename = export_top_leads_csv(run_id=run_id, top_n=top_n)
    except Exception as e:
        return error_response(e)

    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
