"""
Ranking routes — run lifecycle API (start, batch, finalize), results and runs.
"""
import logging

from flask import Blueprint, jsonify, request

from leadrank.ranking.controller import (
    finalize_run, get_results, get_run, launch_full_run, list_runs,
    process_batch, start_run,
)
from leadrank.routes import error_response

logger = logging.getLogger('routes.ranking')

bp = Blueprint('ranking', __name__)


# ── Run lifecycle ────────────────────────────────────────────────────────────

@bp.route('/api/rank', methods=['POST'])
def start():
    """Start a new ranking run over every lead."""
    try:
        started = start_run()
        return jsonify({'success': True, **started})
    except Exception as e:
        return error_response(e)


@bp.route('/api/rank/batch', methods=['POST'])
def batch():
    """Score one batch of leads for a running run."""
    try:
        data = request.get_json(silent=True) or {}
        progress = process_batch(data.get('run_id'), data.get('lead_ids'))
        return jsonify({'success': True, **progress})
    except Exception as e:
        return error_response(e)


@bp.route('/api/rank/finalize', methods=['POST'])
def finalize():
    """Assign per-company ranks and complete the run."""
    try:
        data = request.get_json(silent=True) or {}
        summary = finalize_run(data.get('run_id'))
        return jsonify({'success': True, **summary})
    except Exception as e:
        return error_response(e)


@bp.route('/api/rank/auto', methods=['POST'])
def auto():
    """Start a run and let a worker drive every batch plus finalize."""
    try:
        data = request.get_json(silent=True) or {}
        batch_size = data.get('batch_size')
        if batch_size is not None:
            try:
                batch_size = int(batch_size)
            except (TypeError, ValueError):
                return jsonify({'error': f'Invalid batch_size: {batch_size!r}'}), 400
        launched = launch_full_run(batch_size=batch_size)
        return jsonify({'success': True, **launched}), 202
    except Exception as e:
        return error_response(e)


# ── Read side ────────────────────────────────────────────────────────────────

@bp.route('/api/results')
def results():
    """Results of a run (latest completed by default)."""
    try:
        run_id = request.args.get('run_id') or None
        relevant_only = request.args.get('relevant_only', '').lower() in ('1', 'true', 'yes')
        return jsonify(get_results(run_id, relevant_only=relevant_only))
    except Exception as e:
        return error_response(e)


@bp.route('/api/runs')
def runs():
    """List ranking runs, newest first."""
    try:
        limit = request.args.get('limit', type=int)
        status = request.args.get('status') or None
        return jsonify({'runs': list_runs(limit=limit, status=status)})
    except Exception as e:
        return error_response(e)


@bp.route('/api/runs/<run_id>')
def run_detail(run_id):
    """Single run status."""
    try:
        return jsonify(get_run(run_id))
    except Exception as e:
        return error_response(e)
