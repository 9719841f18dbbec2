"""
Daily Target Routes
Create, update, toggle, delete and list daily targets
"""

import logging
from flask import Blueprint, request, jsonify, g, current_app
from tillsync.constants import Messages
from tillsync.exceptions import TillsyncError
from tillsync.kv_store import KVStore
from tillsync.services.target_registry import TargetRegistry
from tillsync.utils.responses import error_response, internal_error_response, bad_request
from tillsync.utils.tenant_context import tenant_required

logger = logging.getLogger(__name__)

bp = Blueprint('targets', __name__)


def _registry():
    return TargetRegistry(
        KVStore(), g.tenant_id,
        lookup_days=current_app.config.get('TARGET_LOOKUP_DAYS', 7)
    )


@bp.route('/<date>')
@tenant_required
def list_targets(date):
    """A day's targets, with progress from the day's sales"""
    try:
        return jsonify({'success': True, 'data': _registry().list_targets(date)})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to fetch targets')


@bp.route('', methods=['POST'])
@tenant_required
def create_target():
    """Create a target; body has target_type, target_value, date and description"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')

        target = _registry().create_target(
            data.get('target_type'),
            data.get('target_value'),
            data.get('date'),
            description=data.get('description', '')
        )
        return jsonify({'success': True, 'data': target, 'message': Messages.TARGET_CREATED})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to create target')


@bp.route('/<target_id>', methods=['PUT'])
@tenant_required
def update_target(target_id):
    """Update a target on the date given in the body"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')

        target = _registry().update_target(
            target_id,
            data.get('date'),
            target_type=data.get('target_type'),
            target_value=data.get('target_value'),
            description=data.get('description'),
            is_active=data.get('is_active'),
            current_value=data.get('current_value')
        )
        return jsonify({'success': True, 'data': target, 'message': Messages.TARGET_UPDATED})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to update target')


@bp.route('/<target_id>/toggle', methods=['POST'])
@tenant_required
def toggle_target(target_id):
    """Switch a target on or off; body has date and is_active"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')
        if not isinstance(data.get('is_active'), bool):
            return bad_request('is_active must be true or false')

        target = _registry().set_active(target_id, data.get('date'), data['is_active'])
        return jsonify({'success': True, 'data': target, 'message': Messages.TARGET_UPDATED})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to update target')


@bp.route('/<target_id>', methods=['DELETE'])
@tenant_required
def delete_target(target_id):
    """Delete a target created within the lookup window"""
    try:
        target = _registry().delete_target(target_id)
        return jsonify({'success': True, 'data': target, 'message': Messages.TARGET_DELETED})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to delete target')
