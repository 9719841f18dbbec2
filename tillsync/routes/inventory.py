"""
Inventory Routes
Inventory items, low-stock alerts and projection reconciliation
"""

import logging
from flask import Blueprint, request, jsonify, g, current_app
from tillsync.constants import Messages
from tillsync.exceptions import TillsyncError
from tillsync.kv_store import KVStore
from tillsync.services import inventory_service
from tillsync.services.sync_service import InventorySyncService
from tillsync.utils.responses import error_response, internal_error_response, bad_request
from tillsync.utils.tenant_context import tenant_required

logger = logging.getLogger(__name__)

bp = Blueprint('inventory', __name__)


def _threshold():
    return current_app.config.get('LOW_STOCK_THRESHOLD', 10)


@bp.route('')
@tenant_required
def list_inventory():
    """Item-ledger records for the tenant"""
    try:
        items = inventory_service.list_inventory(KVStore(), g.tenant_id)
        return jsonify({'success': True, 'data': items, 'count': len(items)})

    except Exception as e:
        return internal_error_response(e, 'Failed to fetch inventory')


@bp.route('', methods=['POST'])
@tenant_required
def create_inventory_item():
    """Create an item in the item ledger and mirror it into the catalogs"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')

        item = inventory_service.create_inventory_item(
            KVStore(), g.tenant_id, data, low_stock_threshold=_threshold()
        )
        return jsonify({
            'success': True,
            'data': item,
            'message': Messages.INVENTORY_ITEM_CREATED
        }), 201

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to create inventory item')


@bp.route('/items/<item_id>', methods=['PUT'])
@tenant_required
def update_inventory_item(item_id):
    """Update an item-ledger record and sync the change to the catalogs"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')

        item = inventory_service.update_inventory_item(
            KVStore(), g.tenant_id, item_id, data, low_stock_threshold=_threshold()
        )
        return jsonify({
            'success': True,
            'data': item,
            'message': Messages.INVENTORY_ITEM_UPDATED
        })

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, Messages.FAILED_TO_UPDATE_ITEM)


@bp.route('/items/<item_id>', methods=['DELETE'])
@tenant_required
def delete_inventory_item(item_id):
    """Remove an item from the item ledger and the catalogs"""
    try:
        item = inventory_service.delete_inventory_item(KVStore(), g.tenant_id, item_id)
        return jsonify({
            'success': True,
            'data': item,
            'message': Messages.INVENTORY_ITEM_DELETED
        })

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, Messages.FAILED_TO_DELETE_ITEM)


@bp.route('/low-stock')
@tenant_required
def low_stock():
    """Items at or below their minimum stock"""
    try:
        items = inventory_service.list_low_stock(KVStore(), g.tenant_id, low_stock_threshold=_threshold())
        return jsonify({'success': True, 'data': items, 'count': len(items)})

    except Exception as e:
        return internal_error_response(e, 'Failed to fetch low stock items')


@bp.route('/sync-status')
@tenant_required
def sync_status():
    """Last reconciliation and current drift between projections"""
    try:
        status = InventorySyncService(current_app._get_current_object()).get_sync_status(g.tenant_id)
        return jsonify({'success': True, 'data': status})

    except Exception as e:
        return internal_error_response(e, 'Failed to fetch sync status')


@bp.route('/reconcile', methods=['POST'])
@tenant_required
def reconcile():
    """Rebuild the synced inventory snapshot and report drift"""
    try:
        result = InventorySyncService(current_app._get_current_object()).reconcile(g.tenant_id)
        return jsonify({
            'success': True,
            'data': result,
            'message': Messages.INVENTORY_RECONCILED
        })

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to reconcile inventory')
