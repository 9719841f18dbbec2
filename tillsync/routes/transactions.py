"""
Transaction Routes
Commit sales and read back transactions and daily summaries
"""

import logging
from flask import Blueprint, request, jsonify, g
from tillsync.constants import Messages
from tillsync.exceptions import TillsyncError
from tillsync.services.sale_service import SaleService
from tillsync.utils.helpers import utc_now_iso
from tillsync.utils.responses import error_response, internal_error_response, bad_request
from tillsync.utils.tenant_context import tenant_required

logger = logging.getLogger(__name__)

bp = Blueprint('transactions', __name__)


@bp.route('', methods=['POST'])
@tenant_required
def create_transaction():
    """
    Commit a sale

    Body: items, payment_method, payment_received, optional cashier/terminal
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return bad_request('Request body must be a JSON object')

        transaction = SaleService(g.tenant_id).commit_sale(
            data.get('items'),
            data.get('payment_method'),
            data.get('payment_received'),
            cashier=data.get('cashier'),
            terminal=data.get('terminal')
        )

        return jsonify({
            'success': True,
            'data': transaction,
            'message': Messages.TRANSACTION_PROCESSED
        })

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e)


@bp.route('/health')
def health():
    """Health check for the transaction service"""
    return jsonify({
        'success': True,
        'status': 'healthy',
        'service': 'transactions',
        'timestamp': utc_now_iso()
    })


@bp.route('/<transaction_id>')
@tenant_required
def get_transaction(transaction_id):
    """Get one transaction"""
    try:
        transaction = SaleService(g.tenant_id).get_transaction(transaction_id)
        return jsonify({'success': True, 'data': transaction})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to fetch transaction')


@bp.route('/daily/<date>')
@tenant_required
def daily_sales(date):
    """Daily sales summary; zeroed when there were no sales"""
    try:
        summary = SaleService(g.tenant_id).get_daily_sales(date)
        return jsonify({'success': True, 'data': summary})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to fetch daily sales')


@bp.route('/list/<date>')
@tenant_required
def list_transactions(date):
    """All transactions committed on a day"""
    try:
        transactions, count = SaleService(g.tenant_id).list_transactions(date)
        return jsonify({'success': True, 'data': transactions, 'count': count})

    except TillsyncError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'Failed to fetch transaction list')
