"""
Tenant Context Utilities

Resolves the tenant for the current request from the tenant header and makes
it available on Flask's g object. Isolation between tenants is purely the key
prefix built from this value; there is no access-control check here.
"""

from functools import wraps
from flask import g, request, jsonify, current_app
from tillsync.constants import Messages


def get_current_tenant():
    """
    Get the tenant for the current request.

    Returns:
        Tenant ID string, the configured default tenant when the header is
        absent, or None if REQUIRE_TENANT_ID is on and no header was sent
    """
    header = current_app.config.get('TENANT_HEADER', 'X-Tenant-ID')
    tenant_id = (request.headers.get(header) or '').strip()
    if tenant_id:
        return tenant_id

    if current_app.config.get('REQUIRE_TENANT_ID'):
        return None

    return current_app.config.get('DEFAULT_TENANT_ID', 'tenant_default')


def set_tenant_context():
    """
    Set tenant context in Flask's g object.
    Call this in before_request to make the tenant available throughout the request.
    """
    g.tenant_id = get_current_tenant()


def tenant_required(f):
    """
    Decorator to ensure a tenant could be resolved for the request.

    Usage:
        @tenant_required
        def my_view():
            # g.tenant_id is guaranteed to be set
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        tenant_id = getattr(g, 'tenant_id', None) or get_current_tenant()
        if not tenant_id:
            return jsonify({'success': False, 'error': Messages.TENANT_REQUIRED}), 400

        g.tenant_id = tenant_id
        return f(*args, **kwargs)
    return decorated_function
