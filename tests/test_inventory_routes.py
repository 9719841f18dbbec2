"""
Integration Tests for Inventory Routes
"""

import pytest
import json

from conftest import OTHER_TENANT
from tillsync.constants import Messages

pytestmark = pytest.mark.integration

ITEM = {'name': 'Oat Latte', 'category': 'Beverages', 'unit_price': 4.5, 'current_stock': 3, 'min_stock': 5}


class TestInventoryRoutes:
    """Tests for /inventory endpoints"""

    def test_create_and_list(self, client, tenant_headers):
        response = client.post('/inventory', json=ITEM, headers=tenant_headers)
        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['message'] == Messages.INVENTORY_ITEM_CREATED
        assert data['data']['low_stock_alert'] is True

        listed = json.loads(client.get('/inventory', headers=tenant_headers).data)
        assert listed['count'] == 1
        assert listed['data'][0]['name'] == 'Oat Latte'

    def test_create_invalid(self, client, tenant_headers):
        response = client.post('/inventory', json={'name': 'Oat Latte'}, headers=tenant_headers)
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == Messages.INVENTORY_FIELDS_REQUIRED

    def test_create_duplicate(self, client, tenant_headers):
        client.post('/inventory', json=ITEM, headers=tenant_headers)
        response = client.post('/inventory', json=ITEM, headers=tenant_headers)
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == Messages.INVENTORY_DUPLICATE

    def test_update(self, client, tenant_headers):
        item = json.loads(client.post('/inventory', json=ITEM, headers=tenant_headers).data)['data']

        response = client.put(f"/inventory/items/{item['id']}", json={'current_stock': 40},
                              headers=tenant_headers)
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['message'] == Messages.INVENTORY_ITEM_UPDATED
        assert data['data']['current_stock'] == 40
        assert data['data']['low_stock_alert'] is False

    def test_update_unknown(self, client, tenant_headers):
        response = client.put('/inventory/items/INV-MISSING', json={'current_stock': 1},
                              headers=tenant_headers)
        assert response.status_code == 404
        assert json.loads(response.data)['error'] == Messages.INVENTORY_ITEM_NOT_FOUND

    def test_update_requires_json_object(self, client, tenant_headers):
        item = json.loads(client.post('/inventory', json=ITEM, headers=tenant_headers).data)['data']
        response = client.put(f"/inventory/items/{item['id']}", data='stock=1', headers=tenant_headers)
        assert response.status_code == 400

    def test_delete(self, client, tenant_headers):
        item = json.loads(client.post('/inventory', json=ITEM, headers=tenant_headers).data)['data']

        response = client.delete(f"/inventory/items/{item['id']}", headers=tenant_headers)
        assert response.status_code == 200
        assert json.loads(response.data)['message'] == Messages.INVENTORY_ITEM_DELETED

        listed = json.loads(client.get('/inventory', headers=tenant_headers).data)
        assert listed['count'] == 0
        assert client.delete(f"/inventory/items/{item['id']}", headers=tenant_headers).status_code == 404

    def test_low_stock(self, client, tenant_headers, seed_inventory):
        response = client.get('/inventory/low-stock', headers=tenant_headers)
        data = json.loads(response.data)
        assert response.status_code == 200
        # P-MUFFIN has stock 1 and no min_stock, so the threshold of 10 applies
        assert [item['id'] for item in data['data']] == ['P-MUFFIN']

    def test_inventory_is_tenant_scoped(self, client, tenant_headers):
        client.post('/inventory', json=ITEM, headers=tenant_headers)
        listed = json.loads(client.get('/inventory', headers={'X-Tenant-ID': OTHER_TENANT}).data)
        assert listed['count'] == 0

    def test_reconcile_and_status(self, client, tenant_headers, seed_inventory):
        response = client.post('/inventory/reconcile', headers=tenant_headers)
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['message'] == Messages.INVENTORY_RECONCILED
        assert data['data']['synced_items'] == 3

        status = json.loads(client.get('/inventory/sync-status', headers=tenant_headers).data)['data']
        assert status['synced_items'] == 3
        assert status['in_sync'] is True
        assert status['last_sync'] == data['data']['last_sync']

    def test_requires_tenant_when_configured(self, client, fresh_app):
        fresh_app.config['REQUIRE_TENANT_ID'] = True
        assert client.get('/inventory').status_code == 400
        assert client.post('/inventory/reconcile').status_code == 400
