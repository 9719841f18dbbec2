"""
Database Models
SQLAlchemy ORM models backing the key-value store and error capture
"""

from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class KVEntry(db.Model):
    """A single key in the flat key-value store"""
    __tablename__ = 'kv_store'

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.JSON)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<KVEntry {self.key}>'


class ErrorLog(db.Model):
    """Unhandled application errors captured with request context"""
    __tablename__ = 'error_logs'

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    error_type = db.Column(db.String(128), nullable=False, index=True)
    error_message = db.Column(db.Text, nullable=False)
    traceback = db.Column(db.Text)

    # Request context
    request_url = db.Column(db.String(512))
    request_method = db.Column(db.String(10))
    request_data = db.Column(db.Text)
    tenant_id = db.Column(db.String(128), index=True)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(512))
    status_code = db.Column(db.Integer, index=True)
    blueprint = db.Column(db.String(64))
    endpoint = db.Column(db.String(128))

    is_resolved = db.Column(db.Boolean, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'error_type': self.error_type,
            'error_message': self.error_message,
            'request_url': self.request_url,
            'request_method': self.request_method,
            'tenant_id': self.tenant_id,
            'status_code': self.status_code,
            'endpoint': self.endpoint,
            'is_resolved': self.is_resolved
        }

    def __repr__(self):
        return f'<ErrorLog {self.error_type} {self.status_code}>'
