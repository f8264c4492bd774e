"""
API Module
==========
Flask API routes and blueprints.
"""
from nyay_sahayak.api.routes import (
    create_sessions_blueprint,
    create_chat_blueprint,
    create_documents_blueprint,
    create_account_blueprint,
    create_learning_blueprint,
    create_health_blueprint,
    create_logs_blueprint
)

__all__ = [
    'create_sessions_blueprint',
    'create_chat_blueprint',
    'create_documents_blueprint',
    'create_account_blueprint',
    'create_learning_blueprint',
    'create_health_blueprint',
    'create_logs_blueprint'
]
