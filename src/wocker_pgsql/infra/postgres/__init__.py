"""PostgreSQL service operations: reconcile, federate, back up, restore."""

from .admin import AdminFederation, AdminStatus, FederatedServer
from .backup import BackupPipe, default_backup_filename
from .connection import ExternalConnection
from .databases import list_databases, password_env
from .reconciler import ServiceReconciler

__all__ = [
    "AdminFederation",
    "AdminStatus",
    "BackupPipe",
    "ExternalConnection",
    "FederatedServer",
    "ServiceReconciler",
    "default_backup_filename",
    "list_databases",
    "password_env",
]
