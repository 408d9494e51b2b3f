"""
Custom exceptions for docsync
"""

class DocSyncError(Exception):
    """Base exception for all docsync errors"""
    pass

class MissingCredentialError(DocSyncError):
    """Raised when a required service credential is absent"""
    pass

class InvalidParametersError(DocSyncError):
    """Raised when an action receives malformed or missing parameters"""
    pass

class DependencyUnmetError(DocSyncError):
    """Raised when an action runs before a required predecessor"""
    pass

class RemoteOperationError(DocSyncError):
    """Raised when a gateway or generator call fails"""
    pass

class ContentQualityError(DocSyncError):
    """Raised when generated content fails the quality gate"""
    pass

class StateConflictError(DocSyncError):
    """Raised when a delta tries to overwrite a set-once state field"""
    pass

class ConfigurationError(DocSyncError):
    """Raised when configuration or the action graph is invalid"""
    pass
