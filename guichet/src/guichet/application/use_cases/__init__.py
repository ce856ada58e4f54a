"""
Use cases for Guichet application layer.
"""

from guichet.application.use_cases.issue_credential import IssueCredentialUseCase

__all__ = ["IssueCredentialUseCase"]
