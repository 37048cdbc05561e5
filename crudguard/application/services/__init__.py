"""Application services: the access engine and the policy loader."""

from crudguard.application.services.field_projector import FieldProjector
from crudguard.application.services.permission_evaluator import PermissionEvaluator
from crudguard.application.services.policy_loader import build_policy, load_policy
from crudguard.application.services.request_authorizer import RequestAuthorizer
from crudguard.application.services.row_filter_compiler import RowFilterCompiler

__all__ = [
    "FieldProjector",
    "PermissionEvaluator",
    "RequestAuthorizer",
    "RowFilterCompiler",
    "build_policy",
    "load_policy",
]
