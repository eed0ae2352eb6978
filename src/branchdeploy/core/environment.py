"""
Environment resolution module for the branchdeploy application.

This module decides between the production and development environments and
reads the matching bucket and credentials from environment variables.
"""

import os
from typing import List, Mapping, Optional

from branchdeploy.core.constants import (
    ACCESS_KEY_VAR,
    BUCKET_NAME_VAR,
    DEFAULT_PRODUCTION_BRANCH,
    DEFAULT_REGION,
    DEVELOPMENT_SUFFIX,
    KEY_PREFIX_VERSION,
    PRODUCTION_BRANCH_VAR,
    PRODUCTION_SUFFIX,
    REGION_VAR,
    REQUIRED_ENV_VARS,
    SECRET_KEY_VAR,
)
from branchdeploy.core.errors import MissingEnvironmentError
from branchdeploy.core.models import Credentials, DeploymentTarget


def is_production_branch(branch_name: str, environ: Mapping[str, str]) -> bool:
    production_branch = environ.get(PRODUCTION_BRANCH_VAR) or DEFAULT_PRODUCTION_BRANCH
    return branch_name == production_branch


def env_var_name(name: str, is_production: bool) -> str:
    return f"{name}_{PRODUCTION_SUFFIX if is_production else DEVELOPMENT_SUFFIX}"


def required_env_vars(is_production: bool) -> List[str]:
    """Names of the variables the selected environment cannot run without."""
    return [env_var_name(name, is_production) for name in REQUIRED_ENV_VARS]


def key_prefix(repo_identifier: str, branch_name: str, is_production: bool) -> str:
    """
    Compute the key prefix a deployment is stored under.

    Production deploys to v1/{owner/name}/, any other branch to
    v1/{owner/name}/{branch}/.
    """
    if is_production:
        return f"{KEY_PREFIX_VERSION}/{repo_identifier}/"
    return f"{KEY_PREFIX_VERSION}/{repo_identifier}/{branch_name}/"


def resolve_target(
    branch_name: str,
    repo_identifier: str,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentTarget:
    """
    Resolve the deployment target for a branch.

    Args:
        branch_name (str): Branch being deployed
        repo_identifier (str): GitHub "owner/name" of the repository
        environ (Mapping[str, str], optional): Environment to read, defaults to os.environ

    Returns:
        DeploymentTarget: Bucket, prefix, credentials and region of the run

    Raises:
        MissingEnvironmentError: If a required variable is missing or empty
    """
    environ = os.environ if environ is None else environ
    is_production = is_production_branch(branch_name, environ)

    missing = [name for name in required_env_vars(is_production) if not environ.get(name)]
    if missing:
        raise MissingEnvironmentError(missing)

    return DeploymentTarget(
        is_production=is_production,
        bucket_name=environ[env_var_name(BUCKET_NAME_VAR, is_production)],
        key_prefix=key_prefix(repo_identifier, branch_name, is_production),
        credentials=Credentials(
            access_key=environ[env_var_name(ACCESS_KEY_VAR, is_production)],
            secret_key=environ[env_var_name(SECRET_KEY_VAR, is_production)],
        ),
        region=environ.get(REGION_VAR) or DEFAULT_REGION,
    )
