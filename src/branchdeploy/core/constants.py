"""
Constants module for the branchdeploy application.

This module provides constants used throughout the application.
"""

# Branch and environment constants
DEFAULT_PRODUCTION_BRANCH = "master"
PRODUCTION_SUFFIX = "PROD"
DEVELOPMENT_SUFFIX = "DEV"

# Required environment variables, suffixed with _PROD or _DEV
BUCKET_NAME_VAR = "BUCKET_NAME"
ACCESS_KEY_VAR = "AWS_KEY"
SECRET_KEY_VAR = "AWS_SECRET"
REQUIRED_ENV_VARS = (BUCKET_NAME_VAR, ACCESS_KEY_VAR, SECRET_KEY_VAR)

# Optional environment variables
PRODUCTION_BRANCH_VAR = "PRODUCTION_BRANCH"
REGION_VAR = "AWS_REGION"
LOG_DIR_VAR = "BRANCHDEPLOY_LOG_DIR"

# Remote constants
REMOTE_NAME = "origin"
GITHUB_HOST = "github.com"

# S3 constants
DEFAULT_REGION = "eu-west-1"
KEY_PREFIX_VERSION = "v1"
MAX_POOL_CONNECTIONS = 20
ACL = "public-read"

# Per-file metadata
ONE_MINUTE = 60
CACHE_TTL = ONE_MINUTE
EXTENSIONLESS_CONTENT_TYPE = "text/html"

# Directories never uploaded
EXCLUDED_DIRECTORIES = {".git"}
