"""Well-known runtime variables.

Names provided by the platform, the runtime or a CI system. They never need a
declaration, so in non-strict mode a missing declaration is reported as
"skipped" rather than as an issue.
"""
from __future__ import annotations

# https://docs.aws.amazon.com/lambda/latest/dg/configuration-envvars.html
AWS_PROVIDED_VARS: frozenset[str] = frozenset({
    'AWS_REGION',
    'AWS_DEFAULT_REGION',
    'AWS_EXECUTION_ENV',
    'AWS_LAMBDA_FUNCTION_NAME',
    'AWS_LAMBDA_FUNCTION_VERSION',
    'AWS_LAMBDA_FUNCTION_MEMORY_SIZE',
    'AWS_LAMBDA_LOG_GROUP_NAME',
    'AWS_LAMBDA_LOG_STREAM_NAME',
    'AWS_ACCESS_KEY_ID',
    'AWS_SECRET_ACCESS_KEY',
    'AWS_SESSION_TOKEN',
    'AWS_LAMBDA_RUNTIME_API',
    '_HANDLER',
    '_X_AMZN_TRACE_ID',
    'LAMBDA_TASK_ROOT',
    'LAMBDA_RUNTIME_DIR',
    'TZ',
})

NODEJS_RUNTIME_VARS: frozenset[str] = frozenset({
    'NODE_ENV',
    'NODE_OPTIONS',
    'PATH',
    'HOME',
    'USER',
    'LANG',
    'LC_ALL',
    'PWD',
    'OLDPWD',
    'SHELL',
    'TERM',
})

CI_CD_VARS: frozenset[str] = frozenset({
    'CI',
    'CONTINUOUS_INTEGRATION',
    'GITHUB_ACTIONS',
    'GITLAB_CI',
    'CIRCLECI',
    'TRAVIS',
    'JENKINS_URL',
    'BUILDKITE',
})

SERVERLESS_FRAMEWORK_VARS: frozenset[str] = frozenset({
    'IS_OFFLINE',
    'SLS_OFFLINE',
    'SERVERLESS_STAGE',
    'SERVERLESS_REGION',
})

TEST_VARS: frozenset[str] = frozenset({
    'JEST_WORKER_ID',
    'VITEST_WORKER_ID',
    'MOCHA_COLORS',
})

# Lookup order decides the category of a name listed twice.
CATEGORIES: list[tuple[str, frozenset[str]]] = [
    ('AWS Lambda', AWS_PROVIDED_VARS),
    ('Node.js Runtime', NODEJS_RUNTIME_VARS),
    ('CI/CD', CI_CD_VARS),
    ('Serverless Framework', SERVERLESS_FRAMEWORK_VARS),
    ('Testing', TEST_VARS),
]

KNOWN_RUNTIME_VARS: frozenset[str] = frozenset().union(*(names for _, names in CATEGORIES))

CUSTOM_CATEGORY = 'Custom (from config)'


def is_known_runtime_var(name: str) -> bool:
    return name in KNOWN_RUNTIME_VARS


def get_runtime_var_category(name: str) -> str | None:
    for label, names in CATEGORIES:
        if name in names:
            return label
    return None


__all__ = [
    'AWS_PROVIDED_VARS',
    'NODEJS_RUNTIME_VARS',
    'CI_CD_VARS',
    'SERVERLESS_FRAMEWORK_VARS',
    'TEST_VARS',
    'CATEGORIES',
    'KNOWN_RUNTIME_VARS',
    'CUSTOM_CATEGORY',
    'is_known_runtime_var',
    'get_runtime_var_category',
]
