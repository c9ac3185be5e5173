"""
Runner Configuration
====================

Run configuration loaded from environment variables, with credential
checks for the Anthropic API or AWS Bedrock.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import boto3

from .exceptions import ConfigurationError
from .mcp_servers import get_default_mcp_servers, parse_mcp_servers, validate_mcp_servers

logger = logging.getLogger(__name__)


# Configuration Constants
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_TESTS_DIR = Path("./tests")
DEFAULT_MAX_STEPS = 20
TRUTHY_ENV_VALUES = ("true", "1", "yes")


def get_aws_region(environ: Mapping[str, str]) -> str:
    """
    Get AWS region from environment variables.

    Raises:
        ConfigurationError: If AWS region is not configured
    """
    aws_region = environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION")
    if not aws_region:
        raise ConfigurationError(
            "AWS_REGION or AWS_DEFAULT_REGION environment variable not set.\n"
            "Set your AWS region for Bedrock (e.g., us-east-1, us-west-2)"
        )
    return aws_region


def validate_aws_credentials() -> None:
    """
    Validate that AWS credentials are available.

    Raises:
        ConfigurationError: If AWS credentials are not configured or invalid
    """
    try:
        credentials = boto3.Session().get_credentials()
    except Exception as e:
        raise ConfigurationError(f"Failed to validate AWS credentials: {e}") from e

    if credentials is None:
        raise ConfigurationError(
            "AWS credentials not found.\n"
            "Configure AWS credentials using one of:\n"
            "  1. AWS CLI: aws configure\n"
            "  2. Environment variables: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY\n"
            "  3. IAM role (if running on EC2/ECS/Lambda)"
        )


@dataclass(frozen=True)
class RunnerConfig:
    """Everything needed to build the agent client and run a test directory."""
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    tests_dir: Path = DEFAULT_TESTS_DIR
    max_steps: int = DEFAULT_MAX_STEPS
    mcp_servers: Dict[str, Dict[str, Any]] = field(default_factory=get_default_mcp_servers)
    use_bedrock: bool = False
    aws_region: Optional[str] = None
    strict_response: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RunnerConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        max_steps_raw = env.get("MAX_STEPS")
        try:
            max_steps = int(max_steps_raw) if max_steps_raw else DEFAULT_MAX_STEPS
        except ValueError as e:
            raise ConfigurationError(f"MAX_STEPS must be an integer, got {max_steps_raw!r}") from e

        mcp_raw = env.get("MCP_SERVERS")
        mcp_servers = parse_mcp_servers(mcp_raw) if mcp_raw else get_default_mcp_servers()

        use_bedrock = env.get("USE_AWS_BEDROCK", "").lower() in TRUTHY_ENV_VALUES

        return cls(
            api_key=env.get("ANTHROPIC_API_KEY") or env.get("API_KEY") or None,
            model=env.get("MODEL_NAME") or DEFAULT_MODEL,
            base_url=env.get("ANTHROPIC_BASE_URL") or env.get("BASE_URL") or None,
            tests_dir=Path(env.get("TESTS_DIR") or DEFAULT_TESTS_DIR),
            max_steps=max_steps,
            mcp_servers=mcp_servers,
            use_bedrock=use_bedrock,
            aws_region=get_aws_region(env) if use_bedrock else None,
            strict_response=env.get("STRICT_RESPONSE", "").lower() in TRUTHY_ENV_VALUES,
        )

    def with_overrides(self, **overrides: Any) -> "RunnerConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "tests_dir" in changes:
            changes["tests_dir"] = Path(changes["tests_dir"])
        return replace(self, **changes)

    def validate(self, check_aws: bool = True) -> "RunnerConfig":
        """
        Check the configuration before any client is created.

        Args:
            check_aws: Whether to look up AWS credentials when Bedrock is enabled

        Raises:
            ConfigurationError: If no credential is configured or a value is invalid
        """
        if self.max_steps < 1:
            raise ConfigurationError(f"max_steps must be a positive integer, got {self.max_steps}")

        validate_mcp_servers(self.mcp_servers)

        if self.use_bedrock:
            if not self.aws_region:
                raise ConfigurationError("AWS region is required when USE_AWS_BEDROCK is set")
            if check_aws:
                validate_aws_credentials()
            logger.info(f"Using AWS Bedrock in region: {self.aws_region}")
        elif not self.api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY environment variable not set.\n"
                "Get your API key from: https://console.anthropic.com/\n"
                "Or set USE_AWS_BEDROCK=true to use AWS Bedrock instead."
            )

        return self

    def client_env(self) -> Dict[str, str]:
        """Environment variables handed to the agent process."""
        env_vars: Dict[str, str] = {}

        if self.use_bedrock:
            env_vars["CLAUDE_CODE_USE_BEDROCK"] = "true"
            env_vars["AWS_REGION"] = self.aws_region or ""
        elif self.api_key:
            env_vars["ANTHROPIC_API_KEY"] = self.api_key

        if self.base_url:
            env_vars["ANTHROPIC_BASE_URL"] = self.base_url

        return env_vars
