"""Declaration collectors for .env files, templates and serverless manifests."""
from .dotenv import parse_env_file, parse_example_names
from .manifest import parse_manifest

__all__ = ["parse_env_file", "parse_example_names", "parse_manifest"]
