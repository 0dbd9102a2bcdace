"""CLI command implementations, loaded on demand by ``vksdk.cli.parser``."""
