"""leakguard CLI commands."""
