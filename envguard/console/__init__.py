"""Terminal rendering of EnvGuard results."""
