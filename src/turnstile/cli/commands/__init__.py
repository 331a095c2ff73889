"""Top-level Turnstile commands (one module per command)."""
