"""
Turnstile CLI package.

Commands live in ``turnstile.cli.commands`` and are discovered by
``turnstile.cli._dispatcher``. Shared helpers:

- _output: text/JSON output
- _args: common argument registration
"""
from ._args import add_definition_arg, add_json_flag
from ._output import OutputFormatter

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_definition_arg",
]
