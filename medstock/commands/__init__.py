from medstock.commands.handlers import (
    COMMANDS,
    CommandContext,
    CommandResult,
    execute_command,
    get_command,
    register_command,
)
from medstock.commands.cascade import UpdateCascade, UpdateOutcome
from medstock.commands.query import QueryEngine
from medstock.commands.tokenizer import ParsedCommand, parse_command
from medstock.commands.validation import ValidationContext, ValidationResult, validate

__all__ = [
    "COMMANDS",
    "CommandContext",
    "CommandResult",
    "ParsedCommand",
    "QueryEngine",
    "UpdateCascade",
    "UpdateOutcome",
    "ValidationContext",
    "ValidationResult",
    "execute_command",
    "get_command",
    "parse_command",
    "register_command",
    "validate",
]
