"""Utility functions and helpers."""

from .helpers import (
    async_to_sync,
    ordered_group,
)
from .menu import select_menu
from .output import (
    confirm,
    console,
    create_table,
    err_console,
    print_cancelled,
    print_error,
    print_info,
    print_json,
    print_success,
    print_warning,
    prompt,
)

__all__ = [
    "async_to_sync",
    "confirm",
    "console",
    "create_table",
    "err_console",
    "ordered_group",
    "print_cancelled",
    "print_error",
    "print_info",
    "print_json",
    "print_success",
    "print_warning",
    "prompt",
    "select_menu",
]
