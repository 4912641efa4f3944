from fundraiser_toolkit.utils.formatters import (
    console,
    format_address,
    format_usd_value,
    save_json_output,
)

__all__ = [
    "console",
    "format_address",
    "format_usd_value",
    "save_json_output",
]
