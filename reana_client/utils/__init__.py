"""Helper modules shared by the command handlers."""
