"""Local JSON snapshot store used by the command line."""
