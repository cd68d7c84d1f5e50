"""Runtime context, logging and filesystem helpers shared by every command."""
