"""Exception handling."""
