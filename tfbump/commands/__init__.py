"""Click commands for tfbump."""
