"""Click commands for the splice CLI."""
