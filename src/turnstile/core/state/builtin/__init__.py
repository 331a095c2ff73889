"""Built-in guards and actions available to every machine definition."""
