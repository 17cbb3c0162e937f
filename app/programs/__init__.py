"""Feature handlers, imported at startup by handler discovery."""
