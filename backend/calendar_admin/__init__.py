"""School calendar administration backend."""
