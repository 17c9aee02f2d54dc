"""Route modules, one router factory per resource."""
