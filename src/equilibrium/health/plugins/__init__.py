"""Built-in sleep-sensor providers."""
