"""Built-in plugins: the sample operation catalog and the recorded transport."""
