"""binmagic test suite."""
