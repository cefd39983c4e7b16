"""Test infrastructure: scripted process handles and sinks."""
