"""adapterstack command-line interface."""
