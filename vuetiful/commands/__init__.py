"""Command line commands, registered on the group in ``vuetiful.cli``."""
