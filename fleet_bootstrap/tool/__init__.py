"""Command line tool for printing the objects that bootstrap the local cluster."""
