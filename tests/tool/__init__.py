"""Tests for the fleet-bootstrap command line tool."""
