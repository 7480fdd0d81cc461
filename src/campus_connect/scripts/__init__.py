"""Operator scripts for database setup and administration."""
