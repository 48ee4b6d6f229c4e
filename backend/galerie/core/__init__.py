"""Configuration, database, logging and other cross-cutting concerns."""
