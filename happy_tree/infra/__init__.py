"""Infrastructure: logging setup and database engine/session wiring."""
