"""Static content tables for the built-in realms."""
