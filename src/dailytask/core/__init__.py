"""Core domain: models, REST client, history vault and services."""
