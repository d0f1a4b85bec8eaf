"""Configuration package for the Falabella search scraper."""
