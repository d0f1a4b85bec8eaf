"""Candidate selection, field extraction and the browser-side helpers."""
