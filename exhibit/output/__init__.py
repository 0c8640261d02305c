"""Exhibit output: Rich console rendering and flat JSON reports."""
