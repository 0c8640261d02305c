"""Exhibit core: data model, errors, dispatch, heuristics and the analysis engine."""
