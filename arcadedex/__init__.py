"""
ArcadeDex - MAME metadata ingestion and reconciliation

Reads the MAME catalog together with the history, catver, nplayers, series,
languages and resources data files, merges them into one record per machine
and exports the result to JSON, CSV or SQLite.
"""

__version__ = "0.7.2"
