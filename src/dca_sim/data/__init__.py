"""
Data export module for the DCA projection simulator.

Provides CSV output of projection rows and summaries, and loading of
exported projections.
"""

from dca_sim.data.export import (
    ExportError,
    load_projection,
    make_csv,
    projection_to_dataframe,
    save_projection,
    save_summary,
)
from dca_sim.data.schemas import (
    PROJECTION_SCHEMA,
    SUMMARY_SCHEMA,
)

__all__ = [
    "ExportError",
    "load_projection",
    "make_csv",
    "projection_to_dataframe",
    "save_projection",
    "save_summary",
    "PROJECTION_SCHEMA",
    "SUMMARY_SCHEMA",
]
