"""amrdb-pipeline: curation of public resistance and virulence gene databases."""

__version__ = "0.1.0"
