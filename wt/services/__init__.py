"""Services used by the wt commands."""
