"""Mirror every branch of a remote git repository into its own folder."""

__version__ = "0.3.0"
