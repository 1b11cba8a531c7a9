"""Command line entry point for helpy-receipts."""
