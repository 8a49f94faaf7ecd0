"""SERP Pipeline - structured records from search and maps markup."""

__version__ = "0.1.0"
