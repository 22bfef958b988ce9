"""Client-side ledger model and REST gateway for the SoupFinance backend."""

__version__ = "0.1.0"
