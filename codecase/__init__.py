"""CodeCase engine: validate learner HTML/CSS and gate hints behind an unlock ledger."""

__version__ = "0.1.0"
