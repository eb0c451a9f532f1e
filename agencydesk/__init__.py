"""AgencyDesk: insurance agency back-office records, commission figures and the client core that keeps them fresh."""

__version__ = "1.0.0"
