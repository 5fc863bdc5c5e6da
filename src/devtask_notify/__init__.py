"""Local reminder & notification scheduling for the devtask app."""

__version__ = "0.1.0"
