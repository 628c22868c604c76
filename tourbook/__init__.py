"""Tour booking backend: OTP signup/login, tour packages and booking emails."""

__version__ = "1.0.0"
