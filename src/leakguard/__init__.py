"""
leakguard - secret scanning bootstrap.

Installs gitleaks, writes its shared configuration and keeps pre-commit /
commit-msg hooks in place across every git repository on the machine.
"""

__version__ = "0.1.0"
